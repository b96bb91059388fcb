from __future__ import annotations


def damerau_levenshtein(a: str, b: str) -> int:
    """Edit distance counting insertions, deletions, substitutions and adjacent swaps."""
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)

    len_a, len_b = len(a), len(b)
    d = [[0] * (len_b + 1) for _ in range(len_a + 1)]
    for i in range(len_a + 1):
        d[i][0] = i
    for j in range(len_b + 1):
        d[0][j] = j

    for i in range(1, len_a + 1):
        for j in range(1, len_b + 1):
            cost = 0 if a[i - 1] == b[j - 1] else 1
            d[i][j] = min(
                d[i - 1][j] + 1,
                d[i][j - 1] + 1,
                d[i - 1][j - 1] + cost,
            )
            if i > 1 and j > 1 and a[i - 1] == b[j - 2] and a[i - 2] == b[j - 1]:
                d[i][j] = min(d[i][j], d[i - 2][j - 2] + 1)

    return d[len_a][len_b]


def allowed_edits(max_len: int) -> int:
    if max_len <= 4:
        return 1
    if max_len <= 8:
        return 2
    return min(4, int(max_len * 0.2))


def is_within_edit_distance(a: str, b: str) -> bool:
    max_len = max(len(a), len(b))
    if max_len == 0:
        return True
    return damerau_levenshtein(a, b) <= allowed_edits(max_len)

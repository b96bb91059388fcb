import re
import time
from typing import Dict, List, Optional, Tuple

_TAG_RE = re.compile(r"<[^>]*>")
_YEAR_RE = re.compile(r"\b(\d{4})\b")
_DIGITS_RE = re.compile(r"\d+")


def now_ts() -> float:
    return time.time()


def sort_scoreboard(scores: Dict[str, int]) -> List[Tuple[str, int]]:
    return sorted(scores.items(), key=lambda item: (-item[1], item[0].lower()))


def strip_html(text: str) -> str:
    return _TAG_RE.sub("", text or "").strip()


def parse_value(value: Optional[str]) -> int:
    """"$1,200" -> 1200; anything without digits is worth nothing."""
    if not value:
        return 0
    match = _DIGITS_RE.search(value.replace(",", ""))
    return int(match.group(0)) if match else 0


def format_dollars(amount: int) -> str:
    return f"${amount:,}"


def air_year(air_date: Optional[str]) -> Optional[int]:
    if not air_date:
        return None
    match = _YEAR_RE.search(air_date)
    return int(match.group(1)) if match else None

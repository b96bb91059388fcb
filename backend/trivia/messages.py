from __future__ import annotations

from typing import Dict, List, Optional

from .models import DashboardQuestion, Question
from .utils import air_year, format_dollars, sort_scoreboard, strip_html


def format_amount(amount: int, scoring_mode: str = "dollars") -> str:
    if scoring_mode == "points":
        return f"{amount:,} pt" if amount == 1 else f"{amount:,} pts"
    return format_dollars(amount)


def format_scoreboard(
    scores: Dict[str, int],
    *,
    winning_score: int,
    scoring_mode: str = "dollars",
    is_final: bool = False,
) -> Optional[str]:
    """Render scores as a fixed-width block, highest first; None when nobody has scored."""
    entries = sort_scoreboard(scores)
    if not entries:
        return None

    if is_final:
        label = "Final Scores"
    else:
        label = f"Scores - First to {format_amount(winning_score, scoring_mode)} wins!"

    amounts = [format_amount(amount, scoring_mode) for _, amount in entries]
    name_width = max(max(len(name) for name, _ in entries), 4)
    amount_width = max(max(len(a) for a in amounts), 1)

    lines = [f"{name.ljust(name_width)}  {amount.rjust(amount_width)}" for (name, _), amount in zip(entries, amounts)]
    divider = "─" * (name_width + amount_width + 2)

    return "```\n" + label + "\n" + divider + "\n" + "\n".join(lines) + "\n```"


def format_question(question: Question) -> str:
    category = question.category.upper()
    value = question.value or "???"
    year = air_year(question.air_date) or "???"

    prefix = f"[**aired {year}**] From **{category}** for **{value}**"
    if question.daily_double:
        prefix = f"[**DAILY DOUBLE**] {prefix}"
    return f"_{prefix}:_\n> # {strip_html(question.clue)}"


def build_question_message(question: Question, scoreboard_text: Optional[str] = None, prefix: Optional[str] = None) -> str:
    parts: List[str] = []
    if prefix:
        parts.append(prefix)
    if scoreboard_text:
        parts.append(scoreboard_text)
    parts.append(format_question(question))
    return "\n\n".join(parts)


def dashboard_question(question: Optional[Question]) -> Optional[DashboardQuestion]:
    if question is None:
        return None
    return DashboardQuestion(
        category=question.category.upper(),
        value=question.value or "???",
        clue=strip_html(question.clue),
        year=air_year(question.air_date),
        daily_double=question.daily_double,
    )


EXHAUSTED_TEXT = "Wow! You've gone through all the questions! An admin can shuffle the deck to start over."

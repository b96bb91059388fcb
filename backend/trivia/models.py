from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class Question(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    category: str = ""
    value: str = ""  # e.g. "$400", empty for Final Jeopardy
    clue: str = ""
    answer: str = ""
    daily_double: bool = False
    air_date: Optional[str] = None
    round: str = ""
    show_number: str = ""


class AnswerCacheEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    answer: str
    clue: str = ""


class CheckResult(BaseModel):
    correct: bool
    answer: Optional[str] = None
    error: Optional[str] = None


class ReplyPayload(BaseModel):
    text: str
    cite_original: bool = False


ReplyFn = Callable[[ReplyPayload], Awaitable[None]]
ShoutFn = Callable[[Any, str], Awaitable[None]]


class GuessEvent(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    player_id: str
    text: str
    channel_ref: Any = None
    reply: ReplyFn
    shout: Optional[ShoutFn] = None


class DashboardQuestion(BaseModel):
    category: str
    value: str
    clue: str
    year: Optional[int] = None
    daily_double: bool = False


class DashboardState(BaseModel):
    message: Optional[str] = None
    scoreboard: Dict[str, int] = Field(default_factory=dict)
    question: Optional[DashboardQuestion] = None


@dataclass
class PendingTimeout:
    question_id: int
    task: asyncio.Task


# States: idle (no current question) <-> awaiting answer
@dataclass
class GameSessionState:
    current_question: Optional[Question] = None
    scoreboard: Dict[str, int] = field(default_factory=dict)
    last_request_at: Optional[float] = None
    first_guess_at: Optional[float] = None
    pending_timeout: Optional[PendingTimeout] = None
    last_channel: Any = None
    last_shout: Optional[ShoutFn] = None
    last_message: Optional[str] = None

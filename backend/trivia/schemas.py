from pydantic import BaseModel, Field
from typing import Any, List, Optional
from .models import DashboardState, ReplyPayload


class GuessIn(BaseModel):
    player_id: str = Field(min_length=1)
    text: str = ""
    channel: Optional[str] = None


class GuessOut(BaseModel):
    replies: List[ReplyPayload]


class ViewerStateOut(BaseModel):
    state: DashboardState


class ViewerEventsOut(BaseModel):
    events: List[dict[str, Any]]
    latest_seq: Optional[int] = None


class StatsOut(BaseModel):
    seen: int
    total: int

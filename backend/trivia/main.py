import logging
import threading
from functools import lru_cache
from typing import List, Optional

from fastapi import Depends, FastAPI, Header, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from .config import settings
from .events import EventStore
from .game import GameSession
from .models import GuessEvent, ReplyPayload
from .schemas import GuessIn, GuessOut, StatsOut, ViewerEventsOut, ViewerStateOut
from .store import QuestionStore

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)-8s %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Jeopardy Trivia API")

origins = [o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()]
origin_regex = settings.CORS_ORIGIN_REGEX or None

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins or ["*"],
    allow_origin_regex=origin_regex,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


_game_lock = threading.Lock()


@lru_cache
def _build_game() -> GameSession:
    # CorpusError propagates: the API must not run without questions
    store = QuestionStore(settings.CORPUS_PATH, settings.SEEN_CACHE_PATH)
    logger.info(
        "Loaded %s questions (%s previously seen)",
        f"{store.total_count:,}",
        f"{store.seen_count:,}",
    )
    return GameSession(store, EventStore())


def get_game() -> GameSession:
    # FastAPI resolves sync dependencies on worker threads
    with _game_lock:
        return _build_game()


def require_admin(x_admin_key: Optional[str] = Header(default=None)):
    if x_admin_key != settings.ADMIN_KEY:
        raise HTTPException(status_code=401, detail="Invalid admin key")


@app.post("/api/guess", response_model=GuessOut)
async def guess(payload: GuessIn, game: GameSession = Depends(get_game)):
    replies: List[ReplyPayload] = []

    async def reply(message: ReplyPayload) -> None:
        replies.append(message)

    event = GuessEvent(
        player_id=payload.player_id,
        text=payload.text,
        channel_ref=payload.channel,
        reply=reply,
        shout=game.feed.publish_shout,
    )
    await game.handle_guess(event)
    return GuessOut(replies=replies)


@app.get("/api/viewer/state", response_model=ViewerStateOut)
async def viewer_state(game: GameSession = Depends(get_game)):
    return ViewerStateOut(state=game.dashboard_state())


@app.get("/api/viewer/events", response_model=ViewerEventsOut)
async def viewer_events(after: int | None = None, limit: int = 200, game: GameSession = Depends(get_game)):
    try:
        events = await game.feed.list(after=after, limit=limit)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    latest_seq = events[-1]["seq"] if events else after
    return ViewerEventsOut(events=events, latest_seq=latest_seq)


@app.get("/api/stats", response_model=StatsOut)
async def stats(game: GameSession = Depends(get_game)):
    return StatsOut(**game.stats())


@app.get("/api/admin/verify")
async def verify(_: None = Depends(require_admin)):
    return {"ok": True}


@app.post("/api/admin/shuffle")
async def shuffle(_: None = Depends(require_admin), game: GameSession = Depends(get_game)):
    await game.shuffle()
    return {"ok": True, **game.stats()}


@app.post("/api/admin/reset")
async def reset(_: None = Depends(require_admin), game: GameSession = Depends(get_game)):
    await game.reset()
    return {"ok": True}


@app.on_event("shutdown")
async def _shutdown() -> None:
    if _build_game.cache_info().currsize:
        game = _build_game()
        await game.close()
        game.store.close()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("backend.trivia.main:app", host="127.0.0.1", port=3093)

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Dict, Optional

from .config import settings
from .events import EventStore
from .messages import (
    EXHAUSTED_TEXT,
    build_question_message,
    dashboard_question,
    format_amount,
    format_question,
    format_scoreboard,
)
from .models import (
    CheckResult,
    DashboardState,
    GameSessionState,
    GuessEvent,
    PendingTimeout,
    Question,
    ReplyPayload,
)
from .store import QuestionStore
from .utils import now_ts, parse_value

logger = logging.getLogger(__name__)

SKIP_COMMANDS = frozenset({"?", "skip", "pass", "give up", "giveup", "idk", "i don't know"})


class GameSession:
    """One live round of trivia: the current clue, the scoreboard and its timers.

    Every state change, whether caused by a guess or by an answer timer
    firing, happens while holding ``self._lock``.
    """

    def __init__(
        self,
        store: QuestionStore,
        feed: Optional[EventStore] = None,
        *,
        round_timeout: Optional[float] = None,
        answer_timeout: Optional[float] = None,
        winning_score: Optional[int] = None,
        scoring_mode: Optional[str] = None,
        clock: Callable[[], float] = now_ts,
    ):
        self.store = store
        self.feed = feed or EventStore()
        self.round_timeout = settings.ROUND_TIMEOUT_SECONDS if round_timeout is None else round_timeout
        self.answer_timeout = settings.ANSWER_TIMEOUT_SECONDS if answer_timeout is None else answer_timeout
        self.winning_score = settings.WINNING_SCORE if winning_score is None else winning_score
        self.scoring_mode = scoring_mode or settings.SCORING_MODE
        self.clock = clock
        self.state = GameSessionState()
        self._lock = asyncio.Lock()

    # -- guesses -------------------------------------------------------------

    async def handle_guess(self, event: GuessEvent) -> None:
        async with self._lock:
            now = self.clock()
            await self._finish_idle_round(event, now)
            self.state.last_request_at = now

            if event.channel_ref is not None:
                self.state.last_channel = event.channel_ref
            if event.shout is not None:
                self.state.last_shout = event.shout

            guess = event.text.strip()
            current = self.state.current_question

            if current is not None and guess.lower() in SKIP_COMMANDS:
                self._clear_timeout()
                answer = await asyncio.to_thread(self.store.give_up, current.id)
                await event.reply(ReplyPayload(text=f"The answer was: **{answer}**"))
                self.state.last_message = f"The answer was: {answer}"
                self.state.current_question = current = None

            if current is not None and guess:
                result = await asyncio.to_thread(self.store.check_answer, current.id, guess)
                if not result.correct:
                    if self.state.pending_timeout is None:
                        self._arm_timeout(current.id, now)
                    return
                self._clear_timeout()
                await self._credit(event, current, result)
                self.state.current_question = None

            if self.state.current_question is None:
                self.state.current_question = await asyncio.to_thread(self.store.get_question)
                self.state.last_message = None

            await self._broadcast()

            if self.state.current_question is None:
                logger.info("Question corpus exhausted (%d seen)", self.store.seen_count)
                await event.reply(ReplyPayload(text=EXHAUSTED_TEXT))
                return

            await event.reply(ReplyPayload(text=self._question_message(self.state.current_question)))

    async def _finish_idle_round(self, event: GuessEvent, now: float) -> None:
        last = self.state.last_request_at
        if last is None or now - last < self.round_timeout or not self.state.scoreboard:
            return

        logger.info("Round idle for %.0fs, starting a new round", now - last)
        self._clear_timeout()

        final_scores = self._scoreboard_text(is_final=True)
        text = (
            "It's been a while since anyone played. Let's start a new round!\n"
            f"Here are last round's scores:\n{final_scores}"
        )
        if self.state.current_question is not None:
            text += f"\n\nAs a reminder, here's the current question:\n{format_question(self.state.current_question)}"

        await event.reply(ReplyPayload(text=text))
        self.state.scoreboard = {}
        self.state.last_message = "New round started!"
        await self._broadcast()

    async def _credit(self, event: GuessEvent, question: Question, result: CheckResult) -> None:
        player = event.player_id
        amount = 1 if self.scoring_mode == "points" else parse_value(question.value)
        answer = result.answer
        if answer is None:
            answer = await asyncio.to_thread(self.store.give_up, question.id)

        scoreboard = self.state.scoreboard
        scoreboard[player] = scoreboard.get(player, 0) + amount
        gained = format_amount(amount, self.scoring_mode)
        await event.reply(ReplyPayload(text=f"# **Correct: ** {answer} (+{gained})", cite_original=True))

        total = scoreboard[player]
        if total >= self.winning_score:
            won_with = format_amount(total, self.scoring_mode)
            logger.info("%s won the round with %s", player, won_with)
            await event.reply(ReplyPayload(text=f"# 🎉🏆 {player} wins with {won_with}! 🏆🎉"))
            await event.reply(ReplyPayload(text="Starting new game..."))
            self.state.last_message = f"{player} wins the game with {won_with}!"
            self.state.scoreboard = {}
        else:
            self.state.last_message = f"{player} got it! {answer} (+{gained})"

    # -- answer timer --------------------------------------------------------

    def _arm_timeout(self, question_id: int, now: float) -> None:
        task = asyncio.create_task(self._answer_timeout(question_id))
        self.state.pending_timeout = PendingTimeout(question_id=question_id, task=task)
        self.state.first_guess_at = now
        logger.info("Started %ss answer timeout for question %s", self.answer_timeout, question_id)

    def _clear_timeout(self) -> None:
        pending = self.state.pending_timeout
        if pending is not None:
            logger.info("Clearing answer timeout for question %s", pending.question_id)
            if pending.task is not asyncio.current_task():
                pending.task.cancel()
        self.state.pending_timeout = None
        self.state.first_guess_at = None

    async def _answer_timeout(self, question_id: int) -> None:
        await asyncio.sleep(self.answer_timeout)

        try:
            await self._expire_question(question_id)
        except Exception:
            logger.exception("Answer timeout for question %s failed", question_id)

    async def _expire_question(self, question_id: int) -> None:
        async with self._lock:
            pending = self.state.pending_timeout
            if pending is None or pending.task is not asyncio.current_task():
                logger.info("Stale answer timeout for question %s ignored", question_id)
                return
            self._clear_timeout()

            current = self.state.current_question
            if current is None or current.id != question_id:
                logger.info("Answer timeout for question %s no longer current", question_id)
                return

            answer = await asyncio.to_thread(self.store.give_up, current.id)
            logger.info("Time's up! Answer was: %s", answer)
            self.state.current_question = await asyncio.to_thread(self.store.get_question)
            self.state.last_message = f"Time is up! The answer was: {answer}"
            await self._broadcast()

            prefix = f"**Time is up!** The answer was: **{answer}**"
            if self.state.current_question is None:
                text = f"{prefix}\n\n{EXHAUSTED_TEXT}"
            else:
                text = self._question_message(self.state.current_question, prefix=prefix)

            if self.state.last_shout is None:
                logger.warning("Answer timeout fired with no channel to announce it on")
                return
            await self.state.last_shout(self.state.last_channel, text)

    # -- admin ---------------------------------------------------------------

    async def shuffle(self) -> None:
        """Forget every question served so far; the current clue stays in play."""
        async with self._lock:
            await asyncio.to_thread(self.store.shuffle)
            logger.info("Question deck shuffled (%d questions)", self.store.total_count)

    async def reset(self) -> None:
        async with self._lock:
            self._clear_timeout()
            self.state.current_question = None
            self.state.scoreboard = {}
            self.state.last_message = None
            await self.feed.reset()
            await self._broadcast()

    async def close(self) -> None:
        async with self._lock:
            self._clear_timeout()

    # -- views ---------------------------------------------------------------

    def dashboard_state(self) -> DashboardState:
        return DashboardState(
            message=self.state.last_message,
            scoreboard=dict(self.state.scoreboard),
            question=dashboard_question(self.state.current_question),
        )

    def stats(self) -> Dict[str, int]:
        return {"seen": self.store.seen_count, "total": self.store.total_count}

    async def _broadcast(self) -> None:
        await self.feed.publish_state(self.dashboard_state().model_dump())

    def _scoreboard_text(self, is_final: bool = False) -> Optional[str]:
        return format_scoreboard(
            self.state.scoreboard,
            winning_score=self.winning_score,
            scoring_mode=self.scoring_mode,
            is_final=is_final,
        )

    def _question_message(self, question: Question, prefix: Optional[str] = None) -> str:
        return build_question_message(question, self._scoreboard_text(), prefix=prefix)

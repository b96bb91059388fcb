"""Question corpus access with a persistent no-repeat guarantee.

The corpus is an Anki-style SQLite export: a ``notes`` table whose ``flds``
column packs every field of a clue into one ``\\x1f``-separated string.
"""

from __future__ import annotations

import json
import logging
import random
from pathlib import Path
from typing import Dict, Optional, Set

from sqlalchemy import create_engine, text
from sqlalchemy.exc import SQLAlchemyError

from .matcher import check_answer
from .models import AnswerCacheEntry, CheckResult, Question

logger = logging.getLogger(__name__)

FIELD_SEP = "\x1f"
FIELD_NAMES = (
    "show_number",
    "air_date",
    "show_notes",
    "round",
    "position",
    "category",
    "clue_number",
    "value",
    "daily_double",
    "clue",
    "media_url",
    "answer",
)


class CorpusError(RuntimeError):
    pass


def parse_fields(flds: str) -> Dict[str, str]:
    parts = (flds or "").split(FIELD_SEP)
    return {name: (parts[idx] if idx < len(parts) else "") for idx, name in enumerate(FIELD_NAMES)}


def question_from_row(note_id: int, flds: str) -> Question:
    fields = parse_fields(flds)
    clue = fields["clue"]
    if fields["media_url"]:
        clue = f"{clue} - {fields['media_url']}"
    return Question(
        id=note_id,
        show_number=fields["show_number"],
        air_date=fields["air_date"] or None,
        round=fields["round"],
        category=fields["category"],
        value=fields["value"],
        clue=clue,
        answer=fields["answer"],
        daily_double=fields["daily_double"] == "True",
    )


class QuestionStore:
    # above this many seen ids the NOT IN query gives way to random offsets
    exclusion_limit = 1000
    max_offset_attempts = 100

    def __init__(self, corpus_path: str | Path, seen_path: str | Path | None = None, *, rng: random.Random | None = None):
        path = Path(corpus_path)
        if not path.is_file():
            raise CorpusError(f"Question corpus not found at {path}")

        self.engine = create_engine(
            f"sqlite:///file:{path.resolve()}?mode=ro&uri=true",
            connect_args={"check_same_thread": False},
        )
        try:
            with self.engine.connect() as conn:
                self.total_questions = int(conn.execute(text("SELECT COUNT(*) FROM notes")).scalar() or 0)
        except SQLAlchemyError as exc:
            self.engine.dispose()
            raise CorpusError(f"Could not open question corpus at {path}: {exc}") from exc

        self.seen_path = Path(seen_path) if seen_path else None
        self.rng = rng or random.Random()
        self.seen_ids: Set[int] = self._load_seen()
        self.answer_cache: Dict[int, AnswerCacheEntry] = {}

    @property
    def seen_count(self) -> int:
        return len(self.seen_ids)

    @property
    def total_count(self) -> int:
        return self.total_questions

    def _load_seen(self) -> Set[int]:
        if not self.seen_path or not self.seen_path.exists():
            return set()
        try:
            data = json.loads(self.seen_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable seen-question cache %s: %s", self.seen_path, exc)
            return set()
        if not isinstance(data, list):
            logger.warning("Ignoring seen-question cache %s: expected a JSON array", self.seen_path)
            return set()
        return {item for item in data if isinstance(item, int) and not isinstance(item, bool)}

    def _save_seen(self) -> None:
        if not self.seen_path:
            return
        try:
            self.seen_path.write_text(json.dumps(sorted(self.seen_ids)), encoding="utf-8")
        except OSError as exc:
            logger.warning("Could not persist seen questions to %s: %s", self.seen_path, exc)

    def _fetch_row(self, question_id: int):
        with self.engine.connect() as conn:
            return conn.execute(
                text("SELECT id, flds FROM notes WHERE id = :id"), {"id": question_id}
            ).first()

    def _sample_excluding_seen(self):
        with self.engine.connect() as conn:
            return conn.execute(
                text(
                    """
                    SELECT id, flds FROM notes
                    WHERE id NOT IN (SELECT value FROM json_each(:seen))
                    ORDER BY RANDOM()
                    LIMIT 1
                    """
                ),
                {"seen": json.dumps(sorted(self.seen_ids))},
            ).first()

    def _sample_by_offset(self):
        with self.engine.connect() as conn:
            for _ in range(self.max_offset_attempts):
                offset = self.rng.randrange(self.total_questions)
                row = conn.execute(
                    text("SELECT id, flds FROM notes LIMIT 1 OFFSET :offset"), {"offset": offset}
                ).first()
                if row is not None and row.id not in self.seen_ids:
                    return row
        logger.warning(
            "No unseen question after %d random probes (%d/%d seen)",
            self.max_offset_attempts,
            len(self.seen_ids),
            self.total_questions,
        )
        return None

    def get_question(self) -> Optional[Question]:
        """Draw a question that has not been served since the last shuffle.

        Returns ``None`` once the corpus is exhausted, or when random probing
        keeps landing on seen questions.
        """
        if len(self.seen_ids) >= self.total_questions:
            return None

        if len(self.seen_ids) < self.exclusion_limit:
            row = self._sample_excluding_seen()
        else:
            row = self._sample_by_offset()
        if row is None:
            return None

        question = question_from_row(row.id, row.flds)
        self.seen_ids.add(question.id)
        self.answer_cache[question.id] = AnswerCacheEntry(answer=question.answer, clue=question.clue)
        self._save_seen()
        return question

    def check_answer(self, question_id: int, guess: str) -> CheckResult:
        cached = self.answer_cache.get(question_id)
        if cached is not None:
            return CheckResult(
                correct=check_answer(guess, cached.answer, cached.clue),
                answer=cached.answer,
            )

        row = self._fetch_row(question_id)
        if row is None:
            return CheckResult(correct=False, error="Question not found")

        question = question_from_row(row.id, row.flds)
        self.answer_cache[question_id] = AnswerCacheEntry(answer=question.answer, clue=question.clue)
        return CheckResult(correct=check_answer(guess, question.answer, question.clue))

    def give_up(self, question_id: int) -> Optional[str]:
        cached = self.answer_cache.get(question_id)
        if cached is not None:
            return cached.answer

        row = self._fetch_row(question_id)
        if row is None:
            return None
        return parse_fields(row.flds)["answer"]

    def shuffle(self) -> None:
        self.seen_ids.clear()
        self.answer_cache.clear()
        self._save_seen()

    def close(self) -> None:
        self.engine.dispose()

from __future__ import annotations

import json
import tempfile
from pathlib import Path
from unittest import TestCase, mock

from sqlalchemy import create_engine, text

from backend.trivia.store import (
    FIELD_SEP,
    CorpusError,
    QuestionStore,
    parse_fields,
    question_from_row,
)


def _flds(category: str, value: str, clue: str, answer: str, *, daily_double: str = "False", media_url: str = "", air_date: str = "1999-03-04") -> str:
    return FIELD_SEP.join(
        ["3342", air_date, "", "Jeopardy!", "1", category, "1", value, daily_double, clue, media_url, answer]
    )


ROWS = [
    (101, _flds("POETS", "$200", "He wrote 'The Raven'", "Edgar Allan Poe")),
    (102, _flds("COMPOSERS", "$400", "The 1812 Overture composer", "Tchaikovsky")),
    (103, _flds("PLAYWRIGHTS", "$600", "Author of Hamlet", "Shakespeare", daily_double="True")),
    (104, _flds("COMEDY", "$800", "Larry, Moe & Curly", "The Three Stooges", media_url="http://example.com/a.jpg")),
    (105, _flds("HISTORY", "$1,000", "The Declaration was signed in this year", "1776")),
]


def build_corpus(path: Path, rows=ROWS) -> None:
    engine = create_engine(f"sqlite:///{path}")
    with engine.begin() as conn:
        conn.execute(text("CREATE TABLE notes (id INTEGER PRIMARY KEY, flds TEXT NOT NULL)"))
        for note_id, flds in rows:
            conn.execute(text("INSERT INTO notes (id, flds) VALUES (:id, :flds)"), {"id": note_id, "flds": flds})
    engine.dispose()


class ParseFieldsTests(TestCase):
    def test_missing_fields_default_to_empty(self):
        fields = parse_fields(FIELD_SEP.join(["1", "2001-01-01"]))
        self.assertEqual(fields["air_date"], "2001-01-01")
        self.assertEqual(fields["answer"], "")
        self.assertEqual(fields["category"], "")

    def test_daily_double_needs_literal_true(self):
        self.assertTrue(question_from_row(1, _flds("A", "$1", "c", "a", daily_double="True")).daily_double)
        self.assertFalse(question_from_row(1, _flds("A", "$1", "c", "a", daily_double="true")).daily_double)
        self.assertFalse(question_from_row(1, _flds("A", "$1", "c", "a", daily_double="")).daily_double)

    def test_media_url_is_appended_to_clue(self):
        question = question_from_row(104, ROWS[3][1])
        self.assertEqual(question.clue, "Larry, Moe & Curly - http://example.com/a.jpg")
        self.assertEqual(question.answer, "The Three Stooges")
        self.assertEqual(question.value, "$800")


class QuestionStoreTests(TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self._tmp.name)
        self.corpus = self.dir / "trivia.sqlite"
        self.seen_path = self.dir / "seen.json"
        build_corpus(self.corpus)
        self.stores: list[QuestionStore] = []

    def tearDown(self) -> None:
        for store in self.stores:
            store.close()
        self._tmp.cleanup()

    def _store(self, **kwargs) -> QuestionStore:
        store = QuestionStore(self.corpus, kwargs.pop("seen_path", self.seen_path), **kwargs)
        self.stores.append(store)
        return store

    def test_counts(self):
        store = self._store()
        self.assertEqual(store.total_count, 5)
        self.assertEqual(store.seen_count, 0)

    def test_missing_corpus_is_fatal(self):
        with self.assertRaises(CorpusError):
            QuestionStore(self.dir / "nope.sqlite")

    def test_corpus_without_notes_table_is_fatal(self):
        empty = self.dir / "empty.sqlite"
        empty.touch()
        with self.assertRaises(CorpusError):
            QuestionStore(empty)

    def test_never_repeats_until_exhausted(self):
        store = self._store()
        ids = [store.get_question().id for _ in range(store.total_count)]
        self.assertEqual(sorted(ids), [101, 102, 103, 104, 105])
        self.assertIsNone(store.get_question())

    def test_offset_sampling_never_repeats(self):
        store = self._store()
        store.exclusion_limit = 0
        ids = [store.get_question().id for _ in range(store.total_count)]
        self.assertEqual(sorted(ids), [101, 102, 103, 104, 105])
        self.assertIsNone(store.get_question())

    def test_offset_sampling_gives_up_after_max_attempts(self):
        rng = mock.Mock()
        rng.randrange.return_value = 0
        store = self._store(rng=rng)
        store.exclusion_limit = 0
        store.seen_ids.add(101)

        self.assertIsNone(store.get_question())
        self.assertEqual(rng.randrange.call_count, store.max_offset_attempts)

    def test_seen_ids_are_persisted_and_reloaded(self):
        store = self._store()
        first = store.get_question()
        second = store.get_question()

        self.assertEqual(sorted(json.loads(self.seen_path.read_text())), sorted([first.id, second.id]))

        reloaded = self._store()
        self.assertEqual(reloaded.seen_ids, {first.id, second.id})

    def test_corrupt_seen_file_is_ignored(self):
        self.seen_path.write_text("{not json")
        self.assertEqual(self._store().seen_count, 0)

        self.seen_path.write_text('{"ids": [101]}')
        self.assertEqual(self._store().seen_count, 0)

    def test_unwritable_seen_file_does_not_break_sampling(self):
        store = self._store(seen_path=self.dir / "missing-dir" / "seen.json")
        question = store.get_question()
        self.assertIsNotNone(question)
        self.assertEqual(store.seen_ids, {question.id})

    def test_shuffle_forgets_seen_questions(self):
        store = self._store()
        for _ in range(store.total_count):
            store.get_question()
        store.shuffle()

        self.assertEqual(store.seen_count, 0)
        self.assertEqual(store.answer_cache, {})
        self.assertEqual(json.loads(self.seen_path.read_text()), [])
        self.assertIsNotNone(store.get_question())

    def test_check_answer_from_cache_reveals_answer(self):
        store = self._store()
        question = store.get_question()
        result = store.check_answer(question.id, question.answer)
        self.assertTrue(result.correct)
        self.assertEqual(result.answer, question.answer)

    def test_check_answer_falls_back_to_corpus(self):
        store = self._store()
        result = store.check_answer(102, "Chaikovsky")
        self.assertTrue(result.correct)
        self.assertIsNone(result.answer)
        self.assertIn(102, store.answer_cache)

        self.assertFalse(store.check_answer(105, "1876").correct)

    def test_check_answer_unknown_question(self):
        result = self._store().check_answer(999, "anything")
        self.assertFalse(result.correct)
        self.assertEqual(result.error, "Question not found")

    def test_give_up(self):
        store = self._store()
        self.assertEqual(store.give_up(103), "Shakespeare")
        self.assertIsNone(store.give_up(999))
        self.assertEqual(store.seen_count, 0)

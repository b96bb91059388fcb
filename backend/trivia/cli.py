"""Interactive terminal trivia game.

Run with ``jeopardy-cli`` or ``python -m backend.trivia.cli``.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Callable, Optional, TextIO

from .config import settings
from .game import SKIP_COMMANDS
from .models import Question
from .store import CorpusError, QuestionStore
from .utils import air_year, strip_html

EXIT_COMMANDS = frozenset({"quit", "exit", "q", "bye"})


def format_question(question: Question) -> str:
    year = air_year(question.air_date) or "???"
    prefix = f"[{year}] From {question.category.upper()} for {question.value or '???'}"
    if question.daily_double:
        prefix = f"[DAILY DOUBLE] {prefix}"
    return f"\n{prefix}:\n{strip_html(question.clue)}\n"


def play(store: QuestionStore, read: Callable[[str], str] = input, out: TextIO = sys.stdout) -> int:
    """Run the question/answer loop until the player quits or the deck runs out.

    Returns the number of questions answered correctly.
    """
    correct = 0
    question: Optional[Question] = store.get_question()

    while True:
        if question is None:
            print("\nWow! You've gone through all the questions!", file=out)
            return correct

        print(format_question(question), file=out)
        while True:
            try:
                answer = read("> ").strip()
            except EOFError:
                print("\n\nThanks for playing!", file=out)
                return correct

            if not answer:
                continue

            lowered = answer.lower()
            if lowered in EXIT_COMMANDS:
                print("\nThanks for playing!", file=out)
                return correct

            if lowered in SKIP_COMMANDS:
                print(f"\nThe answer was: {store.give_up(question.id)}\n", file=out)
                break

            if store.check_answer(question.id, answer).correct:
                correct += 1
                print("\nCorrect!\n", file=out)
                break

            print("Incorrect. Try again, or type ? to skip.", file=out)

        question = store.get_question()


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Play Jeopardy! clues in the terminal.")
    parser.add_argument("--corpus", type=Path, default=Path(settings.CORPUS_PATH), help="Path to the SQLite clue corpus")
    parser.add_argument(
        "--seen-cache",
        type=Path,
        default=Path(settings.SEEN_CACHE_PATH) if settings.SEEN_CACHE_PATH else None,
        help="JSON file remembering which clues were already asked",
    )
    parser.add_argument("--shuffle", action="store_true", help="Forget previously asked clues before playing")
    args = parser.parse_args(argv)

    logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))

    try:
        store = QuestionStore(args.corpus, args.seen_cache)
    except CorpusError as exc:
        print(f"Error opening database: {exc}", file=sys.stderr)
        print(f"Expected database at: {args.corpus}", file=sys.stderr)
        return 1

    if args.shuffle:
        store.shuffle()

    print("Welcome to TriviaBot!")
    print('Type your answer, "?" to skip, or "quit" to exit.\n')
    print(f"Loaded {store.total_count:,} questions ({store.seen_count:,} previously seen).\n")

    try:
        play(store)
    except KeyboardInterrupt:
        print("\n\nThanks for playing!")
    finally:
        store.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())

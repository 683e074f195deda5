"""Ten-question trivia quiz fed one question at a time by a TriviaSource."""

from __future__ import annotations

import logging
import random
from typing import Any

from dad_arcade.games.base import Game, event_index
from dad_arcade.models import TriviaQuestion
from dad_arcade.trivia import (
    CATEGORIES,
    FALLBACK_QUESTIONS,
    TriviaError,
    TriviaSource,
)

logger = logging.getLogger(__name__)

QUESTION_COUNT = 10
RETRY_BUDGET = 5
REVEAL_DELAY = 2.0
POINTS = {"easy": 10, "medium": 20, "hard": 30}


class TriviaGame(Game):
    """Input: {"type": "answer", "answer": text} or {"type": "answer", "index": i}.

    After an answer the result stays on screen for REVEAL_DELAY seconds, then
    the next question is requested. prepare() performs the fetch.
    """

    game_type = "trivia"

    def __init__(
        self,
        source: TriviaSource,
        rng: random.Random | None = None,
        question_count: int = QUESTION_COUNT,
        retry_budget: int = RETRY_BUDGET,
    ) -> None:
        self.source = source
        self.question_count = question_count
        self.retry_budget = retry_budget
        super().__init__(rng)

    def _reset_state(self) -> None:
        self.question: TriviaQuestion | None = None
        self.answers: list[str] = []
        self.selected: str | None = None
        self.question_number = 0
        self.seen_ids: set[str] = set()
        self.results: list[dict[str, Any]] = []
        self.reveal_timer: float | None = None
        self._needs_question = True

    async def _fetch_one(self) -> TriviaQuestion:
        category = self.rng.choice(CATEGORIES)
        try:
            return await self.source.fetch(category)
        except TriviaError as e:
            logger.warning("Trivia question unavailable, using built-in set: %s", e)
            return self.rng.choice(FALLBACK_QUESTIONS)

    async def _next_question(self) -> TriviaQuestion:
        question = await self._fetch_one()
        retries = 0
        while question.id in self.seen_ids and retries < self.retry_budget:
            retries += 1
            question = await self._fetch_one()
        self.seen_ids.add(question.id)
        return question

    async def prepare(self) -> None:
        if not self._needs_question or not self.active:
            return
        self._needs_question = False
        question = await self._next_question()
        if not self.active:
            return
        self.question = question
        self.answers = [question.correct_answer, *question.incorrect_answers]
        self.rng.shuffle(self.answers)
        self.selected = None
        self.question_number += 1

    def answer(self, choice: str) -> None:
        if not self.active or self.question is None or self.selected is not None:
            return
        self.selected = choice
        correct = choice == self.question.correct_answer
        points = POINTS[self.question.difficulty] if correct else 0
        self.score += points
        self.results.append({"id": self.question.id, "correct": correct, "points": points})
        self.reveal_timer = REVEAL_DELAY

    def _handle(self, event: dict[str, Any]) -> None:
        if event.get("type") != "answer":
            return
        choice = event.get("answer")
        index = event_index(event)
        if choice is None and index is not None and 0 <= index < len(self.answers):
            choice = self.answers[index]
        if isinstance(choice, str):
            self.answer(choice)

    def _tick(self, dt: float) -> None:
        if self.reveal_timer is None:
            return
        self.reveal_timer -= dt
        if self.reveal_timer > 0:
            return
        self.reveal_timer = None
        if self.question_number >= self.question_count:
            self.finish("completed")
            return
        self.question = None
        self.answers = []
        self.selected = None
        self._needs_question = True

    def _snapshot(self) -> dict[str, Any]:
        question = None
        if self.question is not None:
            question = {
                "id": self.question.id,
                "category": self.question.category,
                "difficulty": self.question.difficulty,
                "question": self.question.question,
                "answers": list(self.answers),
            }
            if self.selected is not None:
                question["correct_answer"] = self.question.correct_answer
        return {
            "question_number": self.question_number,
            "question_count": self.question_count,
            "question": question,
            "selected": self.selected,
            "loading": self.question is None and not self.finished,
        }

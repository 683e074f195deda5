"""Trivia question sources.

A source matches the protocol:

    async def fetch(self, category: str | None) -> TriviaQuestion: ...

and raises TriviaError when it cannot produce a question.

    HttpTriviaSource      GET {base_url}/api/trivia/{category} over httpx
    LocalTriviaSource     random pick from an in-memory list
    FallbackTriviaSource  tries a primary source, logs and falls back on failure

The sheet import format (header row, one question per line):

    id,question,correct_answer,incorrect_answers,category,difficulty

`incorrect_answers` is ';'-separated. `id`, `category` and `difficulty` are
optional (defaults: hash of the question text, "general", "medium").
"""

from __future__ import annotations

import csv
import hashlib
import io
import logging
import random
from typing import Protocol

import httpx
from pydantic import ValidationError

from dad_arcade.models import TriviaQuestion

logger = logging.getLogger(__name__)

CATEGORIES = ("dad", "general", "sports")

FALLBACK_QUESTIONS: tuple[TriviaQuestion, ...] = (
    TriviaQuestion(
        id="fallback-1",
        category="dad",
        question="When is Father's Day celebrated in the United States?",
        correct_answer="Third Sunday in June",
        incorrect_answers=["First Sunday in June", "Second Sunday in May", "Last Sunday in June"],
        difficulty="medium",
    ),
    TriviaQuestion(
        id="fallback-2",
        category="general",
        question='What does "www" stand for in a website address?',
        correct_answer="World Wide Web",
        incorrect_answers=["World Wide Window", "Web Wide World", "Wide World Web"],
        difficulty="easy",
    ),
    TriviaQuestion(
        id="fallback-3",
        category="sports",
        question="How many players are on a basketball team on the court at one time?",
        correct_answer="5",
        incorrect_answers=["6", "7", "4"],
        difficulty="easy",
    ),
)


class TriviaSource(Protocol):
    async def fetch(self, category: str | None) -> TriviaQuestion: ...


class HttpTriviaSource:
    def __init__(self, base_url: str, timeout: float = 10.0) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    async def fetch(self, category: str | None) -> TriviaQuestion:
        url = f"{self._base_url}/api/trivia/{category or ''}".rstrip("/")
        logger.debug("trivia fetch url=%s", url)
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.get(url)
                resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise TriviaError(f"Trivia source returned HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise TriviaError(f"Cannot reach trivia source at {self._base_url}") from e

        try:
            return TriviaQuestion.model_validate(resp.json())
        except (ValueError, ValidationError) as e:
            raise TriviaError(f"Malformed trivia question from {url}") from e


class LocalTriviaSource:
    """Pick from a fixed list, preferring the requested category."""

    def __init__(
        self,
        questions: list[TriviaQuestion] | tuple[TriviaQuestion, ...] = FALLBACK_QUESTIONS,
        rng: random.Random | None = None,
    ) -> None:
        self._questions = list(questions)
        self._rng = rng or random.Random()

    async def fetch(self, category: str | None) -> TriviaQuestion:
        if not self._questions:
            raise TriviaError("No local trivia questions available")
        pool = [q for q in self._questions if q.category == category] or self._questions
        return self._rng.choice(pool)


class FallbackTriviaSource:
    def __init__(self, primary: TriviaSource, fallback: TriviaSource) -> None:
        self._primary = primary
        self._fallback = fallback

    async def fetch(self, category: str | None) -> TriviaQuestion:
        try:
            return await self._primary.fetch(category)
        except TriviaError as e:
            logger.warning("Trivia fetch failed, using fallback source: %s", e)
            return await self._fallback.fetch(category)


def _question_id(text: str) -> str:
    return hashlib.sha1(text.encode("utf-8")).hexdigest()[:12]


def parse_trivia_csv(text: str) -> list[TriviaQuestion]:
    """Parse the sheet export. Malformed rows are logged and skipped.

    Raises TriviaError if the header lacks a required column.
    """
    reader = csv.reader(io.StringIO(text.strip()))
    try:
        header = [h.strip().lower() for h in next(reader)]
    except StopIteration:
        raise TriviaError("CSV data must have a header row") from None

    required = ("question", "correct_answer", "incorrect_answers")
    missing = [col for col in required if col not in header]
    if missing:
        raise TriviaError(f"CSV is missing columns: {', '.join(missing)}")

    questions: list[TriviaQuestion] = []
    for line_no, values in enumerate(reader, start=2):
        if not any(v.strip() for v in values):
            continue
        if len(values) != len(header):
            logger.warning(
                "Skipping malformed row %d: expected %d values, got %d",
                line_no, len(header), len(values),
            )
            continue
        row = {col: value.strip() for col, value in zip(header, values)}
        if not all(row[col] for col in required):
            logger.warning("Skipping row %d: missing question or answers", line_no)
            continue
        try:
            questions.append(TriviaQuestion(
                id=row.get("id") or _question_id(row["question"]),
                question=row["question"],
                correct_answer=row["correct_answer"],
                incorrect_answers=[a.strip() for a in row["incorrect_answers"].split(";") if a.strip()],
                category=row.get("category") or "general",
                difficulty=row.get("difficulty") or "medium",
            ))
        except ValidationError as e:
            logger.warning("Skipping row %d: %s", line_no, e.errors()[0]["msg"])
    return questions


async def fetch_trivia_csv(url: str, timeout: float = 30.0) -> list[TriviaQuestion]:
    """Download and parse the published sheet CSV."""
    try:
        async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as client:
            resp = await client.get(url)
            resp.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise TriviaError(f"Failed to fetch CSV: HTTP {e.response.status_code}") from e
    except httpx.HTTPError as e:
        raise TriviaError(f"Failed to fetch CSV from {url}") from e
    return parse_trivia_csv(resp.text)


class TriviaError(RuntimeError):
    """Raised when a trivia source cannot produce a question."""

"""Tests for the trivia bank: presets merged with imported questions."""

import random

from backend import storage
from dad_arcade.models import TriviaQuestion


def _q(qid: str, category: str = "dad") -> TriviaQuestion:
    return TriviaQuestion(
        id=qid, category=category, question=f"{qid}?", correct_answer="a",
        incorrect_answers=["b", "c", "d"],
    )


def test_presets_loaded():
    presets = storage.preset_trivia()
    assert len(presets) == 10
    assert {q["category"] for q in presets} == {"dad", "general", "sports"}


def test_list_by_category():
    assert all(q["category"] == "sports" for q in storage.list_trivia("sports"))
    assert len(storage.list_trivia()) == 10


def test_upsert_adds_and_replaces():
    assert storage.upsert_trivia([_q("new-1"), _q("new-2", "general")]) == 2
    assert len(storage.list_trivia()) == 12

    replaced = _q("preset-dad-1")
    storage.upsert_trivia([replaced])
    merged = {q["id"]: q for q in storage.list_trivia()}
    assert merged["preset-dad-1"]["question"] == "preset-dad-1?"
    assert len(merged) == 12


def test_random_question_prefers_category():
    rng = random.Random(0)
    for _ in range(10):
        assert storage.random_question("dad", rng)["category"] == "dad"


def test_random_question_unknown_category_uses_any():
    assert storage.random_question("cooking", random.Random(0)) is not None

"""Trivia question bank: imported questions merged over the built-in presets."""

import json
import random
from pathlib import Path
from typing import Any

from dad_arcade.models import TriviaQuestion

from .core import data_dir, presets_dir

_preset_cache: list[dict[str, Any]] | None = None


def _trivia_path() -> Path:
    return data_dir() / "trivia.json"


def preset_trivia() -> list[dict[str, Any]]:
    """Questions shipped in presets/trivia.json (cached per init_storage)."""
    global _preset_cache
    if _preset_cache is None:
        path = presets_dir() / "trivia.json"
        _preset_cache = json.loads(path.read_text()) if path.is_file() else []
    return _preset_cache


def get_stored_trivia() -> list[dict[str, Any]]:
    path = _trivia_path()
    if not path.is_file():
        return []
    return json.loads(path.read_text())


def list_trivia(category: str | None = None) -> list[dict[str, Any]]:
    """Preset + stored questions; stored wins on id collision."""
    merged: dict[str, dict[str, Any]] = {q["id"]: q for q in preset_trivia()}
    for q in get_stored_trivia():
        merged[q["id"]] = q
    questions = list(merged.values())
    if category:
        questions = [q for q in questions if q.get("category") == category]
    return questions


def upsert_trivia(questions: list[TriviaQuestion]) -> int:
    """Insert or replace stored questions by id. Returns the number written."""
    stored = {q["id"]: q for q in get_stored_trivia()}
    for q in questions:
        stored[q.id] = q.model_dump()
    _trivia_path().write_text(json.dumps(list(stored.values()), indent=2))
    return len(questions)


def random_question(
    category: str | None = None, rng: random.Random | None = None
) -> dict[str, Any] | None:
    """Random question in the category, falling back to any category."""
    pool = list_trivia(category) or list_trivia()
    if not pool:
        return None
    return (rng or random).choice(pool)

"""Finished game sessions, stored as one JSON list per user."""

import json
from pathlib import Path
from typing import Any

from dad_arcade.models import GAME_TYPES, GameSession

from .core import sessions_dir, storage_key


def _sessions_path(user_id: str) -> Path:
    return sessions_dir() / f"{storage_key(user_id)}.json"


def get_game_sessions(user_id: str) -> list[dict[str, Any]]:
    path = _sessions_path(user_id)
    if not path.is_file():
        return []
    return json.loads(path.read_text())


def record_game_session(session: GameSession) -> bool:
    """Append a finished session. A session id is stored at most once."""
    sessions = get_game_sessions(session.user_id)
    if any(s["id"] == session.id for s in sessions):
        return False
    sessions.append(session.model_dump(mode="json"))
    _sessions_path(session.user_id).write_text(json.dumps(sessions, indent=2))
    return True


def get_user_game_stats(user_id: str) -> dict[str, Any]:
    """Totals across every recorded session, with the best score per game."""
    sessions = get_game_sessions(user_id)
    high_scores = {game_type: 0 for game_type in GAME_TYPES}
    for s in sessions:
        high_scores[s["game_type"]] = max(high_scores.get(s["game_type"], 0), s["score"])
    return {
        "total_score": sum(s["score"] for s in sessions),
        "games_played": len(sessions),
        "games_completed": sum(1 for s in sessions if s.get("completed")),
        "high_scores": high_scores,
    }

"""Saved cards. One JSON file per card, listed per user by scanning."""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from .core import cards_dir, new_id, storage_key


def _card_path(card_id: str) -> Path:
    return cards_dir() / f"{storage_key(card_id)}.json"


def save_card(
    user_id: str,
    card: dict[str, Any],
    profile: dict[str, Any] | None = None,
    kind: str = "father",
) -> dict[str, Any]:
    """Store a generated card. `kind` is "father" or "thank_you"."""
    record = {
        "id": new_id(),
        "user_id": user_id,
        "kind": kind,
        "card": card,
        "profile": profile,
        "view_count": 0,
        "created_at": datetime.now(timezone.utc).isoformat(),
    }
    _card_path(record["id"]).write_text(json.dumps(record, indent=2))
    return record


def get_card(card_id: str) -> dict[str, Any] | None:
    path = _card_path(card_id)
    if not path.is_file():
        return None
    return json.loads(path.read_text())


def view_card(card_id: str) -> dict[str, Any] | None:
    """Read a card and count the view. Returns None if missing."""
    record = get_card(card_id)
    if record is None:
        return None
    record["view_count"] = record.get("view_count", 0) + 1
    _card_path(card_id).write_text(json.dumps(record, indent=2))
    return record


def list_user_cards(user_id: str) -> list[dict[str, Any]]:
    """All cards for a user, newest first."""
    results = []
    for path in cards_dir().glob("*.json"):
        record = json.loads(path.read_text())
        if record.get("user_id") == user_id:
            results.append(record)
    results.sort(key=lambda r: r["created_at"], reverse=True)
    return results

"""User records: subscription status and period-stamped usage counters."""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from dad_arcade.entitlements import Usage, day_key, month_key

from .core import storage_key, users_dir

_SUBSCRIPTION_STATUSES = {"free", "active", "canceled", "past_due"}


def _user_path(user_id: str) -> Path:
    return users_dir() / f"{storage_key(user_id)}.json"


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _write(user: dict[str, Any]) -> None:
    user["updated_at"] = _now().isoformat()
    _user_path(user["id"]).write_text(json.dumps(user, indent=2))


def get_user(user_id: str) -> dict[str, Any] | None:
    path = _user_path(user_id)
    if not path.is_file():
        return None
    return json.loads(path.read_text())


def upsert_user(user_id: str, fields: dict[str, Any] | None = None) -> dict[str, Any]:
    """Create the user if missing, then apply allowed fields (email, subscription_status)."""
    user = get_user(user_id)
    if user is None:
        user = {
            "id": user_id,
            "email": "",
            "subscription_status": "free",
            "cards_generated": 0,
            "cards_period": "",
            "games_played": 0,
            "games_period": "",
            "created_at": _now().isoformat(),
        }
    for key, value in (fields or {}).items():
        if key == "email":
            user["email"] = value
        elif key == "subscription_status" and value in _SUBSCRIPTION_STATUSES:
            user["subscription_status"] = value
    _write(user)
    return user


def set_subscription(user_id: str, status: str) -> dict[str, Any]:
    if status not in _SUBSCRIPTION_STATUSES:
        raise ValueError(f"Unknown subscription status: {status!r}")
    return upsert_user(user_id, {"subscription_status": status})


def get_usage(user_id: str) -> Usage:
    """Usage counters for the entitlement gate. Unknown users read as fresh free accounts."""
    user = get_user(user_id)
    if user is None:
        return Usage()
    return Usage.model_validate(user)


def record_card_usage(user_id: str, now: datetime | None = None) -> dict[str, Any]:
    """Count one generated card against the current calendar month."""
    period = month_key(now or _now())
    user = upsert_user(user_id)
    if user.get("cards_period") != period:
        user["cards_period"] = period
        user["cards_generated"] = 0
    user["cards_generated"] += 1
    _write(user)
    return user


def record_game_usage(user_id: str, now: datetime | None = None) -> dict[str, Any]:
    """Count one started game against the current UTC day."""
    period = day_key(now or _now())
    user = upsert_user(user_id)
    if user.get("games_period") != period:
        user["games_period"] = period
        user["games_played"] = 0
    user["games_played"] += 1
    _write(user)
    return user

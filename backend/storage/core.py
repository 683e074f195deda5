"""Storage initialization, path helpers, and id utilities."""

import hashlib
import re
import unicodedata
import uuid
from pathlib import Path

_data_dir: Path | None = None
_presets_dir: Path | None = None


def slugify(value: str) -> str:
    """Convert an external id to a filesystem-safe key.

    "User 42/../x" → "user-42-x"
    """
    text = unicodedata.normalize("NFKD", value)
    text = text.encode("ascii", "ignore").decode("ascii")
    text = text.lower()
    text = re.sub(r"['\"]", "", text)
    text = re.sub(r"[^a-z0-9]+", "-", text)
    text = text.strip("-")
    return text or "anonymous"


def storage_key(value: str) -> str:
    """Filename key for an external id: readable slug plus a digest of the raw id.

    Ids that slugify alike ("Alice", "alice") still get separate files.
    "Alice" → "alice-3bc51062973c"
    """
    digest = hashlib.sha256(value.encode("utf-8")).hexdigest()[:12]
    return f"{slugify(value)}-{digest}"


def new_id() -> str:
    return uuid.uuid4().hex[:16]


def init_storage(data_dir: Path, presets_dir: Path | None = None) -> None:
    global _data_dir, _presets_dir
    from . import trivia as _trivia_mod

    _data_dir = data_dir
    _data_dir.mkdir(parents=True, exist_ok=True)
    users_dir().mkdir(exist_ok=True)
    cards_dir().mkdir(exist_ok=True)
    sessions_dir().mkdir(exist_ok=True)
    if presets_dir is None:
        # Default: repo_root/presets
        presets_dir = Path(__file__).parent.parent.parent / "presets"
    _presets_dir = presets_dir
    _trivia_mod._preset_cache = None


def data_dir() -> Path:
    assert _data_dir is not None, "Call init_storage() before using storage"
    return _data_dir


def presets_dir() -> Path:
    assert _presets_dir is not None, "Call init_storage() before using storage"
    return _presets_dir


def users_dir() -> Path:
    return data_dir() / "users"


def cards_dir() -> Path:
    return data_dir() / "cards"


def sessions_dir() -> Path:
    return data_dir() / "sessions"

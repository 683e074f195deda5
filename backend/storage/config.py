"""Global app configuration (LLM connection, card prompt, free-tier limits, arcade, trivia)."""

import json
from pathlib import Path
from typing import Any

from .core import data_dir

DEFAULT_CARD_PROMPT = """\
Create a personalized Father's Day card message based on this information about dad:
- Name: {{dad.name}}
- Favorite hobby: {{dad.favorite_hobby}}
- Personality: {{dad.personality}}
- Favorite memory: {{dad.favorite_memory}}
- Special trait: {{dad.special_trait}}

Create a heartfelt, personal message that incorporates these details. The tone should match \
the {{dad.personality}} personality. Keep it warm, genuine, and about 3-4 sentences.{{#if theme}} \
The card will be shown on the "{{theme}}" theme.{{/if}}

Respond with JSON in this format:
{"title": "Happy Father's Day, {{dad.name}}!", "message": "...", "animation": "<emoji>", \
"colors": {"primary": "#RRGGBB", "secondary": "#RRGGBB", "accent": "#RRGGBB"} }
"""

_CONFIG_DEFAULTS: dict[str, Any] = {
    "llm": {
        "provider_url": "",
        "api_key": "",
        "provider_format": "openai",
        "model": "gpt-4o",
    },
    "card_prompt": DEFAULT_CARD_PROMPT,
    "limits": {
        "cards_per_month": 3,
        "games_per_day": 20,
    },
    "display_delay": 2.0,
    "trivia_csv_url": "",
}

_NESTED = ("llm", "limits")
_SCALARS = ("card_prompt", "display_delay", "trivia_csv_url")


def _config_path() -> Path:
    return data_dir() / "config.json"


def get_config() -> dict[str, Any]:
    """Read config, returning defaults merged with stored values."""
    config: dict[str, Any] = json.loads(json.dumps(_CONFIG_DEFAULTS))
    path = _config_path()
    if path.is_file():
        stored = json.loads(path.read_text())
        for group in _NESTED:
            if isinstance(stored.get(group), dict):
                config[group].update(stored[group])
        for key in _SCALARS:
            if key in stored:
                config[key] = stored[key]
    return config


def update_config(fields: dict[str, Any]) -> dict[str, Any]:
    """Merge fields into config and persist. Returns full config.

    Nested groups (llm, limits) merge key-by-key; scalars are overwritten.
    Unknown keys are ignored.
    """
    config = get_config()
    for group in _NESTED:
        if isinstance(fields.get(group), dict):
            config[group].update(fields[group])
    for key in _SCALARS:
        if key in fields:
            config[key] = fields[key]
    _config_path().write_text(json.dumps(config, indent=2))
    return config

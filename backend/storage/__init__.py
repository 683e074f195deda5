"""File-based JSON storage, one module per record type.

Data layout:
  data/
    users/<key>.json      User record: subscription status + usage counters
                          (cards_generated/cards_period, games_played/games_period)
    cards/<id>.json       Saved card: {id, user_id, kind, card, profile, view_count, created_at}
    sessions/<key>.json   List of finished GameSession records for one user
    trivia.json           Imported trivia questions (upserted by id)
    config.json           App settings (LLM connection, card prompt, limits, arcade, trivia)
  presets/
    trivia.json           Built-in trivia questions (merged at read time)

Keys: external user ids are slugified before they touch the filesystem
(Unicode normalize → strip non-ASCII → lowercase → non-alnum runs to hyphen).

Preset merging: list_trivia() merges preset + stored questions; stored wins
on id collision.

Config: get_config() returns defaults merged with stored values.
update_config() applies partial updates: llm and limits merged key-by-key,
scalars overwritten.
"""

# Re-export all public symbols so `from backend import storage` keeps working.

from .core import (  # noqa: F401
    cards_dir,
    data_dir,
    init_storage,
    new_id,
    presets_dir,
    sessions_dir,
    slugify,
    storage_key,
    users_dir,
)

from .users import (  # noqa: F401
    get_usage,
    get_user,
    record_card_usage,
    record_game_usage,
    set_subscription,
    upsert_user,
)

from .cards import (  # noqa: F401
    get_card,
    list_user_cards,
    save_card,
    view_card,
)

from .sessions import (  # noqa: F401
    get_game_sessions,
    get_user_game_stats,
    record_game_session,
)

from .trivia import (  # noqa: F401
    get_stored_trivia,
    list_trivia,
    preset_trivia,
    random_question,
    upsert_trivia,
)

from .config import (  # noqa: F401
    DEFAULT_CARD_PROMPT,
    get_config,
    update_config,
)

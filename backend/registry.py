"""In-memory live state per user: the onboarding flow and the arcade host.

Both live only as long as the process; finished game sessions and cards are
what gets persisted. reset() clears everything (used by tests).
"""

import logging
import os

from dad_arcade.entitlements import Access, EntitlementGate
from dad_arcade.flow import FlowController
from dad_arcade.host import GameHost, make_game_factory
from dad_arcade.models import Feature, GameSession, TriviaQuestion
from dad_arcade.trivia import (
    FallbackTriviaSource,
    HttpTriviaSource,
    LocalTriviaSource,
    TriviaError,
    TriviaSource,
)

from backend import storage
from backend.llm import build_card_generator

logger = logging.getLogger(__name__)

_flows: dict[str, FlowController] = {}
_hosts: dict[str, GameHost] = {}


def reset() -> None:
    for host in _hosts.values():
        host.close()
    _flows.clear()
    _hosts.clear()


def entitlement_gate() -> EntitlementGate:
    limits = storage.get_config()["limits"]
    return EntitlementGate(
        cards_per_month=int(limits["cards_per_month"]),
        games_per_day=int(limits["games_per_day"]),
    )


def check_access(user_id: str, feature: Feature) -> Access:
    return entitlement_gate().check_access(storage.get_usage(user_id), feature)


# ── Flows ────────────────────────────────────────────────


def new_flow(user_id: str) -> FlowController:
    flow = FlowController(
        build_card_generator(),
        entitlement_check=lambda feature: check_access(user_id, feature),
    )
    _flows[user_id] = flow
    return flow


def get_flow(user_id: str) -> FlowController | None:
    return _flows.get(user_id)


# ── Arcade ───────────────────────────────────────────────


class StorageTriviaSource:
    """Serves questions from the local trivia bank (presets + imports)."""

    async def fetch(self, category: str | None) -> TriviaQuestion:
        data = storage.random_question(category)
        if data is None:
            raise TriviaError("Trivia bank is empty")
        return TriviaQuestion.model_validate(data)


def trivia_source() -> TriviaSource:
    remote = os.getenv("TRIVIA_API_URL", "")
    local = FallbackTriviaSource(StorageTriviaSource(), LocalTriviaSource())
    if remote:
        return FallbackTriviaSource(HttpTriviaSource(remote), local)
    return local


def record_session(session: GameSession) -> bool:
    return storage.record_game_session(session)


def game_in_progress(user_id: str) -> bool:
    host = _hosts.get(user_id)
    return host is not None and host.active


def _game_closed(user_id: str) -> None:
    flow = _flows.get(user_id)
    logger.info(
        "Arcade game closed for user=%s, back at stage %s",
        user_id, flow.state.stage if flow else "arcade",
    )


def get_host(user_id: str) -> GameHost:
    """The user's arcade host, created on first use."""
    host = _hosts.get(user_id)
    if host is None:
        host = GameHost(
            record_session,
            user_id,
            factory=make_game_factory(trivia_source()),
            display_delay=float(storage.get_config()["display_delay"]),
            on_close=lambda: _game_closed(user_id),
        )
        _hosts[user_id] = host
        logger.debug("Arcade host created for user=%s", user_id)
    return host

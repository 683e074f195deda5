"""Arcade endpoints: a server-hosted game session per user, plus client-reported scores.

The hosted session is a projection of the same engines the client runs; the
client forwards its inputs and frame ticks here. It is not an anti-cheat
authority.
"""

from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, HTTPException

from backend import registry, storage
from dad_arcade.host import GameAlreadyActive, NoActiveGame, UnknownGame
from dad_arcade.models import GameSession

from .models import GameInputBody, GameSessionBody, StartGameBody, TickBody

router = APIRouter()


@router.get("/arcade/{user_id}")
async def get_arcade(user_id: str):
    """Render snapshot of the user's current game (or the last result)."""
    return registry.get_host(user_id).snapshot()


@router.post("/arcade/{user_id}/games")
async def start_game(user_id: str, body: StartGameBody):
    """Start a game from the arcade stage. Free accounts get a number of games per day."""
    flow = registry.get_flow(user_id)
    if flow is not None and flow.state.stage != "arcade":
        raise HTTPException(409, f"Games open from the arcade stage, flow is at {flow.state.stage}")

    access = registry.check_access(user_id, "unlimited_games")
    if not access.allowed:
        raise HTTPException(402, {"message": access.reason, "offer": access.offer.model_dump()})

    host = registry.get_host(user_id)
    try:
        handle = host.start_game(body.game_type)
    except GameAlreadyActive as e:
        raise HTTPException(409, str(e))
    except UnknownGame as e:
        raise HTTPException(404, str(e))
    storage.record_game_usage(user_id)
    await handle.game.prepare()
    return host.snapshot()


@router.post("/arcade/{user_id}/input")
async def game_input(user_id: str, body: GameInputBody):
    host = registry.get_host(user_id)
    try:
        await host.handle_input(body.event)
    except NoActiveGame as e:
        raise HTTPException(404, str(e))
    return host.snapshot()


@router.post("/arcade/{user_id}/tick")
async def game_tick(user_id: str, body: TickBody):
    """Advance the game by `dt` simulated seconds."""
    host = registry.get_host(user_id)
    try:
        await host.tick(body.dt)
    except NoActiveGame as e:
        raise HTTPException(404, str(e))
    return host.snapshot()


@router.post("/arcade/{user_id}/end")
async def end_game(user_id: str):
    """Voluntary end. The score is recorded unless the game treats it as an abandon."""
    host = registry.get_host(user_id)
    try:
        await host.end()
    except NoActiveGame as e:
        raise HTTPException(404, str(e))
    return host.snapshot()


@router.delete("/arcade/{user_id}/games")
async def close_game(user_id: str):
    """Close the game. Mid-game this drops the session without recording it."""
    host = registry.get_host(user_id)
    host.close()
    return host.snapshot()


@router.post("/game-session")
async def save_game_session(body: GameSessionBody):
    """Record a session played entirely on the client."""
    ended_at = datetime.now(timezone.utc)
    session = GameSession(
        id=storage.new_id(),
        user_id=body.user_id,
        game_type=body.game_type,
        score=body.score,
        started_at=ended_at - timedelta(seconds=body.duration),
        ended_at=ended_at,
        completed=body.completed,
        duration_seconds=body.duration,
    )
    storage.record_game_session(session)
    return session.model_dump(mode="json")

"""User record, usage/entitlement, and game stats endpoints."""

from fastapi import APIRouter, HTTPException

from backend import registry, storage
from dad_arcade.models import Feature

from .models import UpsertUser

router = APIRouter()


@router.post("/users/{user_id}")
async def upsert_user(user_id: str, body: UpsertUser):
    """Create a user or update email / subscription status."""
    return storage.upsert_user(user_id, body.model_dump(exclude_none=True))


@router.get("/users/{user_id}")
async def get_user(user_id: str):
    user = storage.get_user(user_id)
    if not user:
        raise HTTPException(404, "User not found")
    return user


@router.get("/users/{user_id}/stats")
async def get_stats(user_id: str):
    """Total score, games played and high score per game."""
    return storage.get_user_game_stats(user_id)


@router.get("/users/{user_id}/sessions")
async def get_sessions(user_id: str):
    return storage.get_game_sessions(user_id)


@router.get("/users/{user_id}/access/{feature}")
async def check_access(user_id: str, feature: Feature):
    """Entitlement check. A denial carries the upgrade offer instead of failing."""
    return registry.check_access(user_id, feature).model_dump()

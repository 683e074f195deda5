"""Pydantic request/response models for API endpoints."""

from typing import Any

from pydantic import BaseModel, Field

from dad_arcade.models import GameType


class UpsertUser(BaseModel):
    email: str | None = None
    subscription_status: str | None = None


class CheckoutBody(BaseModel):
    user_id: str = Field(alias="userId")
    origin: str = ""

    model_config = {"populate_by_name": True}


class FlowEventBody(BaseModel):
    event: dict[str, Any]
    activation: int | None = None


class StartGameBody(BaseModel):
    game_type: GameType


class GameInputBody(BaseModel):
    event: dict[str, Any]


class TickBody(BaseModel):
    dt: float = Field(ge=0, le=5.0)


class GameSessionBody(BaseModel):
    user_id: str
    game_type: GameType
    score: int = Field(ge=0)
    duration: int = Field(default=0, ge=0)
    completed: bool = False


class TriviaRefreshBody(BaseModel):
    url: str | None = None
    csv_text: str | None = None

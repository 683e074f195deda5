"""Core domain models.

Stage machine, game host, card generator and storage all exchange these types.
Pydantic is used for validation and serialisation at every data boundary.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

Stage = Literal[
    "theme-selection",
    "envelope",
    "questionnaire",
    "card-preview",
    "paywall",
    "gift-reveal",
    "arcade-intro",
    "arcade",
    "thank-you",
]

STAGE_ORDER: tuple[Stage, ...] = (
    "theme-selection",
    "envelope",
    "questionnaire",
    "card-preview",
    "paywall",
    "gift-reveal",
    "arcade-intro",
    "arcade",
    "thank-you",
)

Personality = Literal["funny", "serious", "adventurous", "gentle"]

GameType = Literal["match", "memory", "trivia", "catch"]

GAME_TYPES: tuple[GameType, ...] = ("match", "memory", "trivia", "catch")

Difficulty = Literal["easy", "medium", "hard"]

Feature = Literal["card_generation", "unlimited_games", "premium_themes"]

SubscriptionStatus = Literal["free", "active", "canceled", "past_due"]


class DadProfile(BaseModel):
    """Questionnaire answers. Immutable once the questionnaire completes."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    name: str = Field(min_length=1)
    favorite_hobby: str = Field(min_length=1)
    personality: Personality = "funny"
    favorite_memory: str = Field(min_length=1)
    special_trait: str = Field(min_length=1)


class ColorTheme(BaseModel):
    model_config = ConfigDict(frozen=True)

    primary: str
    secondary: str
    accent: str


class GeneratedCard(BaseModel):
    """Personalised card content shown in the card-preview stage."""

    model_config = ConfigDict(frozen=True)

    title: str
    message: str
    signature: str = "Made with love for the best dad ever!"
    colors: ColorTheme
    emoji: str = ""
    avatar_svg: str = ""
    source: Literal["ai", "fallback"] = "fallback"


class ArcadeIntro(BaseModel):
    """Arcade intro personalisation chosen before entering the arcade."""

    model_config = ConfigDict(frozen=True)

    intro_style: Literal["classic", "neon", "retro", "space", "custom"] = "classic"
    welcome_message: str = "Welcome to your arcade, champion!"
    dad_nickname: str = "Player One"
    favorite_color: str = "#FF6B35"
    background_music: Literal["arcade", "electronic", "jazz", "rock", "none"] = "arcade"


class ThankYouRequest(BaseModel):
    """Inputs for the thank-you card detour."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    dad_name: str = "Dad"
    personal_message: str = ""
    favorite_memory: str = ""
    card_style: Literal["heartfelt", "funny", "grateful", "proud"] = "heartfelt"
    signature_name: str = "Your Child"


class TriviaQuestion(BaseModel):
    id: str
    category: str = "general"
    question: str
    correct_answer: str
    incorrect_answers: list[str] = Field(default_factory=list)
    difficulty: Difficulty = "medium"

    @field_validator("difficulty", mode="before")
    @classmethod
    def _normalise_difficulty(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower() or "medium"
        return value


class GameSession(BaseModel):
    """One finished play-through. Built once by the host, never mutated."""

    model_config = ConfigDict(frozen=True)

    id: str
    user_id: str
    game_type: GameType
    score: int = Field(ge=0)
    started_at: datetime
    ended_at: datetime
    completed: bool = False
    duration_seconds: int = Field(default=0, ge=0)

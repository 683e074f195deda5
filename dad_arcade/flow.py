"""Onboarding stage machine.

The flow is a pure function `transition(state, event) -> state` over frozen
FlowState values, plus a FlowController that owns the current state and runs
the effects that follow a transition (card generation, intro personalisation,
entitlement checks).

Stage path:

  theme-selection → envelope → questionnaire → card-preview → paywall
      → gift-reveal → arcade-intro → arcade ⇄ thank-you

The paywall is the only branch: PaywallUpgrade and PaywallSkip both lead to
gift-reveal. Every stage completion bumps `activation`; a completion sent
with an older activation number is rejected, so a stage completes at most
once per activation.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from dad_arcade.cards import CardGenerator, fallback_card
from dad_arcade.entitlements import Access, UpgradeOffer
from dad_arcade.models import (
    ArcadeIntro,
    DadProfile,
    Feature,
    GeneratedCard,
    Stage,
)

logger = logging.getLogger(__name__)

THEMES = ("dark", "theme-warm", "theme-ocean", "theme-forest", "theme-light")
PREMIUM_THEMES = frozenset({"theme-ocean", "theme-forest"})

PROFILE_FIELDS = ("name", "favorite_hobby", "personality", "favorite_memory", "special_trait")
_CAMEL_KEYS = {
    "favoriteHobby": "favorite_hobby",
    "favoriteMemory": "favorite_memory",
    "specialTrait": "special_trait",
}


class FlowState(BaseModel):
    model_config = ConfigDict(frozen=True)

    stage: Stage = "theme-selection"
    activation: int = 0
    theme: str | None = None
    profile: DadProfile | None = None
    card: GeneratedCard | None = None
    intro: ArcadeIntro | None = None
    upgraded: bool = False
    paywall_choice: Literal["upgrade", "skip"] | None = None
    thank_you: GeneratedCard | None = None


# ── Events ───────────────────────────────────────────────


class ThemeSelected(BaseModel):
    kind: Literal["theme_selected"] = "theme_selected"
    theme: str


class EnvelopeOpened(BaseModel):
    kind: Literal["envelope_opened"] = "envelope_opened"


class QuestionnaireCompleted(BaseModel):
    kind: Literal["questionnaire_completed"] = "questionnaire_completed"
    answers: dict[str, Any]


class CardReady(BaseModel):
    kind: Literal["card_ready"] = "card_ready"
    card: GeneratedCard


class CardAccepted(BaseModel):
    kind: Literal["card_accepted"] = "card_accepted"


class PaywallUpgrade(BaseModel):
    kind: Literal["paywall_upgrade"] = "paywall_upgrade"


class PaywallSkip(BaseModel):
    kind: Literal["paywall_skip"] = "paywall_skip"


class GiftRevealed(BaseModel):
    kind: Literal["gift_revealed"] = "gift_revealed"


class IntroCompleted(BaseModel):
    kind: Literal["intro_completed"] = "intro_completed"
    intro: ArcadeIntro = Field(default_factory=ArcadeIntro)


class ThankYouStarted(BaseModel):
    kind: Literal["thank_you_started"] = "thank_you_started"


class ThankYouCompleted(BaseModel):
    kind: Literal["thank_you_completed"] = "thank_you_completed"
    card: GeneratedCard | None = None


FlowEvent = Annotated[
    Union[
        ThemeSelected,
        EnvelopeOpened,
        QuestionnaireCompleted,
        CardReady,
        CardAccepted,
        PaywallUpgrade,
        PaywallSkip,
        GiftRevealed,
        IntroCompleted,
        ThankYouStarted,
        ThankYouCompleted,
    ],
    Field(discriminator="kind"),
]

_event_adapter: TypeAdapter[Any] = TypeAdapter(FlowEvent)


def parse_event(data: dict[str, Any]) -> Any:
    """Validate a raw event dict into the matching event model."""
    return _event_adapter.validate_python(data)


# (stage the event is valid in, stage it leads to); None = stays put
_EDGES: dict[type[BaseModel], tuple[Stage, Stage | None]] = {
    ThemeSelected: ("theme-selection", "envelope"),
    EnvelopeOpened: ("envelope", "questionnaire"),
    QuestionnaireCompleted: ("questionnaire", "card-preview"),
    CardReady: ("card-preview", None),
    CardAccepted: ("card-preview", "paywall"),
    PaywallUpgrade: ("paywall", "gift-reveal"),
    PaywallSkip: ("paywall", "gift-reveal"),
    GiftRevealed: ("gift-reveal", "arcade-intro"),
    IntroCompleted: ("arcade-intro", "arcade"),
    ThankYouStarted: ("arcade", "thank-you"),
    ThankYouCompleted: ("thank-you", "arcade"),
}


def validate_profile(answers: dict[str, Any]) -> DadProfile:
    """Build a DadProfile from questionnaire answers (snake_case or camelCase keys).

    Raises QuestionnaireIncomplete listing every blank or invalid field.
    """
    normalised = {_CAMEL_KEYS.get(k, k): v for k, v in answers.items()}
    missing = [
        f for f in PROFILE_FIELDS
        if f != "personality" and not str(normalised.get(f) or "").strip()
    ]
    if missing:
        raise QuestionnaireIncomplete(missing)
    fields = {f: normalised[f] for f in PROFILE_FIELDS if normalised.get(f)}
    try:
        return DadProfile.model_validate(fields)
    except ValidationError as e:
        raise QuestionnaireIncomplete([str(err["loc"][0]) for err in e.errors()]) from e


def transition(state: FlowState, event: BaseModel) -> FlowState:
    """Apply one event. Pure: returns a new state or raises a FlowError."""
    edge = _EDGES.get(type(event))
    if edge is None:
        raise InvalidTransition(state.stage, getattr(event, "kind", type(event).__name__))
    expected, target = edge
    if state.stage != expected:
        raise InvalidTransition(state.stage, event.kind)

    updates: dict[str, Any] = {}
    if isinstance(event, CardReady):
        return state.model_copy(update={"card": event.card})
    if isinstance(event, ThemeSelected):
        if event.theme not in THEMES:
            raise UnknownTheme(event.theme)
        updates["theme"] = event.theme
    elif isinstance(event, QuestionnaireCompleted):
        updates["profile"] = validate_profile(event.answers)
        updates["card"] = None
    elif isinstance(event, CardAccepted):
        if state.card is None:
            raise InvalidTransition(state.stage, event.kind, "the card is not ready yet")
    elif isinstance(event, PaywallUpgrade):
        updates["upgraded"] = True
        updates["paywall_choice"] = "upgrade"
    elif isinstance(event, PaywallSkip):
        updates["paywall_choice"] = "skip"
    elif isinstance(event, IntroCompleted):
        updates["intro"] = event.intro
    elif isinstance(event, ThankYouCompleted):
        if event.card is not None:
            updates["thank_you"] = event.card

    updates["stage"] = target
    updates["activation"] = state.activation + 1
    return state.model_copy(update=updates)


# ── Rendering projection ─────────────────────────────────


class StageView(BaseModel):
    stage: Stage
    activation: int
    status: Literal["ready", "loading"] = "ready"
    missing: list[str] = Field(default_factory=list)
    data: dict[str, Any] = Field(default_factory=dict)


# upstream data each stage renders from
_STAGE_NEEDS: dict[str, tuple[str, ...]] = {
    "card-preview": ("profile", "card"),
    "paywall": ("card",),
    "gift-reveal": ("profile",),
    "arcade": ("intro",),
}


def stage_view(state: FlowState) -> StageView:
    needs = _STAGE_NEEDS.get(state.stage, ())
    missing = [name for name in needs if getattr(state, name) is None]
    data: dict[str, Any] = {"theme": state.theme, "upgraded": state.upgraded}
    for name in ("profile", "card", "intro", "thank_you"):
        value = getattr(state, name)
        if value is not None:
            data[name] = value.model_dump(mode="json")
    return StageView(
        stage=state.stage,
        activation=state.activation,
        status="loading" if missing else "ready",
        missing=missing,
        data=data,
    )


# ── Controller ───────────────────────────────────────────

EntitlementCheck = Callable[[Feature], "Access | Awaitable[Access]"]


class FlowController:
    """Owns the FlowState for one onboarding session.

    Args:
        card_generator:     Produces the card on entering card-preview. Never raises.
        entitlement_check:  Feature -> Access. Premium themes are checked with it;
                            without one every theme is allowed.
    """

    def __init__(
        self,
        card_generator: CardGenerator,
        entitlement_check: EntitlementCheck | None = None,
        state: FlowState | None = None,
    ) -> None:
        self._cards = card_generator
        self._entitlement_check = entitlement_check
        self._state = state or FlowState()

    @property
    def state(self) -> FlowState:
        return self._state

    def view(self) -> StageView:
        return stage_view(self._state)

    def reset(self) -> None:
        self._state = FlowState()

    async def _require(self, feature: Feature) -> None:
        if self._entitlement_check is None:
            return
        access = self._entitlement_check(feature)
        if inspect.isawaitable(access):
            access = await access
        if not access.allowed:
            raise FeatureLocked(feature, access.reason, access.offer)

    async def dispatch(self, event: BaseModel, activation: int | None = None) -> FlowState:
        """Apply an event sent by the active stage and run its effects.

        `activation` is the number the stage was rendered with; a mismatch
        raises StaleActivation.
        """
        if activation is not None and activation != self._state.activation:
            raise StaleActivation(activation, self._state.activation)

        if (
            isinstance(event, ThemeSelected)
            and event.theme in PREMIUM_THEMES
            and not self._state.upgraded
        ):
            await self._require("premium_themes")
        if isinstance(event, IntroCompleted) and self._state.stage == "arcade-intro":
            event = IntroCompleted(intro=await self._cards.personalize_intro(event.intro))

        previous = self._state.stage
        self._state = transition(self._state, event)
        if self._state.stage != previous:
            logger.info(
                "Flow stage %s -> %s (activation %d)",
                previous, self._state.stage, self._state.activation,
            )

        if (
            self._state.stage == "card-preview"
            and self._state.card is None
            and self._state.profile is not None
        ):
            try:
                card = await self._cards.generate(self._state.profile)
            except Exception:
                logger.exception("Card generator failed, using the template card")
                card = fallback_card(self._state.profile)
            self._state = transition(self._state, CardReady(card=card))
        return self._state


# ── Errors ───────────────────────────────────────────────


class FlowError(Exception):
    """Base class for stage machine errors."""


class InvalidTransition(FlowError):
    def __init__(self, stage: str, kind: str, detail: str = "") -> None:
        self.stage = stage
        self.kind = kind
        message = f"Event {kind!r} is not valid in stage {stage!r}"
        super().__init__(f"{message}: {detail}" if detail else message)


class StaleActivation(FlowError):
    def __init__(self, given: int, current: int) -> None:
        self.given = given
        self.current = current
        super().__init__(f"Stale activation {given}; current activation is {current}")


class QuestionnaireIncomplete(FlowError):
    def __init__(self, missing: list[str]) -> None:
        self.missing = missing
        super().__init__(f"Questionnaire is missing: {', '.join(missing)}")


class UnknownTheme(FlowError):
    def __init__(self, theme: str) -> None:
        self.theme = theme
        super().__init__(f"Unknown theme: {theme!r}")


class FeatureLocked(FlowError):
    def __init__(self, feature: str, reason: str, offer: UpgradeOffer | None) -> None:
        self.feature = feature
        self.offer = offer
        super().__init__(reason or f"{feature} requires Premium Access")

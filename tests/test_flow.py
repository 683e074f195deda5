"""Tests for dad_arcade.flow: the onboarding stage machine."""

import pytest
from pydantic import ValidationError
from unittest.mock import AsyncMock, MagicMock, patch

from dad_arcade.cards import CardGenerator
from dad_arcade.entitlements import Access, UpgradeOffer
from dad_arcade.flow import (
    CardAccepted,
    CardReady,
    EnvelopeOpened,
    FeatureLocked,
    FlowController,
    FlowState,
    GiftRevealed,
    IntroCompleted,
    InvalidTransition,
    PaywallSkip,
    PaywallUpgrade,
    QuestionnaireCompleted,
    QuestionnaireIncomplete,
    StaleActivation,
    ThankYouCompleted,
    ThankYouStarted,
    ThemeSelected,
    UnknownTheme,
    parse_event,
    stage_view,
    transition,
    validate_profile,
)
from dad_arcade.llm import HttpLLM, LLMError
from dad_arcade.models import ArcadeIntro, ColorTheme, GeneratedCard

ANSWERS = {
    "name": "Tom",
    "favorite_hobby": "golf",
    "personality": "funny",
    "favorite_memory": "our fishing trip",
    "special_trait": "endless patience",
}

CARD = GeneratedCard(
    title="Hi Tom",
    message="Thanks for everything.",
    colors=ColorTheme(primary="#000000", secondary="#111111", accent="#222222"),
)


def _walk(*events) -> FlowState:
    state = FlowState()
    for event in events:
        state = transition(state, event)
    return state


def _at_card_preview() -> FlowState:
    return _walk(
        ThemeSelected(theme="theme-warm"),
        EnvelopeOpened(),
        QuestionnaireCompleted(answers=ANSWERS),
    )


def _failing_generator() -> CardGenerator:
    return CardGenerator(AsyncMock(side_effect=LLMError("Cannot connect to LLM backend")))


# ── Pure transitions ─────────────────────────────────────


class TestTransition:
    def test_starts_at_theme_selection(self) -> None:
        state = FlowState()
        assert state.stage == "theme-selection"
        assert state.activation == 0

    def test_happy_path_stage_order(self) -> None:
        state = _at_card_preview()
        assert state.stage == "card-preview"
        state = transition(state, CardReady(card=CARD))
        assert state.stage == "card-preview"
        stages = []
        for event in (CardAccepted(), PaywallSkip(), GiftRevealed(), IntroCompleted()):
            state = transition(state, event)
            stages.append(state.stage)
        assert stages == ["paywall", "gift-reveal", "arcade-intro", "arcade"]

    def test_every_completion_bumps_activation(self) -> None:
        state = _at_card_preview()
        assert state.activation == 3
        state = transition(state, CardReady(card=CARD))
        assert state.activation == 3
        state = transition(state, CardAccepted())
        assert state.activation == 4

    def test_paywall_branches_converge(self) -> None:
        base = transition(transition(_at_card_preview(), CardReady(card=CARD)), CardAccepted())
        upgraded = transition(base, PaywallUpgrade())
        skipped = transition(base, PaywallSkip())
        assert upgraded.stage == skipped.stage == "gift-reveal"
        assert upgraded.upgraded and upgraded.paywall_choice == "upgrade"
        assert not skipped.upgraded and skipped.paywall_choice == "skip"

    def test_thank_you_detour_returns_to_arcade(self) -> None:
        state = transition(transition(_at_card_preview(), CardReady(card=CARD)), CardAccepted())
        for event in (PaywallSkip(), GiftRevealed(), IntroCompleted(), ThankYouStarted()):
            state = transition(state, event)
        assert state.stage == "thank-you"
        state = transition(state, ThankYouCompleted(card=CARD))
        assert state.stage == "arcade"
        assert state.thank_you == CARD

    def test_out_of_order_event_rejected(self) -> None:
        with pytest.raises(InvalidTransition):
            transition(FlowState(), CardAccepted())

    def test_stage_completes_once(self) -> None:
        state = transition(FlowState(), ThemeSelected(theme="dark"))
        with pytest.raises(InvalidTransition):
            transition(state, ThemeSelected(theme="dark"))

    def test_accept_before_card_ready_rejected(self) -> None:
        with pytest.raises(InvalidTransition, match="not ready"):
            transition(_at_card_preview(), CardAccepted())

    def test_unknown_theme(self) -> None:
        with pytest.raises(UnknownTheme):
            transition(FlowState(), ThemeSelected(theme="theme-neon-pink"))

    def test_states_are_immutable(self) -> None:
        state = FlowState()
        transition(state, ThemeSelected(theme="dark"))
        assert state.stage == "theme-selection"
        with pytest.raises(ValidationError):
            state.stage = "arcade"


# ── Questionnaire validation ─────────────────────────────


class TestQuestionnaire:
    def test_valid_answers(self) -> None:
        profile = validate_profile(ANSWERS)
        assert profile.name == "Tom"
        assert profile.personality == "funny"

    def test_camel_case_keys(self) -> None:
        profile = validate_profile({
            "name": "Tom",
            "favoriteHobby": "golf",
            "personality": "gentle",
            "favoriteMemory": "camping",
            "specialTrait": "kindness",
        })
        assert profile.favorite_hobby == "golf"
        assert profile.special_trait == "kindness"

    def test_personality_defaults_to_funny(self) -> None:
        answers = {k: v for k, v in ANSWERS.items() if k != "personality"}
        assert validate_profile(answers).personality == "funny"

    def test_blank_fields_listed(self) -> None:
        with pytest.raises(QuestionnaireIncomplete) as exc:
            validate_profile({**ANSWERS, "name": "  ", "special_trait": ""})
        assert exc.value.missing == ["name", "special_trait"]

    def test_bad_personality(self) -> None:
        with pytest.raises(QuestionnaireIncomplete) as exc:
            validate_profile({**ANSWERS, "personality": "grumpy"})
        assert exc.value.missing == ["personality"]

    def test_incomplete_questionnaire_stays_put(self) -> None:
        state = _walk(ThemeSelected(theme="dark"), EnvelopeOpened())
        with pytest.raises(QuestionnaireIncomplete):
            transition(state, QuestionnaireCompleted(answers={"name": "Tom"}))
        assert state.stage == "questionnaire"


# ── Events and views ─────────────────────────────────────


class TestEvents:
    def test_parse_event_by_kind(self) -> None:
        event = parse_event({"kind": "theme_selected", "theme": "dark"})
        assert isinstance(event, ThemeSelected)
        assert isinstance(parse_event({"kind": "intro_completed"}).intro, ArcadeIntro)

    def test_parse_unknown_kind(self) -> None:
        with pytest.raises(ValidationError):
            parse_event({"kind": "dance"})


class TestStageView:
    def test_card_preview_loading_until_card(self) -> None:
        view = stage_view(_at_card_preview())
        assert view.status == "loading"
        assert view.missing == ["card"]

    def test_card_preview_ready(self) -> None:
        view = stage_view(transition(_at_card_preview(), CardReady(card=CARD)))
        assert view.status == "ready"
        assert view.data["card"]["title"] == "Hi Tom"
        assert view.data["profile"]["name"] == "Tom"

    def test_stage_without_requirements(self) -> None:
        view = stage_view(FlowState())
        assert view.status == "ready"
        assert view.data["theme"] is None


# ── Controller ───────────────────────────────────────────


class TestFlowController:
    async def test_card_generated_on_entering_preview(self) -> None:
        flow = FlowController(_failing_generator())
        await flow.dispatch(ThemeSelected(theme="theme-warm"))
        await flow.dispatch(EnvelopeOpened())
        state = await flow.dispatch(QuestionnaireCompleted(answers=ANSWERS))

        assert state.stage == "card-preview"
        card = state.card
        assert card is not None
        assert card.source == "fallback"
        assert card.title == "Happy Father's Day, Tom!"
        for detail in ("Tom", "golf", "our fishing trip", "endless patience"):
            assert detail in card.message
        assert card.emoji == "🎭"
        assert "<svg" in card.avatar_svg
        assert flow.view().status == "ready"

    async def test_ai_card_used_when_valid(self) -> None:
        llm = AsyncMock(return_value='{"title": "Fore!", "message": "Tom, you are a hole in one."}')
        flow = FlowController(CardGenerator(llm))
        await flow.dispatch(ThemeSelected(theme="dark"))
        await flow.dispatch(EnvelopeOpened())
        state = await flow.dispatch(QuestionnaireCompleted(answers=ANSWERS))
        assert state.card.source == "ai"
        assert state.card.title == "Fore!"

    async def test_malformed_provider_response_still_reaches_card(self) -> None:
        llm = HttpLLM(provider_url="https://api.openai.com", api_key="sk-test")
        resp = MagicMock()
        resp.json.return_value = {"choices": ["oops"]}
        flow = FlowController(CardGenerator(llm))
        with patch("httpx.AsyncClient.post", AsyncMock(return_value=resp)):
            await flow.dispatch(ThemeSelected(theme="dark"))
            await flow.dispatch(EnvelopeOpened())
            state = await flow.dispatch(QuestionnaireCompleted(answers=ANSWERS))
        assert state.card.source == "fallback"
        state = await flow.dispatch(CardAccepted())
        assert state.stage == "paywall"

    async def test_raising_generator_gets_template_card(self) -> None:
        generator = MagicMock()
        generator.generate = AsyncMock(side_effect=AttributeError("boom"))
        flow = FlowController(generator, state=FlowState(stage="questionnaire", theme="dark", activation=2))
        state = await flow.dispatch(QuestionnaireCompleted(answers=ANSWERS))
        assert state.stage == "card-preview"
        assert state.card.source == "fallback"
        assert state.card.title == "Happy Father's Day, Tom!"

    async def test_stale_activation_rejected(self) -> None:
        flow = FlowController(_failing_generator())
        await flow.dispatch(ThemeSelected(theme="dark"), activation=0)
        with pytest.raises(StaleActivation):
            await flow.dispatch(EnvelopeOpened(), activation=0)
        await flow.dispatch(EnvelopeOpened(), activation=1)
        assert flow.state.stage == "questionnaire"

    async def test_premium_theme_locked_for_free_user(self) -> None:
        offer = UpgradeOffer()
        check = lambda feature: Access(
            feature=feature, allowed=False, reason="Premium themes require Premium Access",
            offer=offer,
        )
        flow = FlowController(_failing_generator(), entitlement_check=check)
        with pytest.raises(FeatureLocked) as exc:
            await flow.dispatch(ThemeSelected(theme="theme-ocean"))
        assert exc.value.feature == "premium_themes"
        assert exc.value.offer == offer
        assert flow.state.stage == "theme-selection"

        await flow.dispatch(ThemeSelected(theme="theme-warm"))
        assert flow.state.theme == "theme-warm"

    async def test_premium_theme_allowed_with_async_check(self) -> None:
        check = AsyncMock(return_value=Access(feature="premium_themes", allowed=True))
        flow = FlowController(_failing_generator(), entitlement_check=check)
        await flow.dispatch(ThemeSelected(theme="theme-forest"))
        check.assert_awaited_once_with("premium_themes")
        assert flow.state.stage == "envelope"

    async def test_custom_intro_personalised(self) -> None:
        llm = AsyncMock(return_value='{"customWelcome": "Ready, Captain Tom?"}')
        state = FlowState(stage="arcade-intro", activation=6)
        flow = FlowController(CardGenerator(llm), state=state)
        await flow.dispatch(IntroCompleted(intro=ArcadeIntro(intro_style="custom")))
        assert flow.state.stage == "arcade"
        assert flow.state.intro.welcome_message == "Ready, Captain Tom?"

    async def test_reset(self) -> None:
        flow = FlowController(_failing_generator())
        await flow.dispatch(ThemeSelected(theme="dark"))
        flow.reset()
        assert flow.state == FlowState()

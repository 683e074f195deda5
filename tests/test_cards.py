"""Tests for dad_arcade.cards: AI card content with template fallbacks."""

import pytest
from unittest.mock import AsyncMock

from dad_arcade.cards import (
    PERSONALITY_EMOJI,
    PERSONALITY_THEMES,
    THANK_YOU_THEMES,
    CardGenerator,
    card_from_output,
    default_card_prompt,
    fallback_card,
    fallback_thank_you,
    parse_json_output,
)
from dad_arcade.llm import EchoLLM, LLMError
from dad_arcade.models import ArcadeIntro, DadProfile, ThankYouRequest


def _profile(**overrides) -> DadProfile:
    fields = {
        "name": "Tom",
        "favorite_hobby": "golf",
        "personality": "funny",
        "favorite_memory": "our fishing trip",
        "special_trait": "endless patience",
    }
    fields.update(overrides)
    return DadProfile(**fields)


# ── Fallback templates ───────────────────────────────────


class TestFallbackCard:
    @pytest.mark.parametrize("personality", ["funny", "serious", "adventurous", "gentle"])
    def test_every_personality_mentions_profile(self, personality: str) -> None:
        card = fallback_card(_profile(personality=personality))
        for detail in ("Tom", "golf", "our fishing trip", "endless patience"):
            assert detail in card.message
        assert "Tom" in card.title
        assert card.colors == PERSONALITY_THEMES[personality]
        assert card.emoji == PERSONALITY_EMOJI[personality]
        assert card.source == "fallback"

    def test_titles_follow_personality(self) -> None:
        assert fallback_card(_profile()).title == "Happy Father's Day, Tom!"
        assert fallback_card(_profile(personality="serious")).title == "To the Wisest Dad, Tom"
        assert fallback_card(_profile(personality="gentle")).title == "With Love for Tom"

    def test_is_deterministic(self) -> None:
        assert fallback_card(_profile()) == fallback_card(_profile())


class TestFallbackThankYou:
    def test_defaults(self) -> None:
        card = fallback_thank_you(ThankYouRequest())
        assert card.title == "Thank You, Dad!"
        assert card.signature == "Your Child"
        assert card.emoji == "💌"
        assert card.colors == THANK_YOU_THEMES["heartfelt"]

    def test_personal_message_and_memory(self) -> None:
        card = fallback_thank_you(ThankYouRequest(
            dad_name="Tom",
            personal_message="You taught me to ride a bike.",
            favorite_memory="that summer at the lake",
            card_style="proud",
            signature_name="Sam",
        ))
        assert card.message.startswith("You taught me to ride a bike.")
        assert "that summer at the lake" in card.message
        assert card.signature == "Sam"
        assert card.colors == THANK_YOU_THEMES["proud"]


# ── Parsing LLM output ───────────────────────────────────


class TestParseOutput:
    def test_plain_json(self) -> None:
        assert parse_json_output('{"title": "Hi"}') == {"title": "Hi"}

    def test_fenced_json(self) -> None:
        text = '```json\n{"title": "Hi"}\n```'
        assert parse_json_output(text) == {"title": "Hi"}

    def test_not_json(self) -> None:
        assert parse_json_output("Dear dad, ...") is None

    def test_json_array_rejected(self) -> None:
        assert parse_json_output('["title"]') is None


class TestCardFromOutput:
    def test_current_field_names(self) -> None:
        data = {
            "title": "Hi Tom",
            "message": "You rock.",
            "animation": "⛳",
            "colors": {"primary": "#111111", "secondary": "#222222", "accent": "#333333"},
        }
        card = card_from_output(data, PERSONALITY_THEMES["funny"], "<svg/>")
        assert card.title == "Hi Tom"
        assert card.emoji == "⛳"
        assert card.colors.primary == "#111111"
        assert card.avatar_svg == "<svg/>"
        assert card.source == "ai"

    def test_legacy_field_names(self) -> None:
        data = {
            "frontMessage": "Front",
            "insideMessage": "Inside",
            "signature": "Love, Sam",
            "cardTheme": {"primaryColor": "#ABCDEF"},
        }
        default = PERSONALITY_THEMES["gentle"]
        card = card_from_output(data, default, "<svg/>")
        assert card.title == "Front"
        assert card.message == "Inside"
        assert card.signature == "Love, Sam"
        assert card.colors.primary == "#ABCDEF"
        assert card.colors.secondary == default.secondary

    def test_missing_colors_use_default(self) -> None:
        default = PERSONALITY_THEMES["serious"]
        card = card_from_output({"title": "t", "message": "m"}, default, "")
        assert card.colors == default

    def test_missing_message_raises(self) -> None:
        with pytest.raises(ValueError):
            card_from_output({"title": "t"}, PERSONALITY_THEMES["funny"], "")


# ── Generator ────────────────────────────────────────────


class TestCardGenerator:
    async def test_no_llm_uses_template(self) -> None:
        card = await CardGenerator(None).generate(_profile())
        assert card == fallback_card(_profile())

    async def test_llm_error_falls_back(self) -> None:
        llm = AsyncMock(side_effect=LLMError("LLM backend returned HTTP 500"))
        card = await CardGenerator(llm).generate(_profile())
        assert card.source == "fallback"
        assert card.title == "Happy Father's Day, Tom!"

    async def test_non_json_output_falls_back(self) -> None:
        card = await CardGenerator(EchoLLM()).generate(_profile())
        assert card.source == "fallback"

    async def test_non_string_output_falls_back(self) -> None:
        llm = AsyncMock(return_value=["not", "text"])
        card = await CardGenerator(llm).generate(_profile())
        assert card.source == "fallback"

    async def test_incomplete_output_falls_back(self) -> None:
        llm = AsyncMock(return_value='{"title": "Only a title"}')
        card = await CardGenerator(llm).generate(_profile())
        assert card.source == "fallback"

    async def test_bad_colors_fall_back(self) -> None:
        llm = AsyncMock(return_value='{"title": "t", "message": "m", "colors": {"primary": 1, "secondary": 2, "accent": 3}}')
        card = await CardGenerator(llm).generate(_profile())
        assert card.source == "fallback"

    async def test_valid_output_used(self) -> None:
        llm = AsyncMock(return_value='{"title": "Fore, Tom!", "message": "Best golfer, best dad."}')
        card = await CardGenerator(llm).generate(_profile())
        assert card.source == "ai"
        assert card.title == "Fore, Tom!"
        assert card.colors == PERSONALITY_THEMES["funny"]
        assert "<svg" in card.avatar_svg
        purpose, prompt = llm.call_args[0]
        assert purpose == "card"
        assert "golf" in prompt

    async def test_custom_prompt_builder(self) -> None:
        llm = AsyncMock(return_value='{"title": "t", "message": "m"}')
        gen = CardGenerator(llm, prompt_builder=lambda p: f"card for {p.name}")
        await gen.generate(_profile())
        assert llm.call_args[0][1] == "card for Tom"

    async def test_broken_prompt_builder_falls_back(self) -> None:
        def broken(profile: DadProfile) -> str:
            raise KeyError("dad")

        llm = AsyncMock()
        card = await CardGenerator(llm, prompt_builder=broken).generate(_profile())
        assert card.source == "fallback"
        llm.assert_not_called()

    def test_default_prompt_lists_answers(self) -> None:
        prompt = default_card_prompt(_profile(personality="adventurous"))
        for detail in ("Tom", "golf", "adventurous", "our fishing trip", "endless patience"):
            assert detail in prompt


class TestThankYouGeneration:
    async def test_signature_always_from_request(self) -> None:
        llm = AsyncMock(return_value='{"title": "Thanks!", "message": "You are great.", "signature": "AI"}')
        card = await CardGenerator(llm).generate_thank_you(ThankYouRequest(signature_name="Sam"))
        assert card.source == "ai"
        assert card.signature == "Sam"

    async def test_failure_falls_back(self) -> None:
        llm = AsyncMock(side_effect=LLMError("down"))
        card = await CardGenerator(llm).generate_thank_you(ThankYouRequest(dad_name="Tom"))
        assert card.title == "Thank You, Tom!"


class TestIntroPersonalisation:
    async def test_non_custom_style_untouched(self) -> None:
        llm = AsyncMock()
        intro = ArcadeIntro(intro_style="neon")
        assert await CardGenerator(llm).personalize_intro(intro) == intro
        llm.assert_not_called()

    async def test_custom_style_uses_welcome(self) -> None:
        llm = AsyncMock(return_value='{"customWelcome": "  Game on, Big T!  "}')
        intro = await CardGenerator(llm).personalize_intro(ArcadeIntro(intro_style="custom"))
        assert intro.welcome_message == "Game on, Big T!"

    async def test_custom_style_keeps_message_on_failure(self) -> None:
        llm = AsyncMock(side_effect=LLMError("down"))
        intro = ArcadeIntro(intro_style="custom", welcome_message="Hi Dad")
        assert (await CardGenerator(llm).personalize_intro(intro)).welcome_message == "Hi Dad"

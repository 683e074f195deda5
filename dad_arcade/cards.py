"""Card content generation with deterministic local fallbacks.

CardGenerator asks the LLM for JSON card content. Any failure (backend down,
non-JSON output, missing fields) is caught here and replaced with a template
card derived from the DadProfile, so callers always get a GeneratedCard.

LLM JSON accepted (either naming style from the two prompt generations):
  {"title" | "frontMessage", "message" | "insideMessage",
   "signature"?, "animation" | "emoji"?, "dadAvatar"?,
   "colors": {"primary","secondary","accent"}
     | "cardTheme": {"primaryColor","secondaryColor","accentColor"}}
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from typing import Any

from pydantic import ValidationError

from dad_arcade.avatar import dad_avatar, thank_you_avatar
from dad_arcade.llm import LLM, LLMError
from dad_arcade.models import (
    ArcadeIntro,
    ColorTheme,
    DadProfile,
    GeneratedCard,
    ThankYouRequest,
)

logger = logging.getLogger(__name__)

PERSONALITY_THEMES: dict[str, ColorTheme] = {
    "funny": ColorTheme(primary="#FF6B35", secondary="#F7931E", accent="#FFD23F"),
    "serious": ColorTheme(primary="#2C5F41", secondary="#4A7C59", accent="#8FB996"),
    "adventurous": ColorTheme(primary="#1B4D3E", secondary="#2E7D6B", accent="#4ECDC4"),
    "gentle": ColorTheme(primary="#8E7CC3", secondary="#A18CD4", accent="#C8B2DB"),
}

PERSONALITY_EMOJI = {"funny": "🎭", "serious": "🦉", "adventurous": "🏔️", "gentle": "💝"}

THANK_YOU_THEMES: dict[str, ColorTheme] = {
    "heartfelt": ColorTheme(primary="#E91E63", secondary="#F8BBD9", accent="#AD1457"),
    "funny": ColorTheme(primary="#FF9800", secondary="#FFE0B2", accent="#F57C00"),
    "grateful": ColorTheme(primary="#4CAF50", secondary="#C8E6C9", accent="#388E3C"),
    "proud": ColorTheme(primary="#2196F3", secondary="#BBDEFB", accent="#1976D2"),
}


def fallback_card(profile: DadProfile) -> GeneratedCard:
    """Template card keyed by personality. No external dependency."""
    p = profile
    if p.personality == "serious":
        title = f"To the Wisest Dad, {p.name}"
        message = (
            f"{p.name}, your thoughtful guidance and wisdom have shaped who I am today. "
            f"Whether you're enjoying {p.favorite_hobby} or sharing life lessons, you always "
            f"know the right thing to say. {p.favorite_memory} reminds me of your incredible "
            f"strength and love. {p.special_trait}: these qualities make you an extraordinary father."
        )
    elif p.personality == "adventurous":
        title = f"Adventure Awaits, {p.name}!"
        message = (
            f"{p.name}, from your passion for {p.favorite_hobby} to all our amazing adventures "
            f"together, you've taught me to embrace life fully! {p.favorite_memory} is proof of "
            f"your adventurous spirit and loving heart. {p.special_trait}: you're not just a dad, "
            f"you're a true life explorer!"
        )
    elif p.personality == "gentle":
        title = f"With Love for {p.name}"
        message = (
            f"{p.name}, your gentle heart and caring nature make you the most wonderful dad. "
            f"Whether you're enjoying {p.favorite_hobby} or just being there when I need you "
            f"most, your love shines through. {p.favorite_memory} captures the essence of your "
            f"beautiful soul. {p.special_trait}: you are truly a gift to our family."
        )
    else:
        title = f"Happy Father's Day, {p.name}!"
        message = (
            f"{p.name}, you're the dad with all the best jokes and the biggest heart! Your love "
            f"for {p.favorite_hobby} and your amazing sense of humor make every day brighter. "
            f"{p.favorite_memory} is just one of the countless memories that show what an "
            f"incredible father you are. {p.special_trait}: that's what makes you one of a kind!"
        )
    return GeneratedCard(
        title=title,
        message=message,
        colors=PERSONALITY_THEMES[p.personality],
        emoji=PERSONALITY_EMOJI[p.personality],
        avatar_svg=dad_avatar(p),
        source="fallback",
    )


def fallback_thank_you(request: ThankYouRequest) -> GeneratedCard:
    message = request.personal_message or (
        f"Dear {request.dad_name}, thank you for being the amazing father you are. "
        "Your love and support mean everything to me."
    )
    if request.favorite_memory:
        message = f"{message} I'll always treasure {request.favorite_memory}."
    return GeneratedCard(
        title=f"Thank You, {request.dad_name}!",
        message=message,
        signature=request.signature_name,
        colors=THANK_YOU_THEMES[request.card_style],
        emoji="💌",
        avatar_svg=thank_you_avatar(),
        source="fallback",
    )


def default_card_prompt(profile: DadProfile) -> str:
    return (
        "Create a personalized Father's Day card message based on this information about dad:\n"
        f"- Name: {profile.name}\n"
        f"- Favorite hobby: {profile.favorite_hobby}\n"
        f"- Personality: {profile.personality}\n"
        f"- Favorite memory: {profile.favorite_memory}\n"
        f"- Special trait: {profile.special_trait}\n\n"
        "Create a heartfelt, personal message that incorporates these details. The tone should "
        "match the personality type. Keep it warm, genuine, and about 3-4 sentences. Also "
        "suggest an appropriate emoji for the card theme.\n\n"
        "Respond with JSON in this format:\n"
        '{"title": "Happy Father\'s Day, [Name]!", "message": "...", "animation": "<emoji>", '
        '"colors": {"primary": "#RRGGBB", "secondary": "#RRGGBB", "accent": "#RRGGBB"}}'
    )


def default_thank_you_prompt(request: ThankYouRequest) -> str:
    return (
        "Create a heartfelt thank you card from a child to their father based on:\n"
        f"- Dad's name: {request.dad_name}\n"
        f"- Card style: {request.card_style}\n"
        f"- Personal message: {request.personal_message}\n"
        f"- Favorite memory: {request.favorite_memory}\n"
        f"- Child's name: {request.signature_name}\n\n"
        "Generate a warm, grateful message that feels authentic and personal.\n"
        'Return JSON with "title", "message" and "colors" '
        f"(primary, secondary, accent) matching the {request.card_style} style."
    )


def default_intro_prompt(intro: ArcadeIntro) -> str:
    return (
        "Create a custom arcade intro based on:\n"
        f"- Style: {intro.intro_style}\n"
        f"- Welcome message: {intro.welcome_message}\n"
        f"- Dad's nickname: {intro.dad_nickname}\n"
        f"- Favorite color: {intro.favorite_color}\n"
        f"- Music preference: {intro.background_music}\n\n"
        'Return JSON with "customWelcome": an enhanced welcome message.'
    )


def parse_json_output(text: str) -> dict[str, Any] | None:
    """Parse a JSON object from LLM output, stripping markdown fences."""
    cleaned = text.strip()
    if cleaned.startswith("```"):
        lines = [line for line in cleaned.split("\n")[1:] if not line.strip().startswith("```")]
        cleaned = "\n".join(lines)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.warning("Card output is not valid JSON: %s", e)
        return None
    return data if isinstance(data, dict) else None


def _colors_from(data: dict[str, Any], default: ColorTheme) -> ColorTheme:
    colors = data.get("colors")
    if isinstance(colors, dict) and {"primary", "secondary", "accent"} <= colors.keys():
        return ColorTheme.model_validate(colors)
    theme = data.get("cardTheme") or data.get("colors")
    if isinstance(theme, dict) and "primaryColor" in theme:
        return ColorTheme(
            primary=theme["primaryColor"],
            secondary=theme.get("secondaryColor", default.secondary),
            accent=theme.get("accentColor", default.accent),
        )
    return default


def card_from_output(
    data: dict[str, Any], default_colors: ColorTheme, avatar_svg: str
) -> GeneratedCard:
    """Build a GeneratedCard from parsed LLM JSON. Raises ValueError if incomplete."""
    title = data.get("title") or data.get("frontMessage")
    message = data.get("message") or data.get("insideMessage")
    if not title or not message:
        raise ValueError("card output is missing title or message")
    fields: dict[str, Any] = {
        "title": title,
        "message": message,
        "colors": _colors_from(data, default_colors),
        "emoji": data.get("animation") or data.get("emoji") or "",
        "avatar_svg": data.get("dadAvatar") or avatar_svg,
        "source": "ai",
    }
    if data.get("signature"):
        fields["signature"] = data["signature"]
    return GeneratedCard(**fields)


class CardGenerator:
    """AI-backed card generator that never fails.

    Args:
        llm:             Text-generation callable, or None to always use templates.
        prompt_builder:  DadProfile -> prompt text. Defaults to default_card_prompt.
    """

    def __init__(
        self,
        llm: LLM | None,
        prompt_builder: Callable[[DadProfile], str] = default_card_prompt,
    ) -> None:
        self._llm = llm
        self._prompt_builder = prompt_builder

    async def _ask(self, purpose: str, prompt: str) -> dict[str, Any] | None:
        if self._llm is None:
            return None
        try:
            text = await self._llm(purpose, prompt)
        except LLMError as e:
            logger.warning("%s generation failed, using fallback: %s", purpose, e)
            return None
        if not isinstance(text, str):
            logger.warning("%s generation returned %s, using fallback", purpose, type(text).__name__)
            return None
        return parse_json_output(text)

    async def generate(self, profile: DadProfile) -> GeneratedCard:
        try:
            prompt = self._prompt_builder(profile)
        except Exception as e:
            logger.warning("Card prompt could not be built, using fallback: %s", e)
            return fallback_card(profile)

        data = await self._ask("card", prompt)
        if data is not None:
            try:
                return card_from_output(
                    data, PERSONALITY_THEMES[profile.personality], dad_avatar(profile)
                )
            except (ValueError, ValidationError) as e:
                logger.warning("Card output rejected, using fallback: %s", e)
        return fallback_card(profile)

    async def generate_thank_you(self, request: ThankYouRequest) -> GeneratedCard:
        data = await self._ask("thank_you", default_thank_you_prompt(request))
        if data is not None:
            try:
                card = card_from_output(
                    data, THANK_YOU_THEMES[request.card_style], thank_you_avatar()
                )
                return card.model_copy(update={"signature": request.signature_name})
            except (ValueError, ValidationError) as e:
                logger.warning("Thank-you output rejected, using fallback: %s", e)
        return fallback_thank_you(request)

    async def personalize_intro(self, intro: ArcadeIntro) -> ArcadeIntro:
        """Only the "custom" style asks the LLM; the rest keep the user's choices."""
        if intro.intro_style != "custom":
            return intro
        data = await self._ask("arcade_intro", default_intro_prompt(intro))
        welcome = (data or {}).get("customWelcome")
        if isinstance(welcome, str) and welcome.strip():
            return intro.model_copy(update={"welcome_message": welcome.strip()})
        return intro

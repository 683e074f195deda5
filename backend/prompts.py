"""Handlebars prompt rendering for card generation."""

from collections.abc import Callable
from typing import Any

import pybars

from dad_arcade.models import DadProfile

_compiler = pybars.Compiler()
_cache: dict[str, Callable] = {}


class PromptError(Exception):
    """Raised when a Handlebars template fails to compile or render."""


# ── Custom Handlebars helpers ────────────────────────────


def _helper_ifeq(this, options, left, right):
    """{{#ifeq dad.personality "funny"}}...{{else}}...{{/ifeq}}"""
    if str(left) == str(right):
        return options["fn"](this)
    return options["inverse"](this)


def _helper_upper(this, value):
    """{{upper dad.name}}"""
    return str(value).upper()


_HELPERS: dict[str, Callable] = {
    "ifeq": _helper_ifeq,
    "upper": _helper_upper,
}


def render_prompt(template_str: str, context: dict[str, Any]) -> str:
    """Compile and render a Handlebars template with the given context.

    Templates are cached by source string to avoid recompilation.
    """
    try:
        compiled = _cache.get(template_str)
        if compiled is None:
            compiled = _compiler.compile(template_str)
            _cache[template_str] = compiled
        return str(compiled(context, helpers=_HELPERS))
    except Exception as e:
        raise PromptError(f"Template error: {e}") from e


def build_card_context(profile: DadProfile, theme: str | None = None) -> dict[str, Any]:
    """Template variables for the card prompt.

    `dad` holds the questionnaire answers; the camelCase aliases match the
    questionnaire's field names.
    """
    dad = profile.model_dump()
    dad.update({
        "favoriteHobby": profile.favorite_hobby,
        "favoriteMemory": profile.favorite_memory,
        "specialTrait": profile.special_trait,
    })
    ctx: dict[str, Any] = {"dad": dad}
    if theme:
        ctx["theme"] = theme
    return ctx


def card_prompt_builder(
    template_str: str, theme: str | None = None
) -> Callable[[DadProfile], str]:
    """Bind a template so CardGenerator can call it with just the profile."""

    def build(profile: DadProfile) -> str:
        return render_prompt(template_str, build_card_context(profile, theme))

    return build

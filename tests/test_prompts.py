"""Tests for Handlebars prompt rendering: template compilation, the card
context, custom helpers (ifeq, upper), and error handling."""

import pytest
from unittest.mock import AsyncMock

from backend.prompts import (
    PromptError,
    build_card_context,
    card_prompt_builder,
    render_prompt,
)
from backend.storage.config import DEFAULT_CARD_PROMPT
from dad_arcade.cards import CardGenerator
from dad_arcade.models import DadProfile


def _profile(**overrides) -> DadProfile:
    fields = {
        "name": "Tom",
        "favorite_hobby": "golf",
        "personality": "serious",
        "favorite_memory": "our fishing trip",
        "special_trait": "endless patience",
    }
    fields.update(overrides)
    return DadProfile(**fields)


# ── render_prompt ────────────────────────────────────────────


def test_render_simple_variable():
    assert render_prompt("Hello {{name}}!", {"name": "Dad"}) == "Hello Dad!"


def test_render_if_conditional():
    tpl = "{{#if theme}}on {{theme}}{{else}}plain{{/if}}"
    assert render_prompt(tpl, {"theme": "dark"}) == "on dark"
    assert render_prompt(tpl, {}) == "plain"


def test_render_missing_variable():
    assert render_prompt("Hello {{dad.name}}!", {}) == "Hello !"


def test_render_invalid_template():
    with pytest.raises(PromptError):
        render_prompt("{{> missing_partial}}", {})


# ── Helpers ──────────────────────────────────────────────────


def test_ifeq_helper():
    tpl = '{{#ifeq dad.personality "funny"}}joke{{else}}toast{{/ifeq}}'
    assert render_prompt(tpl, {"dad": {"personality": "funny"}}) == "joke"
    assert render_prompt(tpl, {"dad": {"personality": "gentle"}}) == "toast"


def test_upper_helper():
    assert render_prompt("{{upper dad.name}}", {"dad": {"name": "Tom"}}) == "TOM"


# ── build_card_context ───────────────────────────────────────


def test_card_context_fields():
    ctx = build_card_context(_profile())
    assert ctx["dad"]["name"] == "Tom"
    assert ctx["dad"]["favorite_hobby"] == "golf"
    assert ctx["dad"]["favoriteHobby"] == "golf"
    assert ctx["dad"]["specialTrait"] == "endless patience"
    assert "theme" not in ctx


def test_card_context_theme():
    assert build_card_context(_profile(), "theme-warm")["theme"] == "theme-warm"


# ── Default template ─────────────────────────────────────────


def test_default_prompt_renders_every_answer():
    prompt = card_prompt_builder(DEFAULT_CARD_PROMPT, "theme-ocean")(_profile())
    for detail in ("Tom", "golf", "serious", "our fishing trip", "endless patience", "theme-ocean"):
        assert detail in prompt
    assert "{{" not in prompt


def test_default_prompt_without_theme():
    prompt = card_prompt_builder(DEFAULT_CARD_PROMPT)(_profile())
    assert "will be shown on" not in prompt


async def test_broken_template_gives_fallback_card():
    llm = AsyncMock()
    gen = CardGenerator(llm, prompt_builder=card_prompt_builder("{{> missing_partial}}"))
    card = await gen.generate(_profile())
    assert card.source == "fallback"
    llm.assert_not_called()

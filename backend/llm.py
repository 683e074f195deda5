"""Builds the card generator from app settings and environment.

Connection resolution, first match wins per field:
  provider_url     config llm.provider_url → $LLM_PROVIDER_URL → OpenAI if a key is set
  api_key          config llm.api_key → $OPENAI_API_KEY
  provider_format  config llm.provider_format → $LLM_PROVIDER_FORMAT → "openai"
  model            $LLM_MODEL → config llm.model

With no provider URL at all, cards come from the local templates only.
"""

import logging
import os

from dad_arcade.cards import CardGenerator
from dad_arcade.llm import HttpLLM

from backend import storage
from backend.prompts import card_prompt_builder

logger = logging.getLogger(__name__)

OPENAI_URL = "https://api.openai.com"


def resolve_connection() -> dict[str, str]:
    llm_config = storage.get_config()["llm"]
    api_key = llm_config.get("api_key") or os.getenv("OPENAI_API_KEY", "")
    provider_url = llm_config.get("provider_url") or os.getenv("LLM_PROVIDER_URL", "")
    if not provider_url and api_key:
        provider_url = OPENAI_URL
    return {
        "provider_url": provider_url,
        "api_key": api_key,
        "provider_format": (
            llm_config.get("provider_format") or os.getenv("LLM_PROVIDER_FORMAT", "") or "openai"
        ),
        "model": os.getenv("LLM_MODEL", "") or llm_config.get("model", ""),
    }


def build_llm() -> HttpLLM | None:
    conn = resolve_connection()
    if not conn["provider_url"]:
        logger.debug("No LLM connection configured; cards use templates")
        return None
    return HttpLLM(
        provider_url=conn["provider_url"],
        api_key=conn["api_key"],
        provider_format=conn["provider_format"],  # type: ignore[arg-type]
        model=conn["model"],
    )


def build_card_generator(theme: str | None = None) -> CardGenerator:
    prompt = storage.get_config()["card_prompt"]
    return CardGenerator(build_llm(), prompt_builder=card_prompt_builder(prompt, theme))

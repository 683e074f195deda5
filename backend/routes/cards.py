"""Card generation, saved cards, thank-you cards, and share links."""

from typing import Any

from fastapi import APIRouter, HTTPException

from backend import registry, storage
from backend.llm import build_card_generator
from dad_arcade.flow import QuestionnaireIncomplete, validate_profile
from dad_arcade.models import ArcadeIntro, DadProfile, ThankYouRequest
from dad_arcade.share import share_payload

router = APIRouter()


def _profile_or_422(answers: dict[str, Any]) -> DadProfile:
    try:
        return validate_profile(answers)
    except QuestionnaireIncomplete as e:
        raise HTTPException(422, {"message": str(e), "missing": e.missing})


@router.post("/generate-card")
async def generate_card(body: dict[str, Any]):
    """Generate a card from questionnaire answers. Falls back to a template on AI failure."""
    profile = _profile_or_422(body)
    card = await build_card_generator().generate(profile)
    return card.model_dump()


@router.post("/users/{user_id}/cards")
async def create_card(user_id: str, body: dict[str, Any]):
    """Generate and save a card for a user, counting it against the free tier."""
    profile = _profile_or_422(body)
    access = registry.check_access(user_id, "card_generation")
    if not access.allowed:
        raise HTTPException(402, {"message": access.reason, "offer": access.offer.model_dump()})

    card = await build_card_generator().generate(profile)
    record = storage.save_card(user_id, card.model_dump(), profile=profile.model_dump())
    storage.record_card_usage(user_id)
    return record


@router.get("/users/{user_id}/cards")
async def list_cards(user_id: str):
    return storage.list_user_cards(user_id)


@router.get("/cards/{card_id}")
async def get_card(card_id: str):
    """Read a shared card and count the view."""
    record = storage.view_card(card_id)
    if not record:
        raise HTTPException(404, "Card not found")
    return record


@router.get("/cards/{card_id}/share")
async def share_card(card_id: str, origin: str = ""):
    """SMS / e-mail / native share payloads pointing at the card."""
    record = storage.get_card(card_id)
    if not record:
        raise HTTPException(404, "Card not found")
    dad_name = (record.get("profile") or {}).get("name", "Dad")
    url = f"{origin.rstrip('/')}/cards/{card_id}"
    return share_payload(url, card_title=record["card"]["title"], dad_name=dad_name).model_dump()


@router.post("/generate-thank-you-card")
async def generate_thank_you_card(body: ThankYouRequest, user_id: str | None = None):
    """Thank-you card from child to dad. Saved when a user_id is given."""
    card = await build_card_generator().generate_thank_you(body)
    if user_id:
        return storage.save_card(user_id, card.model_dump(), kind="thank_you")
    return card.model_dump()


@router.post("/generate-arcade-intro")
async def generate_arcade_intro(body: ArcadeIntro):
    """Personalise the arcade intro; only the "custom" style calls the AI."""
    intro = await build_card_generator().personalize_intro(body)
    return intro.model_dump()

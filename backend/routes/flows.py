"""Onboarding flow endpoints: create, view, and dispatch stage events."""

from fastapi import APIRouter, HTTPException
from pydantic import ValidationError

from backend import registry
from dad_arcade.flow import (
    FeatureLocked,
    InvalidTransition,
    QuestionnaireIncomplete,
    StaleActivation,
    UnknownTheme,
    parse_event,
)

from .models import FlowEventBody

router = APIRouter()


@router.post("/flows/{user_id}")
async def create_flow(user_id: str):
    """Start (or restart) onboarding at theme selection."""
    return registry.new_flow(user_id).view().model_dump()


@router.get("/flows/{user_id}")
async def get_flow(user_id: str):
    flow = registry.get_flow(user_id)
    if flow is None:
        raise HTTPException(404, "Flow not found")
    return flow.view().model_dump()


@router.post("/flows/{user_id}/events")
async def dispatch_event(user_id: str, body: FlowEventBody):
    """Apply a stage event sent with the activation the stage was rendered with."""
    flow = registry.get_flow(user_id)
    if flow is None:
        raise HTTPException(404, "Flow not found")
    try:
        event = parse_event(body.event)
    except ValidationError as e:
        raise HTTPException(422, {"message": "Invalid event", "errors": [err["msg"] for err in e.errors()]})
    if registry.game_in_progress(user_id):
        raise HTTPException(409, "Close the current game before leaving the arcade")

    try:
        await flow.dispatch(event, activation=body.activation)
    except QuestionnaireIncomplete as e:
        raise HTTPException(422, {"message": str(e), "missing": e.missing})
    except UnknownTheme as e:
        raise HTTPException(422, str(e))
    except FeatureLocked as e:
        offer = e.offer.model_dump() if e.offer else None
        raise HTTPException(402, {"message": str(e), "offer": offer})
    except (InvalidTransition, StaleActivation) as e:
        raise HTTPException(409, str(e))
    return flow.view().model_dump()

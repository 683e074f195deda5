"""Checkout session creation and premium upgrade."""

import logging
import os

from fastapi import APIRouter, HTTPException, Request

from backend import storage
from dad_arcade.checkout import CheckoutClient, CheckoutError

from .models import CheckoutBody

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/create-checkout-session")
async def create_checkout_session(body: CheckoutBody, request: Request):
    """Start a one-time premium payment. Returns {"url": <redirect>}."""
    client = CheckoutClient(os.getenv("STRIPE_SECRET_KEY", ""))
    if not client.configured:
        raise HTTPException(503, "Stripe not configured")
    origin = body.origin or request.headers.get("origin") or str(request.base_url)
    try:
        url = await client.create_checkout(body.user_id, origin)
    except CheckoutError as e:
        logger.warning("Checkout failed for user=%s: %s", body.user_id, e)
        raise HTTPException(502, "Failed to create checkout session")
    return {"url": url}


@router.post("/upgrade/{user_id}")
async def upgrade(user_id: str):
    """Mark the user premium (payment success callback and dev flow)."""
    return storage.set_subscription(user_id, "active")

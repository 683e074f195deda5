"""Payment checkout via Stripe's Checkout Sessions REST API.

Only session creation is needed: the caller redirects the user to the
returned URL. Stripe expects form-encoded bodies with bracketed keys.
"""

from __future__ import annotations

import logging

import httpx

from dad_arcade.entitlements import PREMIUM_PRICE_CENTS, PREMIUM_PRODUCT_NAME

logger = logging.getLogger(__name__)

STRIPE_API_URL = "https://api.stripe.com"


class CheckoutClient:
    def __init__(
        self,
        secret_key: str,
        api_url: str = STRIPE_API_URL,
        price_cents: int = PREMIUM_PRICE_CENTS,
        timeout: float = 30.0,
    ) -> None:
        self._secret_key = secret_key
        self._api_url = api_url.rstrip("/")
        self._price_cents = price_cents
        self._timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self._secret_key)

    def _session_form(self, user_id: str, origin: str) -> dict[str, str]:
        origin = origin.rstrip("/")
        return {
            "mode": "payment",
            "payment_method_types[0]": "card",
            "line_items[0][price_data][currency]": "usd",
            "line_items[0][price_data][product_data][name]": PREMIUM_PRODUCT_NAME,
            "line_items[0][price_data][product_data][description]": (
                "Unlimited personalized cards and games"
            ),
            "line_items[0][price_data][unit_amount]": str(self._price_cents),
            "line_items[0][quantity]": "1",
            "success_url": f"{origin}/success?session_id={{CHECKOUT_SESSION_ID}}",
            "cancel_url": f"{origin}/",
            "metadata[userId]": user_id,
        }

    async def create_checkout(self, user_id: str, origin: str) -> str:
        """Create a one-time payment session and return its redirect URL."""
        if not self.configured:
            raise CheckoutError("Stripe not configured")

        url = f"{self._api_url}/v1/checkout/sessions"
        logger.debug("checkout create user=%s origin=%s", user_id, origin)
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(
                    url,
                    data=self._session_form(user_id, origin),
                    headers={"Authorization": f"Bearer {self._secret_key}"},
                )
                resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise CheckoutError(f"Payment provider returned HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise CheckoutError("Cannot reach payment provider") from e

        try:
            data = resp.json()
        except ValueError as e:
            raise CheckoutError("Payment provider returned a non-JSON response") from e
        redirect = data.get("url") if isinstance(data, dict) else None
        if not isinstance(redirect, str) or not redirect:
            raise CheckoutError("Payment provider did not return a checkout URL")
        return redirect


class CheckoutError(RuntimeError):
    """Raised when a checkout session cannot be created."""

"""Free/premium feature gate.

Free accounts get FREE_CARDS_PER_MONTH cards per calendar month and
FREE_GAMES_PER_DAY games per UTC day; premium themes are premium-only.
An "active" subscription allows everything. A denial never hard-blocks:
it carries an UpgradeOffer for the caller to show.

Usage counters are stamped with the period they were counted in
(`cards_period` = "YYYY-MM", `games_period` = "YYYY-MM-DD"); a counter from an
older period reads as zero.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone

from pydantic import BaseModel, Field

from dad_arcade.models import Feature, SubscriptionStatus

FREE_CARDS_PER_MONTH = 3
FREE_GAMES_PER_DAY = 20
PREMIUM_PRICE_CENTS = 999
PREMIUM_PRODUCT_NAME = "Father's Day Arcade - Premium Access"
PREMIUM_FEATURES = [
    "Unlimited personalized cards",
    "Unlimited game plays",
    "Access to all 4 arcade games",
    "Premium themes & animations",
]


def month_key(now: datetime) -> str:
    return now.strftime("%Y-%m")


def day_key(now: datetime) -> str:
    return now.strftime("%Y-%m-%d")


class Usage(BaseModel):
    subscription_status: SubscriptionStatus = "free"
    cards_generated: int = Field(default=0, ge=0)
    cards_period: str = ""
    games_played: int = Field(default=0, ge=0)
    games_period: str = ""

    def cards_in(self, now: datetime) -> int:
        return self.cards_generated if self.cards_period == month_key(now) else 0

    def games_in(self, now: datetime) -> int:
        return self.games_played if self.games_period == day_key(now) else 0


class UpgradeOffer(BaseModel):
    product: str = PREMIUM_PRODUCT_NAME
    price_cents: int = PREMIUM_PRICE_CENTS
    currency: str = "usd"
    features: list[str] = Field(default_factory=lambda: list(PREMIUM_FEATURES))


class Access(BaseModel):
    feature: Feature
    allowed: bool
    reason: str = ""
    remaining: int | None = None
    offer: UpgradeOffer | None = None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class EntitlementGate:
    def __init__(
        self,
        cards_per_month: int = FREE_CARDS_PER_MONTH,
        games_per_day: int = FREE_GAMES_PER_DAY,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.cards_per_month = cards_per_month
        self.games_per_day = games_per_day
        self.clock = clock

    def check_access(self, usage: Usage, feature: Feature) -> Access:
        if usage.subscription_status == "active":
            return Access(feature=feature, allowed=True)

        now = self.clock()
        if feature == "card_generation":
            used, limit = usage.cards_in(now), self.cards_per_month
            reason = f"You've created {used}/{limit} free cards this month."
        elif feature == "unlimited_games":
            used, limit = usage.games_in(now), self.games_per_day
            reason = f"You've played {used}/{limit} free games today."
        else:
            return Access(
                feature=feature,
                allowed=False,
                reason="Premium themes are part of Premium Access.",
                offer=UpgradeOffer(),
            )

        remaining = max(0, limit - used)
        if remaining > 0:
            return Access(feature=feature, allowed=True, remaining=remaining)
        return Access(
            feature=feature, allowed=False, reason=reason, remaining=0, offer=UpgradeOffer()
        )

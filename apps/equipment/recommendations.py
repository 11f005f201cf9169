"""Weighted recommendation score for equipment.

Each machine is scored against the renter's stored preferences and rental
history:

    category match        +30
    location match        +20
    price within range    +15
    each matching feature  +5
    popularity            +min(10, popularity)
    rented before         +10

Scores are capped at 100; only scores above 30 are recommended.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from django.db import transaction  # type: ignore

from .models import Equipment, Recommendation

logger = logging.getLogger(__name__)

MAX_SCORE = 100
MIN_RECOMMENDED_SCORE = 30
DEFAULT_LIMIT = 5
DEFAULT_REASON = "Recommended based on your preferences"


@dataclass
class ScoredEquipment:
    equipment: Equipment
    score: int
    reasons: list[str] = field(default_factory=list)

    @property
    def reason(self) -> str:
        return self.reasons[0] if self.reasons else DEFAULT_REASON


def score_equipment(equipment: Equipment, preferences: dict[str, Any], rented_before: bool = False) -> ScoredEquipment:
    score = 0
    reasons: list[str] = []

    if equipment.category in (preferences.get("preferred_categories") or []):
        score += 30
        reasons.append(f"Matches your preferred category: {equipment.category}")

    if equipment.location in (preferences.get("preferred_locations") or []):
        score += 20
        reasons.append(f"Available in your preferred location: {equipment.location}")

    price_range = preferences.get("price_range") or {}
    try:
        low, high = int(price_range.get("min", 0)), int(price_range.get("max", 0))
    except (TypeError, ValueError):
        low, high = 0, 0
    if high and low <= equipment.daily_rate <= high:
        score += 15
        reasons.append("Within your preferred price range")

    wanted = set(preferences.get("features") or [])
    matching = [feature for feature in (equipment.features or []) if feature in wanted]
    if matching:
        score += 5 * len(matching)
        reasons.append(f"Has {len(matching)} features you prefer")

    if equipment.popularity > 0:
        score += min(10, equipment.popularity)

    if rented_before:
        score += 10
        reasons.append("You have rented this before")

    return ScoredEquipment(equipment=equipment, score=min(MAX_SCORE, score), reasons=reasons)


@transaction.atomic
def recommend_for_user(user, limit: int = DEFAULT_LIMIT) -> list[ScoredEquipment]:
    """Score every listed machine for the user and store the top matches."""

    from apps.bookings.models import Booking

    preferences = user.preferences or {}
    rented_ids = set(Booking.objects.filter(renter=user).values_list("equipment_id", flat=True))

    scored = [
        score_equipment(equipment, preferences, rented_before=equipment.pk in rented_ids)
        for equipment in Equipment.objects.all()
    ]
    top = sorted(
        (item for item in scored if item.score > MIN_RECOMMENDED_SCORE),
        key=lambda item: item.score,
        reverse=True,
    )[:limit]

    Recommendation.objects.bulk_create(
        [
            Recommendation(user=user, equipment=item.equipment, score=item.score, reason=item.reason)
            for item in top
        ]
    )
    logger.info(f"Stored {len(top)} recommendations for user {user.pk}")
    return top

"""Serializers for user-related API endpoints."""

from __future__ import annotations

from typing import Any

from django.contrib.auth import get_user_model  # type: ignore
from rest_framework import serializers  # type: ignore

User = get_user_model()

LIST_PREFERENCES = ("preferred_categories", "preferred_locations", "features")


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "name",
            "contact",
            "language",
            "preferences",
            "is_staff",
            "created_at",
        ]
        read_only_fields = ["id", "is_staff", "created_at"]

    def validate_preferences(self, value: Any) -> dict[str, Any]:
        """Merge a partial preferences update into the stored ones."""
        if not isinstance(value, dict):
            raise serializers.ValidationError("Preferences must be an object.")

        unknown = set(value) - set(LIST_PREFERENCES) - {"price_range"}
        if unknown:
            raise serializers.ValidationError(f"Unknown preferences: {', '.join(sorted(unknown))}.")

        for key in LIST_PREFERENCES:
            if key in value and not (
                isinstance(value[key], list) and all(isinstance(item, str) for item in value[key])
            ):
                raise serializers.ValidationError({key: "Must be a list of strings."})

        price_range = value.get("price_range")
        if price_range is not None:
            if not isinstance(price_range, dict) or not all(
                isinstance(price_range.get(bound, 0), int) and price_range.get(bound, 0) >= 0
                for bound in ("min", "max")
            ):
                raise serializers.ValidationError({"price_range": "min and max must be non-negative integers."})

        current = dict(self.instance.preferences) if self.instance is not None else {}
        current.update(value)
        return current


class UserShortSerializer(serializers.ModelSerializer):
    """Owner/renter summary embedded in equipment and booking payloads."""

    class Meta:
        model = User
        fields = ["id", "name", "contact"]

"""Serializers for the equipment domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.users.serializers import UserShortSerializer

from .models import Equipment


class EquipmentSerializer(serializers.ModelSerializer):
    owner = UserShortSerializer(read_only=True)

    class Meta:
        model = Equipment
        fields = [
            "id",
            "owner",
            "name",
            "description",
            "category",
            "daily_rate",
            "location",
            "image_url",
            "available",
            "specs",
            "features",
            "popularity",
            "created_at",
            "updated_at",
        ]
        # available belongs to the booking flow, popularity to reviews
        read_only_fields = ["id", "owner", "available", "popularity", "created_at", "updated_at"]

    def validate_specs(self, value):  # type: ignore
        if not isinstance(value, dict):
            raise serializers.ValidationError("specs must be an object of string values.")
        if not all(isinstance(k, str) and isinstance(v, str) for k, v in value.items()):
            raise serializers.ValidationError("specs must map strings to strings.")
        return value

    def validate_features(self, value):  # type: ignore
        if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
            raise serializers.ValidationError("features must be a list of strings.")
        return value


class EquipmentAvailabilityToggleSerializer(serializers.Serializer):
    available = serializers.BooleanField()


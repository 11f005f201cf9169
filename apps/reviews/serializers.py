"""Serializers for reviews.

The creating renter is taken from the request and the booking is chosen
by the review gate, so clients only send the equipment, rating and comment.
"""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Review


class ReviewSerializer(serializers.ModelSerializer):
    renter_name = serializers.ReadOnlyField(source="renter.name")

    class Meta:
        model = Review
        fields = ['id', 'renter', 'renter_name', 'equipment', 'booking', 'rating', 'comment', 'created_at']
        read_only_fields = fields


class ReviewCreateSerializer(serializers.Serializer):
    equipment_id = serializers.IntegerField()
    rating = serializers.IntegerField()
    comment = serializers.CharField(allow_blank=True, trim_whitespace=False)

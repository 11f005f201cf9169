"""Serializers for the payments domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Receipt


class ReceiptSerializer(serializers.ModelSerializer):
    booking_id = serializers.ReadOnlyField(source="booking.id")

    class Meta:
        model = Receipt
        fields = ["id", "booking_id", "payment_id", "amount", "currency", "method", "status", "captured_at", "created_at"]
        read_only_fields = fields

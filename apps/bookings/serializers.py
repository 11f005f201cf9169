"""Serializers for the booking domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Booking


class BookingCreateSerializer(serializers.Serializer):
    """Booking request from a renter.

    Dates stay strings here; the booking service parses and validates them.
    """

    equipment_id = serializers.IntegerField()
    start_date = serializers.CharField()
    end_date = serializers.CharField()


class BookingSerializer(serializers.ModelSerializer):
    renter_id = serializers.ReadOnlyField(source="renter.id")
    equipment_id = serializers.ReadOnlyField(source="equipment.id")
    equipment_name = serializers.ReadOnlyField(source="equipment.name")

    class Meta:
        model = Booking
        fields = [
            "id",
            "equipment_id",
            "equipment_name",
            "renter_id",
            "start_date",
            "end_date",
            "total_price",
            "status",
            "payment_order_id",
            "payment_id",
            "is_rated",
            "created_at",
            "last_status_update",
        ]
        read_only_fields = fields


class BookingStatusSerializer(serializers.Serializer):
    """Admin decision on a booking."""

    status = serializers.ChoiceField(choices=[Booking.Status.APPROVED, Booking.Status.REJECTED])

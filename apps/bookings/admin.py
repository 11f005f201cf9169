"""Admin registration for bookings."""

from __future__ import annotations

from django.contrib import admin

from .models import Booking


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "equipment",
        "renter",
        "status",
        "start_date",
        "end_date",
        "total_price",
        "is_rated",
        "created_at",
    )
    list_filter = ("status", "is_rated", "start_date")
    search_fields = ("equipment__name", "renter__email", "payment_order_id", "payment_id")
    # Status moves through the booking services only
    readonly_fields = (
        "status",
        "total_price",
        "payment_order_id",
        "payment_id",
        "created_at",
        "last_status_update",
    )

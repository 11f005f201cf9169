"""Admin registrations for equipment domain."""

from __future__ import annotations

from django.contrib import admin

from .models import Equipment, Recommendation


@admin.register(Equipment)
class EquipmentAdmin(admin.ModelAdmin):
    list_display = ("name", "category", "location", "daily_rate", "available", "popularity", "owner")
    list_filter = ("category", "available")
    search_fields = ("name", "location", "owner__email")
    # Written by the booking flow only
    readonly_fields = ("available", "popularity", "created_at", "updated_at")


@admin.register(Recommendation)
class RecommendationAdmin(admin.ModelAdmin):
    list_display = ("user", "equipment", "score", "created_at")
    search_fields = ("user__email", "equipment__name")

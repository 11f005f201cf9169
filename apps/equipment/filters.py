"""FilterSet definitions for equipment listing."""

from __future__ import annotations

import django_filters  # type: ignore

from .models import Equipment


class EquipmentFilterSet(django_filters.FilterSet):
    """FilterSet for Equipment with the filters used by the listing page."""

    category = django_filters.CharFilter(field_name="category", lookup_expr="iexact")
    location = django_filters.CharFilter(field_name="location", lookup_expr="icontains")
    available = django_filters.BooleanFilter(field_name="available")
    rate_min = django_filters.NumberFilter(field_name="daily_rate", lookup_expr="gte")
    rate_max = django_filters.NumberFilter(field_name="daily_rate", lookup_expr="lte")
    owner = django_filters.NumberFilter(field_name="owner_id", lookup_expr="exact")

    class Meta:
        model = Equipment
        fields = ["category", "location", "available", "owner"]

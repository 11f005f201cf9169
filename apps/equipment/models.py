"""Equipment domain models for AgriRent."""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.core.validators import MaxValueValidator, MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Equipment(models.Model):
    """A machine listed for daily rental.

    ``available`` mirrors the booking rows: it is false while any booking of
    this machine is awaiting payment or paid. Only the booking services
    write it.
    """

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="equipment",
    )
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    category = models.CharField(max_length=100, db_index=True)
    daily_rate = models.PositiveIntegerField(
        validators=[MinValueValidator(1)],
        help_text=_("Flat price per day in whole currency units."),
    )
    location = models.CharField(max_length=255, db_index=True)
    image_url = models.URLField(blank=True)
    available = models.BooleanField(default=True)
    specs = models.JSONField(default=dict, blank=True)
    features = models.JSONField(default=list, blank=True)
    popularity = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Equipment")
        verbose_name_plural = _("Equipment")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["category", "location"], name="equipment_cat_loc_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.location})"


class Recommendation(models.Model):
    """Stored snapshot of a recommendation score for a user."""

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="recommendations",
    )
    equipment = models.ForeignKey(
        Equipment,
        on_delete=models.CASCADE,
        related_name="recommendations",
    )
    score = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(0), MaxValueValidator(100)],
    )
    reason = models.CharField(max_length=500, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Recommendation")
        verbose_name_plural = _("Recommendations")
        ordering = ["-created_at", "-score"]

    def __str__(self) -> str:
        return f"{self.equipment_id} for {self.user_id}: {self.score}"

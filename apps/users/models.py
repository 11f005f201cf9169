"""User model for AgriRent.

A single account type covers equipment owners and renters. Staff accounts
act as marketplace administrators. The ``preferences`` JSON feeds the
recommendation score and holds ``preferred_categories``,
``preferred_locations``, ``price_range`` (``{"min": .., "max": ..}``) and
``features``.
"""

from __future__ import annotations

from typing import Any

from django.contrib.auth.models import AbstractUser, BaseUserManager  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class UserManager(BaseUserManager):
    """User manager that logs users in by email."""

    use_in_migrations = True

    def _create_user(self, email: str, password: str | None, **extra_fields: Any):
        if not email:
            raise ValueError("Email is required to create a user.")
        email = self.normalize_email(email)
        extra_fields.setdefault("username", email)

        user = self.model(email=email, **extra_fields)
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()
        user.save(using=self._db)
        return user

    def create_user(self, email: str, password: str | None = None, **extra_fields: Any):
        extra_fields.setdefault("is_staff", False)
        extra_fields.setdefault("is_superuser", False)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email: str, password: str | None = None, **extra_fields: Any):
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)

        if extra_fields.get("is_staff") is not True:
            raise ValueError("Superuser must have is_staff=True.")
        if extra_fields.get("is_superuser") is not True:
            raise ValueError("Superuser must have is_superuser=True.")

        return self._create_user(email, password, **extra_fields)


def default_preferences() -> dict[str, Any]:
    return {
        "preferred_categories": [],
        "preferred_locations": [],
        "price_range": {"min": 0, "max": 0},
        "features": [],
    }


class User(AbstractUser):
    """Marketplace user, owner and renter alike."""

    class Language(models.TextChoices):
        ENGLISH = "en", _("English")
        HINDI = "hi", _("Hindi")
        MARATHI = "mr", _("Marathi")
        TAMIL = "ta", _("Tamil")

    username = models.CharField(_("Username"), max_length=150, blank=True)
    email = models.EmailField(_("Email"), unique=True)
    name = models.CharField(_("Display name"), max_length=255, blank=True)
    contact = models.CharField(_("Contact"), max_length=50, blank=True)
    language = models.CharField(
        _("Language"),
        max_length=5,
        choices=Language.choices,
        default=Language.ENGLISH,
    )
    preferences = models.JSONField(_("Recommendation preferences"), default=default_preferences, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS: list[str] = []

    class Meta:
        verbose_name = _("User")
        verbose_name_plural = _("Users")
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return self.name or self.email

    @property
    def is_admin(self) -> bool:
        return bool(self.is_staff or self.is_superuser)

    def preference(self, key: str, default: Any = None) -> Any:
        return (self.preferences or {}).get(key, default)

"""Admin registrations for the users domain."""

from __future__ import annotations

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.translation import gettext_lazy as _

from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    fieldsets = (
        (None, {"fields": ("email", "password")}),
        (
            _("Personal info"),
            {"fields": ("username", "name", "contact", "language")},
        ),
        (_("Recommendations"), {"fields": ("preferences",)}),
        (
            _("Permissions"),
            {"fields": ("is_active", "is_staff", "is_superuser", "groups", "user_permissions")},
        ),
        (_("Important dates"), {"fields": ("last_login", "date_joined", "created_at", "updated_at")}),
    )
    add_fieldsets = (
        (
            None,
            {
                "classes": ("wide",),
                "fields": ("email", "password1", "password2", "name", "contact", "is_staff"),
            },
        ),
    )
    list_display = ("email", "name", "contact", "language", "is_active", "is_staff")
    list_filter = ("language", "is_active", "is_staff")
    search_fields = ("email", "name", "contact")
    ordering = ("email",)
    readonly_fields = ("created_at", "updated_at", "date_joined")

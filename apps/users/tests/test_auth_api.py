"""API tests for authentication endpoints."""

from __future__ import annotations

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.users.models import User


class AuthAPITests(APITestCase):
    def test_register_returns_tokens(self) -> None:
        payload = {
            "email": "farmer@example.com",
            "name": "Ravi Patil",
            "contact": "+919800000000",
            "password": "StrongPass123",
            "password_confirm": "StrongPass123",
        }

        response = self.client.post(reverse("auth:register"), payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertIn("tokens", response.data)
        self.assertEqual(response.data["user"]["email"], payload["email"])
        user = User.objects.get(email=payload["email"])
        self.assertEqual(user.language, User.Language.ENGLISH)
        self.assertFalse(user.is_admin)

    def test_register_rejects_mismatched_passwords(self) -> None:
        payload = {
            "email": "farmer@example.com",
            "password": "StrongPass123",
            "password_confirm": "OtherPass123",
        }

        response = self.client.post(reverse("auth:register"), payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(User.objects.filter(email=payload["email"]).exists())

    def test_login_with_wrong_password(self) -> None:
        User.objects.create_user(email="owner@example.com", password="CorrectPassword1")

        url = reverse("auth:login")
        response = self.client.post(url, {"email": "owner@example.com", "password": "wrong"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.post(url, {"email": "owner@example.com", "password": "CorrectPassword1"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertIn("access", response.data["tokens"])

    def test_update_preferences(self) -> None:
        user = User.objects.create_user(email="renter@example.com", password="Password123")
        self.client.force_authenticate(user)

        preferences = {
            "preferred_categories": ["tractor"],
            "preferred_locations": ["Pune"],
            "price_range": {"min": 100, "max": 1000},
            "features": ["GPS"],
        }
        response = self.client.patch(reverse("auth:me"), {"preferences": preferences}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)

        user.refresh_from_db()
        self.assertEqual(user.preference("preferred_categories"), ["tractor"])

    def test_partial_preferences_are_merged(self) -> None:
        user = User.objects.create_user(email="renter@example.com", password="Password123")
        self.client.force_authenticate(user)

        response = self.client.patch(
            reverse("auth:me"), {"preferences": {"preferred_locations": ["Nashik"]}}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["preferences"]["preferred_locations"], ["Nashik"])
        self.assertEqual(response.data["preferences"]["price_range"], {"min": 0, "max": 0})

    def test_malformed_preferences_rejected(self) -> None:
        user = User.objects.create_user(email="renter@example.com", password="Password123")
        self.client.force_authenticate(user)

        for preferences in ({"features": "GPS"}, {"price_range": {"min": -5}}, {"colour": ["red"]}):
            response = self.client.patch(reverse("auth:me"), {"preferences": preferences}, format="json")
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, preferences)

    def test_staff_is_admin(self) -> None:
        admin_user = User.objects.create_superuser(email="admin@example.com", password="Password123")
        self.assertTrue(admin_user.is_admin)

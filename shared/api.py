"""Helpers shared by the API views of every app."""

from __future__ import annotations

from rest_framework.response import Response  # type: ignore

from shared.domain.exceptions import DomainError


def domain_error_response(exc: DomainError) -> Response:
    """Translate a domain error into the JSON error body used across the API."""
    return Response({"error": exc.code, "detail": exc.message}, status=exc.status_code)

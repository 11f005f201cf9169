"""Equipment API views."""

from __future__ import annotations

import logging

from django.db.models import Avg  # type: ignore
from django.shortcuts import get_object_or_404  # type: ignore
from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import permissions, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.filters import OrderingFilter  # type: ignore
from rest_framework.response import Response  # type: ignore

from shared.api import domain_error_response
from shared.domain.exceptions import DomainError

from .filters import EquipmentFilterSet
from .models import Equipment
from .recommendations import recommend_for_user
from .serializers import EquipmentAvailabilityToggleSerializer, EquipmentSerializer
from .services import is_available, resolve_availability_window, set_owner_availability

logger = logging.getLogger(__name__)


class IsEquipmentOwnerOrAdmin(permissions.BasePermission):
    """Only the owner or an administrator may change a listing."""

    def has_permission(self, request, view):  # type: ignore
        if request.method in permissions.SAFE_METHODS:
            return True
        return bool(request.user and request.user.is_authenticated)

    def has_object_permission(self, request, view, obj: Equipment):  # type: ignore
        if request.method in permissions.SAFE_METHODS:
            return True
        user = request.user
        if getattr(user, "is_staff", False) or getattr(user, "is_superuser", False):
            return True
        return obj.owner_id == user.id


class EquipmentViewSet(viewsets.ModelViewSet):
    """Viewset for listing and managing equipment."""

    queryset = Equipment.objects.select_related("owner").all()
    serializer_class = EquipmentSerializer
    permission_classes = [IsEquipmentOwnerOrAdmin]
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_class = EquipmentFilterSet
    ordering_fields = ["daily_rate", "created_at", "popularity"]

    def perform_create(self, serializer):  # type: ignore
        equipment = serializer.save(owner=self.request.user)
        logger.info(f"Equipment {equipment.pk} listed by user {self.request.user.pk}")

    def perform_destroy(self, instance):  # type: ignore
        logger.info(f"Equipment {instance.pk} deleted with its bookings")
        instance.delete()

    @action(detail=True, methods=["get", "patch"], url_path="availability")
    def availability(self, request, pk=None):  # type: ignore
        if request.method == "PATCH":
            return self._toggle_availability(request, pk)

        equipment = get_object_or_404(Equipment, pk=pk)
        try:
            start, end = resolve_availability_window(
                request.query_params.get("start_date"),
                request.query_params.get("end_date"),
            )
        except DomainError as exc:
            return domain_error_response(exc)

        available = is_available(equipment.pk, start, end)
        return Response(
            {
                "available": available,
                "start_date": start.isoformat(),
                "end_date": end.isoformat(),
                "message": (
                    "Equipment is available for the selected dates"
                    if available
                    else "Equipment is not available for the selected dates"
                ),
            }
        )

    def _toggle_availability(self, request, pk):  # type: ignore
        serializer = EquipmentAvailabilityToggleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            equipment = set_owner_availability(int(pk), serializer.validated_data["available"], request.user)
        except DomainError as exc:
            return domain_error_response(exc)
        return Response(EquipmentSerializer(equipment, context=self.get_serializer_context()).data)

    @action(detail=True, methods=["get"], url_path="reviews", permission_classes=[permissions.AllowAny])
    def reviews(self, request, pk=None):  # type: ignore
        from apps.reviews.serializers import ReviewSerializer

        equipment = get_object_or_404(Equipment, pk=pk)
        reviews = equipment.reviews.select_related("renter").all()
        average = reviews.aggregate(avg=Avg("rating"))["avg"] or 0
        return Response(
            {
                "average_rating": round(float(average), 2),
                "count": reviews.count(),
                "results": ReviewSerializer(reviews, many=True).data,
            }
        )

    @action(
        detail=False,
        methods=["get"],
        url_path="recommendations",
        permission_classes=[permissions.IsAuthenticated],
    )
    def recommendations(self, request):  # type: ignore
        top = recommend_for_user(request.user)
        context = self.get_serializer_context()
        return Response(
            [
                {
                    "equipment": EquipmentSerializer(item.equipment, context=context).data,
                    "score": item.score,
                    "reason": item.reason,
                }
                for item in top
            ]
        )

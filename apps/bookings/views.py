"""API views for the booking domain."""

from __future__ import annotations

from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.payments.serializers import ReceiptSerializer
from apps.payments.services import receipt_for_booking, verify_client_payment
from shared.api import domain_error_response
from shared.domain.exceptions import DomainError

from .models import Booking
from .serializers import BookingCreateSerializer, BookingSerializer, BookingStatusSerializer
from .services import create_booking, payment_checkout, update_booking_status


class IsBookingStakeholder(permissions.BasePermission):
    """The renter and administrators have access to a booking."""

    def has_object_permission(self, request, view, obj: Booking):  # type: ignore
        user = request.user
        if not user.is_authenticated:
            return False
        if getattr(user, "is_staff", False) or getattr(user, "is_superuser", False):
            return True
        return obj.renter_id == user.id


class BookingViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """Viewset for creating bookings and following their payment."""

    queryset = Booking.objects.select_related("equipment", "renter").all()
    serializer_class = BookingSerializer
    permission_classes = [permissions.IsAuthenticated, IsBookingStakeholder]

    def get_queryset(self):  # type: ignore
        user = self.request.user
        qs = super().get_queryset()
        if getattr(user, "is_staff", False) or getattr(user, "is_superuser", False):
            return qs
        return qs.filter(renter=user)

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = BookingCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        try:
            checkout = create_booking(request.user, data["equipment_id"], data["start_date"], data["end_date"])
        except DomainError as exc:
            return domain_error_response(exc)

        return Response(
            {
                "booking": BookingSerializer(checkout.booking, context=self.get_serializer_context()).data,
                "payment": checkout.payment,
            },
            status=status.HTTP_201_CREATED,
        )

    @action(detail=True, methods=["get", "patch"], url_path="status", url_name="status")
    def booking_status(self, request, pk=None):  # type: ignore
        booking: Booking = self.get_object()  # type: ignore
        if request.method == "GET":
            return Response(
                {
                    "id": booking.pk,
                    "status": booking.status,
                    "last_status_update": booking.last_status_update,
                }
            )

        if not getattr(request.user, "is_admin", False):
            return Response({"detail": "Only administrators can change booking status."}, status=status.HTTP_403_FORBIDDEN)

        serializer = BookingStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            booking = update_booking_status(booking.pk, serializer.validated_data["status"])
        except DomainError as exc:
            return domain_error_response(exc)
        return Response(BookingSerializer(booking, context=self.get_serializer_context()).data)

    @action(detail=True, methods=["get"], url_path="payment-config")
    def payment_config(self, request, pk=None):  # type: ignore
        booking: Booking = self.get_object()  # type: ignore
        try:
            config = payment_checkout(booking)
        except DomainError as exc:
            return domain_error_response(exc)
        return Response(config)

    @action(detail=True, methods=["post"], url_path="receipt")
    def receipt(self, request, pk=None):  # type: ignore
        booking: Booking = self.get_object()  # type: ignore
        try:
            receipt = receipt_for_booking(booking)
        except DomainError as exc:
            return domain_error_response(exc)
        return Response(ReceiptSerializer(receipt).data)

    @action(detail=False, methods=["post"], url_path="verify-payment")
    def verify_payment(self, request):  # type: ignore
        data = request.data
        try:
            booking = verify_client_payment(
                data.get("booking_id"),
                data.get("razorpay_order_id"),
                data.get("razorpay_payment_id"),
                data.get("razorpay_signature"),
                actor=request.user,
            )
        except DomainError as exc:
            return domain_error_response(exc)

        return Response(
            {
                "success": True,
                "booking": BookingSerializer(booking, context=self.get_serializer_context()).data,
            }
        )

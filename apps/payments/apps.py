from django.apps import AppConfig  # type: ignore


class PaymentsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.payments"
    verbose_name = "Payments"

    def ready(self) -> None:
        from apps.bookings.domain.events import BookingPaid, BookingPaymentFailed
        from shared.application.message_bus import message_bus

        from .handlers import generate_receipt_on_booking_paid, log_booking_payment_failed

        message_bus.register_event_handler(BookingPaid, generate_receipt_on_booking_paid)
        message_bus.register_event_handler(BookingPaymentFailed, log_booking_payment_failed)

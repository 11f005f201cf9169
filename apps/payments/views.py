import logging

from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from shared.domain.exceptions import DomainError

from .services import process_webhook

logger = logging.getLogger(__name__)


@csrf_exempt
@require_POST
def razorpay_webhook(request):
    """
    Gateway webhook (payment.captured / payment.failed)

    The signature is computed over the raw body, so the body is passed on
    unparsed.
    """
    signature = request.headers.get("X-Razorpay-Signature")
    try:
        result = process_webhook(request.body, signature)
    except DomainError as exc:
        logger.warning(f"Webhook rejected: {exc.message}")
        return JsonResponse({"error": exc.code, "detail": exc.message}, status=exc.status_code)
    return JsonResponse(result)

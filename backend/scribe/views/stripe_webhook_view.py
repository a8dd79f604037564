"""
Webhook handler para eventos do Stripe.
"""

import logging

import stripe
from django.conf import settings
from django.views.decorators.csrf import csrf_exempt
from rest_framework import status
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from ..exceptions import ScribeError
from ..models import Payment
from ..services.payment_service import PaymentService
from ..services.stripe_service import StripeService

logger = logging.getLogger(__name__)


@csrf_exempt
@api_view(["POST"])
@authentication_classes([])
@permission_classes([AllowAny])
def stripe_webhook(request):
    """
    Webhook do Stripe para eventos de pagamento.

    Eventos tratados:
    - payment_intent.succeeded - Pagamento bem-sucedido
    - payment_intent.payment_failed - Pagamento falhou
    """
    if not getattr(settings, "STRIPE_WEBHOOK_SECRET", None):
        return Response(
            {"error": "Webhook secret not configured"},
            status=status.HTTP_400_BAD_REQUEST,
        )

    sig_header = request.META.get("HTTP_STRIPE_SIGNATURE")
    if not sig_header:
        return Response(
            {"error": "Missing signature header"},
            status=status.HTTP_400_BAD_REQUEST,
        )

    try:
        event = StripeService.construct_event(request.body, sig_header)
    except ValueError as e:
        return Response(
            {"error": f"Invalid payload: {str(e)}"},
            status=status.HTTP_400_BAD_REQUEST,
        )
    except stripe.error.SignatureVerificationError as e:
        return Response(
            {"error": f"Invalid signature: {str(e)}"},
            status=status.HTTP_400_BAD_REQUEST,
        )

    event_type = event["type"]
    payment_intent = event["data"]["object"]

    try:
        if event_type == "payment_intent.succeeded":
            PaymentService.complete_payment(payment_intent["id"], _raw(payment_intent))

        elif event_type == "payment_intent.payment_failed":
            PaymentService.fail_payment(payment_intent["id"], _raw(payment_intent))

        else:
            logger.info(f"[stripe] Evento ignorado: {event_type}")

        return Response({"status": "success"}, status=status.HTTP_200_OK)

    except Payment.DoesNotExist:
        logger.warning(f"[stripe] Pagamento não encontrado para {payment_intent.get('id')}")
        return Response({"status": "ignored"}, status=status.HTTP_200_OK)
    except ScribeError as e:
        return Response(e.to_response(), status=e.status_code)
    except Exception as e:
        logger.error(f"[stripe] Erro ao processar webhook: {e}", exc_info=True)
        return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)


def _raw(payment_intent) -> dict:
    """Campos do PaymentIntent guardados em Payment.raw_response."""
    return {
        "id": payment_intent.get("id"),
        "amount": payment_intent.get("amount"),
        "currency": payment_intent.get("currency"),
        "status": payment_intent.get("status"),
        "metadata": dict(payment_intent.get("metadata") or {}),
    }

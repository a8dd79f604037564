"""
Views de pagamentos: catálogo, início de pagamento e histórico.
"""

import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..decorators import rate_limit, require_active
from ..exceptions import ScribeError
from ..services.payment_service import PaymentService

logger = logging.getLogger(__name__)


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def payment_catalogue(request):
    """Pacotes de créditos e planos de assinatura."""
    return Response(PaymentService.catalogue(), status=status.HTTP_200_OK)


@api_view(["POST"])
@permission_classes([IsAuthenticated])
@require_active
@rate_limit(requests_per_hour=30, requests_per_minute=5)
def start_payment(request):
    """
    Inicia um pagamento e retorna o client_secret do Stripe.

    Body:
    {
        "payment_type": "credits|subscription",
        "package": "1h|3h|6h|10h",
        "minutes": 120,
        "plan": "basic|pro|enterprise",
        "payment_method": "card"
    }
    """
    try:
        minutes = request.data.get("minutes")
        result = PaymentService.start_payment(
            request.user,
            request.data.get("payment_type"),
            package=request.data.get("package"),
            minutes=int(minutes) if minutes not in (None, "") else None,
            plan=request.data.get("plan"),
            payment_method=request.data.get("payment_method", "card"),
        )
        return Response(result, status=status.HTTP_201_CREATED)

    except ValueError:
        return Response({"error": "minutes must be an integer"}, status=status.HTTP_400_BAD_REQUEST)
    except ScribeError as e:
        return Response(e.to_response(), status=e.status_code)
    except Exception as e:
        logger.error(f"[payments] Erro ao iniciar pagamento: {e}", exc_info=True)
        return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)


@api_view(["GET"])
@permission_classes([IsAuthenticated])
@require_active
def payment_history(request):
    """Pagamentos do usuário, mais recentes primeiro."""
    try:
        return Response(
            {"payments": PaymentService.payment_history(request.user)},
            status=status.HTTP_200_OK,
        )

    except Exception as e:
        return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)

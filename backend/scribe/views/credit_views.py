"""
Views de créditos do usuário: saldo, histórico e pedidos.
"""

import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..decorators import require_active
from ..exceptions import ScribeError
from ..services.credit_service import CreditService

logger = logging.getLogger(__name__)


@api_view(["GET"])
@permission_classes([IsAuthenticated])
@require_active
def get_credit_balance(request):
    """Saldo pessoal e quanto está disponível para uma transcrição."""
    try:
        return Response(CreditService.get_balance(request.user), status=status.HTTP_200_OK)

    except Exception as e:
        logger.error(f"[credits] Erro ao obter saldo: {e}", exc_info=True)
        return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)


@api_view(["GET"])
@permission_classes([IsAuthenticated])
@require_active
def get_credit_history(request):
    """
    Histórico de transações de créditos.

    Query params:
    - limit: int (padrão 20, máximo 100)
    - offset: int (padrão 0)
    """
    try:
        limit = min(int(request.query_params.get("limit", 20)), 100)
        offset = max(int(request.query_params.get("offset", 0)), 0)

        return Response(
            CreditService.get_history(request.user, limit=limit, offset=offset),
            status=status.HTTP_200_OK,
        )

    except ValueError:
        return Response(
            {"error": "limit and offset must be integers"},
            status=status.HTTP_400_BAD_REQUEST,
        )
    except Exception as e:
        logger.error(f"[credits] Erro ao obter histórico: {e}", exc_info=True)
        return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)


@api_view(["GET", "POST"])
@permission_classes([IsAuthenticated])
@require_active
def credit_requests(request):
    """
    GET: pedidos de créditos do usuário (mais recentes primeiro).
    POST: cria um pedido.

    Body:
    {
        "message": "string"
    }
    """
    try:
        if request.method == "GET":
            return Response(
                {
                    "requests": [
                        CreditService.serialize_request(credit_request)
                        for credit_request in CreditService.list_requests(request.user)
                    ]
                },
                status=status.HTTP_200_OK,
            )

        credit_request = CreditService.submit_request(request.user, request.data.get("message"))
        return Response(
            CreditService.serialize_request(credit_request),
            status=status.HTTP_201_CREATED,
        )

    except ScribeError as e:
        return Response(e.to_response(), status=e.status_code)
    except Exception as e:
        logger.error(f"[credits] Erro em pedidos de créditos: {e}", exc_info=True)
        return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)

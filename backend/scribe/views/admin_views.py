"""
Views do painel administrativo.
"""

import logging

from django.contrib.auth import get_user_model
from django.http import HttpResponse
from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..decorators import require_admin
from ..exceptions import ScribeError
from ..models import CreditRequest, Organization
from ..services.admin_service import AdminService
from ..services.credit_service import CreditService
from ..services.email_service import EmailService
from ..services.message_service import MessageService
from ..services.notification_service import NotificationService
from ..services.organization_service import OrganizationService

logger = logging.getLogger(__name__)

User = get_user_model()


# Usuários

@api_view(["GET"])
@permission_classes([IsAuthenticated])
@require_admin
def list_users(request):
    """Perfis com papel e créditos."""
    try:
        return Response({"users": AdminService.list_users()}, status=status.HTTP_200_OK)

    except Exception as e:
        logger.error(f"[admin] Erro ao listar usuários: {e}", exc_info=True)
        return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)


@api_view(["GET"])
@permission_classes([IsAuthenticated])
@require_admin
def user_details(request, user_id):
    """Perfil, créditos, pagamentos, projetos e mensagens do usuário."""
    try:
        return Response(AdminService.user_details(user_id), status=status.HTTP_200_OK)

    except User.DoesNotExist:
        return Response({"error": "User not found"}, status=status.HTTP_404_NOT_FOUND)
    except Exception as e:
        return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)


@api_view(["POST"])
@permission_classes([IsAuthenticated])
@require_admin
def toggle_user_role(request, user_id):
    """Alterna o papel entre admin e user."""
    try:
        user = AdminService.toggle_role(user_id, request.user)
        return Response({"user_id": str(user.user_id), "role": user.role}, status=status.HTTP_200_OK)

    except User.DoesNotExist:
        return Response({"error": "User not found"}, status=status.HTTP_404_NOT_FOUND)
    except ScribeError as e:
        return Response(e.to_response(), status=e.status_code)
    except Exception as e:
        logger.error(f"[admin] Erro ao alterar papel de {user_id}: {e}", exc_info=True)
        return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)


@api_view(["POST"])
@permission_classes([IsAuthenticated])
@require_admin
def toggle_user_suspension(request, user_id):
    """Suspende ou reativa a conta."""
    try:
        profile = AdminService.toggle_suspension(user_id, request.user)
        return Response(
            {"user_id": str(profile.user_id), "suspended": profile.suspended},
            status=status.HTTP_200_OK,
        )

    except User.DoesNotExist:
        return Response({"error": "User not found"}, status=status.HTTP_404_NOT_FOUND)
    except Exception as e:
        logger.error(f"[admin] Erro ao suspender {user_id}: {e}", exc_info=True)
        return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)


@api_view(["POST"])
@permission_classes([IsAuthenticated])
@require_admin
def send_message(request, user_id):
    """
    Envia mensagem do admin para o usuário.

    Body:
    {
        "subject": "string",
        "content": "string"
    }
    """
    try:
        user = User.objects.get(user_id=user_id)
        message = MessageService.send(
            user,
            request.data.get("subject"),
            request.data.get("content"),
            from_admin=True,
        )
        NotificationService.notify(user, "system", "New Message", message.subject)
        return Response(MessageService.serialize(message), status=status.HTTP_201_CREATED)

    except User.DoesNotExist:
        return Response({"error": "User not found"}, status=status.HTTP_404_NOT_FOUND)
    except ScribeError as e:
        return Response(e.to_response(), status=e.status_code)
    except Exception as e:
        logger.error(f"[admin] Erro ao enviar mensagem: {e}", exc_info=True)
        return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)


# Pedidos de créditos

@api_view(["GET"])
@permission_classes([IsAuthenticated])
@require_admin
def list_credit_requests(request):
    """
    Todos os pedidos de créditos.

    Query params:
    - status: pending|approved|declined (opcional)
    """
    try:
        return Response(
            {"requests": CreditService.list_all_requests(request.query_params.get("status"))},
            status=status.HTTP_200_OK,
        )

    except Exception as e:
        return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)


@api_view(["POST"])
@permission_classes([IsAuthenticated])
@require_admin
def approve_credit_request(request, request_id):
    """
    Aprova pedido e credita o usuário.

    Body:
    {
        "credits": 60,
        "admin_note": "string"
    }
    """
    try:
        credit_request = CreditService.approve_request(
            request_id,
            request.data.get("credits"),
            request.data.get("admin_note", ""),
        )

        NotificationService.notify(
            credit_request.user,
            "credits",
            "Credit Request Approved",
            f"{credit_request.credits_approved} credits were added to your account.",
        )
        EmailService.send_credit_request_resolved(
            credit_request.user.email,
            "approved",
            credit_request.credits_approved,
            credit_request.admin_note,
        )

        return Response(CreditService.serialize_request(credit_request), status=status.HTTP_200_OK)

    except CreditRequest.DoesNotExist:
        return Response({"error": "Credit request not found"}, status=status.HTTP_404_NOT_FOUND)
    except ScribeError as e:
        return Response(e.to_response(), status=e.status_code)
    except Exception as e:
        logger.error(f"[admin] Erro ao aprovar pedido {request_id}: {e}", exc_info=True)
        return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)


@api_view(["POST"])
@permission_classes([IsAuthenticated])
@require_admin
def decline_credit_request(request, request_id):
    """
    Recusa pedido.

    Body:
    {
        "admin_note": "string"
    }
    """
    try:
        credit_request = CreditService.decline_request(
            request_id, request.data.get("admin_note", "")
        )

        NotificationService.notify(
            credit_request.user,
            "credits",
            "Credit Request Declined",
            credit_request.admin_note or "Your credit request was declined.",
        )
        EmailService.send_credit_request_resolved(
            credit_request.user.email,
            "declined",
            admin_note=credit_request.admin_note,
        )

        return Response(CreditService.serialize_request(credit_request), status=status.HTTP_200_OK)

    except CreditRequest.DoesNotExist:
        return Response({"error": "Credit request not found"}, status=status.HTTP_404_NOT_FOUND)
    except ScribeError as e:
        return Response(e.to_response(), status=e.status_code)
    except Exception as e:
        logger.error(f"[admin] Erro ao recusar pedido {request_id}: {e}", exc_info=True)
        return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)


# Organizações

@api_view(["GET"])
@permission_classes([IsAuthenticated])
@require_admin
def list_organizations(request):
    """Organizações com dono, membros aceitos e projetos."""
    try:
        return Response(
            {"organizations": OrganizationService.admin_list_organizations()},
            status=status.HTTP_200_OK,
        )

    except Exception as e:
        return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)


@api_view(["PUT", "DELETE"])
@permission_classes([IsAuthenticated])
@require_admin
def manage_organization(request, organization_id):
    """
    PUT: ajusta créditos compartilhados e gratuitos.
    DELETE: remove organização e membros.

    Body (PUT):
    {
        "shared_credits": 1000,
        "free_credits": true,
        "free_credits_expiry": "2026-12-31T23:59:59Z"
    }
    """
    try:
        if request.method == "DELETE":
            OrganizationService.delete_organization(organization_id, request.user)
            return Response({"status": "deleted"}, status=status.HTTP_200_OK)

        org = OrganizationService.admin_update_organization(organization_id, request.data)
        return Response(OrganizationService.serialize(org), status=status.HTTP_200_OK)

    except Organization.DoesNotExist:
        return Response({"error": "Organization not found"}, status=status.HTTP_404_NOT_FOUND)
    except ScribeError as e:
        return Response(e.to_response(), status=e.status_code)
    except (TypeError, ValueError):
        return Response({"error": "shared_credits must be an integer"}, status=status.HTTP_400_BAD_REQUEST)
    except Exception as e:
        logger.error(f"[admin] Erro na organização {organization_id}: {e}", exc_info=True)
        return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)


@api_view(["GET"])
@permission_classes([IsAuthenticated])
@require_admin
def organization_members(request, organization_id):
    try:
        org = Organization.objects.get(organization_id=organization_id)
        return Response({"members": OrganizationService.list_members(org)}, status=status.HTTP_200_OK)

    except Organization.DoesNotExist:
        return Response({"error": "Organization not found"}, status=status.HTTP_404_NOT_FOUND)
    except Exception as e:
        return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)


# Pagamentos e relatórios

@api_view(["GET"])
@permission_classes([IsAuthenticated])
@require_admin
def list_payments(request):
    """
    Pagamentos com nome do usuário.

    Query params:
    - status: pending|completed|failed (opcional)
    """
    try:
        return Response(
            {
                "payments": AdminService.list_payments(request.query_params.get("status")),
                "highest_payer": AdminService.highest_payer(),
                "credit_usage": AdminService.credit_usage_totals(),
            },
            status=status.HTTP_200_OK,
        )

    except Exception as e:
        logger.error(f"[admin] Erro ao listar pagamentos: {e}", exc_info=True)
        return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)


@api_view(["GET"])
@permission_classes([IsAuthenticated])
@require_admin
def export_payments_csv(request):
    """Exporta pagamentos em CSV."""
    try:
        response = HttpResponse(AdminService.payments_csv(), content_type="text/csv; charset=utf-8")
        filename = f"payments-{timezone.localdate().isoformat()}.csv"
        response["Content-Disposition"] = f'attachment; filename="{filename}"'
        return response

    except Exception as e:
        logger.error(f"[admin] Erro ao exportar pagamentos: {e}", exc_info=True)
        return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)


@api_view(["GET"])
@permission_classes([IsAuthenticated])
@require_admin
def admin_stats(request):
    """Totais de usuários, projetos, pagamentos, créditos e horas gravadas."""
    try:
        return Response(AdminService.stats(), status=status.HTTP_200_OK)

    except Exception as e:
        return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)

"""
Views para gerenciamento de organizações e créditos compartilhados.
"""

import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..decorators import require_active
from ..exceptions import PermissionDeniedError, ScribeError
from ..models import Organization, OrganizationMember
from ..services.notification_service import NotificationService
from ..services.organization_service import OrganizationService

logger = logging.getLogger(__name__)


def _get_visible_member(organization_id, member_id, user) -> OrganizationMember:
    """Membro visível para o dono da organização, admin ou o próprio membro."""
    member = OrganizationMember.objects.select_related("organization").get(
        member_id=member_id, organization_id=organization_id
    )
    if (
        member.user_id != user.user_id
        and member.organization.owner_id != user.user_id
        and not user.is_admin
    ):
        raise PermissionDeniedError("You cannot view this member")
    return member


@api_view(["POST"])
@permission_classes([IsAuthenticated])
@require_active
def create_organization(request):
    """
    Cria uma organização com o usuário como dono.

    Body:
    {
        "name": "string"
    }
    """
    try:
        org = OrganizationService.create_organization(request.user, request.data.get("name"))
        return Response(OrganizationService.serialize(org), status=status.HTTP_201_CREATED)

    except ScribeError as e:
        return Response(e.to_response(), status=e.status_code)
    except Exception as e:
        logger.error(f"[org] Erro ao criar organização: {e}", exc_info=True)
        return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)


@api_view(["GET"])
@permission_classes([IsAuthenticated])
@require_active
def get_my_organization(request):
    """Organização do usuário (própria ou via membership aceita)."""
    try:
        found = OrganizationService.get_user_organization(request.user)
        if found is None:
            return Response({"organization": None, "is_owner": False}, status=status.HTTP_200_OK)

        org, is_owner = found
        data = {
            "organization": OrganizationService.serialize(org),
            "is_owner": is_owner,
        }
        if not is_owner:
            member = OrganizationMember.objects.get(
                organization=org, user=request.user, status="accepted"
            )
            data["member"] = OrganizationService.member_credit_summary(member)

        return Response(data, status=status.HTTP_200_OK)

    except Exception as e:
        logger.error(f"[org] Erro ao obter organização do usuário: {e}", exc_info=True)
        return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)


@api_view(["GET", "PUT", "DELETE"])
@permission_classes([IsAuthenticated])
@require_active
def organization_detail(request, organization_id):
    """
    GET: detalhes da organização (dono).
    PUT: atualiza nome, créditos compartilhados ou limite de alerta.
    DELETE: remove organização e membros.

    Body (PUT):
    {
        "name": "string",
        "shared_credits": 1000,
        "low_credit_threshold": 100
    }
    """
    try:
        if request.method == "GET":
            org = OrganizationService.get_managed_organization(organization_id, request.user)
            return Response(OrganizationService.serialize(org), status=status.HTTP_200_OK)

        if request.method == "DELETE":
            OrganizationService.delete_organization(organization_id, request.user)
            return Response({"status": "deleted"}, status=status.HTTP_200_OK)

        org = OrganizationService.update_organization(
            organization_id,
            request.user,
            name=request.data.get("name"),
            shared_credits=request.data.get("shared_credits"),
            low_credit_threshold=request.data.get("low_credit_threshold"),
        )
        return Response(OrganizationService.serialize(org), status=status.HTTP_200_OK)

    except Organization.DoesNotExist:
        return Response({"error": "Organization not found"}, status=status.HTTP_404_NOT_FOUND)
    except ScribeError as e:
        return Response(e.to_response(), status=e.status_code)
    except ValueError:
        return Response(
            {"error": "shared_credits and low_credit_threshold must be integers"},
            status=status.HTTP_400_BAD_REQUEST,
        )
    except Exception as e:
        logger.error(f"[org] Erro na organização {organization_id}: {e}", exc_info=True)
        return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)


@api_view(["GET"])
@permission_classes([IsAuthenticated])
@require_active
def list_members(request, organization_id):
    """Membros da organização, convites mais recentes primeiro."""
    try:
        org = OrganizationService.get_managed_organization(organization_id, request.user)
        return Response(
            {
                "members": OrganizationService.list_members(org),
                "total_allocated": OrganizationService.total_allocated(org),
            },
            status=status.HTTP_200_OK,
        )

    except Organization.DoesNotExist:
        return Response({"error": "Organization not found"}, status=status.HTTP_404_NOT_FOUND)
    except ScribeError as e:
        return Response(e.to_response(), status=e.status_code)
    except Exception as e:
        logger.error(f"[org] Erro ao listar membros: {e}", exc_info=True)
        return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)


@api_view(["PUT"])
@permission_classes([IsAuthenticated])
@require_active
def allocate_member_credits(request, organization_id, member_id):
    """
    Define a alocação de créditos de um membro aceito.

    Body:
    {
        "allocated_credits": 200
    }
    """
    try:
        member = OrganizationService.allocate_member_credits(
            organization_id,
            request.user,
            member_id,
            request.data.get("allocated_credits"),
        )
        return Response(OrganizationService.serialize_member(member), status=status.HTTP_200_OK)

    except (Organization.DoesNotExist, OrganizationMember.DoesNotExist):
        return Response({"error": "Member not found"}, status=status.HTTP_404_NOT_FOUND)
    except ScribeError as e:
        return Response(e.to_response(), status=e.status_code)
    except Exception as e:
        logger.error(f"[org] Erro ao alocar créditos: {e}", exc_info=True)
        return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)


@api_view(["GET"])
@permission_classes([IsAuthenticated])
@require_active
def member_credit_summary(request, organization_id, member_id):
    """Uso de créditos de um membro (usado, alocado, restante, percentual)."""
    try:
        member = _get_visible_member(organization_id, member_id, request.user)
        return Response(OrganizationService.member_credit_summary(member), status=status.HTTP_200_OK)

    except OrganizationMember.DoesNotExist:
        return Response({"error": "Member not found"}, status=status.HTTP_404_NOT_FOUND)
    except ScribeError as e:
        return Response(e.to_response(), status=e.status_code)
    except Exception as e:
        return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)


@api_view(["GET"])
@permission_classes([IsAuthenticated])
@require_active
def member_activity(request, organization_id, member_id):
    """Projetos e audiências do membro."""
    try:
        member = _get_visible_member(organization_id, member_id, request.user)
        return Response(
            {
                "member_id": str(member.member_id),
                "projects": OrganizationService.member_projects(member),
                "hearings": OrganizationService.member_hearings(member),
            },
            status=status.HTTP_200_OK,
        )

    except OrganizationMember.DoesNotExist:
        return Response({"error": "Member not found"}, status=status.HTTP_404_NOT_FOUND)
    except ScribeError as e:
        return Response(e.to_response(), status=e.status_code)
    except Exception as e:
        return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)


@api_view(["GET"])
@permission_classes([IsAuthenticated])
@require_active
def organization_stats(request, organization_id):
    """Contagens e créditos da organização."""
    try:
        org = OrganizationService.get_managed_organization(organization_id, request.user)
        return Response(OrganizationService.organization_stats(org), status=status.HTTP_200_OK)

    except Organization.DoesNotExist:
        return Response({"error": "Organization not found"}, status=status.HTTP_404_NOT_FOUND)
    except ScribeError as e:
        return Response(e.to_response(), status=e.status_code)
    except Exception as e:
        return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)


@api_view(["GET"])
@permission_classes([IsAuthenticated])
@require_active
def organization_alerts(request, organization_id):
    """Alertas de créditos baixos, uso alto de membros e convites pendentes."""
    try:
        org = OrganizationService.get_managed_organization(organization_id, request.user)
        return Response(
            {"alerts": NotificationService.organization_alerts(org)},
            status=status.HTTP_200_OK,
        )

    except Organization.DoesNotExist:
        return Response({"error": "Organization not found"}, status=status.HTTP_404_NOT_FOUND)
    except ScribeError as e:
        return Response(e.to_response(), status=e.status_code)
    except Exception as e:
        return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)

"""
Views de convites e memberships de organizações.
"""

import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..decorators import require_active
from ..exceptions import ScribeError
from ..models import Organization, OrganizationMember
from ..services.invitation_service import InvitationService
from ..services.organization_service import OrganizationService

logger = logging.getLogger(__name__)


@api_view(["POST"])
@permission_classes([IsAuthenticated])
@require_active
def invite_member(request, organization_id):
    """
    Convida um email para a organização.

    Body:
    {
        "email": "member@example.com"
    }
    """
    try:
        member = InvitationService.invite_member(
            organization_id, request.user, request.data.get("email")
        )
        return Response(OrganizationService.serialize_member(member), status=status.HTTP_201_CREATED)

    except Organization.DoesNotExist:
        return Response({"error": "Organization not found"}, status=status.HTTP_404_NOT_FOUND)
    except ScribeError as e:
        return Response(e.to_response(), status=e.status_code)
    except Exception as e:
        logger.error(f"[invite] Erro ao convidar membro: {e}", exc_info=True)
        return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)


@api_view(["GET"])
@permission_classes([IsAuthenticated])
@require_active
def pending_invitations(request):
    """Convites pendentes para o email do usuário."""
    try:
        return Response(
            {"invitations": InvitationService.pending_invitations(request.user)},
            status=status.HTTP_200_OK,
        )

    except Exception as e:
        return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)


@api_view(["POST"])
@permission_classes([IsAuthenticated])
@require_active
def respond_to_invitation(request, member_id):
    """
    Aceita ou recusa um convite.

    Body:
    {
        "accept": true
    }
    """
    try:
        accept = request.data.get("accept")
        if not isinstance(accept, bool):
            return Response(
                {"error": "accept must be true or false"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        member = InvitationService.respond_to_invitation(member_id, request.user, accept)
        return Response(OrganizationService.serialize_member(member), status=status.HTTP_200_OK)

    except OrganizationMember.DoesNotExist:
        return Response({"error": "Invitation not found"}, status=status.HTTP_404_NOT_FOUND)
    except ScribeError as e:
        return Response(e.to_response(), status=e.status_code)
    except Exception as e:
        logger.error(f"[invite] Erro ao responder convite {member_id}: {e}", exc_info=True)
        return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)


@api_view(["GET"])
@permission_classes([IsAuthenticated])
@require_active
def my_memberships(request):
    """Organizações próprias e memberships aceitas."""
    try:
        return Response(
            {"memberships": InvitationService.my_memberships(request.user)},
            status=status.HTTP_200_OK,
        )

    except Exception as e:
        return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)


@api_view(["DELETE"])
@permission_classes([IsAuthenticated])
@require_active
def remove_member(request, organization_id, member_id):
    """Dono remove um membro ou cancela um convite."""
    try:
        InvitationService.remove_member(organization_id, request.user, member_id)
        return Response({"status": "removed"}, status=status.HTTP_200_OK)

    except (Organization.DoesNotExist, OrganizationMember.DoesNotExist):
        return Response({"error": "Member not found"}, status=status.HTTP_404_NOT_FOUND)
    except ScribeError as e:
        return Response(e.to_response(), status=e.status_code)
    except Exception as e:
        logger.error(f"[invite] Erro ao remover membro {member_id}: {e}", exc_info=True)
        return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)


@api_view(["POST"])
@permission_classes([IsAuthenticated])
@require_active
def leave_organization(request, member_id):
    """Usuário sai de uma organização."""
    try:
        InvitationService.leave_organization(request.user, member_id)
        return Response({"status": "left"}, status=status.HTTP_200_OK)

    except OrganizationMember.DoesNotExist:
        return Response({"error": "Membership not found"}, status=status.HTTP_404_NOT_FOUND)
    except ScribeError as e:
        return Response(e.to_response(), status=e.status_code)
    except Exception as e:
        logger.error(f"[invite] Erro ao sair da organização: {e}", exc_info=True)
        return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)

"""
Serviço de convites e memberships.

Estados: pending -> accepted | rejected. Remover ou sair apaga a linha.
"""

import logging
from typing import Any, Dict, List

from django.core.exceptions import ValidationError
from django.core.validators import validate_email
from django.db import transaction
from django.utils import timezone

from ..exceptions import InvalidTransitionError, PermissionDeniedError, ScribeError
from ..models import Organization, OrganizationMember
from .email_service import EmailService
from .organization_service import OrganizationService

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


class InvitationService:
    """Serviço para o ciclo de vida dos convites."""

    @staticmethod
    def invite_member(organization_id, inviter, email: str) -> OrganizationMember:
        email = normalize_email(email)
        if not email:
            raise ScribeError("email is required")

        try:
            validate_email(email)
        except ValidationError:
            raise ScribeError("Please enter a valid email address")

        with transaction.atomic():
            org = OrganizationService.get_managed_organization(organization_id, inviter)

            if email == normalize_email(org.owner.email):
                raise ScribeError("The organization owner is already a member")

            already = OrganizationMember.objects.select_for_update().filter(
                organization=org,
                email=email,
                status__in=["pending", "accepted"],
            ).first()
            if already:
                raise InvalidTransitionError(
                    f"This email is already {already.status} in the organization",
                    status=already.status,
                )

            member = OrganizationMember.objects.create(organization=org, email=email)

        EmailService.send_organization_invitation(email, org.name, inviter.email)
        logger.info(f"[invite] {email} convidado para {org.organization_id}")
        return member

    @staticmethod
    def respond_to_invitation(member_id, user, accept: bool) -> OrganizationMember:
        """
        Aceita ou recusa um convite pendente.

        O email convidado precisa ser o email do usuário autenticado.
        """
        with transaction.atomic():
            member = OrganizationMember.objects.select_for_update().get(member_id=member_id)

            if normalize_email(member.email) != normalize_email(user.email):
                raise PermissionDeniedError("This invitation was sent to a different email address")

            if member.status != "pending":
                raise InvalidTransitionError(
                    f"Invitation is already {member.status}",
                    status=member.status,
                )

            if accept:
                if member.organization.owner_id == user.user_id:
                    raise ScribeError("You already own this organization")

                duplicate = OrganizationMember.objects.filter(
                    organization_id=member.organization_id,
                    user=user,
                    status="accepted",
                ).exists()
                if duplicate:
                    raise InvalidTransitionError("You are already a member of this organization")

                member.status = "accepted"
                member.user = user
                member.joined_at = timezone.now()
            else:
                member.status = "rejected"

            member.save()

        logger.info(f"[invite] Convite {member_id} -> {member.status}")
        return member

    @staticmethod
    def pending_invitations(user) -> List[Dict[str, Any]]:
        invitations = (
            OrganizationMember.objects.select_related("organization")
            .filter(email__iexact=user.email, status="pending")
            .order_by("-invited_at")
        )
        return [
            {
                "member_id": str(invitation.member_id),
                "organization_id": str(invitation.organization_id),
                "organization_name": invitation.organization.name,
                "invited_at": invitation.invited_at.isoformat(),
            }
            for invitation in invitations
        ]

    @staticmethod
    def my_memberships(user) -> List[Dict[str, Any]]:
        """Organizações próprias (is_owner) seguidas das memberships aceitas."""
        memberships = []
        for org in Organization.objects.filter(owner=user).order_by("-created_at"):
            memberships.append({
                "member_id": None,
                "organization_id": str(org.organization_id),
                "organization_name": org.name,
                "is_owner": True,
                "joined_at": org.created_at.isoformat(),
                "allocated_credits": None,
                "used_credits": None,
            })

        accepted = (
            OrganizationMember.objects.select_related("organization")
            .filter(user=user, status="accepted")
            .order_by("-joined_at")
        )
        for member in accepted:
            memberships.append({
                "member_id": str(member.member_id),
                "organization_id": str(member.organization_id),
                "organization_name": member.organization.name,
                "is_owner": False,
                "joined_at": member.joined_at.isoformat() if member.joined_at else None,
                "allocated_credits": member.allocated_credits,
                "used_credits": member.used_credits,
            })

        return memberships

    @staticmethod
    def remove_member(organization_id, actor, member_id) -> None:
        with transaction.atomic():
            org = OrganizationService.get_managed_organization(organization_id, actor)
            member = OrganizationMember.objects.select_for_update().get(
                member_id=member_id, organization=org
            )
            email = member.email
            member.delete()

        logger.info(f"[invite] {email} removido de {organization_id} por {actor.user_id}")

    @staticmethod
    def leave_organization(user, member_id) -> None:
        with transaction.atomic():
            member = OrganizationMember.objects.select_for_update().get(member_id=member_id)

            if member.user_id != user.user_id:
                raise PermissionDeniedError("You can only leave your own memberships")
            if member.status != "accepted":
                raise InvalidTransitionError("Only accepted memberships can be left")

            organization_id = member.organization_id
            member.delete()

        logger.info(f"[invite] {user.user_id} saiu de {organization_id}")

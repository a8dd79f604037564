"""
Serviço de organizações: pool compartilhado de créditos e alocação por membro.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from django.conf import settings
from django.db import transaction
from django.db.models import Count, Q, Sum
from django.utils.dateparse import parse_datetime

from ..exceptions import CreditAllocationError, PermissionDeniedError, ScribeError
from ..models import CreditTransaction, Hearing, Organization, OrganizationMember, Project

logger = logging.getLogger(__name__)


class OrganizationService:
    """Serviço para gerenciar organizações."""

    @staticmethod
    def create_organization(owner, name: str) -> Organization:
        name = (name or "").strip()
        if not name:
            raise ScribeError("name is required")

        org = Organization.objects.create(
            name=name,
            owner=owner,
            low_credit_threshold=getattr(settings, "ORG_LOW_CREDIT_THRESHOLD", 100),
        )
        logger.info(f"[org] Organização {org.organization_id} criada por {owner.user_id}")
        return org

    @staticmethod
    def get_managed_organization(organization_id, actor) -> Organization:
        """Retorna a organização se o ator for o dono (ou admin da plataforma)."""
        org = Organization.objects.get(organization_id=organization_id)
        if org.owner_id != actor.user_id and not actor.is_admin:
            raise PermissionDeniedError("Only the organization owner can do this")
        return org

    @staticmethod
    def get_user_organization(user) -> Optional[Tuple[Organization, bool]]:
        """Organização do usuário: a que ele possui ou a da membership aceita."""
        owned = Organization.objects.filter(owner=user).order_by("created_at").first()
        if owned:
            return owned, True

        member = (
            OrganizationMember.objects.select_related("organization")
            .filter(user=user, status="accepted")
            .order_by("joined_at")
            .first()
        )
        if member:
            return member.organization, False

        return None

    @staticmethod
    def list_members(org: Organization) -> List[Dict[str, Any]]:
        members = (
            OrganizationMember.objects.filter(organization=org)
            .select_related("user__profile")
            .order_by("-invited_at")
        )
        return [OrganizationService.serialize_member(member) for member in members]

    @staticmethod
    def update_organization(
        organization_id,
        actor,
        name: Optional[str] = None,
        shared_credits: Optional[int] = None,
        low_credit_threshold: Optional[int] = None,
    ) -> Organization:
        with transaction.atomic():
            org = OrganizationService.get_managed_organization(organization_id, actor)
            org = Organization.objects.select_for_update().get(organization_id=org.organization_id)

            if name is not None:
                name = name.strip()
                if not name:
                    raise ScribeError("name cannot be empty")
                org.name = name

            if shared_credits is not None:
                shared_credits = int(shared_credits)
                OrganizationService._validate_shared_credits(org, shared_credits)
                delta = shared_credits - org.shared_credits
                org.shared_credits = shared_credits

                if delta:
                    CreditTransaction.objects.create(
                        organization=org,
                        user=actor,
                        amount=delta,
                        type="adjustment",
                        source="organization",
                        reason=f"Shared credits set to {shared_credits}",
                        balance_after=org.shared_credits - org.used_credits,
                    )

            if low_credit_threshold is not None:
                low_credit_threshold = int(low_credit_threshold)
                if low_credit_threshold < 0:
                    raise ScribeError("low_credit_threshold cannot be negative")
                org.low_credit_threshold = low_credit_threshold

            org.save()

        logger.info(f"[org] Organização {org.organization_id} atualizada por {actor.user_id}")
        return org

    @staticmethod
    def _validate_shared_credits(org: Organization, shared_credits: int) -> None:
        if shared_credits < 0:
            raise CreditAllocationError("shared_credits cannot be negative")
        if shared_credits < org.used_credits:
            raise CreditAllocationError(
                f"Shared credits cannot be less than used credits ({org.used_credits})"
            )

        allocated = OrganizationService.total_allocated(org)
        if shared_credits < allocated:
            raise CreditAllocationError(
                f"Shared credits cannot be less than credits allocated to members ({allocated})"
            )

    @staticmethod
    def total_allocated(org: Organization, exclude_member_id=None) -> int:
        query = OrganizationMember.objects.filter(organization=org, status="accepted")
        if exclude_member_id:
            query = query.exclude(member_id=exclude_member_id)
        return query.aggregate(total=Sum("allocated_credits"))["total"] or 0

    @staticmethod
    def delete_organization(organization_id, actor) -> None:
        """Remove membros e a organização na mesma transação."""
        with transaction.atomic():
            org = OrganizationService.get_managed_organization(organization_id, actor)
            org = Organization.objects.select_for_update().get(organization_id=org.organization_id)

            deleted_members, _ = OrganizationMember.objects.filter(organization=org).delete()
            org.delete()

        logger.info(
            f"[org] Organização {organization_id} removida por {actor.user_id} "
            f"({deleted_members} membros)"
        )

    @staticmethod
    def allocate_member_credits(organization_id, actor, member_id, allocated_credits) -> OrganizationMember:
        """
        Define a alocação de um membro aceito.

        allocated >= used do membro e soma das alocações <= shared_credits.
        """
        try:
            allocated_credits = int(allocated_credits)
        except (TypeError, ValueError):
            raise CreditAllocationError("allocated_credits must be an integer")

        with transaction.atomic():
            org = OrganizationService.get_managed_organization(organization_id, actor)
            org = Organization.objects.select_for_update().get(organization_id=org.organization_id)
            member = OrganizationMember.objects.select_for_update().get(
                member_id=member_id, organization=org
            )

            if member.status != "accepted":
                raise CreditAllocationError("Credits can only be allocated to accepted members")

            if allocated_credits < member.used_credits:
                raise CreditAllocationError(
                    f"Allocated credits cannot be less than used credits ({member.used_credits})"
                )

            others = OrganizationService.total_allocated(org, exclude_member_id=member.member_id)
            if others + allocated_credits > org.shared_credits:
                raise CreditAllocationError(
                    f"Only {max(0, org.shared_credits - others)} shared credits are available to allocate",
                    available=max(0, org.shared_credits - others),
                )

            delta = allocated_credits - member.allocated_credits
            member.allocated_credits = allocated_credits
            member.save(update_fields=["allocated_credits", "updated_at"])

            if delta:
                CreditTransaction.objects.create(
                    organization=org,
                    user=member.user,
                    amount=delta,
                    type="allocation",
                    source="organization",
                    reason=f"Allocation set to {allocated_credits} for {member.email}",
                    reference_id=str(member.member_id),
                    balance_after=member.remaining_credits,
                )

        logger.info(f"[org] Membro {member_id} com alocação {allocated_credits}")
        return member

    @staticmethod
    def member_credit_summary(member: OrganizationMember) -> Dict[str, Any]:
        low_percent = getattr(settings, "MEMBER_LOW_CREDIT_PERCENT", 80)
        usage = member.usage_percent
        return {
            "member_id": str(member.member_id),
            "used_credits": member.used_credits,
            "allocated_credits": member.allocated_credits,
            "remaining_credits": member.remaining_credits,
            "usage_percent": round(usage, 1),
            "is_low": usage > low_percent,
        }

    @staticmethod
    def organization_stats(org: Organization) -> Dict[str, Any]:
        accepted = OrganizationMember.objects.filter(organization=org, status="accepted").count()
        return {
            "organization_id": str(org.organization_id),
            "total_members": accepted + 1,
            "total_projects": Project.objects.filter(organization=org).count(),
            "total_hearings": Hearing.objects.filter(organization=org).count(),
            "shared_credits": org.shared_credits,
            "used_credits": org.used_credits,
            "remaining_credits": org.remaining_credits,
        }

    @staticmethod
    def member_projects(member: OrganizationMember) -> List[Dict[str, Any]]:
        if not member.user_id:
            return []
        projects = Project.objects.filter(user_id=member.user_id).order_by("-created_at")
        return [
            {
                "project_id": str(project.project_id),
                "name": project.name,
                "status": project.status,
                "created_at": project.created_at.isoformat(),
            }
            for project in projects
        ]

    @staticmethod
    def member_hearings(member: OrganizationMember, limit: int = 50) -> List[Dict[str, Any]]:
        if not member.user_id:
            return []
        hearings = (
            Hearing.objects.filter(user_id=member.user_id)
            .select_related("project")
            .order_by("-created_at")[:limit]
        )
        return [
            {
                "hearing_id": str(hearing.hearing_id),
                "title": hearing.title,
                "status": hearing.status,
                "audio_duration": hearing.audio_duration,
                "project_name": hearing.project.name if hearing.project_id else "Unknown Project",
                "created_at": hearing.created_at.isoformat(),
            }
            for hearing in hearings
        ]

    @staticmethod
    def admin_list_organizations() -> List[Dict[str, Any]]:
        orgs = (
            Organization.objects.select_related("owner__profile")
            .annotate(
                member_count=Count("members", filter=Q(members__status="accepted"), distinct=True),
                project_count=Count("projects", distinct=True),
            )
            .order_by("-created_at")
        )
        return [
            {
                **OrganizationService.serialize(org),
                "owner_name": _profile_name(org.owner),
                "owner_email": org.owner.email,
                "member_count": org.member_count,
                "project_count": org.project_count,
            }
            for org in orgs
        ]

    @staticmethod
    def admin_update_organization(organization_id, data: Dict[str, Any]) -> Organization:
        """Admin ajusta pool compartilhado e créditos gratuitos."""
        with transaction.atomic():
            org = Organization.objects.select_for_update().get(organization_id=organization_id)

            if "shared_credits" in data:
                shared_credits = int(data["shared_credits"])
                OrganizationService._validate_shared_credits(org, shared_credits)
                org.shared_credits = shared_credits

            if "free_credits" in data:
                org.free_credits = bool(data["free_credits"])

            if "free_credits_expiry" in data:
                expiry = data["free_credits_expiry"]
                if expiry:
                    parsed = parse_datetime(expiry) if isinstance(expiry, str) else expiry
                    if parsed is None:
                        raise ScribeError("free_credits_expiry must be an ISO datetime")
                    org.free_credits_expiry = parsed
                else:
                    org.free_credits_expiry = None

            org.save()

        logger.info(f"[org] Admin atualizou organização {organization_id}")
        return org

    @staticmethod
    def serialize(org: Organization) -> Dict[str, Any]:
        return {
            "organization_id": str(org.organization_id),
            "name": org.name,
            "owner_id": str(org.owner_id),
            "shared_credits": org.shared_credits,
            "used_credits": org.used_credits,
            "remaining_credits": org.remaining_credits,
            "low_credit_threshold": org.low_credit_threshold,
            "free_credits": org.free_credits,
            "free_credits_expiry": org.free_credits_expiry.isoformat() if org.free_credits_expiry else None,
            "free_credits_active": org.free_credits_active(),
            "created_at": org.created_at.isoformat(),
        }

    @staticmethod
    def serialize_member(member: OrganizationMember) -> Dict[str, Any]:
        profile = getattr(member.user, "profile", None) if member.user_id else None
        return {
            "member_id": str(member.member_id),
            "organization_id": str(member.organization_id),
            "email": member.email,
            "user_id": str(member.user_id) if member.user_id else None,
            "status": member.status,
            "allocated_credits": member.allocated_credits,
            "used_credits": member.used_credits,
            "remaining_credits": member.remaining_credits,
            "invited_at": member.invited_at.isoformat(),
            "joined_at": member.joined_at.isoformat() if member.joined_at else None,
            "full_name": profile.full_name if profile else None,
            "title": profile.title if profile else None,
        }


def _profile_name(user) -> str:
    profile = getattr(user, "profile", None)
    return profile.display_name if profile else "Unknown"

from typing import Any, Dict

from scribe.services.credit_service import CreditService
from scribe.services.organization_service import OrganizationService

from ..models import Profile


def serialize_profile(profile: Profile) -> Dict[str, Any]:
    return {
        "full_name": profile.full_name,
        "title": profile.title,
        "organization": profile.organization,
        "company": profile.company,
        "phone_number": profile.phone_number,
        "license_number": profile.license_number,
        "suspended": profile.suspended,
    }


def me_service(user) -> Dict[str, Any]:
    profile, _ = Profile.objects.get_or_create(user=user)

    organization_data = None
    found = OrganizationService.get_user_organization(user)
    if found is not None:
        organization, is_owner = found
        organization_data = {
            **OrganizationService.serialize(organization),
            "is_owner": is_owner,
        }

    return {
        "user_id": str(user.user_id),
        "email": user.email,
        "role": user.role,
        "profile": serialize_profile(profile),
        "credits": CreditService.get_balance(user),
        "organization": organization_data,
    }

from typing import Any, Dict, Optional, Tuple

from ..models import Profile

PROFILE_FIELDS = (
    "full_name",
    "title",
    "organization",
    "company",
    "phone_number",
    "license_number",
)


def update_profile_service(user, data: Dict[str, Any]) -> Tuple[Optional[Profile], Optional[str]]:
    """Atualiza os dados profissionais do usuário. O campo suspended é só do admin."""
    profile, _ = Profile.objects.get_or_create(user=user)

    for field in PROFILE_FIELDS:
        if field not in data:
            continue
        value = data.get(field)
        if value is not None and not isinstance(value, str):
            return None, f"'{field}' must be a string"
        setattr(profile, field, (value or "").strip())

    profile.save()
    return profile, None

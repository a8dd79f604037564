from typing import Optional, Tuple

from django.contrib.auth import get_user_model

User = get_user_model()


def login_service(email: str, password: str) -> Tuple[Optional[User], Optional[str]]:
    """
    Valida credenciais.

    Returns:
        Tupla (user, error). Contas suspensas não entram.
    """
    try:
        user = User.objects.select_related("profile").get(email=(email or "").strip().lower())
    except User.DoesNotExist:
        return None, "Invalid credentials"

    if not user.check_password(password) or not user.is_active:
        return None, "Invalid credentials"

    profile = getattr(user, "profile", None)
    if profile is not None and profile.suspended:
        return None, "Your account is suspended. Contact support."

    return user, None

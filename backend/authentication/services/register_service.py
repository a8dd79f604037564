import logging
from typing import Optional, Tuple

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.core.validators import validate_email
from django.db import transaction

from scribe.services.credit_service import CreditService

from ..models import Profile

logger = logging.getLogger(__name__)

User = get_user_model()


def register_service(
    email: str,
    password: str,
    full_name: str = "",
    title: str = "",
) -> Tuple[Optional[User], Optional[str]]:
    """
    Registra um novo usuário com perfil e créditos de boas-vindas.

    Returns:
        Tupla (user, error)
    """
    if not isinstance(email, str):
        return None, "Please enter a valid email address"

    if not isinstance(password, str):
        return None, "Password must be a string"

    email = email.strip().lower()

    try:
        validate_email(email)
    except ValidationError:
        return None, "Please enter a valid email address"

    if len(password) < 6:
        return None, "Password must be at least 6 characters"

    if User.objects.filter(email=email).exists():
        return None, "Email already exists"

    with transaction.atomic():
        user = User.objects.create_user(email=email, password=password)
        Profile.objects.create(
            user=user,
            full_name=(full_name or "").strip(),
            title=(title or "").strip(),
        )

        signup_credits = int(getattr(settings, "SIGNUP_FREE_CREDITS", 0))
        if signup_credits > 0:
            CreditService.grant_credits(
                user,
                signup_credits,
                "signup",
                f"Welcome credits ({signup_credits} minutes)",
            )
        else:
            CreditService.get_or_create_credits(user)

    logger.info(f"[auth] Usuário {user.user_id} registrado")
    return user, None

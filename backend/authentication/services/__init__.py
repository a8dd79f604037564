from .login_service import login_service
from .logout_service import logout_service
from .register_service import register_service
from .me_service import me_service
from .update_profile_service import update_profile_service

__all__ = (
    "login_service",
    "logout_service",
    "register_service",
    "me_service",
    "update_profile_service",
)

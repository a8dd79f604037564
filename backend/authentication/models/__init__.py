from .user import CustomUser, CustomUserManager
from .profile import Profile

__all__ = (
    "CustomUser",
    "CustomUserManager",
    "Profile",
)

"""
Decorators para validação de créditos, papéis e rate limit.
"""

from functools import wraps

from django.core.cache import cache
from rest_framework import status
from rest_framework.response import Response

from .services.credit_service import CreditService


def _is_suspended(user) -> bool:
    profile = getattr(user, "profile", None)
    return bool(profile and profile.suspended)


def require_active(view_func):
    """
    Decorator que bloqueia usuários suspensos pelo admin.
    Deve vir depois de @permission_classes([IsAuthenticated]).
    """
    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        if _is_suspended(request.user):
            return Response(
                {
                    "error_code": "ACCOUNT_SUSPENDED",
                    "error": "Your account is suspended. Contact support.",
                },
                status=status.HTTP_403_FORBIDDEN,
            )
        return view_func(request, *args, **kwargs)

    return wrapper


def require_admin(view_func):
    """Decorator para endpoints administrativos (papel admin)."""
    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        user = request.user
        if not user or not user.is_authenticated or not getattr(user, "is_admin", False):
            return Response(
                {"error": "Admin access required"},
                status=status.HTTP_403_FORBIDDEN,
            )
        return view_func(request, *args, **kwargs)

    return wrapper


def require_credits(view_func):
    """
    Decorator para validar créditos antes de aceitar um upload.
    O valor exato é cobrado pela task, quando a duração é conhecida.
    """
    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        credits_available = CreditService.available_credits(request.user)

        if credits_available < 1:
            return Response(
                {
                    "error_code": "INSUFFICIENT_CREDITS",
                    "error": "You do not have credits available for transcription.",
                    "user_action": "Request or purchase credits to continue.",
                    "credits_needed": 1,
                    "credits_available": credits_available,
                },
                status=status.HTTP_402_PAYMENT_REQUIRED,
            )

        request.credits_available = credits_available
        return view_func(request, *args, **kwargs)

    return wrapper


def rate_limit(requests_per_hour: int = None, requests_per_minute: int = None):
    """
    Decorator para rate limiting por usuário e IP.
    """
    def decorator(view_func):
        @wraps(view_func)
        def wrapper(request, *args, **kwargs):
            client_ip = _get_client_ip(request)
            user_id = getattr(request.user, "user_id", None)

            if requests_per_minute:
                ip_key = f"rate_limit:ip:{client_ip}:{view_func.__name__}:minute"
                cache.add(ip_key, 0, 60)
                if cache.incr(ip_key) > requests_per_minute:
                    return Response(
                        {
                            "error_code": "RATE_LIMIT_ERROR",
                            "error": f"You reached the limit of {requests_per_minute} requests per minute.",
                            "user_action": "Try again in a few moments.",
                        },
                        status=status.HTTP_429_TOO_MANY_REQUESTS,
                    )

            if user_id and requests_per_hour:
                user_key = f"rate_limit:user:{user_id}:{view_func.__name__}:hour"
                cache.add(user_key, 0, 3600)
                if cache.incr(user_key) > requests_per_hour:
                    return Response(
                        {
                            "error_code": "RATE_LIMIT_ERROR",
                            "error": f"You reached the limit of {requests_per_hour} requests per hour.",
                            "user_action": "Try again in an hour.",
                        },
                        status=status.HTTP_429_TOO_MANY_REQUESTS,
                    )

            return view_func(request, *args, **kwargs)

        return wrapper

    return decorator


def _get_client_ip(request):
    """Obtém IP real do cliente considerando proxies."""
    x_forwarded_for = request.META.get("HTTP_X_FORWARDED_FOR")
    if x_forwarded_for:
        ip = x_forwarded_for.split(",")[0]
    else:
        ip = request.META.get("REMOTE_ADDR")
    return ip

import logging

from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt

from ..services.logout_service import logout_service

logger = logging.getLogger(__name__)


@csrf_exempt
def logout_view(request: HttpRequest) -> JsonResponse:
    if request.method != "POST":
        return JsonResponse({"detail": "Method not allowed"}, status=405)

    user_id = getattr(request.user, "user_id", None)
    logout_service(request)
    if user_id:
        logger.info(f"[auth] Logout de {user_id}")
    return JsonResponse({"detail": "Logged out"}, status=200)

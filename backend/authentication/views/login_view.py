import json
import logging

from django.contrib.auth import login
from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt

from ..services.login_service import login_service

logger = logging.getLogger(__name__)


@csrf_exempt
def login_view(request: HttpRequest) -> JsonResponse:
    if request.method != "POST":
        return JsonResponse({"detail": "Method not allowed"}, status=405)

    try:
        body = json.loads(request.body or b"{}")
    except json.JSONDecodeError:
        return JsonResponse({"detail": "Invalid JSON body"}, status=400)

    email = body.get("email")
    password = body.get("password")

    if not email or not password:
        return JsonResponse({"detail": "'email' and 'password' are required"}, status=400)

    user, error = login_service(email=email, password=password)
    if user is None:
        status = 403 if error and "suspended" in error else 400
        return JsonResponse({"detail": error}, status=status)

    login(request, user)
    logger.info(f"[auth] Login de {user.user_id}")
    return JsonResponse(
        {"detail": "Logged in", "email": user.email, "role": user.role},
        status=200,
    )

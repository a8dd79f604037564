"""
View para atualizar perfil do usuário.
"""

import json

from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt

from ..services.me_service import serialize_profile
from ..services.update_profile_service import update_profile_service


@csrf_exempt
def update_profile_view(request: HttpRequest) -> JsonResponse:
    """
    Atualiza perfil do usuário autenticado.

    Body:
    {
        "full_name": "Jane Doe",
        "title": "Court Reporter",
        "organization": "string",
        "company": "string",
        "phone_number": "string",
        "license_number": "string"
    }
    """
    if request.method not in ("PUT", "PATCH"):
        return JsonResponse({"detail": "Method not allowed"}, status=405)

    if not request.user.is_authenticated:
        return JsonResponse({"detail": "Authentication required"}, status=401)

    try:
        body = json.loads(request.body or b"{}")
    except json.JSONDecodeError:
        return JsonResponse({"detail": "Invalid JSON body"}, status=400)

    if not isinstance(body, dict):
        return JsonResponse({"detail": "Invalid JSON body"}, status=400)

    profile, error = update_profile_service(request.user, body)
    if error is not None:
        return JsonResponse({"detail": error}, status=400)

    return JsonResponse(
        {
            "detail": "Profile updated successfully",
            "profile": serialize_profile(profile),
        },
        status=200,
    )

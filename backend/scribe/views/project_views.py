"""
Views de projetos e audiências.
"""

import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..decorators import require_active
from ..exceptions import ScribeError
from ..models import Hearing, Project
from ..services.project_service import ProjectService

logger = logging.getLogger(__name__)


@api_view(["GET", "POST"])
@permission_classes([IsAuthenticated])
@require_active
def projects(request):
    """
    GET: projetos do usuário.
    POST: cria projeto.

    Body:
    {
        "name": "string",
        "description": "string"
    }
    """
    try:
        if request.method == "GET":
            query = Project.objects.filter(user=request.user).order_by("-created_at")
            return Response(
                {"projects": [ProjectService.serialize_project(p) for p in query]},
                status=status.HTTP_200_OK,
            )

        project = ProjectService.create_project(
            request.user,
            request.data.get("name"),
            request.data.get("description", ""),
        )
        return Response(ProjectService.serialize_project(project), status=status.HTTP_201_CREATED)

    except ScribeError as e:
        return Response(e.to_response(), status=e.status_code)
    except Exception as e:
        logger.error(f"[projects] Erro em projetos: {e}", exc_info=True)
        return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)


@api_view(["GET", "PUT", "DELETE"])
@permission_classes([IsAuthenticated])
@require_active
def project_detail(request, project_id):
    """
    GET: projeto com suas audiências.
    PUT: atualiza name, description ou status.
    DELETE: remove projeto e audiências.
    """
    try:
        project = Project.objects.get(project_id=project_id, user=request.user)

        if request.method == "GET":
            return Response(
                {
                    **ProjectService.serialize_project(project),
                    "hearings": [
                        ProjectService.serialize_hearing(h)
                        for h in project.hearings.order_by("-created_at")
                    ],
                },
                status=status.HTTP_200_OK,
            )

        if request.method == "DELETE":
            ProjectService.delete_project(project)
            return Response({"status": "deleted"}, status=status.HTTP_200_OK)

        project = ProjectService.update_project(project, request.data)
        return Response(ProjectService.serialize_project(project), status=status.HTTP_200_OK)

    except Project.DoesNotExist:
        return Response({"error": "Project not found"}, status=status.HTTP_404_NOT_FOUND)
    except ScribeError as e:
        return Response(e.to_response(), status=e.status_code)
    except Exception as e:
        logger.error(f"[projects] Erro no projeto {project_id}: {e}", exc_info=True)
        return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)


@api_view(["POST"])
@permission_classes([IsAuthenticated])
@require_active
def create_hearing(request, project_id):
    """
    Cria audiência no projeto.

    Body:
    {
        "title": "string",
        "status": "draft|recording|transcribed|completed",
        "audio_duration": "HH:MM:SS",
        "plain_text": "string",
        "case_brief": "string"
    }
    """
    try:
        hearing = ProjectService.create_hearing(
            request.user, project_id, request.data.get("title"), request.data
        )
        return Response(ProjectService.serialize_hearing(hearing), status=status.HTTP_201_CREATED)

    except Project.DoesNotExist:
        return Response({"error": "Project not found"}, status=status.HTTP_404_NOT_FOUND)
    except ScribeError as e:
        return Response(e.to_response(), status=e.status_code)
    except Exception as e:
        logger.error(f"[projects] Erro ao criar audiência: {e}", exc_info=True)
        return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)


@api_view(["GET", "PUT", "DELETE"])
@permission_classes([IsAuthenticated])
@require_active
def hearing_detail(request, hearing_id):
    """
    GET: audiência.
    PUT: atualiza campos da audiência.
    DELETE: remove audiência.
    """
    try:
        hearing = Hearing.objects.get(hearing_id=hearing_id, user=request.user)

        if request.method == "GET":
            return Response(ProjectService.serialize_hearing(hearing), status=status.HTTP_200_OK)

        if request.method == "DELETE":
            hearing.delete()
            return Response({"status": "deleted"}, status=status.HTTP_200_OK)

        hearing = ProjectService.update_hearing(hearing, request.data)
        return Response(ProjectService.serialize_hearing(hearing), status=status.HTTP_200_OK)

    except Hearing.DoesNotExist:
        return Response({"error": "Hearing not found"}, status=status.HTTP_404_NOT_FOUND)
    except ScribeError as e:
        return Response(e.to_response(), status=e.status_code)
    except Exception as e:
        logger.error(f"[projects] Erro na audiência {hearing_id}: {e}", exc_info=True)
        return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)

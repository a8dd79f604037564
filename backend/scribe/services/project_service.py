"""
Serviço de projetos e audiências.
"""

import logging
from typing import Any, Dict, Optional

from django.db import transaction

from ..exceptions import ScribeError
from ..models import Hearing, Project
from .organization_service import OrganizationService

logger = logging.getLogger(__name__)

HEARING_FIELDS = ("title", "status", "audio_duration", "plain_text", "case_brief", "chat_history")


def _current_organization(user):
    found = OrganizationService.get_user_organization(user)
    return found[0] if found else None


class ProjectService:
    """Serviço para projetos e audiências do usuário."""

    @staticmethod
    def create_project(user, name: str, description: str = "") -> Project:
        name = (name or "").strip()
        if not name:
            raise ScribeError("name is required")

        project = Project.objects.create(
            user=user,
            name=name,
            description=(description or "").strip(),
            organization=_current_organization(user),
        )
        logger.info(f"[projects] Projeto {project.project_id} criado por {user.user_id}")
        return project

    @staticmethod
    def update_project(project: Project, data: Dict[str, Any]) -> Project:
        if "name" in data:
            name = (data["name"] or "").strip()
            if not name:
                raise ScribeError("name cannot be empty")
            project.name = name
        if "description" in data:
            project.description = data["description"] or ""
        if "status" in data:
            if data["status"] not in dict(Project.STATUS_CHOICES):
                raise ScribeError("status must be 'active' or 'archived'")
            project.status = data["status"]

        project.save()
        return project

    @staticmethod
    def create_hearing(user, project_id, title: str, data: Optional[Dict[str, Any]] = None) -> Hearing:
        project = Project.objects.get(project_id=project_id, user=user)

        title = (title or "").strip()
        if not title:
            raise ScribeError("title is required")

        hearing = Hearing(
            project=project,
            user=user,
            organization=project.organization,
            title=title,
        )
        ProjectService._apply_hearing_fields(hearing, data or {})
        hearing.save()
        logger.info(f"[projects] Audiência {hearing.hearing_id} criada no projeto {project.project_id}")
        return hearing

    @staticmethod
    def update_hearing(hearing: Hearing, data: Dict[str, Any]) -> Hearing:
        if "title" in data and not (data["title"] or "").strip():
            raise ScribeError("title cannot be empty")

        ProjectService._apply_hearing_fields(hearing, data)
        hearing.save()
        return hearing

    @staticmethod
    def _apply_hearing_fields(hearing: Hearing, data: Dict[str, Any]) -> None:
        for field in HEARING_FIELDS:
            if field not in data:
                continue
            value = data[field]
            if field == "status" and value not in dict(Hearing.STATUS_CHOICES):
                raise ScribeError("Invalid hearing status")
            if field == "chat_history" and not isinstance(value, list):
                raise ScribeError("chat_history must be a list")
            if field == "title":
                value = value.strip()
            setattr(hearing, field, value if value is not None else "")

    @staticmethod
    def delete_project(project: Project) -> None:
        with transaction.atomic():
            project.hearings.all().delete()
            project.delete()

    @staticmethod
    def serialize_project(project: Project) -> Dict[str, Any]:
        return {
            "project_id": str(project.project_id),
            "name": project.name,
            "description": project.description,
            "status": project.status,
            "organization_id": str(project.organization_id) if project.organization_id else None,
            "created_at": project.created_at.isoformat(),
            "updated_at": project.updated_at.isoformat(),
        }

    @staticmethod
    def serialize_hearing(hearing: Hearing) -> Dict[str, Any]:
        return {
            "hearing_id": str(hearing.hearing_id),
            "project_id": str(hearing.project_id),
            "title": hearing.title,
            "status": hearing.status,
            "audio_duration": hearing.audio_duration,
            "plain_text": hearing.plain_text,
            "case_brief": hearing.case_brief,
            "chat_history": hearing.chat_history,
            "created_at": hearing.created_at.isoformat(),
            "updated_at": hearing.updated_at.isoformat(),
        }

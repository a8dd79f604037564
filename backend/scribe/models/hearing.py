"""
Model para audiências gravadas dentro de um projeto.
"""

import uuid
from django.conf import settings
from django.db import models

from .project import Project


class Hearing(models.Model):
    STATUS_CHOICES = [
        ("draft", "Draft"),
        ("recording", "Recording"),
        ("transcribed", "Transcribed"),
        ("completed", "Completed"),
    ]

    hearing_id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    project = models.ForeignKey(Project, on_delete=models.CASCADE, related_name="hearings")
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="hearings",
    )
    organization = models.ForeignKey(
        "scribe.Organization",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="hearings",
    )

    title = models.CharField(max_length=255)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="draft")
    audio_duration = models.CharField(max_length=20, blank=True, default="")  # HH:MM:SS
    plain_text = models.TextField(blank=True, default="")
    case_brief = models.TextField(blank=True, default="")
    chat_history = models.JSONField(default=list, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "-created_at"], name="hearing_user_created_idx"),
        ]

    def __str__(self) -> str:
        return self.title

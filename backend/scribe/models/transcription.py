"""
Model para transcrições de audiências e depoimentos.
"""

import uuid
from django.conf import settings
from django.db import models


class Transcription(models.Model):
    STATUS_CHOICES = [
        ("processing", "Processing"),
        ("completed", "Completed"),
        ("failed", "Failed"),
    ]

    # Identificadores
    transcription_id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="transcriptions",
    )
    hearing = models.ForeignKey(
        "scribe.Hearing",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="transcriptions",
    )

    # Conteúdo
    title = models.CharField(max_length=255)
    content = models.TextField(blank=True, default="")
    audio_duration = models.FloatField(default=0)  # em segundos
    speaker_count = models.IntegerField(default=0)
    confidence_score = models.FloatField(default=0)  # 0-1

    # Arquivo
    file_name = models.CharField(max_length=255, blank=True, default="")
    file_size = models.BigIntegerField(default=0)
    content_type = models.CharField(max_length=100, blank=True, default="")
    local_path = models.CharField(max_length=500, blank=True, default="")
    storage_path = models.CharField(max_length=500, blank=True, null=True)

    # Metadados jurídicos
    case_number = models.CharField(max_length=100, blank=True, default="")
    session_type = models.CharField(max_length=100, blank=True, default="")

    # Processamento
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="processing")
    error_message = models.TextField(blank=True, null=True)
    credits_charged = models.IntegerField(default=0)
    charge_source = models.CharField(max_length=20, blank=True, default="")
    charge_member_id = models.UUIDField(null=True, blank=True)
    charge_organization_id = models.UUIDField(null=True, blank=True)
    task_id = models.CharField(max_length=255, blank=True, null=True)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "-created_at"], name="transcription_user_idx"),
            models.Index(fields=["status"], name="transcription_status_idx"),
        ]

    def __str__(self) -> str:
        return self.title

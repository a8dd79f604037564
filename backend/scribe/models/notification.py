"""
Model para notificações exibidas ao usuário.
"""

import uuid
from django.conf import settings
from django.db import models


class Notification(models.Model):
    TYPE_CHOICES = [
        ("payment", "Payment"),
        ("credits", "Credits"),
        ("organization", "Organization"),
        ("transcription", "Transcription"),
        ("system", "System"),
    ]

    notification_id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="notifications",
    )

    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default="system")
    title = models.CharField(max_length=255)
    message = models.TextField()
    read = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "read"], name="notification_user_read_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.type} - {self.title}"

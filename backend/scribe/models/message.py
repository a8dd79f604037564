"""
Model para mensagens entre admin e usuários.
"""

import uuid
from django.conf import settings
from django.db import models


class Message(models.Model):
    message_id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="messages",
    )

    subject = models.CharField(max_length=255)
    content = models.TextField()
    from_admin = models.BooleanField(default=False)
    read = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "-created_at"], name="message_user_created_idx"),
        ]

    def __str__(self) -> str:
        return self.subject

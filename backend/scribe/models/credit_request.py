"""
Model para pedidos de créditos feitos pelo usuário e resolvidos pelo admin.
"""

import uuid
from django.conf import settings
from django.db import models


class CreditRequest(models.Model):
    STATUS_CHOICES = [
        ("pending", "Pending"),
        ("approved", "Approved"),
        ("declined", "Declined"),
    ]

    # Identificadores
    request_id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="credit_requests",
    )

    # Pedido
    message = models.TextField()
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="pending")

    # Resolução
    credits_approved = models.IntegerField(null=True, blank=True)
    admin_note = models.TextField(blank=True, default="")
    resolved_at = models.DateTimeField(null=True, blank=True)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "-created_at"], name="credit_req_user_created_idx"),
            models.Index(fields=["status"], name="credit_req_status_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.user_id} - {self.status}"

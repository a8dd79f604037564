"""
Model para pagamentos (pacotes de créditos e assinaturas).
"""

import uuid
from django.conf import settings
from django.db import models


class Payment(models.Model):
    TYPE_CHOICES = [
        ("credits", "Credits"),
        ("subscription", "Subscription"),
    ]

    STATUS_CHOICES = [
        ("pending", "Pending"),
        ("completed", "Completed"),
        ("failed", "Failed"),
    ]

    # Identificadores
    payment_id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="payments",
    )

    # Valores
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    credits_purchased = models.IntegerField(default=0)
    payment_type = models.CharField(max_length=20, choices=TYPE_CHOICES, default="credits")
    plan = models.CharField(max_length=20, blank=True, default="")
    payment_method = models.CharField(max_length=50, default="card")

    # Stripe
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="pending")
    transaction_id = models.CharField(max_length=255, blank=True, null=True, unique=True)
    raw_response = models.JSONField(default=dict, blank=True)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "-created_at"], name="payment_user_created_idx"),
            models.Index(fields=["status"], name="payment_status_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.user_id} - ${self.amount} ({self.status})"

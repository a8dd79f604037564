"""
Model para saldo de créditos por usuário.
1 crédito = 1 minuto de áudio transcrito.
"""

import uuid
from django.conf import settings
from django.db import models


class Credits(models.Model):
    # Identificadores
    credits_id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="credits",
    )

    # Saldo (remaining = total - used)
    total_credits = models.IntegerField(default=0)
    remaining_credits = models.IntegerField(default=0)
    used_credits = models.IntegerField(default=0)

    expires_at = models.DateTimeField(null=True, blank=True)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = "credits"
        constraints = [
            models.CheckConstraint(
                condition=models.Q(remaining_credits__gte=0),
                name="credits_remaining_non_negative",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.user_id} - {self.remaining_credits}/{self.total_credits}"

    def add(self, amount: int) -> None:
        self.total_credits += amount
        self.remaining_credits = self.total_credits - self.used_credits

    def spend(self, amount: int) -> None:
        self.used_credits += amount
        self.remaining_credits = self.total_credits - self.used_credits

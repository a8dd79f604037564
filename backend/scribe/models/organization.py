"""
Model para organizações.
O dono distribui o pool compartilhado de créditos entre os membros.
"""

import uuid
from django.conf import settings
from django.db import models
from django.utils import timezone


class Organization(models.Model):
    # Identificadores
    organization_id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="owned_organizations",
    )

    # Pool compartilhado
    shared_credits = models.IntegerField(default=0)
    used_credits = models.IntegerField(default=0)
    low_credit_threshold = models.IntegerField(default=100)

    # Créditos gratuitos concedidos pelo admin
    free_credits = models.BooleanField(default=False)
    free_credits_expiry = models.DateTimeField(null=True, blank=True)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["owner"], name="org_owner_idx"),
        ]

    def __str__(self) -> str:
        return self.name

    @property
    def remaining_credits(self) -> int:
        return max(0, self.shared_credits - self.used_credits)

    def free_credits_active(self, now=None) -> bool:
        if not self.free_credits:
            return False
        if self.free_credits_expiry is None:
            return True
        return self.free_credits_expiry > (now or timezone.now())

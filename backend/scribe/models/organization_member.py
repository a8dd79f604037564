"""
Model para membros (e convites) de uma organização.

Ciclo de vida: pending -> accepted | rejected.
Remoção e saída apagam a linha.
"""

import uuid
from django.conf import settings
from django.db import models

from .organization import Organization


class OrganizationMember(models.Model):
    STATUS_CHOICES = [
        ("pending", "Pending"),
        ("accepted", "Accepted"),
        ("rejected", "Rejected"),
    ]

    # Identificadores
    member_id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name="members")
    email = models.EmailField()
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="memberships",
    )

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="pending")

    # Créditos alocados pelo dono
    allocated_credits = models.IntegerField(default=0)
    used_credits = models.IntegerField(default=0)

    # Timestamps
    invited_at = models.DateTimeField(auto_now_add=True)
    joined_at = models.DateTimeField(null=True, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-invited_at"]
        indexes = [
            models.Index(fields=["organization", "status"], name="org_member_org_status_idx"),
            models.Index(fields=["email", "status"], name="org_member_email_status_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["organization", "email"],
                condition=models.Q(status__in=["pending", "accepted"]),
                name="unique_open_membership_per_email",
            ),
            models.UniqueConstraint(
                fields=["organization", "user"],
                condition=models.Q(status="accepted"),
                name="unique_accepted_membership_per_user",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.email} - {self.organization_id} ({self.status})"

    @property
    def remaining_credits(self) -> int:
        return max(0, self.allocated_credits - self.used_credits)

    @property
    def usage_percent(self) -> float:
        if self.allocated_credits <= 0:
            return 0.0
        return self.used_credits / self.allocated_credits * 100

"""
Model para transações de crédito (ledger).
Cada alteração de saldo, pessoal ou da organização, gera uma linha.
"""

import uuid
from django.conf import settings
from django.db import models


class CreditTransaction(models.Model):
    TYPE_CHOICES = [
        ("signup", "Signup"),
        ("approval", "Approval"),
        ("purchase", "Purchase"),
        ("subscription", "Subscription"),
        ("consumption", "Consumption"),
        ("refund", "Refund"),
        ("allocation", "Allocation"),
        ("adjustment", "Adjustment"),
    ]

    SOURCE_CHOICES = [
        ("personal", "Personal"),
        ("organization", "Organization"),
        ("free", "Free"),
    ]

    # Identificadores
    transaction_id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="credit_transactions",
    )
    organization = models.ForeignKey(
        "scribe.Organization",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="credit_transactions",
    )
    reference_id = models.CharField(max_length=64, blank=True, default="")  # pedido, pagamento ou transcrição

    # Transação
    amount = models.IntegerField()  # Positivo = crédito, Negativo = débito
    type = models.CharField(max_length=20, choices=TYPE_CHOICES)
    source = models.CharField(max_length=20, choices=SOURCE_CHOICES, default="personal")
    reason = models.TextField()

    # Saldo
    balance_after = models.IntegerField()

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "-created_at"], name="credit_tx_user_created_idx"),
            models.Index(fields=["organization", "-created_at"], name="credit_tx_org_created_idx"),
            models.Index(fields=["type"], name="credit_tx_type_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.user_id or self.organization_id} - {self.type} ({self.amount})"

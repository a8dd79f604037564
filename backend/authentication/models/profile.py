"""
Model para perfis de usuário.
Dados profissionais exibidos no painel e na administração.
"""

from django.conf import settings
from django.db import models


class Profile(models.Model):
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        primary_key=True,
        related_name="profile",
    )

    # Dados profissionais
    full_name = models.CharField(max_length=255, blank=True, default="")
    title = models.CharField(max_length=255, blank=True, default="")
    organization = models.CharField(max_length=255, blank=True, default="")
    company = models.CharField(max_length=255, blank=True, default="")
    phone_number = models.CharField(max_length=50, blank=True, default="")
    license_number = models.CharField(max_length=100, blank=True, default="")

    # Bloqueio administrativo
    suspended = models.BooleanField(default=False)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        app_label = 'authentication'
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return self.full_name or str(self.user_id)

    @property
    def display_name(self) -> str:
        return self.full_name or "Unknown"

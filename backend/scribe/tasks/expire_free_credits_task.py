"""
Task para expirar créditos gratuitos de organizações.
Cron job executado diariamente.
"""

import logging

from celery import shared_task
from django.utils import timezone

from ..models import Organization

logger = logging.getLogger(__name__)


@shared_task
def expire_free_credits_task() -> dict:
    """
    Desliga o uso gratuito de organizações cuja validade já passou.

    Usa bulk update (1 query); a validade fica gravada para auditoria.
    """
    try:
        now = timezone.now()
        logger.info("[FREE-CREDITS] Verificando créditos gratuitos expirados")

        expired = Organization.objects.filter(
            free_credits=True,
            free_credits_expiry__isnull=False,
            free_credits_expiry__lte=now,
        ).update(free_credits=False, updated_at=now)

        logger.info(f"[FREE-CREDITS] {expired} organizações com créditos gratuitos expirados")
        return {
            "status": "completed",
            "timestamp": now.isoformat(),
            "organizations_expired": expired,
        }

    except Exception as e:
        logger.error(f"[FREE-CREDITS] Erro ao expirar créditos gratuitos: {e}", exc_info=True)
        return {
            "status": "failed",
            "error": str(e),
            "timestamp": timezone.now().isoformat(),
        }

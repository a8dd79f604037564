"""
Serviço de notificações do usuário e alertas da organização.
"""

import logging
from typing import Any, Dict, List

from django.conf import settings

from ..models import Notification, Organization

logger = logging.getLogger(__name__)


class NotificationService:
    """Serviço para criar e listar notificações."""

    @staticmethod
    def notify(user, notification_type: str, title: str, message: str) -> Notification:
        notification = Notification.objects.create(
            user=user,
            type=notification_type,
            title=title,
            message=message,
        )
        logger.debug(f"[notifications] {notification_type} para {user.user_id}: {title}")
        return notification

    @staticmethod
    def list_for_user(user, unread_only: bool = False, limit: int = 50) -> List[Notification]:
        query = Notification.objects.filter(user=user).order_by("-created_at")
        if unread_only:
            query = query.filter(read=False)
        return list(query[:limit])

    @staticmethod
    def mark_read(user, notification_id) -> Notification:
        notification = Notification.objects.get(notification_id=notification_id, user=user)
        if not notification.read:
            notification.read = True
            notification.save(update_fields=["read"])
        return notification

    @staticmethod
    def mark_all_read(user) -> int:
        return Notification.objects.filter(user=user, read=False).update(read=True)

    @staticmethod
    def serialize(notification: Notification) -> Dict[str, Any]:
        return {
            "notification_id": str(notification.notification_id),
            "type": notification.type,
            "title": notification.title,
            "message": notification.message,
            "read": notification.read,
            "created_at": notification.created_at.isoformat(),
        }

    @staticmethod
    def organization_alerts(org: Organization) -> List[Dict[str, Any]]:
        """
        Alertas calculados para o dono da organização.

        - pool compartilhado abaixo do limite (error abaixo do nível crítico)
        - membro acima do percentual de uso (error acima do nível crítico)
        - convites pendentes (info)
        """
        alerts = []

        critical_credits = getattr(settings, "ORG_CRITICAL_CREDIT_THRESHOLD", 20)
        low_percent = getattr(settings, "MEMBER_LOW_CREDIT_PERCENT", 80)
        critical_percent = getattr(settings, "MEMBER_CRITICAL_CREDIT_PERCENT", 95)
        threshold = org.low_credit_threshold

        remaining = org.shared_credits - org.used_credits
        if 0 <= remaining < threshold:
            alerts.append({
                "id": f"low-credits-{org.organization_id}",
                "type": "error" if remaining < critical_credits else "warning",
                "title": "Low Organization Credits",
                "message": f"Your organization has only {remaining} credits remaining.",
                "action": "Add more credits to avoid service interruption.",
            })

        members = org.members.filter(status="accepted", allocated_credits__gt=0)
        for member in members:
            usage = member.usage_percent
            if usage > low_percent:
                alerts.append({
                    "id": f"member-usage-{member.member_id}",
                    "type": "error" if usage > critical_percent else "warning",
                    "title": "Member Credit Usage High",
                    "message": f"{member.email} has used {round(usage)}% of allocated credits.",
                    "action": "Consider allocating more credits to this member.",
                })

        pending = org.members.filter(status="pending").count()
        if pending > 0:
            alerts.append({
                "id": f"pending-invitations-{org.organization_id}",
                "type": "info",
                "title": "Pending Invitations",
                "message": f"You have {pending} pending invitation{'s' if pending != 1 else ''}.",
                "action": "Follow up with invited members.",
            })

        return alerts

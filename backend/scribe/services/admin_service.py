"""
Serviço de administração: usuários, pagamentos, relatórios e estatísticas.
"""

import csv
import io
import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db.models import Sum

from authentication.models import Profile

from ..exceptions import ScribeError
from ..models import Credits, Hearing, Message, Payment, Project

logger = logging.getLogger(__name__)

User = get_user_model()


def parse_duration(value: str) -> int:
    """Converte HH:MM:SS (ou MM:SS) em segundos. Valores inválidos contam 0."""
    if not value:
        return 0
    try:
        parts = [int(p) for p in str(value).strip().split(":")]
    except ValueError:
        return 0

    seconds = 0
    for part in parts:
        seconds = seconds * 60 + part
    return seconds


def _name(user) -> str:
    profile = getattr(user, "profile", None)
    return profile.display_name if profile else "Unknown"


class AdminService:
    """Serviço para o painel administrativo."""

    @staticmethod
    def list_users() -> List[Dict[str, Any]]:
        users = User.objects.select_related("profile", "credits").order_by("-created_at")
        result = []
        for user in users:
            profile = getattr(user, "profile", None)
            credits = getattr(user, "credits", None)
            result.append({
                "user_id": str(user.user_id),
                "email": user.email,
                "full_name": profile.full_name if profile else "",
                "title": profile.title if profile else "",
                "suspended": profile.suspended if profile else False,
                "role": user.role,
                "total_credits": credits.total_credits if credits else 0,
                "remaining_credits": credits.remaining_credits if credits else 0,
                "created_at": user.created_at.isoformat() if user.created_at else None,
            })
        return result

    @staticmethod
    def toggle_role(user_id, actor) -> User:
        user = User.objects.get(user_id=user_id)
        if user.user_id == actor.user_id:
            raise ScribeError("You cannot change your own role")

        user.is_admin = not user.is_admin
        user.save(update_fields=["is_admin", "updated_at"])
        logger.info(f"[admin] {actor.user_id} alterou papel de {user_id} para {user.role}")
        return user

    @staticmethod
    def toggle_suspension(user_id, actor) -> Profile:
        user = User.objects.get(user_id=user_id)
        profile, _ = Profile.objects.get_or_create(user=user)
        profile.suspended = not profile.suspended
        profile.save(update_fields=["suspended", "updated_at"])
        logger.info(
            f"[admin] {actor.user_id} {'suspendeu' if profile.suspended else 'reativou'} {user_id}"
        )
        return profile

    @staticmethod
    def user_details(user_id) -> Dict[str, Any]:
        user = User.objects.select_related("profile").get(user_id=user_id)
        profile = getattr(user, "profile", None)
        credits = Credits.objects.filter(user=user).first()

        return {
            "user_id": str(user.user_id),
            "email": user.email,
            "role": user.role,
            "profile": {
                "full_name": profile.full_name,
                "title": profile.title,
                "organization": profile.organization,
                "company": profile.company,
                "phone_number": profile.phone_number,
                "license_number": profile.license_number,
                "suspended": profile.suspended,
            } if profile else None,
            "credits": {
                "total_credits": credits.total_credits,
                "remaining_credits": credits.remaining_credits,
                "used_credits": credits.used_credits,
            } if credits else None,
            "payments": [
                {
                    "payment_id": str(p.payment_id),
                    "amount": str(p.amount),
                    "credits_purchased": p.credits_purchased,
                    "status": p.status,
                    "created_at": p.created_at.isoformat(),
                }
                for p in Payment.objects.filter(user=user).order_by("-created_at")
            ],
            "projects": [
                {"project_id": str(p.project_id), "name": p.name, "status": p.status}
                for p in Project.objects.filter(user=user).order_by("-created_at")
            ],
            "messages": [
                {
                    "message_id": str(m.message_id),
                    "subject": m.subject,
                    "from_admin": m.from_admin,
                    "read": m.read,
                    "created_at": m.created_at.isoformat(),
                }
                for m in Message.objects.filter(user=user).order_by("-created_at")
            ],
        }

    @staticmethod
    def list_payments(status: Optional[str] = None) -> List[Dict[str, Any]]:
        payments = Payment.objects.select_related("user__profile").order_by("-created_at")
        if status:
            payments = payments.filter(status=status)
        return [
            {
                "payment_id": str(p.payment_id),
                "user_id": str(p.user_id),
                "user_name": _name(p.user),
                "user_email": p.user.email,
                "amount": str(p.amount),
                "credits_purchased": p.credits_purchased,
                "payment_type": p.payment_type,
                "payment_method": p.payment_method,
                "status": p.status,
                "transaction_id": p.transaction_id,
                "created_at": p.created_at.isoformat(),
            }
            for p in payments
        ]

    @staticmethod
    def highest_payer() -> Optional[Dict[str, Any]]:
        top = (
            Payment.objects.filter(status="completed")
            .values("user_id")
            .annotate(total=Sum("amount"))
            .order_by("-total")
            .first()
        )
        if not top:
            return None

        user = User.objects.select_related("profile").get(user_id=top["user_id"])
        return {
            "user_id": str(user.user_id),
            "name": _name(user),
            "email": user.email,
            "total_amount": str(top["total"]),
        }

    @staticmethod
    def credit_usage_totals() -> Dict[str, Any]:
        totals = Credits.objects.aggregate(
            used=Sum("used_credits"),
            remaining=Sum("remaining_credits"),
        )
        used = totals["used"] or 0
        remaining = totals["remaining"] or 0
        credit_value = Decimal(str(getattr(settings, "CREDIT_VALUE_USD", "0.10")))
        return {
            "total_used": used,
            "total_remaining": remaining,
            "remaining_worth_usd": str((Decimal(remaining) * credit_value).quantize(Decimal("0.01"))),
        }

    @staticmethod
    def payments_csv() -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer)
        writer.writerow(["Date", "User", "Amount", "Credits", "Method", "Transaction ID"])

        for p in Payment.objects.select_related("user__profile").order_by("-created_at"):
            writer.writerow([
                p.created_at.date().isoformat(),
                _name(p.user),
                f"{p.amount:.2f}",
                p.credits_purchased,
                p.payment_method,
                p.transaction_id or "",
            ])

        return buffer.getvalue()

    @staticmethod
    def stats() -> Dict[str, Any]:
        total_seconds = sum(
            parse_duration(d) for d in Hearing.objects.values_list("audio_duration", flat=True)
        )
        credits = Credits.objects.aggregate(
            total=Sum("total_credits"),
            remaining=Sum("remaining_credits"),
        )
        total_payments = Payment.objects.filter(status="completed").aggregate(total=Sum("amount"))["total"]

        return {
            "total_users": User.objects.count(),
            "total_projects": Project.objects.count(),
            "total_payments": str(total_payments or Decimal("0.00")),
            "total_credits": credits["total"] or 0,
            "remaining_credits": credits["remaining"] or 0,
            "recording_hours": round(total_seconds / 3600, 1),
        }

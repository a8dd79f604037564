"""
Serviço de envio de emails.
"""

import logging

from django.conf import settings
from django.core.mail import send_mail

logger = logging.getLogger(__name__)


class EmailService:
    """Serviço para envio de emails."""

    @staticmethod
    def send_organization_invitation(email: str, organization_name: str, inviter_email: str) -> bool:
        """Envia email de convite para membro da organização."""
        try:
            invite_link = f"{settings.FRONTEND_URL}/invitations"
            send_mail(
                f"You've been invited to join {organization_name}",
                (
                    f"{inviter_email} invited you to join {organization_name}.\n\n"
                    f"Sign in with this email address to accept: {invite_link}"
                ),
                settings.DEFAULT_FROM_EMAIL,
                [email],
                fail_silently=False,
            )
            return True
        except Exception as e:
            logger.warning(f"[email] Falha ao enviar convite para {email}: {e}")
            return False

    @staticmethod
    def send_credit_request_resolved(email: str, status: str, credits: int = 0, admin_note: str = "") -> bool:
        """Envia email quando o admin resolve um pedido de créditos."""
        try:
            if status == "approved":
                subject = "Your credit request was approved"
                body = f"{credits} credits were added to your account."
            else:
                subject = "Your credit request was declined"
                body = "Your credit request was declined."

            if admin_note:
                body += f"\n\nNote from the administrator: {admin_note}"

            send_mail(subject, body, settings.DEFAULT_FROM_EMAIL, [email], fail_silently=False)
            return True
        except Exception as e:
            logger.warning(f"[email] Falha ao enviar resolução de pedido para {email}: {e}")
            return False

    @staticmethod
    def send_payment_failed(email: str, amount: float) -> bool:
        """Envia email de falha de pagamento."""
        try:
            send_mail(
                "Payment failed",
                f"We could not process your payment of ${amount:.2f}. Please try again.",
                settings.DEFAULT_FROM_EMAIL,
                [email],
                fail_silently=False,
            )
            return True
        except Exception as e:
            logger.warning(f"[email] Falha ao enviar aviso de pagamento para {email}: {e}")
            return False

"""
Serviço de pagamentos: pacotes de créditos e planos de assinatura.

1 crédito = 1 minuto de transcrição.
"""

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Optional

from django.db import transaction

from ..exceptions import InvalidTransitionError, ScribeError
from ..models import Payment
from .credit_service import CreditService
from .email_service import EmailService
from .notification_service import NotificationService
from .stripe_service import StripeService

logger = logging.getLogger(__name__)


class PaymentService:
    """Serviço para gerenciar pagamentos."""

    CREDIT_PACKAGES = {
        "1h": {"name": "1 Hour", "minutes": 60, "price_usd": Decimal("10.00")},
        "3h": {"name": "3 Hours", "minutes": 180, "price_usd": Decimal("25.00")},
        "6h": {"name": "6 Hours", "minutes": 360, "price_usd": Decimal("45.00")},
        "10h": {"name": "10 Hours", "minutes": 600, "price_usd": Decimal("70.00")},
    }

    PLANS = {
        "basic": {"name": "Basic", "price_usd": Decimal("29.00"), "minutes_monthly": 100},
        "pro": {"name": "Pro", "price_usd": Decimal("79.00"), "minutes_monthly": 500},
        "enterprise": {"name": "Enterprise", "price_usd": Decimal("199.00"), "minutes_monthly": None},
    }

    # Preço de minutos avulsos: $10 a cada 60 minutos
    CUSTOM_PRICE_PER_HOUR = Decimal("10.00")

    @staticmethod
    def custom_price(minutes: int) -> Decimal:
        price = Decimal(minutes) / Decimal(60) * PaymentService.CUSTOM_PRICE_PER_HOUR
        return price.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)

    @staticmethod
    def catalogue() -> Dict[str, Any]:
        return {
            "packages": [
                {"package_id": key, "name": p["name"], "minutes": p["minutes"], "price_usd": str(p["price_usd"])}
                for key, p in PaymentService.CREDIT_PACKAGES.items()
            ],
            "plans": [
                {
                    "plan_id": key,
                    "name": p["name"],
                    "price_usd": str(p["price_usd"]),
                    "minutes_monthly": p["minutes_monthly"],
                    "unlimited": p["minutes_monthly"] is None,
                }
                for key, p in PaymentService.PLANS.items()
            ],
        }

    @staticmethod
    def quote(
        payment_type: str,
        package: Optional[str] = None,
        minutes: Optional[int] = None,
        plan: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Calcula valor e créditos de uma compra."""
        if payment_type == "credits":
            if package:
                if package not in PaymentService.CREDIT_PACKAGES:
                    raise ScribeError(f"Unknown package. Valid: {', '.join(PaymentService.CREDIT_PACKAGES)}")
                selected = PaymentService.CREDIT_PACKAGES[package]
                return {"amount": selected["price_usd"], "credits": selected["minutes"], "plan": ""}

            try:
                minutes = int(minutes)
            except (TypeError, ValueError):
                raise ScribeError("package or minutes is required")
            if minutes < 1:
                raise ScribeError("minutes must be at least 1")
            return {"amount": PaymentService.custom_price(minutes), "credits": minutes, "plan": ""}

        if payment_type == "subscription":
            if plan not in PaymentService.PLANS:
                raise ScribeError(f"Unknown plan. Valid: {', '.join(PaymentService.PLANS)}")
            selected = PaymentService.PLANS[plan]
            return {
                "amount": selected["price_usd"],
                "credits": selected["minutes_monthly"] or 0,
                "plan": plan,
            }

        raise ScribeError("payment_type must be 'credits' or 'subscription'")

    @staticmethod
    def start_payment(
        user,
        payment_type: str,
        package: Optional[str] = None,
        minutes: Optional[int] = None,
        plan: Optional[str] = None,
        payment_method: str = "card",
    ) -> Dict[str, Any]:
        """Registra pagamento pendente e cria o PaymentIntent no Stripe."""
        quote = PaymentService.quote(payment_type, package=package, minutes=minutes, plan=plan)

        payment = Payment.objects.create(
            user=user,
            amount=quote["amount"],
            credits_purchased=quote["credits"],
            payment_type=payment_type,
            plan=quote["plan"],
            payment_method=payment_method or "card",
        )

        intent = StripeService().create_payment_intent(
            amount_cents=int(quote["amount"] * 100),
            metadata={
                "payment_id": str(payment.payment_id),
                "user_id": str(user.user_id),
                "payment_type": payment_type,
            },
            receipt_email=user.email,
        )

        payment.transaction_id = intent["payment_intent_id"]
        payment.save(update_fields=["transaction_id", "updated_at"])

        logger.info(
            f"[payments] Pagamento {payment.payment_id} iniciado: ${payment.amount} "
            f"({payment_type}, {payment.credits_purchased} créditos)"
        )
        return {
            "payment": PaymentService.serialize(payment),
            "client_secret": intent["client_secret"],
        }

    @staticmethod
    def complete_payment(transaction_id: str, raw_response: Optional[dict] = None) -> Payment:
        """
        Conclui pagamento e credita o usuário na mesma transação.

        Idempotente: pagamento já concluído não é creditado de novo.
        Um pagamento que falhou pode ser concluído se o cliente tentar outro cartão.
        """
        with transaction.atomic():
            payment = Payment.objects.select_for_update().select_related("user").get(
                transaction_id=transaction_id
            )

            if payment.status == "completed":
                logger.warning(f"[payments] Pagamento {payment.payment_id} já concluído. Ignorando.")
                return payment

            if payment.status not in ("pending", "failed"):
                raise InvalidTransitionError(f"Payment is already {payment.status}")

            if payment.status == "failed":
                logger.info(f"[payments] Pagamento {payment.payment_id} aprovado após falha anterior")

            payment.status = "completed"
            payment.raw_response = raw_response or {}
            payment.save()

            if payment.credits_purchased > 0:
                CreditService.grant_credits(
                    payment.user,
                    payment.credits_purchased,
                    "purchase" if payment.payment_type == "credits" else "subscription",
                    f"Payment ${payment.amount} ({payment.payment_type})",
                    reference_id=payment.payment_id,
                )

            NotificationService.notify(
                payment.user,
                "payment",
                "Payment Successful",
                f"Your payment of ${payment.amount} was processed successfully.",
            )

        logger.info(f"[payments] Pagamento {payment.payment_id} concluído")
        return payment

    @staticmethod
    def fail_payment(transaction_id: str, raw_response: Optional[dict] = None) -> Payment:
        with transaction.atomic():
            payment = Payment.objects.select_for_update().select_related("user").get(
                transaction_id=transaction_id
            )

            if payment.status != "pending":
                logger.warning(f"[payments] Pagamento {payment.payment_id} está {payment.status}. Ignorando falha.")
                return payment

            payment.status = "failed"
            payment.raw_response = raw_response or {}
            payment.save()

            NotificationService.notify(
                payment.user,
                "payment",
                "Payment Failed",
                f"Your payment of ${payment.amount} could not be processed.",
            )

        EmailService.send_payment_failed(payment.user.email, float(payment.amount))
        logger.info(f"[payments] Pagamento {payment.payment_id} falhou")
        return payment

    @staticmethod
    def payment_history(user, limit: int = 50):
        payments = Payment.objects.filter(user=user).order_by("-created_at")[:limit]
        return [PaymentService.serialize(payment) for payment in payments]

    @staticmethod
    def serialize(payment: Payment) -> Dict[str, Any]:
        return {
            "payment_id": str(payment.payment_id),
            "amount": str(payment.amount),
            "credits_purchased": payment.credits_purchased,
            "payment_type": payment.payment_type,
            "plan": payment.plan or None,
            "payment_method": payment.payment_method,
            "status": payment.status,
            "transaction_id": payment.transaction_id,
            "created_at": payment.created_at.isoformat(),
        }

"""
Serviço de integração com Stripe para pagamentos.
"""

import stripe
from django.conf import settings


class StripeService:
    """Serviço para operações com Stripe."""

    def __init__(self):
        api_key = getattr(settings, "STRIPE_SECRET_KEY", None)
        if not api_key:
            raise Exception("Stripe not configured")
        stripe.api_key = api_key
        self.stripe = stripe

    def create_payment_intent(
        self,
        amount_cents: int,
        metadata: dict,
        receipt_email: str = None,
        currency: str = "usd",
    ) -> dict:
        """Cria intent de pagamento."""
        try:
            intent = self.stripe.PaymentIntent.create(
                amount=amount_cents,
                currency=currency,
                metadata=metadata,
                receipt_email=receipt_email,
                automatic_payment_methods={"enabled": True},
            )
            return {
                "client_secret": intent.client_secret,
                "payment_intent_id": intent.id,
            }
        except Exception as e:
            raise Exception(f"Error creating payment intent: {e}")

    @staticmethod
    def construct_event(payload: bytes, sig_header: str):
        """Valida assinatura e monta o evento do webhook."""
        return stripe.Webhook.construct_event(
            payload,
            sig_header,
            settings.STRIPE_WEBHOOK_SECRET,
        )

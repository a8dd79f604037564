"""
Serviço de créditos: pedidos, aprovação pelo admin, consumo e estorno.

Toda alteração de saldo roda dentro de transaction.atomic() com a linha
de saldo bloqueada (select_for_update) e gera uma CreditTransaction.
"""

import logging
import math
from typing import Any, Dict, List, Optional

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from ..exceptions import InsufficientCreditsError, InvalidTransitionError, ScribeError
from ..models import CreditRequest, CreditTransaction, Credits, Organization, OrganizationMember

logger = logging.getLogger(__name__)


class CreditService:
    """Serviço para gerenciar saldos de créditos."""

    @staticmethod
    def credits_needed_for_duration(duration_seconds: float) -> int:
        """1 crédito por minuto iniciado, mínimo de 1."""
        if not duration_seconds or duration_seconds <= 0:
            return 1
        return max(1, math.ceil(duration_seconds / 60))

    @staticmethod
    def get_or_create_credits(user) -> Credits:
        credits, _ = Credits.objects.get_or_create(user=user)
        return credits

    @staticmethod
    def _lock_credits(user) -> Credits:
        CreditService.get_or_create_credits(user)
        return Credits.objects.select_for_update().get(user=user)

    @staticmethod
    def grant_credits(
        user,
        amount: int,
        tx_type: str,
        reason: str,
        reference_id: str = "",
    ) -> Credits:
        """
        Soma créditos ao saldo pessoal (total e remaining).

        Caminho comum para aprovação, compra, assinatura e cadastro.
        """
        if amount <= 0:
            raise ScribeError("Credit amount must be at least 1")

        with transaction.atomic():
            credits = CreditService._lock_credits(user)
            credits.add(amount)
            credits.save()

            CreditTransaction.objects.create(
                user=user,
                amount=amount,
                type=tx_type,
                source="personal",
                reason=reason,
                reference_id=str(reference_id),
                balance_after=credits.remaining_credits,
            )

        logger.info(
            f"[credits] +{amount} para {user.user_id} ({tx_type}). "
            f"Saldo: {credits.remaining_credits}"
        )
        return credits

    @staticmethod
    def submit_request(user, message: str) -> CreditRequest:
        message = (message or "").strip()
        if not message:
            raise ScribeError("message is required")

        credit_request = CreditRequest.objects.create(user=user, message=message)
        logger.info(f"[credits] Pedido {credit_request.request_id} criado por {user.user_id}")
        return credit_request

    @staticmethod
    def list_requests(user) -> List[CreditRequest]:
        return list(CreditRequest.objects.filter(user=user).order_by("-created_at"))

    @staticmethod
    def list_all_requests(status: Optional[str] = None) -> List[Dict[str, Any]]:
        query = CreditRequest.objects.select_related("user__profile").order_by("-created_at")
        if status:
            query = query.filter(status=status)

        result = []
        for credit_request in query:
            profile = getattr(credit_request.user, "profile", None)
            result.append({
                **CreditService.serialize_request(credit_request),
                "email": credit_request.user.email,
                "full_name": profile.display_name if profile else "Unknown",
            })
        return result

    @staticmethod
    def serialize_request(credit_request: CreditRequest) -> Dict[str, Any]:
        return {
            "request_id": str(credit_request.request_id),
            "user_id": str(credit_request.user_id),
            "message": credit_request.message,
            "status": credit_request.status,
            "credits_approved": credit_request.credits_approved,
            "admin_note": credit_request.admin_note,
            "created_at": credit_request.created_at.isoformat(),
            "resolved_at": credit_request.resolved_at.isoformat() if credit_request.resolved_at else None,
        }

    @staticmethod
    def approve_request(request_id, amount: int, admin_note: str = "") -> CreditRequest:
        """
        Aprova um pedido e credita o usuário na mesma transação.

        Só pedidos pendentes podem ser aprovados: uma segunda aprovação
        (duplo clique, duas abas) é rejeitada e não credita nada.
        """
        if isinstance(amount, bool) or (isinstance(amount, float) and not amount.is_integer()):
            raise ScribeError("credits must be an integer")

        try:
            amount = int(amount)
        except (TypeError, ValueError):
            raise ScribeError("credits must be an integer")

        if amount < 1:
            raise ScribeError("credits must be at least 1")

        with transaction.atomic():
            credit_request = (
                CreditRequest.objects.select_for_update()
                .select_related("user")
                .get(request_id=request_id)
            )

            if credit_request.status != "pending":
                raise InvalidTransitionError(
                    f"Credit request is already {credit_request.status}",
                    status=credit_request.status,
                )

            credit_request.status = "approved"
            credit_request.credits_approved = amount
            credit_request.admin_note = admin_note or ""
            credit_request.resolved_at = timezone.now()
            credit_request.save()

            CreditService.grant_credits(
                credit_request.user,
                amount,
                "approval",
                f"Credit request approved: {amount} credits",
                reference_id=credit_request.request_id,
            )

        logger.info(f"[credits] Pedido {request_id} aprovado (+{amount})")
        return credit_request

    @staticmethod
    def decline_request(request_id, admin_note: str = "") -> CreditRequest:
        with transaction.atomic():
            credit_request = CreditRequest.objects.select_for_update().get(request_id=request_id)

            if credit_request.status != "pending":
                raise InvalidTransitionError(
                    f"Credit request is already {credit_request.status}",
                    status=credit_request.status,
                )

            credit_request.status = "declined"
            credit_request.admin_note = admin_note or ""
            credit_request.resolved_at = timezone.now()
            credit_request.save()

        logger.info(f"[credits] Pedido {request_id} recusado")
        return credit_request

    @staticmethod
    def _charge_membership(user, amount: int, reference_id: str = "") -> Optional[Dict[str, Any]]:
        """
        Tenta cobrar da alocação de uma organização onde o usuário é membro.

        Deve ser chamado dentro de transaction.atomic().
        """
        memberships = (
            OrganizationMember.objects.select_for_update()
            .select_related("organization")
            .filter(user=user, status="accepted")
            .order_by("joined_at")
        )

        for member in memberships:
            org = member.organization

            if org.free_credits_active():
                CreditTransaction.objects.create(
                    user=user,
                    organization=org,
                    amount=0,
                    type="consumption",
                    source="free",
                    reason="Usage covered by organization free credits",
                    reference_id=str(reference_id),
                    balance_after=member.remaining_credits,
                )
                return {
                    "source": "free",
                    "amount": 0,
                    "member_id": str(member.member_id),
                    "organization_id": str(org.organization_id),
                }

            if member.remaining_credits < amount:
                continue

            org = Organization.objects.select_for_update().get(organization_id=org.organization_id)
            if org.remaining_credits < amount:
                continue

            member.used_credits += amount
            member.save(update_fields=["used_credits", "updated_at"])
            org.used_credits += amount
            org.save(update_fields=["used_credits", "updated_at"])

            return {
                "source": "organization",
                "amount": amount,
                "member_id": str(member.member_id),
                "organization_id": str(org.organization_id),
                "balance_after": member.remaining_credits,
                "organization": org,
            }

        return None

    @staticmethod
    def consume_credits(user, amount: int, reason: str, reference_id: str = "") -> Dict[str, Any]:
        """
        Debita créditos de forma atômica.

        Ordem: alocação da organização (ou créditos gratuitos ativos),
        depois saldo pessoal. Retorna a origem para permitir o estorno.
        """
        if amount <= 0:
            raise ScribeError("Credit amount must be at least 1")

        with transaction.atomic():
            charge = CreditService._charge_membership(user, amount, reference_id)

            if charge is not None:
                org = charge.pop("organization", None)
                balance_after = charge.pop("balance_after", None)
                if org is not None:
                    CreditTransaction.objects.create(
                        user=user,
                        organization=org,
                        amount=-amount,
                        type="consumption",
                        source="organization",
                        reason=reason,
                        reference_id=str(reference_id),
                        balance_after=balance_after,
                    )
                logger.info(
                    f"[credits] Consumo {amount} ({charge['source']}) de {user.user_id} "
                    f"na org {charge['organization_id']}"
                )
                return charge

            credits = CreditService._lock_credits(user)
            if credits.remaining_credits < amount:
                raise InsufficientCreditsError(amount, CreditService.available_credits(user))

            credits.spend(amount)
            credits.save()

            CreditTransaction.objects.create(
                user=user,
                amount=-amount,
                type="consumption",
                source="personal",
                reason=reason,
                reference_id=str(reference_id),
                balance_after=credits.remaining_credits,
            )

        logger.info(f"[credits] Consumo {amount} (personal) de {user.user_id}. Saldo: {credits.remaining_credits}")
        return {"source": "personal", "amount": amount, "member_id": None, "organization_id": None}

    @staticmethod
    def refund_credits(user, charge: Dict[str, Any], reason: str, reference_id: str = "") -> None:
        """Estorna uma cobrança feita por consume_credits para a mesma origem."""
        source = charge.get("source")
        amount = int(charge.get("amount") or 0)

        if source == "free" or amount <= 0:
            return

        with transaction.atomic():
            if source == "organization":
                org = Organization.objects.select_for_update().filter(
                    organization_id=charge.get("organization_id")
                ).first()
                member = OrganizationMember.objects.select_for_update().filter(
                    member_id=charge.get("member_id")
                ).first()

                if org is not None:
                    org.used_credits = max(0, org.used_credits - amount)
                    org.save(update_fields=["used_credits", "updated_at"])
                if member is not None:
                    member.used_credits = max(0, member.used_credits - amount)
                    member.save(update_fields=["used_credits", "updated_at"])

                CreditTransaction.objects.create(
                    user=user,
                    organization=org,
                    amount=amount,
                    type="refund",
                    source="organization",
                    reason=reason,
                    reference_id=str(reference_id),
                    balance_after=member.remaining_credits if member else 0,
                )
            else:
                credits = CreditService._lock_credits(user)
                credits.used_credits = max(0, credits.used_credits - amount)
                credits.remaining_credits = credits.total_credits - credits.used_credits
                credits.save()

                CreditTransaction.objects.create(
                    user=user,
                    amount=amount,
                    type="refund",
                    source="personal",
                    reason=reason,
                    reference_id=str(reference_id),
                    balance_after=credits.remaining_credits,
                )

        logger.info(f"[credits] Estorno {amount} ({source}) para {user.user_id}")

    @staticmethod
    def available_credits(user) -> int:
        """Maior quantidade que uma única cobrança consegue cobrir."""
        personal = Credits.objects.filter(user=user).values_list("remaining_credits", flat=True).first() or 0

        best = personal
        memberships = OrganizationMember.objects.select_related("organization").filter(
            user=user, status="accepted"
        )
        for member in memberships:
            if member.organization.free_credits_active():
                return max(best, getattr(settings, "FREE_CREDITS_CEILING", 10 ** 6))
            best = max(best, min(member.remaining_credits, member.organization.remaining_credits))
        return best

    @staticmethod
    def get_balance(user) -> Dict[str, Any]:
        credits = CreditService.get_or_create_credits(user)
        return {
            "total_credits": credits.total_credits,
            "remaining_credits": credits.remaining_credits,
            "used_credits": credits.used_credits,
            "expires_at": credits.expires_at.isoformat() if credits.expires_at else None,
            "available_for_transcription": CreditService.available_credits(user),
        }

    @staticmethod
    def get_history(user, limit: int = 20, offset: int = 0) -> Dict[str, Any]:
        query = CreditTransaction.objects.filter(user=user).order_by("-created_at")
        total = query.count()
        transactions = query[offset: offset + limit]

        return {
            "total": total,
            "limit": limit,
            "offset": offset,
            "transactions": [
                {
                    "transaction_id": str(tx.transaction_id),
                    "amount": tx.amount,
                    "type": tx.type,
                    "source": tx.source,
                    "reason": tx.reason,
                    "balance_after": tx.balance_after,
                    "created_at": tx.created_at.isoformat(),
                }
                for tx in transactions
            ],
        }

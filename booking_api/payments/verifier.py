"""
Vérification d'un paiement Square à partir de l'order id (lecture seule).

États:
  PENDING        commande sans tender réglé (retour navigateur plus rapide que Square)
  COMPLETED      le paiement du premier tender est COMPLETED
  FAILED         paiement connu mais non finalisé (APPROVED, PENDING, CANCELED, FAILED)
  NOT_FOUND      order id inconnu de Square
  GATEWAY_ERROR  transport, statut inconnu ou incohérence: on échoue fermé
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from booking_api.errors import GatewayError, OrderNotFound
from .models import OrderSnapshot, PaymentRecord, SettlementStatus
from .square_client import PaymentGateway

logger = logging.getLogger(__name__)


class VerificationOutcome(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    NOT_FOUND = "not_found"
    GATEWAY_ERROR = "gateway_error"


@dataclass(frozen=True)
class VerificationResult:
    outcome: VerificationOutcome
    order: Optional[OrderSnapshot] = None
    payment: Optional[PaymentRecord] = None
    reason: str = ""


async def verify(gateway: PaymentGateway, order_id: str) -> VerificationResult:
    try:
        order = await gateway.retrieve_order(order_id)
    except OrderNotFound:
        return VerificationResult(VerificationOutcome.NOT_FOUND, reason="order not found")
    except GatewayError as e:
        return VerificationResult(VerificationOutcome.GATEWAY_ERROR, reason=e.error)

    if not order.tender_payment_ids:
        return VerificationResult(VerificationOutcome.PENDING, order=order, reason="no tender yet")

    payment_id = order.tender_payment_ids[0]
    try:
        payment = await gateway.get_payment(payment_id)
    except GatewayError as e:
        return VerificationResult(VerificationOutcome.GATEWAY_ERROR, order=order, reason=e.error)

    if payment.order_id and payment.order_id != order.order_id:
        logger.error("payments.verify order mismatch order_id=%s payment_order_id=%s", order.order_id, payment.order_id)
        return VerificationResult(VerificationOutcome.GATEWAY_ERROR, order=order, payment=payment, reason="payment belongs to another order")

    if payment.status is SettlementStatus.COMPLETED:
        return VerificationResult(VerificationOutcome.COMPLETED, order=order, payment=payment)
    if payment.status is SettlementStatus.UNKNOWN:
        logger.warning("payments.verify unknown status=%r payment_id=%s", payment.raw_status, payment.payment_id)
        return VerificationResult(VerificationOutcome.GATEWAY_ERROR, order=order, payment=payment, reason=f"unexpected payment status {payment.raw_status!r}")
    return VerificationResult(VerificationOutcome.FAILED, order=order, payment=payment, reason=f"payment status {payment.raw_status}")

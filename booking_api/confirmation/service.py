"""
Cas d'usage 'confirmation': vérification Square puis notifications, une seule fois par commande.

Received -> Verifying -> {Paid, NotPaid, GatewayFailure} -> (Paid) Notifying -> Done
"""
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

from booking_api.errors import GatewayError, OrderNotFound, PaymentNotCompleted, ValidationError
from booking_api.notifications import dispatcher
from booking_api.notifications.backends import Notifier
from booking_api.payments.models import SettlementStatus
from booking_api.payments.square_client import PaymentGateway
from booking_api.payments.verifier import VerificationOutcome, verify
from .dedupe import NotificationLedger
from .schemas import BookingDetails

logger = logging.getLogger(__name__)

# module booking_api.confirmation.service

# Alphabet des ids de commande Square
ORDER_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,64}$")

@dataclass(frozen=True)
class ConfirmationResult:
    confirmation_number: str
    owner_notified: bool
    customer_notified: bool
    amount: int
    currency: str
    order_id: str
    payment_id: str
    already_confirmed: bool = False

    def to_payload(self) -> Dict[str, Any]:
        return {
            "ok": True,
            "confirmationNumber": self.confirmation_number,
            "ownerNotified": self.owner_notified,
            "customerNotified": self.customer_notified,
            "amount": self.amount,
            "currency": self.currency,
            "orderId": self.order_id,
            "paymentId": self.payment_id,
            "alreadyConfirmed": self.already_confirmed,
        }


async def confirm_booking(
    order_id: str,
    booking: Optional[BookingDetails],
    *,
    gateway: PaymentGateway,
    notifier: Notifier,
    ledger: NotificationLedger,
) -> ConfirmationResult:
    """
    Confirme une réservation après retour de Square.
    - ValidationError si order_id absent ou mal formé (aucun appel Square).
    - PaymentNotCompleted si pas encore payé / paiement non finalisé (le client peut réessayer).
    - OrderNotFound / GatewayError sinon.
    - Paiement COMPLETED: réservation atomique dans le registre puis envoi;
      un appel répété renvoie le résultat enregistré sans renvoyer d'e-mail.
    """
    order_id = (order_id or "").strip()
    if not order_id:
        raise ValidationError("Missing orderId from payment redirect")
    if not ORDER_ID_PATTERN.fullmatch(order_id):
        raise ValidationError("Invalid orderId", details={"orderId": order_id[:80]})
    booking = booking or BookingDetails()

    verification = await verify(gateway, order_id)
    outcome = verification.outcome

    if outcome is VerificationOutcome.PENDING:
        raise PaymentNotCompleted("pending", "Order not paid yet, please retry shortly")
    if outcome is VerificationOutcome.FAILED:
        payment = verification.payment
        if payment is not None and payment.status is SettlementStatus.PENDING:
            raise PaymentNotCompleted("pending", f"Payment not completed yet (status: {payment.raw_status})")
        raw = payment.raw_status if payment is not None else ""
        raise PaymentNotCompleted("failed", f"Payment not completed (status: {raw})")
    if outcome is VerificationOutcome.NOT_FOUND:
        raise OrderNotFound("Order not found", details={"orderId": order_id})
    if outcome is VerificationOutcome.GATEWAY_ERROR:
        raise GatewayError("Payment verification failed", details={"reason": verification.reason})

    payment = verification.payment
    # registre et code de confirmation: id canonique renvoyé par Square
    order_id = verification.order.order_id
    confirmation_number = dispatcher.confirmation_number_for(order_id)

    existing = await ledger.claim(order_id, confirmation_number)
    if existing is not None:
        logger.info("confirmation.duplicate order_id=%s state=%s", order_id, existing.get("state"))
        return ConfirmationResult(
            confirmation_number=existing.get("confirmationNumber") or confirmation_number,
            owner_notified=bool(existing.get("ownerNotified")),
            customer_notified=bool(existing.get("customerNotified")),
            amount=payment.amount,
            currency=payment.currency,
            order_id=order_id,
            payment_id=payment.payment_id,
            already_confirmed=True,
        )

    sent = await dispatcher.dispatch(
        notifier,
        payment,
        booking,
        order_id=order_id,
        confirmation_number=confirmation_number,
    )
    if sent.errors:
        logger.warning("confirmation.notifications follow-up needed order_id=%s errors=%s", order_id, sent.errors)

    await ledger.record(order_id, {
        "confirmationNumber": confirmation_number,
        "ownerNotified": sent.owner_sent,
        "customerNotified": sent.customer_sent,
        "paymentId": payment.payment_id,
    })
    logger.info("confirmation.done order_id=%s payment_id=%s amount=%s", order_id, payment.payment_id, payment.amount)

    return ConfirmationResult(
        confirmation_number=confirmation_number,
        owner_notified=sent.owner_sent,
        customer_notified=sent.customer_sent,
        amount=payment.amount,
        currency=payment.currency,
        order_id=order_id,
        payment_id=payment.payment_id,
    )

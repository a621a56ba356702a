"""
Envoi des notifications après un paiement vérifié.

- Propriétaire: toujours tenté; un échec est signalé mais ne bloque pas la réponse.
- Client: seulement si une adresse e-mail non vide est fournie.
- Les erreurs de backend sont absorbées ici et loguées avec l'order id
  pour un suivi manuel.
"""
import logging
import re
from dataclasses import dataclass, field
from typing import Dict, Optional

from booking_api import config
from booking_api.confirmation.schemas import BookingDetails
from booking_api.errors import NotificationError
from booking_api.payments.models import PaymentRecord
from .backends import Notifier
from .render import render_message

logger = logging.getLogger(__name__)

CONFIRMATION_NUMBER_LENGTH = 8
_NON_ALNUM = re.compile(r"[^A-Za-z0-9]")


@dataclass
class DispatchResult:
    owner_sent: bool = False
    customer_sent: bool = False
    customer_attempted: bool = False
    errors: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class NotificationSettings:
    owner_email: str
    business_name: str
    business_phone: str


def settings_from_config() -> NotificationSettings:
    return NotificationSettings(
        owner_email=config.EMAIL_TO_OWNER,
        business_name=config.BUSINESS_NAME,
        business_phone=config.BUSINESS_PHONE,
    )


def confirmation_number_for(order_id: str) -> str:
    """Code court dérivé de l'order id (toujours présent), jamais d'un champ optionnel Square."""
    return _NON_ALNUM.sub("", order_id or "")[:CONFIRMATION_NUMBER_LENGTH].upper()


def format_amount(amount: int) -> str:
    return f"{amount // 100}.{amount % 100:02d}"


async def _send(notifier: Notifier, role: str, to: str, subject: str, text: str, html: str, result: DispatchResult, order_id: str) -> bool:
    try:
        sent = bool(await notifier.send(to, subject, text, html))
    except NotificationError as e:
        logger.error("notifications.%s failed order_id=%s to=%s error=%s", role, order_id, to, e)
        result.errors[role] = str(e)
        return False
    except Exception as e:
        logger.exception("notifications.%s unexpected error order_id=%s", role, order_id)
        result.errors[role] = f"{type(e).__name__}: {e}"
        return False
    if not sent:
        result.errors[role] = "not sent"
    return sent


async def dispatch(
    notifier: Notifier,
    payment: PaymentRecord,
    booking: BookingDetails,
    *,
    order_id: str,
    confirmation_number: str,
    settings: Optional[NotificationSettings] = None,
) -> DispatchResult:
    settings = settings or settings_from_config()
    result = DispatchResult()
    context = {
        "confirmation_number": confirmation_number,
        "order_id": order_id,
        "payment_id": payment.payment_id,
        "amount_display": format_amount(payment.amount),
        "currency": payment.currency,
        "booking": booking.as_context(),
        "business_name": settings.business_name,
        "business_phone": settings.business_phone,
    }

    if settings.owner_email:
        text, html = render_message("owner", context)
        result.owner_sent = await _send(
            notifier, "owner", settings.owner_email,
            f"NEW PAID BOOKING – {confirmation_number}", text, html, result, order_id,
        )
    else:
        logger.error("notifications.owner skipped order_id=%s reason=EMAIL_TO_OWNER missing", order_id)
        result.errors["owner"] = "EMAIL_TO_OWNER not configured"

    customer_email = booking.customer_email
    if customer_email:
        result.customer_attempted = True
        text, html = render_message("customer", context)
        result.customer_sent = await _send(
            notifier, "customer", customer_email,
            f"{settings.business_name} Booking Confirmed – {confirmation_number}", text, html, result, order_id,
        )

    logger.info(
        "notifications.dispatch order_id=%s owner_sent=%s customer_sent=%s",
        order_id, result.owner_sent, result.customer_sent,
    )
    return result

"""
Cas d'usage 'payments': prix autoritaire -> commande Checkout -> lien Square.
"""
import logging
from typing import Any, Dict, Optional

from booking_api import pricing
from . import links
from .models import MerchantConfig, merchant_from_config
from .schemas import BookingRequest
from .square_client import PaymentGateway

logger = logging.getLogger(__name__)

# module booking_api.payments.service
async def create_payment_link(
    booking: BookingRequest,
    gateway: PaymentGateway,
    merchant: Optional[MerchantConfig] = None,
) -> Dict[str, Any]:
    """
    Crée le lien de paiement hébergé pour une réservation.
    - Le prix est résolu avant tout appel Square (PricingError -> 400).
    - Un retry de la même soumission réutilise la clé d'idempotence.
    """
    merchant = merchant or merchant_from_config()
    quote = pricing.resolve(booking.route, booking.vehicle_class, booking.trip_type, booking.hours)
    order = links.build_checkout_order(booking, quote, merchant)
    link = await gateway.create_payment_link(order)
    logger.info(
        "payments.link created order_id=%s reference_id=%s amount=%s route=%s",
        link.order_id, order.reference_id, quote.amount, quote.route,
    )
    return {
        "ok": True,
        "url": link.url,
        "paymentLinkId": link.payment_link_id,
        "orderId": link.order_id,
        "referenceId": order.reference_id,
        "amount": quote.amount,
        "currency": quote.currency,
    }

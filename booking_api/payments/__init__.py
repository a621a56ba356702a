"""
Module 'payments' (feature-first): point d'entrée public.
Réunit construction de la commande Checkout, client Square, vérification et cas d'usage.
"""

from .links import build_checkout_order, idempotency_key_for, safe_redirect_path
from .models import (
    CheckoutLink,
    CheckoutOrder,
    LineItem,
    MerchantConfig,
    OrderSnapshot,
    PaymentRecord,
    SettlementStatus,
    merchant_from_config,
)
from .schemas import BookingRequest
from .square_client import PaymentGateway, SquareClient, get_gateway
from .verifier import VerificationOutcome, VerificationResult, verify
from .service import create_payment_link

__all__ = [
    # links
    "build_checkout_order",
    "idempotency_key_for",
    "safe_redirect_path",
    # models
    "CheckoutLink",
    "CheckoutOrder",
    "LineItem",
    "MerchantConfig",
    "OrderSnapshot",
    "PaymentRecord",
    "SettlementStatus",
    "merchant_from_config",
    "BookingRequest",
    # square
    "PaymentGateway",
    "SquareClient",
    "get_gateway",
    # verification
    "VerificationOutcome",
    "VerificationResult",
    "verify",
    # services
    "create_payment_link",
]

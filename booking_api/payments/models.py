"""
Formes canoniques échangées avec la passerelle (indépendantes du JSON Square).

Le client Square normalise ses réponses vers ces objets une seule fois;
le reste du pipeline ne sonde jamais plusieurs variantes de champs.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from booking_api import config

# module booking_api.payments.models

REFERENCE_ID_MAX_LENGTH = 40
PAYMENT_NOTE_MAX_LENGTH = 500


@dataclass(frozen=True)
class MerchantConfig:
    location_id: str
    currency: str
    site_base_url: str
    confirmation_path: str
    min_amount: int
    max_amount: int


def merchant_from_config() -> MerchantConfig:
    """Instantané de la configuration marchand (lu à chaque appel, patchable en tests)."""
    return MerchantConfig(
        location_id=config.SQUARE_LOCATION_ID,
        currency=config.CURRENCY,
        site_base_url=config.SITE_BASE_URL,
        confirmation_path=config.CONFIRMATION_PATH,
        min_amount=config.MIN_AMOUNT_CENTS,
        max_amount=config.MAX_AMOUNT_CENTS,
    )


@dataclass(frozen=True)
class LineItem:
    name: str
    amount: int
    currency: str
    quantity: int = 1

    def to_square(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "quantity": str(self.quantity),
            "base_price_money": {"amount": self.amount, "currency": self.currency},
        }


@dataclass(frozen=True)
class CheckoutOrder:
    idempotency_key: str
    location_id: str
    line_items: Tuple[LineItem, ...]
    reference_id: str
    redirect_url: Optional[str] = None
    buyer_email: Optional[str] = None
    buyer_phone: Optional[str] = None
    note: Optional[str] = None

    @property
    def amount(self) -> int:
        return sum(li.amount * li.quantity for li in self.line_items)

    def to_square_payload(self) -> Dict[str, Any]:
        """
        Corps de POST /v2/online-checkout/payment-links.
        - Les champs optionnels absents sont omis (Square refuse les chaînes vides).
        """
        payload: Dict[str, Any] = {
            "idempotency_key": self.idempotency_key,
            "order": {
                "location_id": self.location_id,
                "reference_id": self.reference_id,
                "line_items": [li.to_square() for li in self.line_items],
            },
        }
        if self.redirect_url:
            payload["checkout_options"] = {"redirect_url": self.redirect_url}
        prefill = {}
        if self.buyer_email:
            prefill["buyer_email"] = self.buyer_email
        if self.buyer_phone:
            prefill["buyer_phone_number"] = self.buyer_phone
        if prefill:
            payload["pre_populated_data"] = prefill
        if self.note:
            payload["payment_note"] = self.note
        return payload


@dataclass(frozen=True)
class CheckoutLink:
    url: str
    payment_link_id: str
    order_id: str
    long_url: Optional[str] = None


@dataclass(frozen=True)
class OrderSnapshot:
    order_id: str
    reference_id: Optional[str] = None
    state: Optional[str] = None
    tender_payment_ids: Tuple[str, ...] = field(default_factory=tuple)


class SettlementStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    UNKNOWN = "unknown"


# statuts documentés de l'objet Payment Square
_SQUARE_STATUSES = {
    "COMPLETED": SettlementStatus.COMPLETED,
    "APPROVED": SettlementStatus.PENDING,
    "PENDING": SettlementStatus.PENDING,
    "CANCELED": SettlementStatus.FAILED,
    "FAILED": SettlementStatus.FAILED,
}


def settlement_from_square(raw_status: Optional[str]) -> SettlementStatus:
    # comparaison exacte: "completed" en minuscules n'est pas un statut Square
    return _SQUARE_STATUSES.get(raw_status or "", SettlementStatus.UNKNOWN)


@dataclass(frozen=True)
class PaymentRecord:
    payment_id: str
    status: SettlementStatus
    raw_status: str
    amount: int
    currency: str
    order_id: Optional[str] = None

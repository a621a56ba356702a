"""
Construction de la commande Checkout (logique pure, pas d'appel Square).
"""
import uuid
from typing import Optional
from urllib.parse import urlencode, urlsplit

from booking_api.errors import PricingError
from booking_api.pricing import PriceQuote
from .models import (
    CheckoutOrder,
    LineItem,
    MerchantConfig,
    PAYMENT_NOTE_MAX_LENGTH,
    REFERENCE_ID_MAX_LENGTH,
)
from .schemas import BookingRequest

# Espace de noms fixe: même soumission => même clé d'idempotence
IDEMPOTENCY_NAMESPACE = uuid.UUID("5b0e7c1e-8a55-4f0e-9a3c-2f1d6c9e4b17")

# module booking_api.payments.links

def new_reference_id() -> str:
    return uuid.uuid4().hex[:REFERENCE_ID_MAX_LENGTH]


def idempotency_key_for(reference_id: Optional[str], quote: PriceQuote, *details: Optional[str]) -> str:
    """
    Clé d'idempotence Square.
    - Avec reference_id client: UUID5 stable sur (référence, trajet, montant, details), donc
      un retry HTTP de la même soumission retombe sur la même commande Square.
    - details: le reste du corps envoyé (note, pré-remplissage, redirection); un formulaire
      modifié sous la même référence obtient une nouvelle clé au lieu d'un conflit Square.
    - Sans référence: UUID4 aléatoire.
    """
    if not reference_id:
        return str(uuid.uuid4())
    seed = "|".join([
        reference_id,
        quote.route,
        quote.vehicle_class,
        quote.trip_type,
        str(quote.hours or ""),
        str(quote.amount),
        quote.currency,
        *(d or "" for d in details),
    ])
    return str(uuid.uuid5(IDEMPOTENCY_NAMESPACE, seed))


def safe_redirect_path(path: Optional[str], default_path: str) -> str:
    """
    N'accepte qu'un chemin relatif au site: pas de schéma, pas d'hôte,
    pas de '//' initial, pas de '\\' ni de '..'. Sinon chemin par défaut.
    """
    candidate = (path or "").strip()
    if not candidate:
        return default_path
    if "\\" in candidate or ".." in candidate or candidate.startswith("//"):
        return default_path
    parts = urlsplit(candidate)
    if parts.scheme or parts.netloc or parts.query or parts.fragment:
        return default_path
    if not candidate.startswith("/"):
        candidate = "/" + candidate
    return candidate


def build_redirect_url(merchant: MerchantConfig, redirect_path: Optional[str], reference_id: str) -> str:
    path = safe_redirect_path(redirect_path, merchant.confirmation_path)
    return f"{merchant.site_base_url}{path}?{urlencode({'bookingId': reference_id})}"


def _note_for(booking: BookingRequest, quote: PriceQuote) -> str:
    parts = [quote.label]
    if booking.passenger_name:
        parts.append(booking.passenger_name.strip())
    if booking.pickup_date or booking.pickup_time:
        parts.append(f"{booking.pickup_date or ''} {booking.pickup_time or ''}".strip())
    if booking.note:
        parts.append(booking.note)
    return " | ".join(p for p in parts if p)


def check_amount(quote: PriceQuote, merchant: MerchantConfig) -> None:
    if not (merchant.min_amount <= quote.amount <= merchant.max_amount):
        raise PricingError(
            PricingError.AMOUNT_OUT_OF_RANGE,
            "Amount out of allowed range",
            details={"amount": quote.amount, "min": merchant.min_amount, "max": merchant.max_amount},
        )


def build_checkout_order(booking: BookingRequest, quote: PriceQuote, merchant: MerchantConfig) -> CheckoutOrder:
    """
    Décrit la commande Checkout à créer:
      1) contrôle des bornes de montant
      2) reference_id (client ou généré) tronqué à 40 caractères
      3) clé d'idempotence stable par soumission logique
      4) redirection vers notre page de confirmation (origine fixe)
      5) pré-remplissage acheteur uniquement si renseigné, note tronquée
    """
    check_amount(quote, merchant)

    client_reference = (booking.reference_id or "")[:REFERENCE_ID_MAX_LENGTH]
    reference_id = client_reference or new_reference_id()
    redirect_url = build_redirect_url(merchant, booking.redirect_path, reference_id)
    buyer_email = str(booking.buyer_email) if booking.buyer_email else None
    buyer_phone = booking.buyer_phone or None
    note = _note_for(booking, quote)[:PAYMENT_NOTE_MAX_LENGTH] or None

    return CheckoutOrder(
        idempotency_key=idempotency_key_for(client_reference, quote, note, buyer_email, buyer_phone, redirect_url),
        location_id=merchant.location_id,
        line_items=(LineItem(name=quote.label, amount=quote.amount, currency=quote.currency),),
        reference_id=reference_id,
        redirect_url=redirect_url,
        buyer_email=buyer_email,
        buyer_phone=buyer_phone,
        note=note,
    )

"""
Résolution du prix côté serveur (pas de réseau, pas d'état).
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Optional, Union

from booking_api.config import CURRENCY
from booking_api.errors import PricingError
from .table import (
    CUSTOM_ROUTE,
    HOURLY,
    HOURLY_ROUTE,
    MAX_HOURS,
    MIN_HOURS,
    PRICE_TABLE,
    ROUTE_LABELS,
    VEHICLE_LABELS,
)

# module booking_api.pricing.service

@dataclass(frozen=True)
class PriceQuote:
    amount: int
    currency: str
    label: str
    route: str
    vehicle_class: str
    trip_type: str
    hours: Optional[Decimal] = None


def normalize_route(route: str) -> str:
    """
    "mco-disney", "MCO_DISNEY", "Disney-MCO" -> "MCO-DISNEY".
    Les trajets sont symétriques: si l'ordre inverse est tarifé, on l'utilise.
    """
    code = "-".join(part for part in str(route or "").strip().upper().replace("_", "-").split("-") if part)
    if code in ROUTE_LABELS:
        return code
    parts = code.split("-")
    if len(parts) == 2:
        reverse = f"{parts[1]}-{parts[0]}"
        if reverse in ROUTE_LABELS:
            return reverse
    return code


def _normalize_token(value: str) -> str:
    return str(value or "").strip().lower().replace("-", "_").replace(" ", "_")


def clamp_hours(hours: Union[int, float, str, Decimal, None]) -> Decimal:
    """
    Borne la durée horaire dans [MIN_HOURS, MAX_HOURS].
    - Valeur absente ou illisible: MIN_HOURS (on ne rejette pas un léger écart client).
    """
    try:
        value = Decimal(str(hours)) if hours is not None else Decimal(MIN_HOURS)
    except Exception:
        value = Decimal(MIN_HOURS)
    if not value.is_finite():
        value = Decimal(MIN_HOURS)
    return min(max(value, Decimal(MIN_HOURS)), Decimal(MAX_HOURS))


def _label(route: str, vehicle: str, trip_type: str, hours: Optional[Decimal]) -> str:
    vehicle_label = VEHICLE_LABELS.get(vehicle, vehicle)
    if trip_type == HOURLY:
        return f"{ROUTE_LABELS[HOURLY_ROUTE]} – {vehicle_label} – {hours.normalize():f} h"
    trip_label = "Round trip" if trip_type == "round_trip" else "One way"
    return f"{ROUTE_LABELS.get(route, route)} – {vehicle_label} – {trip_label}"


def resolve(route: str, vehicle_class: str, trip_type: str, hours: Any = None) -> PriceQuote:
    """
    Calcule le tarif autoritaire d'une réservation.
    - Lève PricingError(UNKNOWN_COMBINATION) si le triplet n'est pas dans la grille
      (CUSTOM: toujours refusé, devis hors ligne).
    - Horaire: tarif × heures bornées, arrondi à l'entier une seule fois.
    """
    route_code = normalize_route(route)
    vehicle = _normalize_token(vehicle_class)
    trip = _normalize_token(trip_type)

    if route_code == CUSTOM_ROUTE:
        raise PricingError(
            PricingError.UNKNOWN_COMBINATION,
            "Custom routes are quoted by phone, online payment is not available",
        )

    rate = PRICE_TABLE.get((route_code, vehicle, trip))
    if rate is None:
        raise PricingError(
            PricingError.UNKNOWN_COMBINATION,
            "No price for this route, vehicle and trip type",
            details={"route": route_code, "vehicleClass": vehicle, "tripType": trip},
        )

    billed_hours = None
    amount = rate
    if trip == HOURLY:
        billed_hours = clamp_hours(hours)
        amount = int((Decimal(rate) * billed_hours).quantize(Decimal(1), rounding=ROUND_HALF_UP))

    return PriceQuote(
        amount=amount,
        currency=CURRENCY,
        label=_label(route_code, vehicle, trip, billed_hours),
        route=route_code,
        vehicle_class=vehicle,
        trip_type=trip,
        hours=billed_hours,
    )


def list_routes() -> List[Dict[str, Any]]:
    """Grille publique pour le formulaire: [{route, label, vehicleClass, tripType, amount}]."""
    rows = []
    for (route, vehicle, trip), cents in sorted(PRICE_TABLE.items()):
        rows.append({
            "route": route,
            "label": ROUTE_LABELS.get(route, route),
            "vehicleClass": vehicle,
            "tripType": trip,
            "amount": cents,
            "perHour": trip == HOURLY,
        })
    return rows

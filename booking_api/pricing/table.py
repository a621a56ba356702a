"""
Grille tarifaire de référence (centimes USD).

Seule source de vérité pour les montants: le front n'envoie jamais de prix.
Construite une fois à l'import et exposée en lecture seule.
"""
from types import MappingProxyType
from typing import Dict, Tuple

ONE_WAY = "one_way"
ROUND_TRIP = "round_trip"
HOURLY = "hourly"

HOURLY_ROUTE = "HOURLY"
CUSTOM_ROUTE = "CUSTOM"

MIN_HOURS = 3
MAX_HOURS = 24

VEHICLE_LABELS = {
    "sedan": "Sedan",
    "suv": "SUV",
    "van": "Van",
}

ROUTE_LABELS = {
    "MCO-DISNEY": "Orlando Airport (MCO) ↔ Disney area",
    "MCO-UNIVERSAL": "Orlando Airport (MCO) ↔ Universal area",
    "MCO-ICDRIVE": "Orlando Airport (MCO) ↔ International Drive",
    "MCO-KISSIMMEE": "Orlando Airport (MCO) ↔ Kissimmee",
    "MCO-PORT-CANAVERAL": "Orlando Airport (MCO) ↔ Port Canaveral",
    "SFB-DISNEY": "Sanford Airport (SFB) ↔ Disney area",
    HOURLY_ROUTE: "Hourly charter",
}

# route -> vehicule -> aller simple; l'aller-retour vaut le double
_ONE_WAY_RATES = {
    "MCO-DISNEY": {"sedan": 12000, "suv": 14000, "van": 17500},
    "MCO-UNIVERSAL": {"sedan": 9500, "suv": 11500, "van": 15000},
    "MCO-ICDRIVE": {"sedan": 9000, "suv": 11000, "van": 14500},
    "MCO-KISSIMMEE": {"sedan": 10500, "suv": 12500, "van": 16000},
    "MCO-PORT-CANAVERAL": {"sedan": 19500, "suv": 22500, "van": 27500},
    "SFB-DISNEY": {"sedan": 16500, "suv": 18500, "van": 22000},
}

# tarif horaire
_HOURLY_RATES = {"sedan": 7500, "suv": 9500, "van": 12500}


def _build() -> Dict[Tuple[str, str, str], int]:
    table: Dict[Tuple[str, str, str], int] = {}
    for route, rates in _ONE_WAY_RATES.items():
        for vehicle, cents in rates.items():
            table[(route, vehicle, ONE_WAY)] = cents
            table[(route, vehicle, ROUND_TRIP)] = cents * 2
    for vehicle, cents in _HOURLY_RATES.items():
        table[(HOURLY_ROUTE, vehicle, HOURLY)] = cents
    return table


PRICE_TABLE = MappingProxyType(_build())

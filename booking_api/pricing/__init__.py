"""
Module 'pricing': grille tarifaire et résolution du prix côté serveur.
"""

from .service import PriceQuote, resolve, clamp_hours, normalize_route, list_routes
from .table import PRICE_TABLE, MIN_HOURS, MAX_HOURS

__all__ = [
    "PriceQuote",
    "resolve",
    "clamp_hours",
    "normalize_route",
    "list_routes",
    "PRICE_TABLE",
    "MIN_HOURS",
    "MAX_HOURS",
]

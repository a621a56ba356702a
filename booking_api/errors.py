"""
Taxonomie d'erreurs du pipeline de réservation.

Chaque erreur porte son code HTTP; le handler enregistré par la factory
(app_setup/exceptions.py) les rend en JSON {ok: false, error, details?}.
"""
from typing import Any, Optional


class BookingError(Exception):
    status_code = 500

    def __init__(self, error: str, details: Optional[Any] = None):
        super().__init__(error)
        self.error = error
        self.details = details

    def to_payload(self) -> dict:
        payload = {"ok": False, "error": self.error}
        if self.details is not None:
            payload["details"] = self.details
        return payload


class ValidationError(BookingError):
    """Entrée invalide ou manquante: 4xx, jamais rejouée automatiquement."""
    status_code = 400


class PricingError(ValidationError):
    UNKNOWN_COMBINATION = "unknown_combination"
    AMOUNT_OUT_OF_RANGE = "amount_out_of_range"

    def __init__(self, reason: str, error: str, details: Optional[Any] = None):
        super().__init__(error, details)
        self.reason = reason


class OrderNotFound(BookingError):
    status_code = 404


class GatewayError(BookingError):
    """Échec transport Square, statut inattendu: 502, vérification rejouable."""
    status_code = 502


class ConfigurationError(GatewayError):
    status_code = 500


class DedupeUnavailable(GatewayError):
    status_code = 503


class PaymentNotCompleted(Exception):
    """Pas une erreur: paiement pas encore finalisé (le client peut réessayer)."""

    def __init__(self, status: str, message: str):
        super().__init__(message)
        self.status = status
        self.message = message


class NotificationError(Exception):
    """Levée par un backend de notification; absorbée par le dispatcher."""

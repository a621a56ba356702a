"""
Registre anti-doublon des notifications (Redis, clé par order id).

claim() pose atomiquement le marqueur via SET NX EX: un seul appel de
confirmation par commande gagne le droit d'envoyer les e-mails, les suivants
relisent le résultat enregistré. Stockage externe: survit aux redémarrages et
est partagé entre workers.
"""
import json
import logging
from typing import Any, Dict, Optional

from fastapi import Request
from redis.exceptions import RedisError

from booking_api.errors import DedupeUnavailable

logger = logging.getLogger(__name__)

KEY_PREFIX = "booking:notified:"
IN_PROGRESS = "in_progress"
DONE = "done"


class NotificationLedger:
    def __init__(self, redis, ttl_seconds: int):
        self._redis = redis
        self._ttl = ttl_seconds

    @staticmethod
    def key(order_id: str) -> str:
        return f"{KEY_PREFIX}{order_id}"

    async def claim(self, order_id: str, confirmation_number: str) -> Optional[Dict[str, Any]]:
        """
        Tente de réserver l'envoi pour order_id.
        Retour: None si l'appelant a gagné la réservation, sinon l'enregistrement existant.
        """
        marker = json.dumps({"state": IN_PROGRESS, "confirmationNumber": confirmation_number})
        try:
            acquired = await self._redis.set(self.key(order_id), marker, nx=True, ex=self._ttl)
            if acquired:
                return None
            existing = await self._redis.get(self.key(order_id))
        except RedisError as e:
            logger.error("confirmation.dedupe claim failed order_id=%s error=%s", order_id, e)
            raise DedupeUnavailable("Confirmation store unavailable, please retry") from e
        if existing is None:
            # expiré entre SET et GET: on considère l'envoi déjà en cours
            return {"state": IN_PROGRESS, "confirmationNumber": confirmation_number}
        if isinstance(existing, bytes):
            existing = existing.decode("utf-8")
        try:
            return json.loads(existing)
        except ValueError:
            return {"state": IN_PROGRESS, "confirmationNumber": confirmation_number}

    async def record(self, order_id: str, record: Dict[str, Any]) -> None:
        """Remplace le marqueur par le résultat final (conserve le TTL)."""
        payload = json.dumps({**record, "state": DONE})
        try:
            await self._redis.set(self.key(order_id), payload, xx=True, keepttl=True)
        except RedisError:
            # le marqueur in_progress reste posé: aucun renvoi possible, seul le détail est perdu
            logger.exception("confirmation.dedupe record failed order_id=%s", order_id)


def get_ledger(request: Request) -> NotificationLedger:
    """Dépendance FastAPI: registre adossé au client Redis du lifespan."""
    redis = getattr(request.app.state, "dedupe_redis", None)
    if redis is None:
        raise DedupeUnavailable("Confirmation store not configured")
    return NotificationLedger(redis, request.app.state.dedupe_ttl)


def dedupe_health_info(request: Request) -> Dict[str, Any]:
    return {
        "configured": getattr(request.app.state, "dedupe_redis", None) is not None,
        "backend": getattr(request.app.state, "dedupe_backend", None),
    }

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from booking_api.errors import PaymentNotCompleted
from booking_api.notifications.backends import Notifier, get_notifier
from booking_api.payments.square_client import PaymentGateway, get_gateway
from booking_api.utils.rate_limit import optional_rate_limit
from .dedupe import NotificationLedger, get_ledger
from .schemas import ConfirmRequest
from .service import confirm_booking

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Confirmation API"])

# module booking_api.confirmation.views
@router.post("/confirm-booking", dependencies=[Depends(optional_rate_limit(times=30, seconds=60))])
async def confirm_booking_view(
    body: ConfirmRequest,
    gateway: PaymentGateway = Depends(get_gateway),
    notifier: Notifier = Depends(get_notifier),
    ledger: NotificationLedger = Depends(get_ledger),
):
    """
    Appelée par la page de retour Square: {orderId, bookingDetails}.
    - 200 {ok: true, confirmationNumber, ownerNotified, customerNotified} si payé
    - 200 {ok: false, error, status: "pending"|"failed"} si pas (encore) payé:
      code 200 explicite pour que le polling du front distingue "réessayer" d'une panne
    - 400 orderId manquant, 404 commande inconnue, 502 Square, 503 registre indisponible
    """
    try:
        result = await confirm_booking(
            body.order_id,
            body.booking_details,
            gateway=gateway,
            notifier=notifier,
            ledger=ledger,
        )
    except PaymentNotCompleted as e:
        logger.info("confirmation.not_paid order_id=%s status=%s", body.order_id, e.status)
        return JSONResponse({"ok": False, "error": e.message, "status": e.status})
    return result.to_payload()

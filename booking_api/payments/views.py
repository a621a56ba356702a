import logging

from fastapi import APIRouter, Depends

from booking_api.pricing import list_routes
from booking_api.utils.rate_limit import optional_rate_limit
from .schemas import BookingRequest
from .service import create_payment_link
from .square_client import PaymentGateway, get_gateway

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Payments API"])

# module booking_api.payments.views
@router.post("/create-payment-link", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
async def create_payment_link_view(booking: BookingRequest, gateway: PaymentGateway = Depends(get_gateway)):
    """
    Crée un lien Square Checkout pour la réservation.
    - Entrée JSON: {route, vehicleClass, tripType, hours?, referenceId?, buyerEmail?, buyerPhone?, redirectPath?}
    - Le montant n'est jamais lu du client: il vient de la grille tarifaire.
    - Réponses: 200 {ok, url, paymentLinkId, orderId}, 400 validation/prix,
      500 configuration Square manquante, 502 erreur Square.
    """
    return await create_payment_link(booking, gateway)


@router.get("/prices")
def get_prices():
    """Grille tarifaire publique (affichage du formulaire de réservation)."""
    return {"ok": True, "prices": list_routes()}

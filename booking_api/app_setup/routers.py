"""
Registre central des routers.
- API: payments (lien de paiement, grille tarifaire), confirmation
- Health: health_router
"""
from fastapi import FastAPI
from booking_api.payments import views as payments_views
from booking_api.confirmation import views as confirmation_views
from booking_api.health.router import router as health_router

def register_routers(app: FastAPI) -> None:
    app.include_router(payments_views.router)
    app.include_router(confirmation_views.router)
    # Health & monitoring
    app.include_router(health_router)

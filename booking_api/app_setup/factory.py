"""
Factory d'application pour les entrypoints (ex: booking_api.asgi).
Ordonne les étapes d'initialisation de manière lisible et testable.
"""
from fastapi import FastAPI
from .lifespan import lifespan
from .middlewares import register_basic_middlewares, register_no_cache_middleware, register_security_middleware
from .exceptions import register_exception_handlers
from .routers import register_routers

def create_app() -> FastAPI:
    """
    Construit l'app FastAPI avec le lifespan et enregistre:
      - middlewares CORS/hosts, sécurité, no-cache
      - gestionnaires d'exceptions (enveloppe {ok: false, error})
      - routers paiement, confirmation, health
    """
    app = FastAPI(title="Booking payments API", lifespan=lifespan)
    register_basic_middlewares(app)
    register_security_middleware(app)
    register_no_cache_middleware(app)
    register_exception_handlers(app)
    register_routers(app)
    return app

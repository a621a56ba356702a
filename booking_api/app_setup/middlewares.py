"""
Middlewares transverses de l'application.
- register_basic_middlewares: CORS (origines du site uniquement) et TrustedHost.
- register_security_middleware: en-têtes de sécurité sur toutes les réponses.
- register_no_cache_middleware: les réponses de paiement/confirmation ne sont jamais mises en cache.
"""
from fastapi import Request, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.trustedhost import TrustedHostMiddleware

from booking_api import config

NO_CACHE_PATHS = {"/create-payment-link", "/confirm-booking"}


def register_basic_middlewares(app: FastAPI) -> None:
    """
    - CORSMiddleware: POST/OPTIONS depuis les origines déclarées (CORS_ORIGINS).
    - TrustedHostMiddleware: limite les hôtes acceptés (défense host header).
    """
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )
    app.add_middleware(
        TrustedHostMiddleware,
        allowed_hosts=config.ALLOWED_HOSTS or ["*"],
    )


def register_security_middleware(app: FastAPI) -> None:
    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        response = await call_next(request)
        if "X-Frame-Options" not in response.headers:
            response.headers["X-Frame-Options"] = "DENY"
        if "X-Content-Type-Options" not in response.headers:
            response.headers["X-Content-Type-Options"] = "nosniff"
        if "Referrer-Policy" not in response.headers:
            response.headers["Referrer-Policy"] = "no-referrer"
        if config.HSTS_ENABLED and "Strict-Transport-Security" not in response.headers:
            response.headers["Strict-Transport-Security"] = "max-age=63072000; includeSubDomains; preload"
        return response


def register_no_cache_middleware(app: FastAPI) -> None:
    @app.middleware("http")
    async def no_cache_for_payments(request: Request, call_next):
        response = await call_next(request)
        if request.url.path.rstrip("/") in NO_CACHE_PATHS:
            response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate, max-age=0"
            response.headers["Pragma"] = "no-cache"
        return response

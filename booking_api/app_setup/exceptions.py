"""
Gestionnaires d'exceptions utilisés par la factory.
- BookingError (et sous-classes): code porté par l'erreur, JSON {ok: false, error, details?}.
- RequestValidationError (pydantic): 400 au lieu de 422, même enveloppe JSON.
- HTTPException (ex: 429 du rate limit): même enveloppe JSON.
"""
import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from booking_api.errors import BookingError

logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(BookingError)
    async def booking_error_handler(request: Request, exc: BookingError):
        if exc.status_code >= 500:
            logger.error("request failed path=%s status=%s error=%s details=%s",
                         request.url.path, exc.status_code, exc.error, exc.details)
        return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_payload()))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        details = [
            {"field": ".".join(str(p) for p in err.get("loc", ()) if p != "body"), "message": err.get("msg")}
            for err in exc.errors()
        ]
        return JSONResponse(status_code=400, content={"ok": False, "error": "Invalid request body", "details": details})

    @app.exception_handler(HTTPException)
    async def http_error_handler(request: Request, exc: HTTPException):
        return JSONResponse(status_code=exc.status_code, content={"ok": False, "error": str(exc.detail)}, headers=getattr(exc, "headers", None))

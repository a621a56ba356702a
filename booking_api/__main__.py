"""
Lance le service de réservation avec uvicorn: `python -m booking_api`.

Environnement lu ici: PORT (8000), UVICORN_RELOAD, LOG_LEVEL, FORWARDED_ALLOW_IPS.
FORWARDED_ALLOW_IPS liste les proxys dont uvicorn accepte X-Forwarded-For;
l'IP client vue par le rate limiting en dépend.
"""
import os

import uvicorn

if __name__ == "__main__":
    uvicorn.run(
        "booking_api.asgi:app",
        host=os.environ.get("HOST", "0.0.0.0"),
        port=int(os.environ.get("PORT", 8000)),
        reload=os.environ.get("UVICORN_RELOAD", "").lower() in ("1", "true", "yes"),
        log_level=os.environ.get("LOG_LEVEL", "info"),
        proxy_headers=True,
        forwarded_allow_ips=os.environ.get("FORWARDED_ALLOW_IPS", "127.0.0.1"),
    )

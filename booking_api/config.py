# booking_api.config
from pathlib import Path
import os
from dotenv import load_dotenv

# Calculer le chemin du projet puis charger .env de manière explicite
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH, override=False)

"""
Configuration centrale du service de réservation.

- Charge le fichier .env à la racine du projet (BASE_DIR/.env)
- Normalise et expose les secrets/URLs (Square, e-mail, Redis)
- Fixe les bornes de montant et l'URL de retour après paiement
- CORS/hosts pour le site vitrine
"""

def _clean_env(v: str) -> str:
    """
    Nettoie une valeur d'environnement:
    - supprime les espaces et guillemets (simples, doubles) et backticks
    - retourne toujours une chaîne (jamais None)
    """
    return (v or "").strip().strip("'").strip('"').strip("`")

def _int_env(name: str, default: int) -> int:
    try:
        return int(_clean_env(os.getenv(name)) or default)
    except ValueError:
        return default

# Square: jeton d'accès, location et environnement (sandbox/production)
SQUARE_ACCESS_TOKEN = _clean_env(os.getenv("SQUARE_ACCESS_TOKEN") or "")
SQUARE_LOCATION_ID = _clean_env(os.getenv("SQUARE_LOCATION_ID") or "")
SQUARE_ENV = (_clean_env(os.getenv("SQUARE_ENV")) or "production").lower()
SQUARE_VERSION = _clean_env(os.getenv("SQUARE_VERSION")) or "2025-10-16"
SQUARE_TIMEOUT_SECONDS = float(_clean_env(os.getenv("SQUARE_TIMEOUT_SECONDS")) or 10)

SQUARE_BASE_URL = (
    "https://connect.squareupsandbox.com" if SQUARE_ENV == "sandbox" else "https://connect.squareup.com"
)

CURRENCY = (_clean_env(os.getenv("CURRENCY")) or "USD").upper()

# Bornes de montant (centimes): garde-fou contre une table de prix erronée
MIN_AMOUNT_CENTS = _int_env("MIN_AMOUNT_CENTS", 100)
MAX_AMOUNT_CENTS = _int_env("MAX_AMOUNT_CENTS", 500000)

# Retour après paiement: origine de confiance + chemin par défaut
SITE_BASE_URL = (_clean_env(os.getenv("SITE_BASE_URL")) or "http://localhost:8000").rstrip("/")
CONFIRMATION_PATH = _clean_env(os.getenv("CONFIRMATION_PATH")) or "/booking-confirmed.html"

# Notifications: "sendgrid", "smtp" ou "log" (dev)
NOTIFIER_BACKEND = (_clean_env(os.getenv("NOTIFIER_BACKEND")) or "sendgrid").lower()
SENDGRID_API_KEY = _clean_env(os.getenv("SENDGRID_API_KEY") or "")
EMAIL_FROM = _clean_env(os.getenv("EMAIL_FROM") or "")
EMAIL_TO_OWNER = _clean_env(os.getenv("EMAIL_TO_OWNER") or "")

SMTP_HOST = _clean_env(os.getenv("SMTP_HOST") or "")
SMTP_PORT = _int_env("SMTP_PORT", 587)
SMTP_USERNAME = _clean_env(os.getenv("SMTP_USERNAME") or "")
SMTP_PASSWORD = _clean_env(os.getenv("SMTP_PASSWORD") or "")
SMTP_USE_TLS = (os.getenv("SMTP_USE_TLS", "true").lower() == "true")

BUSINESS_NAME = _clean_env(os.getenv("BUSINESS_NAME")) or "MLT Orlando Transportation"
BUSINESS_PHONE = _clean_env(os.getenv("BUSINESS_PHONE")) or "407-369-0643"

# Anti-doublon des notifications (Redis, clé par order id)
DEDUPE_REDIS_URL = _clean_env(os.getenv("DEDUPE_REDIS_URL") or os.getenv("RATE_LIMIT_REDIS_URL") or "redis://127.0.0.1:6379/0")
DEDUPE_TTL_SECONDS = _int_env("DEDUPE_TTL_SECONDS", 60 * 60 * 24 * 30)

# CORS: limité aux origines du site
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "http://localhost:8000").split(",") if o.strip()]
ALLOWED_HOSTS = [h.strip() for h in os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1,testserver").split(",") if h.strip()]
HSTS_ENABLED = (os.getenv("HSTS_ENABLED", "false").lower() == "true")

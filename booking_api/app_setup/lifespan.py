"""
Lifespan FastAPI: initialisation/arrêt des ressources partagées.
- AsyncClient httpx partagé (Square, SendGrid)
- Client Redis du registre anti-doublon des confirmations
- FastAPILimiter (Redis) avec options de test (fakeredis)
Variables d'environnement supportées:
  - DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS=1: désactive le rate limiting (tests)
  - USE_FAKE_REDIS_FOR_TESTS=1: utilise fakeredis pour le limiter et le registre (tests)
  - LOCAL_RATE_LIMIT_FALLBACK=1: active un fallback local si l'init échoue
"""
import os
import logging
from contextlib import asynccontextmanager

import httpx
import redis.asyncio as aioredis
from fastapi import FastAPI
from fastapi_limiter import FastAPILimiter

from booking_api import config

try:
    from fakeredis.aioredis import FakeRedis  # tests only
except Exception:
    FakeRedis = None


def _make_redis(url: str):
    if os.getenv("USE_FAKE_REDIS_FOR_TESTS") == "1":
        if not FakeRedis:
            raise RuntimeError("USE_FAKE_REDIS_FOR_TESTS=1 mais fakeredis n'est pas installé.")
        return FakeRedis(decode_responses=True), "fakeredis"
    return aioredis.from_url(url, encoding="utf-8", decode_responses=True), "redis"


async def _init_rate_limit(app: FastAPI, logger: logging.Logger) -> None:
    """
    Configure le rate limiting et gère les fallbacks.
    - En cas d'échec de Redis et sans fallback, le rate limiting est désactivé proprement.
    """
    try:
        if os.getenv("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS") == "1":
            app.state.rate_limit_enabled = False
            logger.info("Rate limiting disabled by DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS")
            return
        redis_url = os.getenv("RATE_LIMIT_REDIS_URL", "redis://127.0.0.1:6379/0")
        r, _ = _make_redis(redis_url)
        await FastAPILimiter.init(r)
        app.state.rate_limit_enabled = True
        logger.info("Rate limiting enabled")
    except Exception as e:
        if os.getenv("LOCAL_RATE_LIMIT_FALLBACK") == "1":
            app.state.rate_limit_enabled = True
            logger.warning(f"Rate limiting falling back to local in-memory due to init error: {e}")
        else:
            app.state.rate_limit_enabled = False
            logger.warning(f"Rate limiting disabled due to init error: {e}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger = logging.getLogger("uvicorn.error")

    app.state.http = httpx.AsyncClient(timeout=httpx.Timeout(config.SQUARE_TIMEOUT_SECONDS))

    # Le client Redis se connecte à la première commande: une panne n'empêche pas le démarrage,
    # elle se traduit par un 503 sur /confirm-booking.
    app.state.dedupe_redis, app.state.dedupe_backend = _make_redis(config.DEDUPE_REDIS_URL)
    app.state.dedupe_ttl = config.DEDUPE_TTL_SECONDS
    logger.info("Confirmation dedupe store backend=%s", app.state.dedupe_backend)

    await _init_rate_limit(app, logger)
    try:
        yield
    finally:
        await app.state.http.aclose()
        await app.state.dedupe_redis.aclose()

"""
Backends de notification interchangeables derrière une seule capacité:
    await notifier.send(to, subject, text, html) -> bool

- sendgrid: API v3 mail/send (httpx)
- smtp: smtplib exécuté dans un thread (ne bloque pas la boucle)
- log: écrit le message dans les logs (développement local)
"""
import asyncio
import logging
import smtplib
from email.message import EmailMessage
from typing import Protocol

import httpx
from fastapi import Request

from booking_api import config
from booking_api.errors import ConfigurationError, NotificationError

logger = logging.getLogger(__name__)

SENDGRID_URL = "https://api.sendgrid.com/v3/mail/send"


class Notifier(Protocol):
    async def send(self, to: str, subject: str, text: str, html: str) -> bool: ...


class SendGridNotifier:
    def __init__(self, http: httpx.AsyncClient, *, api_key: str, sender: str):
        self._http = http
        self._api_key = api_key
        self._sender = sender

    async def send(self, to: str, subject: str, text: str, html: str) -> bool:
        payload = {
            "personalizations": [{"to": [{"email": to}]}],
            "from": {"email": self._sender},
            "subject": subject,
            "content": [
                {"type": "text/plain", "value": text},
                {"type": "text/html", "value": html},
            ],
        }
        try:
            resp = await self._http.post(
                SENDGRID_URL,
                json=payload,
                headers={"Authorization": f"Bearer {self._api_key}"},
            )
        except httpx.HTTPError as e:
            raise NotificationError(f"SendGrid unreachable: {type(e).__name__}") from e
        if resp.status_code >= 400:
            raise NotificationError(f"SendGrid status={resp.status_code} body={resp.text[:300]}")
        return True


class SmtpNotifier:
    def __init__(self, *, host: str, port: int, sender: str, username: str = "", password: str = "", use_tls: bool = True):
        self.host = host
        self.port = port
        self.sender = sender
        self.username = username
        self.password = password
        self.use_tls = use_tls

    def _send_sync(self, to: str, subject: str, text: str, html: str) -> None:
        msg = EmailMessage()
        msg["From"] = self.sender
        msg["To"] = to
        msg["Subject"] = subject
        msg.set_content(text)
        msg.add_alternative(html, subtype="html")
        with smtplib.SMTP(self.host, self.port, timeout=10) as server:
            if self.use_tls:
                server.starttls()
            if self.username and self.password:
                server.login(self.username, self.password)
            server.send_message(msg)

    async def send(self, to: str, subject: str, text: str, html: str) -> bool:
        try:
            await asyncio.to_thread(self._send_sync, to, subject, text, html)
        except (smtplib.SMTPException, OSError) as e:
            raise NotificationError(f"SMTP error: {e}") from e
        return True


class LogNotifier:
    async def send(self, to: str, subject: str, text: str, html: str) -> bool:
        logger.info("notifications.log to=%s subject=%s\n%s", to, subject, text)
        return True


def build_notifier(http: httpx.AsyncClient) -> Notifier:
    """
    Sélectionne le backend selon NOTIFIER_BACKEND.
    - ConfigurationError si les secrets du backend choisi manquent.
    """
    backend = config.NOTIFIER_BACKEND
    if backend == "log":
        return LogNotifier()
    if not config.EMAIL_FROM:
        raise ConfigurationError("Missing EMAIL_FROM")
    if backend == "smtp":
        if not config.SMTP_HOST:
            raise ConfigurationError("Missing SMTP_HOST")
        return SmtpNotifier(
            host=config.SMTP_HOST,
            port=config.SMTP_PORT,
            sender=config.EMAIL_FROM,
            username=config.SMTP_USERNAME,
            password=config.SMTP_PASSWORD,
            use_tls=config.SMTP_USE_TLS,
        )
    if backend == "sendgrid":
        if not config.SENDGRID_API_KEY:
            raise ConfigurationError("Missing SENDGRID_API_KEY")
        return SendGridNotifier(http, api_key=config.SENDGRID_API_KEY, sender=config.EMAIL_FROM)
    raise ConfigurationError(f"Unknown NOTIFIER_BACKEND {backend!r}")


class UnavailableNotifier:
    """Backend mal configuré: chaque envoi échoue, la confirmation reste valide."""

    def __init__(self, reason: str):
        self.reason = reason

    async def send(self, to: str, subject: str, text: str, html: str) -> bool:
        raise NotificationError(self.reason)


def get_notifier(request: Request) -> Notifier:
    """
    Dépendance FastAPI (surchargée en tests).
    - Configuration absente: on ne bloque pas la confirmation d'un paiement,
      les envois échouent et sont signalés pour suivi manuel.
    """
    try:
        return build_notifier(request.app.state.http)
    except ConfigurationError as e:
        logger.error("notifications.config error=%s", e.error)
        return UnavailableNotifier(e.error)

"""
Adaptateur Square: centralise les appels REST (httpx) et la normalisation des réponses.
"""
import logging
from typing import Any, Dict, Optional, Protocol
from urllib.parse import quote

import httpx
from fastapi import Request

from booking_api import config
from booking_api.errors import ConfigurationError, GatewayError, OrderNotFound
from .models import (
    CheckoutLink,
    CheckoutOrder,
    OrderSnapshot,
    PaymentRecord,
    settlement_from_square,
)

logger = logging.getLogger(__name__)

# module booking_api.payments.square_client

class PaymentGateway(Protocol):
    async def create_payment_link(self, order: CheckoutOrder) -> CheckoutLink: ...
    async def retrieve_order(self, order_id: str) -> OrderSnapshot: ...
    async def get_payment(self, payment_id: str) -> PaymentRecord: ...


def _square_errors(resp: httpx.Response) -> Any:
    try:
        data = resp.json()
    except ValueError:
        return {"status": resp.status_code, "body": resp.text[:500]}
    errors = data.get("errors") if isinstance(data, dict) else None
    return {"status": resp.status_code, "errors": errors or data}


def _body(resp: httpx.Response) -> Dict[str, Any]:
    try:
        data = resp.json()
    except ValueError as e:
        raise GatewayError("Square returned a non-JSON response", details={"status": resp.status_code}) from e
    return data if isinstance(data, dict) else {}


class SquareClient:
    """
    Transport mince vers l'API Square.
    - http: AsyncClient partagé (créé par le lifespan, pool de connexions)
    - Chaque méthode renvoie une forme canonique (models.py) ou lève GatewayError.
    """

    def __init__(self, http: httpx.AsyncClient, *, access_token: str, base_url: str, version: str):
        self._http = http
        self._base_url = base_url.rstrip("/")
        self._headers = {
            "Authorization": f"Bearer {access_token}",
            "Square-Version": version,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    async def _request(self, method: str, path: str, json: Optional[Dict[str, Any]] = None) -> httpx.Response:
        try:
            return await self._http.request(method, f"{self._base_url}{path}", headers=self._headers, json=json)
        except httpx.HTTPError as e:
            logger.warning("square.request failed method=%s path=%s error=%s", method, path, e)
            raise GatewayError("Payment gateway unreachable", details={"reason": type(e).__name__}) from e

    async def create_payment_link(self, order: CheckoutOrder) -> CheckoutLink:
        resp = await self._request("POST", "/v2/online-checkout/payment-links", json=order.to_square_payload())
        if resp.status_code >= 400:
            logger.error("square.create_payment_link status=%s reference_id=%s", resp.status_code, order.reference_id)
            raise GatewayError("Square error", details=_square_errors(resp))
        link = _body(resp).get("payment_link") or {}
        if not link.get("url") or not link.get("order_id"):
            raise GatewayError("Square returned an incomplete payment link", details={"payment_link": link})
        return CheckoutLink(
            url=link["url"],
            long_url=link.get("long_url"),
            payment_link_id=link.get("id") or "",
            order_id=link["order_id"],
        )

    async def retrieve_order(self, order_id: str) -> OrderSnapshot:
        resp = await self._request("GET", f"/v2/orders/{quote(order_id, safe='')}")
        if resp.status_code == 404:
            raise OrderNotFound("Order not found", details={"orderId": order_id})
        if resp.status_code >= 400:
            raise GatewayError("Square error", details=_square_errors(resp))
        order = _body(resp).get("order") or {}
        tenders = order.get("tenders") or []
        return OrderSnapshot(
            order_id=order.get("id") or order_id,
            reference_id=order.get("reference_id"),
            state=order.get("state"),
            tender_payment_ids=tuple(t["payment_id"] for t in tenders if t.get("payment_id")),
        )

    async def get_payment(self, payment_id: str) -> PaymentRecord:
        resp = await self._request("GET", f"/v2/payments/{quote(payment_id, safe='')}")
        if resp.status_code >= 400:
            raise GatewayError("Square error", details=_square_errors(resp))
        payment = _body(resp).get("payment") or {}
        if not payment:
            raise GatewayError("Square returned no payment", details={"paymentId": payment_id})
        money = payment.get("amount_money") or {}
        raw_status = payment.get("status") or ""
        return PaymentRecord(
            payment_id=payment.get("id") or payment_id,
            status=settlement_from_square(raw_status),
            raw_status=raw_status,
            amount=int(money.get("amount") or 0),
            currency=money.get("currency") or config.CURRENCY,
            order_id=payment.get("order_id"),
        )


def require_square_config() -> None:
    if not config.SQUARE_ACCESS_TOKEN or not config.SQUARE_LOCATION_ID:
        raise ConfigurationError("Missing Square configuration", details={"missing": [
            name for name, value in (
                ("SQUARE_ACCESS_TOKEN", config.SQUARE_ACCESS_TOKEN),
                ("SQUARE_LOCATION_ID", config.SQUARE_LOCATION_ID),
            ) if not value
        ]})


def get_gateway(request: Request) -> PaymentGateway:
    """
    Dépendance FastAPI: client Square adossé à l'AsyncClient du lifespan.
    Surchargée en tests via app.dependency_overrides.
    """
    require_square_config()
    return SquareClient(
        request.app.state.http,
        access_token=config.SQUARE_ACCESS_TOKEN,
        base_url=config.SQUARE_BASE_URL,
        version=config.SQUARE_VERSION,
    )

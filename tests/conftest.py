import os

# Avant tout import de booking_api: pas de Redis réel, pas de rate limiting
os.environ.setdefault("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS", "1")
os.environ.setdefault("USE_FAKE_REDIS_FOR_TESTS", "1")
os.environ.setdefault("NOTIFIER_BACKEND", "log")

import pytest
from typing import Dict, Generator, List, Optional
from fakeredis import FakeServer
from fakeredis.aioredis import FakeRedis
from fastapi.testclient import TestClient

from booking_api import config
from booking_api.app_setup.factory import create_app
from booking_api.confirmation.dedupe import NotificationLedger, get_ledger
from booking_api.errors import GatewayError, NotificationError, OrderNotFound
from booking_api.notifications.backends import get_notifier
from booking_api.payments.models import (
    CheckoutLink,
    CheckoutOrder,
    OrderSnapshot,
    PaymentRecord,
    settlement_from_square,
)
from booking_api.payments.square_client import get_gateway

# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "/tests/unit/" in nodeid:
            item.add_marker(pytest.mark.unit)
        elif "/tests/integration/" in nodeid:
            item.add_marker(pytest.mark.integration)


class FakeGateway:
    """Square simulé: commandes/paiements en mémoire, journal des appels."""

    def __init__(self):
        self.orders: Dict[str, OrderSnapshot] = {}
        self.payments: Dict[str, PaymentRecord] = {}
        self.created: List[CheckoutOrder] = []
        self.calls: List[tuple] = []
        self.fail_on: Optional[str] = None

    def add_order(self, order_id: str, payment_ids=()):
        self.orders[order_id] = OrderSnapshot(order_id=order_id, tender_payment_ids=tuple(payment_ids))

    def add_payment(self, order_id: str, payment_id: str, status: str = "COMPLETED", amount: int = 23000):
        self.add_order(order_id, [payment_id])
        self.payments[payment_id] = PaymentRecord(
            payment_id=payment_id,
            status=settlement_from_square(status),
            raw_status=status,
            amount=amount,
            currency="USD",
            order_id=order_id,
        )

    async def create_payment_link(self, order: CheckoutOrder) -> CheckoutLink:
        self.calls.append(("create_payment_link", order.reference_id))
        if self.fail_on == "create_payment_link":
            raise GatewayError("Square error", details={"status": 500})
        self.created.append(order)
        order_id = f"ORD{len(self.created):05d}"
        return CheckoutLink(
            url=f"https://square.link/u/{order_id}",
            payment_link_id=f"PL{len(self.created):05d}",
            order_id=order_id,
        )

    async def retrieve_order(self, order_id: str) -> OrderSnapshot:
        self.calls.append(("retrieve_order", order_id))
        if self.fail_on == "retrieve_order":
            raise GatewayError("Payment gateway unreachable")
        if order_id not in self.orders:
            raise OrderNotFound("Order not found")
        return self.orders[order_id]

    async def get_payment(self, payment_id: str) -> PaymentRecord:
        self.calls.append(("get_payment", payment_id))
        if self.fail_on == "get_payment":
            raise GatewayError("Payment gateway unreachable")
        return self.payments[payment_id]


class RecordingNotifier:
    def __init__(self, fail_for=()):
        self.sent: List[dict] = []
        self.fail_for = set(fail_for)

    async def send(self, to: str, subject: str, text: str, html: str) -> bool:
        if to in self.fail_for:
            raise NotificationError(f"refused {to}")
        self.sent.append({"to": to, "subject": subject, "text": text, "html": html})
        return True


@pytest.fixture(autouse=True)
def _owner_email(monkeypatch):
    monkeypatch.setattr(config, "EMAIL_TO_OWNER", "owner@example.com", raising=True)
    monkeypatch.setattr(config, "SITE_BASE_URL", "https://booking.example.com", raising=True)
    monkeypatch.setattr(config, "SQUARE_LOCATION_ID", "LOC123", raising=True)


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def ledger() -> NotificationLedger:
    return NotificationLedger(FakeRedis(server=FakeServer(), decode_responses=True), ttl_seconds=3600)


@pytest.fixture(scope="session")
def app():
    return create_app()


@pytest.fixture()
def client(app, gateway, notifier, ledger) -> Generator[TestClient, None, None]:
    app.dependency_overrides[get_gateway] = lambda: gateway
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.dependency_overrides[get_ledger] = lambda: ledger
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def make_notifier():
    return RecordingNotifier

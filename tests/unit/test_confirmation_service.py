import httpx
import pytest

from booking_api.confirmation.schemas import BookingDetails, ConfirmRequest
from booking_api.confirmation.service import confirm_booking
from booking_api.errors import GatewayError, OrderNotFound, PaymentNotCompleted, ValidationError
from booking_api.payments import SquareClient
from booking_api.payments.models import OrderSnapshot


async def _confirm(order_id, gateway, notifier, ledger, booking=None):
    return await confirm_booking(order_id, booking, gateway=gateway, notifier=notifier, ledger=ledger)


@pytest.mark.asyncio
@pytest.mark.parametrize("order_id", ["", "   ", None])
async def test_missing_order_id_fails_before_gateway(gateway, notifier, ledger, order_id):
    with pytest.raises(ValidationError):
        await _confirm(order_id, gateway, notifier, ledger)
    assert gateway.calls == []


@pytest.mark.asyncio
async def test_paid_order_notifies_once(gateway, notifier, ledger):
    gateway.add_payment("ORDabc123", "P1", "COMPLETED", amount=23000)
    result = await _confirm("ORDabc123", gateway, notifier, ledger, BookingDetails(email="jane@example.com"))
    assert result.confirmation_number == "ORDABC12"
    assert result.owner_notified and result.customer_notified
    assert result.amount == 23000
    assert result.already_confirmed is False
    assert len(notifier.sent) == 2


@pytest.mark.asyncio
async def test_repeated_confirmation_does_not_resend(gateway, notifier, ledger):
    gateway.add_payment("ORDabc123", "P1", "COMPLETED")
    first = await _confirm("ORDabc123", gateway, notifier, ledger, BookingDetails(email="jane@example.com"))
    second = await _confirm("ORDabc123", gateway, notifier, ledger, BookingDetails(email="other@example.com"))
    assert len(notifier.sent) == 2
    assert second.already_confirmed is True
    assert second.confirmation_number == first.confirmation_number
    assert (second.owner_notified, second.customer_notified) == (True, True)


@pytest.mark.asyncio
async def test_pending_order_is_not_paid_yet(gateway, notifier, ledger):
    gateway.add_order("O1", payment_ids=[])
    with pytest.raises(PaymentNotCompleted) as exc:
        await _confirm("O1", gateway, notifier, ledger)
    assert exc.value.status == "pending"
    assert notifier.sent == []
    # rien n'est réservé: une confirmation ultérieure pourra notifier
    assert await ledger.claim("O1", "O1") is None


@pytest.mark.asyncio
async def test_approved_payment_is_pending(gateway, notifier, ledger):
    gateway.add_payment("O1", "P1", "APPROVED")
    with pytest.raises(PaymentNotCompleted) as exc:
        await _confirm("O1", gateway, notifier, ledger)
    assert exc.value.status == "pending"


@pytest.mark.asyncio
async def test_canceled_payment_is_failed(gateway, notifier, ledger):
    gateway.add_payment("O1", "P1", "CANCELED")
    with pytest.raises(PaymentNotCompleted) as exc:
        await _confirm("O1", gateway, notifier, ledger)
    assert exc.value.status == "failed"
    assert notifier.sent == []


@pytest.mark.asyncio
async def test_unknown_order(gateway, notifier, ledger):
    with pytest.raises(OrderNotFound):
        await _confirm("missing", gateway, notifier, ledger)


@pytest.mark.asyncio
async def test_gateway_failure(gateway, notifier, ledger):
    gateway.add_payment("O1", "P1", "COMPLETED")
    gateway.fail_on = "get_payment"
    with pytest.raises(GatewayError):
        await _confirm("O1", gateway, notifier, ledger)
    assert notifier.sent == []


@pytest.mark.asyncio
async def test_notification_failure_keeps_booking_confirmed(gateway, ledger, make_notifier):
    notifier = make_notifier(fail_for={"owner@example.com"})
    gateway.add_payment("O1", "P1", "COMPLETED")
    result = await _confirm("O1", gateway, notifier, ledger)
    assert result.owner_notified is False
    assert result.confirmation_number == "O1"


def test_confirm_request_accepts_field_variants():
    a = ConfirmRequest.model_validate({"orderId": " O1 ", "bookingDetails": {"passengerName": "Jane", "childSeats": 2}})
    b = ConfirmRequest.model_validate({"order_id": "O1", "booking": {"passenger_name": "Jane", "child_seats": "2"}})
    assert a.order_id == b.order_id == "O1"
    assert a.booking_details.passenger_name == b.booking_details.passenger_name == "Jane"
    assert a.booking_details.as_context()["child_seats"] == "2"
    assert ConfirmRequest.model_validate({"orderId": "O1", "booking": None}).booking_details == BookingDetails()


@pytest.mark.asyncio
@pytest.mark.parametrize("order_id", ["REAL#1", "REAL?x=1", "../REAL", "REAL/extra", "R" * 65])
async def test_malformed_order_id_rejected_before_gateway(gateway, notifier, ledger, order_id):
    with pytest.raises(ValidationError):
        await _confirm(order_id, gateway, notifier, ledger)
    assert gateway.calls == []


@pytest.mark.asyncio
async def test_url_variants_of_a_paid_order_notify_once(notifier, ledger):
    def handler(request: httpx.Request):
        if request.url.raw_path == b"/v2/orders/REAL":
            return httpx.Response(200, json={"order": {"id": "REAL", "tenders": [{"payment_id": "P1"}]}})
        if request.url.raw_path == b"/v2/payments/P1":
            return httpx.Response(200, json={"payment": {
                "id": "P1", "status": "COMPLETED", "order_id": "REAL",
                "amount_money": {"amount": 23000, "currency": "USD"},
            }})
        return httpx.Response(404, json={"errors": [{"code": "NOT_FOUND"}]})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        square = SquareClient(http, access_token="tok", base_url="https://connect.squareupsandbox.com", version="2025-10-16")
        first = await _confirm("REAL", square, notifier, ledger)
        for variant in ("REAL#1", "REAL?x=1", "REAL#2"):
            with pytest.raises(ValidationError):
                await _confirm(variant, square, notifier, ledger)
        again = await _confirm("REAL", square, notifier, ledger)

    assert [m["to"] for m in notifier.sent] == ["owner@example.com"]
    assert again.already_confirmed is True
    assert again.confirmation_number == first.confirmation_number == "REAL"


@pytest.mark.asyncio
async def test_ledger_keyed_on_order_id_returned_by_square(gateway, notifier, ledger):
    gateway.add_payment("REAL", "P1", "COMPLETED")
    gateway.orders["alias"] = OrderSnapshot(order_id="REAL", tender_payment_ids=("P1",))

    first = await _confirm("REAL", gateway, notifier, ledger)
    second = await _confirm("alias", gateway, notifier, ledger)

    assert len([m for m in notifier.sent if m["to"] == "owner@example.com"]) == 1
    assert second.already_confirmed is True
    assert second.order_id == "REAL"
    assert second.confirmation_number == first.confirmation_number

import pytest

from booking_api.confirmation.schemas import BookingDetails
from booking_api.notifications.backends import UnavailableNotifier
from booking_api.notifications.dispatcher import (
    NotificationSettings,
    confirmation_number_for,
    dispatch,
    format_amount,
)
from booking_api.payments.models import PaymentRecord, SettlementStatus

SETTINGS = NotificationSettings(owner_email="owner@example.com", business_name="MLT", business_phone="407-000-0000")
PAYMENT = PaymentRecord(payment_id="P1", status=SettlementStatus.COMPLETED, raw_status="COMPLETED", amount=23000, currency="USD", order_id="O1")


async def _dispatch(notifier, booking, settings=SETTINGS):
    return await dispatch(notifier, PAYMENT, booking, order_id="order-abc123xyz", confirmation_number="ORDERABC", settings=settings)


def test_confirmation_number_is_derived_from_order_id():
    assert confirmation_number_for("ordEr-abc123xyz") == "ORDERABC"
    assert confirmation_number_for("ordEr-abc123xyz") == confirmation_number_for("ordEr-abc123xyz")
    assert len(confirmation_number_for("CAISEHmZ4sLL2lEOqLSkvN8Hz7JvAaVB")) == 8


def test_format_amount():
    assert format_amount(23000) == "230.00"
    assert format_amount(5) == "0.05"


@pytest.mark.asyncio
async def test_owner_and_customer_notified(notifier):
    booking = BookingDetails(passengerName="Jane", email="jane@example.com", pickupDate="2026-11-02")
    result = await _dispatch(notifier, booking)
    assert result.owner_sent and result.customer_sent
    assert [m["to"] for m in notifier.sent] == ["owner@example.com", "jane@example.com"]
    owner = notifier.sent[0]
    assert "ORDERABC" in owner["subject"]
    assert "230.00 USD" in owner["text"]
    assert "Passenger: Jane" in owner["text"]


@pytest.mark.asyncio
async def test_customer_skipped_without_email(notifier):
    result = await _dispatch(notifier, BookingDetails(passengerName="Jane", email="   "))
    assert result.owner_sent is True
    assert result.customer_sent is False
    assert result.customer_attempted is False
    assert len(notifier.sent) == 1


@pytest.mark.asyncio
async def test_user_text_is_escaped_in_html(notifier):
    booking = BookingDetails(passengerName="<script>alert(1)</script>", notes="a & b <b>bold</b>", email="jane@example.com")
    await _dispatch(notifier, booking)
    owner = notifier.sent[0]
    assert "<script>" not in owner["html"]
    assert "&lt;script&gt;" in owner["html"]
    assert "a &amp; b &lt;b&gt;bold&lt;/b&gt;" in owner["html"]
    # la partie texte garde la saisie brute
    assert "<script>alert(1)</script>" in owner["text"]


@pytest.mark.asyncio
async def test_owner_failure_does_not_block_customer(make_notifier):
    notifier = make_notifier(fail_for={"owner@example.com"})
    result = await _dispatch(notifier, BookingDetails(email="jane@example.com"))
    assert result.owner_sent is False
    assert result.customer_sent is True
    assert "owner" in result.errors


@pytest.mark.asyncio
async def test_customer_failure_reported_separately(make_notifier):
    notifier = make_notifier(fail_for={"jane@example.com"})
    result = await _dispatch(notifier, BookingDetails(email="jane@example.com"))
    assert result.owner_sent is True
    assert result.customer_sent is False
    assert result.customer_attempted is True
    assert set(result.errors) == {"customer"}


@pytest.mark.asyncio
async def test_unconfigured_backend_never_raises():
    result = await _dispatch(UnavailableNotifier("Missing EMAIL_FROM"), BookingDetails(email="jane@example.com"))
    assert (result.owner_sent, result.customer_sent) == (False, False)
    assert result.errors["owner"] == "Missing EMAIL_FROM"


@pytest.mark.asyncio
async def test_missing_owner_address_reported(notifier):
    settings = NotificationSettings(owner_email="", business_name="MLT", business_phone="1")
    result = await _dispatch(notifier, BookingDetails(), settings=settings)
    assert result.owner_sent is False
    assert "owner" in result.errors
    assert notifier.sent == []

"""Tests for the concurrent SMS / e-mail dispatch."""

import asyncio
import time

import pytest

from conftest import StubEmail, StubSms
from dk2bot.models import Address, Customer, OrderDetails
from dk2bot.notifications import (
    EMAIL_SUBJECT,
    NotificationDispatcher,
    NotificationError,
    SimulatedEmailTransport,
    SimulatedSmsGateway,
    notification_warning,
    sms_text,
)


def _order(email: str = "jean@example.com") -> OrderDetails:
    return OrderDetails(
        delivery_address=Address(street="5 Rue B", city="Lyon", postal_code="69002"),
        pickup_date="2026-10-20",
        pickup_time="09:30",
        customer=Customer(name="Jean", phone="0612345678", email=email),
    )


@pytest.mark.asyncio
async def test_both_channels_succeed():
    sms, email = StubSms(), StubEmail()
    failed = await NotificationDispatcher(sms, email).dispatch(_order(), "Bonjour")
    assert failed == []
    assert sms.sent == [("0612345678", sms_text(_order()))]
    assert email.sent == [("jean@example.com", EMAIL_SUBJECT, "Bonjour")]


@pytest.mark.asyncio
async def test_sms_failure_does_not_stop_email():
    sms, email = StubSms(fail=True), StubEmail()
    failed = await NotificationDispatcher(sms, email).dispatch(_order(), "Bonjour")
    assert failed == ["SMS"]
    assert len(email.sent) == 1


@pytest.mark.asyncio
async def test_both_fail():
    failed = await NotificationDispatcher(StubSms(fail=True), StubEmail(fail=True)).dispatch(
        _order(), "Bonjour",
    )
    assert failed == ["SMS", "e-mail"]


@pytest.mark.asyncio
async def test_missing_email_is_skipped_not_failed():
    sms, email = StubSms(fail=True), StubEmail(fail=True)
    failed = await NotificationDispatcher(sms, email).dispatch(_order(email=""), "Bonjour")
    assert failed == ["SMS"]
    assert email.sent == []


@pytest.mark.asyncio
async def test_channels_run_concurrently():
    """Wait time is the slower of the two, not their sum."""
    dispatcher = NotificationDispatcher(StubSms(delay=0.3), StubEmail(delay=0.3))
    started = time.monotonic()
    await dispatcher.dispatch(_order(), "Bonjour")
    assert time.monotonic() - started < 0.55


@pytest.mark.asyncio
async def test_slow_channel_times_out():
    dispatcher = NotificationDispatcher(StubSms(delay=1.0), StubEmail(), timeout=0.05)
    failed = await dispatcher.dispatch(_order(), "Bonjour")
    assert failed == ["SMS"]


@pytest.mark.asyncio
async def test_simulated_providers():
    await SimulatedSmsGateway(latency=0, failure_rate=0).send_sms("0612345678", "hi")
    await SimulatedEmailTransport(latency=0, failure_rate=0).send_email("a@b.fr", "s", "b")
    with pytest.raises(NotificationError, match="passerelle SMS"):
        await SimulatedSmsGateway(latency=0, failure_rate=1.0).send_sms("0612345678", "hi")
    with pytest.raises(NotificationError, match="serveur de messagerie"):
        await SimulatedEmailTransport(latency=0, failure_rate=1.0).send_email("a@b.fr", "s", "b")


def test_sms_text():
    assert sms_text(_order()) == (
        "Livraison DK2: Votre commande est confirmée pour le 20/10/2026 à 09:30 "
        "vers Lyon. Merci !"
    )


def test_warning_names_failed_channels():
    assert notification_warning([]) is None

    only_sms = notification_warning(["SMS"])
    assert "par SMS." in only_sms
    assert "e-mail" not in only_sms
    assert "enregistrée avec succès" in only_sms

    both = notification_warning(["SMS", "e-mail"])
    assert "par SMS et e-mail." in both

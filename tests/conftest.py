"""Shared fixtures. Settings need a bot token before any dk2bot import."""

import asyncio
import os

os.environ.setdefault("BOT_TOKEN", "123456:TEST-TOKEN")

import pytest

from dk2bot.estimator import RouteEstimator
from dk2bot.llm import ConfirmationGenerator, GenerationError, TemplateConfirmationGenerator
from dk2bot.models import Address, RouteEstimate
from dk2bot.notifications import (
    EmailTransport,
    NotificationDispatcher,
    NotificationError,
    SmsGateway,
)
from dk2bot.wizard import OrderWizard


class StubSms(SmsGateway):
    def __init__(self, fail: bool = False, delay: float = 0.0) -> None:
        self.fail = fail
        self.delay = delay
        self.sent: list[tuple[str, str]] = []

    async def send_sms(self, phone: str, text: str) -> None:
        await asyncio.sleep(self.delay)
        self.sent.append((phone, text))
        if self.fail:
            raise NotificationError("sms down")


class StubEmail(EmailTransport):
    def __init__(self, fail: bool = False, delay: float = 0.0) -> None:
        self.fail = fail
        self.delay = delay
        self.sent: list[tuple[str, str, str]] = []

    async def send_email(self, address: str, subject: str, body: str) -> None:
        await asyncio.sleep(self.delay)
        self.sent.append((address, subject, body))
        if self.fail:
            raise NotificationError("smtp down")


class FailingGenerator(ConfirmationGenerator):
    async def generate(self, order):
        raise GenerationError("L'assistant IA n'a pas pu générer de confirmation. Cause : quota")


class BlockingGenerator(ConfirmationGenerator):
    def __init__(self) -> None:
        self.release = asyncio.Event()

    async def generate(self, order):
        await self.release.wait()
        return "ok"


class CountingEstimator(RouteEstimator):
    """Fixed 100 km route; counts how often it was asked."""

    def __init__(self) -> None:
        self.calls = 0

    def estimate(self, pickup: Address, delivery: Address, weight: str) -> RouteEstimate:
        self.calls += 1
        return RouteEstimate(
            distance_km=100,
            time_minutes=120,
            cost=50 + 100 * 1.5 + float(weight) * 2.5,
        )


def fill_order(wizard: OrderWizard, *, instructions: str = "") -> None:
    """A complete, valid order."""
    wizard.set_pickup_address_field("street", "12 Rue A")
    wizard.set_pickup_address_field("city", "Ville")
    wizard.set_pickup_address_field("postal_code", "75001")
    wizard.set_delivery_address_field("street", "5 Rue B")
    wizard.set_delivery_address_field("city", "Ville")
    wizard.set_delivery_address_field("postal_code", "69002")
    wizard.set_pickup_date("2026-10-20")
    wizard.set_pickup_time("09:30")
    wizard.set_parcel_field("weight", "10")
    wizard.set_parcel_field("contents", "Livres")
    wizard.set_parcel_field("special_instructions", instructions)
    wizard.set_customer_field("name", "Jean Dupont")
    wizard.set_customer_field("phone", "0612345678")
    wizard.set_customer_field("email", "jean@example.com")


@pytest.fixture
def sms() -> StubSms:
    return StubSms()


@pytest.fixture
def email() -> StubEmail:
    return StubEmail()


@pytest.fixture
def notifier(sms: StubSms, email: StubEmail) -> NotificationDispatcher:
    return NotificationDispatcher(sms=sms, email=email, timeout=2)


@pytest.fixture
def estimator() -> CountingEstimator:
    return CountingEstimator()


@pytest.fixture
def wizard(notifier: NotificationDispatcher, estimator: CountingEstimator) -> OrderWizard:
    return OrderWizard(TemplateConfirmationGenerator(), notifier, estimator)

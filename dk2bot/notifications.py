"""Customer notifications (SMS + e-mail) sent after an order is confirmed.

Both providers are simulated: they sleep for a while and fail at random.
A real gateway replaces them by implementing the same one-method contract.
The two deliveries run side by side and neither failure blocks the other;
the order is already placed by the time we get here, so a failure only
turns into a warning for the customer.
"""

from __future__ import annotations

import asyncio
import logging
import random
from abc import ABC, abstractmethod

from dk2bot.models import OrderDetails
from dk2bot.scheduling import format_pickup_date, format_pickup_time

logger = logging.getLogger(__name__)

EMAIL_SUBJECT = "Confirmation de votre commande Livraison DK2"

SMS_CHANNEL = "SMS"
EMAIL_CHANNEL = "e-mail"


class NotificationError(Exception):
    """A single delivery attempt failed."""


class SmsGateway(ABC):
    @abstractmethod
    async def send_sms(self, phone: str, text: str) -> None:
        ...


class EmailTransport(ABC):
    @abstractmethod
    async def send_email(self, address: str, subject: str, body: str) -> None:
        ...


class _SimulatedProvider:
    def __init__(
        self,
        latency: float = 0.5,
        failure_rate: float = 0.2,
        rng: random.Random | None = None,
    ) -> None:
        self.latency = latency
        self.failure_rate = failure_rate
        self._rng = rng or random.Random()

    async def _simulate(self, error_text: str) -> None:
        await asyncio.sleep(self.latency)
        if self._rng.random() < self.failure_rate:
            raise NotificationError(error_text)


class SimulatedSmsGateway(_SimulatedProvider, SmsGateway):
    async def send_sms(self, phone: str, text: str) -> None:
        logger.info("Sending SMS to %s: %r", phone, text)
        await self._simulate("La passerelle SMS n'a pas répondu.")
        logger.info("SMS sent (simulated)")


class SimulatedEmailTransport(_SimulatedProvider, EmailTransport):
    async def send_email(self, address: str, subject: str, body: str) -> None:
        logger.info("Sending e-mail to %s — subject: %s", address, subject)
        logger.debug("E-mail body:\n%s", body)
        await self._simulate("Le serveur de messagerie a refusé la connexion.")
        logger.info("E-mail sent (simulated)")


def sms_text(order: OrderDetails) -> str:
    when = order.pickup_datetime
    return (
        f"Livraison DK2: Votre commande est confirmée pour le "
        f"{format_pickup_date(when)} à {format_pickup_time(when)} "
        f"vers {order.delivery_address.city}. Merci !"
    )


class NotificationDispatcher:
    """Sends the SMS and the e-mail concurrently and reports what failed."""

    def __init__(
        self,
        sms: SmsGateway,
        email: EmailTransport,
        timeout: float | None = 10.0,
    ) -> None:
        self.sms = sms
        self.email = email
        self.timeout = timeout

    async def _with_timeout(self, coro) -> None:  # noqa: ANN001
        await asyncio.wait_for(coro, timeout=self.timeout)

    async def _send_email(self, order: OrderDetails, message: str) -> None:
        address = order.customer.email
        if not address:
            logger.info("No e-mail address — e-mail notification skipped")
            return
        await self._with_timeout(self.email.send_email(address, EMAIL_SUBJECT, message))

    async def dispatch(self, order: OrderDetails, message: str) -> list[str]:
        """Return the labels of the channels that failed, SMS first."""
        results = await asyncio.gather(
            self._with_timeout(self.sms.send_sms(order.customer.phone, sms_text(order))),
            self._send_email(order, message),
            return_exceptions=True,
        )

        failed: list[str] = []
        for channel, result in zip((SMS_CHANNEL, EMAIL_CHANNEL), results):
            if isinstance(result, BaseException):
                logger.error("%s notification failed: %r", channel, result)
                failed.append(channel)
        return failed


def notification_warning(failed: list[str]) -> str | None:
    if not failed:
        return None
    return (
        "Votre commande a été enregistrée avec succès ! Cependant, un problème "
        "technique nous a empêchés de vous envoyer la confirmation par "
        f"{' et '.join(failed)}. Pas d'inquiétude, votre ramassage est bien "
        "programmé. Veuillez noter votre numéro de suivi pour référence."
    )

"""Pickup address from the customer's shared location.

No reverse-geocoding service is called: any successful position maps to
a placeholder address so the rest of the flow can be exercised.
"""

from __future__ import annotations

import enum
import logging
import random

from dk2bot.models import Address

logger = logging.getLogger(__name__)

SIMULATED_STREET = "123 Rue de la Géolocalisation"
SIMULATED_CITY = "Votre Ville (Simulée)"

SIMULATED_INFO = (
    "Adresse simulée avec succès. Une application réelle utiliserait votre "
    "adresse exacte via un service de géocodage inversé."
)


class GeolocationFailure(str, enum.Enum):
    PERMISSION_DENIED = "permission_denied"
    POSITION_UNAVAILABLE = "position_unavailable"
    TIMEOUT = "timeout"
    OTHER = "other"


_MESSAGES: dict[GeolocationFailure, str] = {
    GeolocationFailure.PERMISSION_DENIED: (
        "La permission d'accès à la géolocalisation a été refusée. "
        "Veuillez l'activer ou saisir l'adresse manuellement."
    ),
    GeolocationFailure.POSITION_UNAVAILABLE: (
        "Les informations de localisation ne sont pas disponibles actuellement. "
        "Veuillez réessayer ou saisir l'adresse manuellement."
    ),
    GeolocationFailure.TIMEOUT: (
        "La demande de géolocalisation a expiré. Veuillez réessayer."
    ),
    GeolocationFailure.OTHER: (
        "Une erreur est survenue lors de l'obtention de la localisation. "
        "Veuillez saisir l'adresse manuellement."
    ),
}


class GeolocationError(Exception):
    def __init__(self, reason: GeolocationFailure, detail: str = "") -> None:
        super().__init__(detail or reason.value)
        self.reason = reason


def geolocation_message(reason: GeolocationFailure) -> str:
    return _MESSAGES.get(reason, _MESSAGES[GeolocationFailure.OTHER])


def simulated_address(
    latitude: float,
    longitude: float,
    rng: random.Random | None = None,
) -> Address:
    """Placeholder for a reverse-geocoding lookup of ``(latitude, longitude)``."""
    rng = rng or random
    logger.info("Location received: lat=%.5f lon=%.5f", latitude, longitude)
    return Address(
        street=SIMULATED_STREET,
        city=SIMULATED_CITY,
        postal_code=str(rng.randint(10000, 99999)),
    )

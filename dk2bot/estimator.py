"""Route cost estimate.

There is no geocoding or routing backend behind this: the distance is a
placeholder draw and the cost is a flat formula on top of it. A real
backend plugs in by implementing :class:`RouteEstimator`.
"""

from __future__ import annotations

import math
import random
from abc import ABC, abstractmethod

from dk2bot.models import Address, RouteEstimate

BASE_FEE = 50.0
RATE_PER_KM = 1.5
RATE_PER_KG = 2.5
MINUTES_PER_KM = 1.2

MIN_DISTANCE_KM = 10
MAX_DISTANCE_KM = 209


def parse_weight(value: str) -> float:
    """Parse a weight typed by the customer; ``0`` if it is not a finite number."""
    try:
        weight = float((value or "").replace(",", ".").strip())
    except (ValueError, TypeError):
        return 0.0
    return weight if math.isfinite(weight) else 0.0


class RouteEstimator(ABC):
    @abstractmethod
    def estimate(self, pickup: Address, delivery: Address, weight: str) -> RouteEstimate:
        """Estimate a route between two complete addresses."""


class SimulatedRouteEstimator(RouteEstimator):
    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    def estimate(self, pickup: Address, delivery: Address, weight: str) -> RouteEstimate:
        distance = self._rng.randint(MIN_DISTANCE_KM, MAX_DISTANCE_KM)
        minutes = round(distance * MINUTES_PER_KM)
        cost = BASE_FEE + distance * RATE_PER_KM + parse_weight(weight) * RATE_PER_KG
        return RouteEstimate(distance_km=distance, time_minutes=minutes, cost=cost)


_default_estimator = SimulatedRouteEstimator()


def estimate(
    pickup: Address,
    delivery: Address,
    weight: str,
    *,
    estimator: RouteEstimator | None = None,
) -> RouteEstimate | None:
    """Return an estimate, or ``None`` while the inputs are incomplete."""
    if not (pickup.is_complete and delivery.is_complete and weight):
        return None
    return (estimator or _default_estimator).estimate(pickup, delivery, weight)


def format_eur(amount: float) -> str:
    """French currency rendering: ``1234.5`` → ``"1 234,50 €"``."""
    whole, cents = f"{amount:,.2f}".split(".")
    return f"{whole.replace(',', ' ')},{cents} €"

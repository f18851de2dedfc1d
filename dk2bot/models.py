"""Order data model: addresses, parcel, customer and the derived estimate."""

from __future__ import annotations

import enum

from pydantic import BaseModel, Field


class ParcelCategory(str, enum.Enum):
    GENERAL = "Général"
    FRAGILE = "Fragile"
    OVERSIZED = "Hors gabarit"
    HAZARDOUS = "Dangereux"


class WizardStage(str, enum.Enum):
    """Form → Summary → Confirmed.

    Summary may go back to Form; Confirmed goes back to Form only
    through a full reset.
    """

    FORM = "form"
    SUMMARY = "summary"
    CONFIRMED = "confirmed"


class Address(BaseModel):
    street: str = ""
    city: str = ""
    postal_code: str = ""

    @property
    def is_complete(self) -> bool:
        return bool(self.street and self.city and self.postal_code)

    def one_line(self) -> str:
        return f"{self.street}, {self.city}, {self.postal_code}"


class Parcel(BaseModel):
    weight: str = ""
    length: str = ""
    width: str = ""
    height: str = ""
    contents: str = ""
    category: ParcelCategory = ParcelCategory.GENERAL
    special_instructions: str = ""


class Customer(BaseModel):
    name: str = ""
    phone: str = ""
    email: str = ""


class OrderDetails(BaseModel):
    """Root state of one in-progress order.

    The pickup timestamp is not stored: it is combined from the date and
    the time slot each time it is read.
    """

    pickup_address: Address = Field(default_factory=Address)
    delivery_address: Address = Field(default_factory=Address)
    pickup_date: str = ""  # YYYY-MM-DD
    pickup_time: str = ""  # HH:MM
    parcel: Parcel = Field(default_factory=Parcel)
    customer: Customer = Field(default_factory=Customer)

    @property
    def pickup_datetime(self) -> str:
        if self.pickup_date and self.pickup_time:
            return f"{self.pickup_date}T{self.pickup_time}"
        return ""


class RouteEstimate(BaseModel):
    distance_km: int
    time_minutes: int
    cost: float

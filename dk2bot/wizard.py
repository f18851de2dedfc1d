"""Order wizard: owns one in-progress order and drives Form → Summary → Confirmed."""

from __future__ import annotations

import logging
from typing import Any

from dk2bot.estimator import RouteEstimator, estimate
from dk2bot.geolocation import (
    SIMULATED_INFO,
    GeolocationError,
    geolocation_message,
    simulated_address,
)
from dk2bot.llm import ConfirmationGenerator, GenerationError
from dk2bot.models import (
    Address,
    OrderDetails,
    ParcelCategory,
    RouteEstimate,
    WizardStage,
)
from dk2bot.notifications import NotificationDispatcher, notification_warning
from dk2bot.validation import validate_order

logger = logging.getLogger(__name__)

ADDRESS_FIELDS = ("street", "city", "postal_code")
PARCEL_FIELDS = ("weight", "length", "width", "height", "contents", "special_instructions")
CUSTOMER_FIELDS = ("name", "phone", "email")


class WizardStageError(Exception):
    """Operation not allowed in the wizard's current stage."""


class OrderWizard:
    def __init__(
        self,
        generator: ConfirmationGenerator,
        dispatcher: NotificationDispatcher,
        estimator: RouteEstimator | None = None,
    ) -> None:
        self.generator = generator
        self.dispatcher = dispatcher
        self.estimator = estimator
        self._reset()

    def _reset(self) -> None:
        self.order = OrderDetails()
        self.stage = WizardStage.FORM
        self.route_estimate: RouteEstimate | None = None
        self.confirmation_message = ""
        self.form_error: str | None = None
        self.form_info: str | None = None
        self.notification_warning: str | None = None
        self.is_confirming = False

    # ── Form editing ────────────────────────────────────────────────

    def _require(self, stage: WizardStage) -> None:
        if self.stage is not stage:
            raise WizardStageError(
                f"not allowed in stage {self.stage.value} (needs {stage.value})"
            )

    def _refresh_estimate(self) -> None:
        self.route_estimate = estimate(
            self.order.pickup_address,
            self.order.delivery_address,
            self.order.parcel.weight,
            estimator=self.estimator,
        )

    @staticmethod
    def _set(target: Any, allowed: tuple[str, ...], field: str, value: str) -> None:
        if field not in allowed:
            raise ValueError(f"unknown field {field!r}")
        setattr(target, field, value)

    def set_pickup_address_field(self, field: str, value: str) -> None:
        self._require(WizardStage.FORM)
        self._set(self.order.pickup_address, ADDRESS_FIELDS, field, value)
        self._refresh_estimate()

    def set_delivery_address_field(self, field: str, value: str) -> None:
        self._require(WizardStage.FORM)
        self._set(self.order.delivery_address, ADDRESS_FIELDS, field, value)
        self._refresh_estimate()

    def set_pickup_date(self, value: str) -> None:
        self._require(WizardStage.FORM)
        self.order.pickup_date = value

    def set_pickup_time(self, value: str) -> None:
        self._require(WizardStage.FORM)
        self.order.pickup_time = value

    def set_parcel_field(self, field: str, value: str) -> None:
        self._require(WizardStage.FORM)
        self._set(self.order.parcel, PARCEL_FIELDS, field, value)
        if field == "weight":
            self._refresh_estimate()

    def set_parcel_category(self, category: ParcelCategory) -> None:
        self._require(WizardStage.FORM)
        self.order.parcel.category = ParcelCategory(category)

    def set_customer_field(self, field: str, value: str) -> None:
        self._require(WizardStage.FORM)
        self._set(self.order.customer, CUSTOMER_FIELDS, field, value)

    def apply_geolocation(self, latitude: float, longitude: float) -> Address:
        """Fill the pickup address from a shared position (simulated lookup)."""
        self._require(WizardStage.FORM)
        self.form_error = None
        self.order.pickup_address = simulated_address(latitude, longitude)
        self.form_info = SIMULATED_INFO
        self._refresh_estimate()
        return self.order.pickup_address

    def report_geolocation_error(self, error: GeolocationError) -> str:
        self._require(WizardStage.FORM)
        logger.warning("Geolocation error: %s (%s)", error.reason.value, error)
        self.form_info = None
        self.form_error = geolocation_message(error.reason)
        return self.form_error

    # ── Transitions ─────────────────────────────────────────────────

    def proceed_to_summary(self) -> bool:
        self._require(WizardStage.FORM)
        result = validate_order(self.order)
        if not result.ok:
            self.form_error = result.reason
            return False
        self.form_error = None
        self.stage = WizardStage.SUMMARY
        return True

    def back_to_form(self) -> None:
        self._require(WizardStage.SUMMARY)
        self.stage = WizardStage.FORM

    async def confirm(self) -> bool:
        """Generate the confirmation, notify the customer, move to Confirmed.

        Returns ``False`` (still in Summary, ``form_error`` set) when the
        message could not be generated. Notification failures never block.
        """
        self._require(WizardStage.SUMMARY)
        if self.is_confirming:
            raise WizardStageError("confirmation already in progress")

        self.is_confirming = True
        self.form_error = None
        self.notification_warning = None
        try:
            try:
                message = await self.generator.generate(self.order)
            except GenerationError as exc:
                logger.error("Failed to confirm order: %s", exc)
                self.form_error = f"Échec de la confirmation de la commande : {exc}"
                return False

            self.confirmation_message = message
            failed = await self.dispatcher.dispatch(self.order, message)
            self.notification_warning = notification_warning(failed)
            self.stage = WizardStage.CONFIRMED
            logger.info(
                "Order confirmed for %s [%s → %s]%s",
                self.order.customer.name,
                self.order.pickup_address.city,
                self.order.delivery_address.city,
                f" — failed: {', '.join(failed)}" if failed else "",
            )
            return True
        finally:
            self.is_confirming = False

    def start_new_order(self) -> None:
        self._reset()

    # ── Storage ─────────────────────────────────────────────────────

    def snapshot(self) -> dict[str, Any]:
        """Plain-dict state, suitable for FSM storage."""
        return {
            "order": self.order.model_dump(mode="json"),
            "stage": self.stage.value,
            "route_estimate": (
                self.route_estimate.model_dump(mode="json") if self.route_estimate else None
            ),
            "confirmation_message": self.confirmation_message,
            "form_error": self.form_error,
            "form_info": self.form_info,
            "notification_warning": self.notification_warning,
        }

    @classmethod
    def restore(
        cls,
        snapshot: dict[str, Any] | None,
        generator: ConfirmationGenerator,
        dispatcher: NotificationDispatcher,
        estimator: RouteEstimator | None = None,
    ) -> "OrderWizard":
        wizard = cls(generator, dispatcher, estimator)
        if not snapshot:
            return wizard
        wizard.order = OrderDetails.model_validate(snapshot["order"])
        wizard.stage = WizardStage(snapshot["stage"])
        if snapshot.get("route_estimate"):
            wizard.route_estimate = RouteEstimate.model_validate(snapshot["route_estimate"])
        wizard.confirmation_message = snapshot.get("confirmation_message", "")
        wizard.form_error = snapshot.get("form_error")
        wizard.form_info = snapshot.get("form_info")
        wizard.notification_warning = snapshot.get("notification_warning")
        return wizard

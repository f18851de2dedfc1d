"""Tests for the order wizard: editing, transitions, confirmation, reset."""

import asyncio

import pytest

from conftest import (
    BlockingGenerator,
    CountingEstimator,
    FailingGenerator,
    StubEmail,
    StubSms,
    fill_order,
)
from dk2bot.geolocation import (
    SIMULATED_STREET,
    GeolocationError,
    GeolocationFailure,
    geolocation_message,
)
from dk2bot.llm import FAKE_TRACKING_NUMBER, TemplateConfirmationGenerator
from dk2bot.models import OrderDetails, ParcelCategory, WizardStage
from dk2bot.notifications import NotificationDispatcher
from dk2bot.wizard import OrderWizard, WizardStageError


# ── End-to-end ───────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_full_order_offline(wizard, sms, email):
    fill_order(wizard)
    assert wizard.proceed_to_summary()
    assert wizard.stage is WizardStage.SUMMARY
    assert wizard.form_error is None

    assert await wizard.confirm()
    assert wizard.stage is WizardStage.CONFIRMED
    assert FAKE_TRACKING_NUMBER in wizard.confirmation_message
    assert "Instructions Spéciales" not in wizard.confirmation_message
    assert wizard.notification_warning is None
    assert len(sms.sent) == 1
    assert email.sent[0][2] == wizard.confirmation_message


@pytest.mark.asyncio
async def test_start_new_order_resets_everything(wizard):
    fill_order(wizard)
    wizard.proceed_to_summary()
    await wizard.confirm()

    wizard.start_new_order()
    assert wizard.order == OrderDetails()
    assert wizard.stage is WizardStage.FORM
    assert wizard.route_estimate is None
    assert wizard.confirmation_message == ""
    assert wizard.form_error is None
    assert wizard.notification_warning is None


# ── Form editing & estimate ──────────────────────────────────────────

def test_estimate_follows_addresses_and_weight(wizard, estimator):
    assert wizard.route_estimate is None
    fill_order(wizard)
    assert wizard.route_estimate is not None
    assert wizard.route_estimate.cost == 50 + 150 + 25

    calls = estimator.calls
    wizard.set_parcel_field("contents", "Autre chose")
    wizard.set_customer_field("name", "Marie")
    assert estimator.calls == calls

    wizard.set_parcel_field("weight", "20")
    assert estimator.calls == calls + 1
    assert wizard.route_estimate.cost == 50 + 150 + 50

    wizard.set_delivery_address_field("city", "")
    assert wizard.route_estimate is None

    wizard.set_delivery_address_field("city", "Lyon")
    assert wizard.route_estimate is not None

    wizard.set_parcel_field("weight", "")
    assert wizard.route_estimate is None


def test_pickup_datetime_is_derived(wizard):
    wizard.set_pickup_date("2026-10-20")
    assert wizard.order.pickup_datetime == ""
    wizard.set_pickup_time("14:00")
    assert wizard.order.pickup_datetime == "2026-10-20T14:00"


def test_unknown_field_rejected(wizard):
    with pytest.raises(ValueError):
        wizard.set_customer_field("age", "42")
    with pytest.raises(ValueError):
        wizard.set_parcel_field("category", "Fragile")


def test_category(wizard):
    wizard.set_parcel_category(ParcelCategory.HAZARDOUS)
    assert wizard.order.parcel.category is ParcelCategory.HAZARDOUS


# ── Transitions ──────────────────────────────────────────────────────

def test_invalid_form_stays_in_form(wizard):
    fill_order(wizard)
    wizard.set_customer_field("phone", "12345")
    assert not wizard.proceed_to_summary()
    assert wizard.stage is WizardStage.FORM
    assert "format du numéro" in wizard.form_error

    wizard.set_customer_field("phone", "06 12 34 56 78")
    assert wizard.proceed_to_summary()
    assert wizard.form_error is None


def test_order_is_read_only_from_summary(wizard):
    fill_order(wizard)
    wizard.proceed_to_summary()
    with pytest.raises(WizardStageError):
        wizard.set_customer_field("name", "Autre")
    with pytest.raises(WizardStageError):
        wizard.set_pickup_time("10:00")


def test_back_to_form_keeps_data(wizard):
    fill_order(wizard)
    wizard.proceed_to_summary()
    estimate = wizard.route_estimate
    wizard.back_to_form()
    assert wizard.stage is WizardStage.FORM
    assert wizard.order.customer.name == "Jean Dupont"
    assert wizard.route_estimate == estimate


@pytest.mark.asyncio
async def test_confirm_requires_summary(wizard):
    with pytest.raises(WizardStageError):
        await wizard.confirm()


@pytest.mark.asyncio
async def test_generation_failure_blocks_confirmation():
    sms, email = StubSms(), StubEmail()
    wizard = OrderWizard(FailingGenerator(), NotificationDispatcher(sms, email), CountingEstimator())
    fill_order(wizard)
    wizard.proceed_to_summary()

    assert not await wizard.confirm()
    assert wizard.stage is WizardStage.SUMMARY
    assert wizard.form_error.startswith("Échec de la confirmation de la commande : ")
    assert "quota" in wizard.form_error
    assert sms.sent == [] and email.sent == []
    assert wizard.confirmation_message == ""


@pytest.mark.asyncio
async def test_notification_failure_still_confirms():
    sms, email = StubSms(fail=True), StubEmail()
    wizard = OrderWizard(
        TemplateConfirmationGenerator(), NotificationDispatcher(sms, email), CountingEstimator(),
    )
    fill_order(wizard, instructions="Fragile, ne pas retourner")
    wizard.proceed_to_summary()

    assert await wizard.confirm()
    assert wizard.stage is WizardStage.CONFIRMED
    assert "par SMS." in wizard.notification_warning
    assert "*Fragile, ne pas retourner*" in wizard.confirmation_message


@pytest.mark.asyncio
async def test_second_confirm_while_in_flight_is_rejected(notifier):
    generator = BlockingGenerator()
    wizard = OrderWizard(generator, notifier, CountingEstimator())
    fill_order(wizard)
    wizard.proceed_to_summary()

    first = asyncio.create_task(wizard.confirm())
    await asyncio.sleep(0)
    assert wizard.is_confirming
    with pytest.raises(WizardStageError):
        await wizard.confirm()

    generator.release.set()
    assert await first
    assert not wizard.is_confirming


# ── Geolocation ──────────────────────────────────────────────────────

def test_geolocation_fills_pickup(wizard):
    address = wizard.apply_geolocation(48.85, 2.35)
    assert address.street == SIMULATED_STREET
    assert len(address.postal_code) == 5 and address.postal_code.isdigit()
    assert wizard.order.pickup_address == address
    assert "simulée" in wizard.form_info
    assert wizard.form_error is None


def test_geolocation_errors_are_distinct(wizard):
    messages = {geolocation_message(reason) for reason in GeolocationFailure}
    assert len(messages) == len(GeolocationFailure)

    wizard.report_geolocation_error(GeolocationError(GeolocationFailure.PERMISSION_DENIED))
    assert wizard.form_error == geolocation_message(GeolocationFailure.PERMISSION_DENIED)
    assert wizard.stage is WizardStage.FORM
    # manual entry still works
    wizard.set_pickup_address_field("street", "12 Rue A")


def test_geolocation_error_only_reported_in_form(wizard):
    fill_order(wizard)
    assert wizard.proceed_to_summary()
    with pytest.raises(WizardStageError):
        wizard.report_geolocation_error(GeolocationError(GeolocationFailure.TIMEOUT))
    assert wizard.form_error is None


# ── Storage ──────────────────────────────────────────────────────────

def test_snapshot_round_trip(wizard, notifier):
    fill_order(wizard)
    wizard.proceed_to_summary()

    restored = OrderWizard.restore(wizard.snapshot(), TemplateConfirmationGenerator(), notifier)
    assert restored.order == wizard.order
    assert restored.stage is WizardStage.SUMMARY
    assert restored.route_estimate == wizard.route_estimate


def test_restore_empty_snapshot(notifier):
    wizard = OrderWizard.restore(None, TemplateConfirmationGenerator(), notifier)
    assert wizard.order == OrderDetails()
    assert wizard.stage is WizardStage.FORM

"""Tests for pickup scheduling helpers and their keyboards."""

from datetime import date

from dk2bot.keyboards import calendar_kb, category_kb, form_menu_kb, time_slots_kb
from dk2bot.models import Address, OrderDetails, ParcelCategory
from dk2bot.scheduling import (
    format_pickup_datetime,
    instructions_placeholder,
    is_selectable_day,
    month_grid,
    month_title,
    shift_month,
    time_slots,
)


def test_time_slots_cover_business_hours():
    slots = time_slots()
    assert len(slots) == 20
    assert slots[0] == ("08:00", "8:00 AM")
    assert slots[-1] == ("17:30", "5:30 PM")
    assert ("12:00", "12:00 PM") in slots
    assert ("12:30", "12:30 PM") in slots


def test_month_grid_is_monday_first():
    weeks = month_grid(2026, 10)  # 1 October 2026 is a Thursday
    assert weeks[0] == [0, 0, 0, 1, 2, 3, 4]
    assert weeks[-1] == [26, 27, 28, 29, 30, 31, 0]
    assert month_title(2026, 10) == "Octobre 2026"


def test_shift_month_wraps_years():
    assert shift_month(2026, 12, 1) == (2027, 1)
    assert shift_month(2026, 1, -1) == (2025, 12)
    assert shift_month(2026, 5, 0) == (2026, 5)


def test_past_days_not_selectable():
    today = date(2026, 10, 15)
    assert not is_selectable_day(date(2026, 10, 14), today)
    assert is_selectable_day(today, today)
    assert is_selectable_day(date(2027, 1, 1), today)


def test_format_pickup_datetime():
    assert format_pickup_datetime("2026-10-20T09:30") == "20/10/2026 09:30:00"
    assert format_pickup_datetime("") == ""
    assert format_pickup_datetime("pas une date") == ""


def test_instructions_placeholder_per_category():
    hints = {instructions_placeholder(c) for c in ParcelCategory}
    assert len(hints) == len(ParcelCategory)
    assert "chariot élévateur" in instructions_placeholder(ParcelCategory.OVERSIZED)


# ── Keyboards ────────────────────────────────────────────────────────

def _buttons(markup):
    return [button for row in markup.inline_keyboard for button in row]


def test_calendar_disables_past_days():
    markup = calendar_kb(2026, 10, today=date(2026, 10, 15))
    by_data = {b.callback_data for b in _buttons(markup)}
    assert "cal:day:2026-10-15" in by_data
    assert "cal:day:2026-10-31" in by_data
    assert "cal:day:2026-10-14" not in by_data
    assert "cal:nav:2026-09" in by_data
    assert "cal:nav:2026-11" in by_data


def test_time_slot_and_category_callbacks():
    slots = {b.callback_data for b in _buttons(time_slots_kb())}
    assert "slot:08:00" in slots and "slot:17:30" in slots

    categories = {b.callback_data for b in _buttons(category_kb())}
    assert categories == {f"cat:{c.name}" for c in ParcelCategory}


def test_form_menu_marks_completed_sections():
    order = OrderDetails(
        pickup_address=Address(street="12 Rue A", city="Ville", postal_code="75001"),
    )
    texts = {b.callback_data: b.text for b in _buttons(form_menu_kb(order))}
    assert texts["section:pickup"].startswith("✅")
    assert not texts["section:delivery"].startswith("✅")
    assert "form:summary" in texts

"""Pickup scheduling helpers: time slots, calendar grid, date rendering."""

from __future__ import annotations

import calendar
from datetime import date, datetime

from dk2bot.models import ParcelCategory

FIRST_SLOT_MINUTES = 8 * 60       # 08:00
LAST_SLOT_MINUTES = 17 * 60 + 30  # 17:30
SLOT_STEP_MINUTES = 30

MONTHS_FR = [
    "janvier", "février", "mars", "avril", "mai", "juin",
    "juillet", "août", "septembre", "octobre", "novembre", "décembre",
]
WEEKDAYS_FR = ["Lu", "Ma", "Me", "Je", "Ve", "Sa", "Di"]


def time_slots() -> list[tuple[str, str]]:
    """``(value, label)`` pairs: 24h value for storage, 12h label for display."""
    slots: list[tuple[str, str]] = []
    for total in range(FIRST_SLOT_MINUTES, LAST_SLOT_MINUTES + 1, SLOT_STEP_MINUTES):
        hour, minute = divmod(total, 60)
        value = f"{hour:02d}:{minute:02d}"
        display_hour = hour % 12 or 12
        period = "PM" if hour >= 12 else "AM"
        slots.append((value, f"{display_hour}:{minute:02d} {period}"))
    return slots


def month_grid(year: int, month: int) -> list[list[int]]:
    """Monday-first weeks of day numbers, ``0`` for padding cells."""
    return calendar.Calendar(firstweekday=0).monthdayscalendar(year, month)


def month_title(year: int, month: int) -> str:
    return f"{MONTHS_FR[month - 1].capitalize()} {year}"


def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def is_selectable_day(day: date, today: date | None = None) -> bool:
    """Past days cannot be booked."""
    return day >= (today or date.today())


def format_pickup_datetime(value: str) -> str:
    """``2026-10-20T09:30`` → ``20/10/2026 09:30:00``; empty for bad input."""
    if not value:
        return ""
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return ""
    return parsed.strftime("%d/%m/%Y %H:%M:%S")


def format_pickup_date(value: str) -> str:
    try:
        return datetime.fromisoformat(value).strftime("%d/%m/%Y")
    except ValueError:
        return ""


def format_pickup_time(value: str) -> str:
    try:
        return datetime.fromisoformat(value).strftime("%H:%M")
    except ValueError:
        return ""


def instructions_placeholder(category: ParcelCategory) -> str:
    if category is ParcelCategory.FRAGILE:
        return "ex: Manipuler avec soin, ne pas empiler, protéger des chocs."
    if category is ParcelCategory.HAZARDOUS:
        return (
            "ex: Maintenir à la verticale, nécessite une ventilation, "
            "équipement de protection requis."
        )
    if category is ParcelCategory.OVERSIZED:
        return "ex: Nécessite un chariot élévateur, dégager la zone de livraison."
    return "ex: Conserver au sec, éviter la lumière directe du soleil."

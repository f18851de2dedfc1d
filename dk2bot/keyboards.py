"""All keyboards and their button labels."""

from __future__ import annotations

from datetime import date

from aiogram.types import (
    InlineKeyboardButton,
    InlineKeyboardMarkup,
    KeyboardButton,
    ReplyKeyboardMarkup,
)
from aiogram.utils.keyboard import InlineKeyboardBuilder

from dk2bot.models import OrderDetails, ParcelCategory
from dk2bot.scheduling import (
    WEEKDAYS_FR,
    is_selectable_day,
    month_grid,
    month_title,
    shift_month,
    time_slots,
)

# ── Form sections (label, callback_value) ───────────────────────────

SECTIONS = [
    ("🚚 Point de ramassage", "pickup"),
    ("📍 Livraison", "delivery"),
    ("📅 Heure du ramassage", "schedule"),
    ("📦 Colis", "parcel"),
    ("👤 Coordonnées", "customer"),
]

SECTION_LABELS: dict[str, str] = {v: lbl for lbl, v in SECTIONS}

CATEGORY_EMOJI: dict[ParcelCategory, str] = {
    ParcelCategory.GENERAL: "📦",
    ParcelCategory.FRAGILE: "🥚",
    ParcelCategory.OVERSIZED: "📐",
    ParcelCategory.HAZARDOUS: "⚠️",
}

GEOLOCATION_BUTTON = "📍 Utiliser ma position"
MANUAL_ENTRY_BUTTON = "✏️ Saisir manuellement"

NOOP = "cal:noop"


def section_done(order: OrderDetails, section: str) -> bool:
    if section == "pickup":
        return order.pickup_address.is_complete
    if section == "delivery":
        return order.delivery_address.is_complete
    if section == "schedule":
        return bool(order.pickup_datetime)
    if section == "parcel":
        return bool(order.parcel.weight and order.parcel.contents)
    if section == "customer":
        c = order.customer
        return bool(c.name and c.phone and c.email)
    return False


# ── Keyboard builders ───────────────────────────────────────────────

def form_menu_kb(order: OrderDetails) -> InlineKeyboardMarkup:
    b = InlineKeyboardBuilder()
    for label, data in SECTIONS:
        mark = "✅ " if section_done(order, data) else ""
        b.button(text=f"{mark}{label}", callback_data=f"section:{data}")
    b.button(text="📋 Voir le récapitulatif", callback_data="form:summary")
    b.adjust(1)
    return b.as_markup()


def location_kb() -> ReplyKeyboardMarkup:
    return ReplyKeyboardMarkup(
        keyboard=[
            [KeyboardButton(text=GEOLOCATION_BUTTON, request_location=True)],
            [KeyboardButton(text=MANUAL_ENTRY_BUTTON)],
        ],
        resize_keyboard=True,
        one_time_keyboard=True,
    )


def phone_kb() -> ReplyKeyboardMarkup:
    return ReplyKeyboardMarkup(
        keyboard=[
            [KeyboardButton(text="📱 Envoyer mon numéro", request_contact=True)],
        ],
        resize_keyboard=True,
        one_time_keyboard=True,
    )


def calendar_kb(year: int, month: int, today: date | None = None) -> InlineKeyboardMarkup:
    """Month view; past days are shown but not clickable."""
    today = today or date.today()
    prev_y, prev_m = shift_month(year, month, -1)
    next_y, next_m = shift_month(year, month, 1)

    rows: list[list[InlineKeyboardButton]] = [
        [
            InlineKeyboardButton(text="<", callback_data=f"cal:nav:{prev_y}-{prev_m:02d}"),
            InlineKeyboardButton(text=month_title(year, month), callback_data=NOOP),
            InlineKeyboardButton(text=">", callback_data=f"cal:nav:{next_y}-{next_m:02d}"),
        ],
        [InlineKeyboardButton(text=d, callback_data=NOOP) for d in WEEKDAYS_FR],
    ]
    for week in month_grid(year, month):
        row = []
        for day in week:
            if day == 0:
                row.append(InlineKeyboardButton(text=" ", callback_data=NOOP))
                continue
            current = date(year, month, day)
            if is_selectable_day(current, today):
                row.append(InlineKeyboardButton(
                    text=str(day),
                    callback_data=f"cal:day:{current.isoformat()}",
                ))
            else:
                row.append(InlineKeyboardButton(text="·", callback_data=NOOP))
        rows.append(row)
    return InlineKeyboardMarkup(inline_keyboard=rows)


def time_slots_kb() -> InlineKeyboardMarkup:
    b = InlineKeyboardBuilder()
    for value, label in time_slots():
        b.button(text=label, callback_data=f"slot:{value}")
    b.adjust(4)
    return b.as_markup()


def category_kb() -> InlineKeyboardMarkup:
    b = InlineKeyboardBuilder()
    for category in ParcelCategory:
        b.button(
            text=f"{CATEGORY_EMOJI[category]} {category.value}",
            callback_data=f"cat:{category.name}",
        )
    b.adjust(2)
    return b.as_markup()


def skip_kb() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [InlineKeyboardButton(text="⏭ Passer", callback_data="skip")]
        ]
    )


def summary_kb() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [InlineKeyboardButton(text="✅ Confirmer la commande", callback_data="order:confirm")],
            [InlineKeyboardButton(text="✏️ Modifier", callback_data="order:back")],
        ]
    )


def confirmed_kb() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [InlineKeyboardButton(text="🔄 Nouvelle commande", callback_data="order:new")]
        ]
    )

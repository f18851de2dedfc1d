"""FSM states for the order wizard conversation."""

from aiogram.fsm.state import State, StatesGroup


class OrderForm(StatesGroup):
    # ── Form: section menu ─────────────────────────────────────────────
    menu = State()

    # ── Pickup / delivery address ──────────────────────────────────────
    pickup_street      = State()   # text or shared location
    pickup_city        = State()
    pickup_postal_code = State()

    delivery_street      = State()
    delivery_city        = State()
    delivery_postal_code = State()

    # ── Schedule ───────────────────────────────────────────────────────
    pickup_date = State()   # inline calendar
    pickup_time = State()   # inline time slots

    # ── Parcel ─────────────────────────────────────────────────────────
    weight       = State()
    dimensions   = State()
    contents     = State()
    category     = State()
    instructions = State()

    # ── Customer ───────────────────────────────────────────────────────
    name  = State()
    phone = State()
    email = State()

    # ── Review ─────────────────────────────────────────────────────────
    summary   = State()
    confirmed = State()

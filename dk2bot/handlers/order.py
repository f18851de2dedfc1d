"""
Order wizard conversation.

/start → section menu ⇄ (pickup · delivery · schedule · parcel · customer)
→ summary → confirm → confirmed → new order

• Progress card: the menu message shows everything collected so far plus
  the live route estimate, and is edited in place where possible.
• Each section is a short run of questions, then back to the menu.
• Summary can go back to the menu without losing anything.
"""

from __future__ import annotations

import logging
import math
import re
from datetime import date

from aiogram import Bot, F, Router
from aiogram.fsm.context import FSMContext
from aiogram.types import CallbackQuery, Message, ReplyKeyboardRemove
from aiogram.utils.text_decorations import html_decoration

from dk2bot.config import settings
from dk2bot.estimator import format_eur
from dk2bot.geolocation import GeolocationError, GeolocationFailure
from dk2bot.keyboards import (
    MANUAL_ENTRY_BUTTON,
    SECTIONS,
    calendar_kb,
    category_kb,
    confirmed_kb,
    form_menu_kb,
    location_kb,
    phone_kb,
    section_done,
    skip_kb,
    summary_kb,
    time_slots_kb,
)
from dk2bot.models import ParcelCategory, WizardStage
from dk2bot.scheduling import (
    format_pickup_datetime,
    instructions_placeholder,
    is_selectable_day,
)
from dk2bot.states import OrderForm
from dk2bot.validation import is_valid_email, is_valid_phone, is_valid_postal_code
from dk2bot.wizard import OrderWizard

logger = logging.getLogger(__name__)
router = Router()

q = html_decoration.quote

TOTAL_SECTIONS = len(SECTIONS)

# Coarser fixes than this are treated as "position unavailable".
MAX_ACCURACY_METERS = 5000

_DIMENSIONS_RE = re.compile(
    r"^\s*(\d+(?:[.,]\d+)?)\s*[x×*]\s*(\d+(?:[.,]\d+)?)\s*[x×*]\s*(\d+(?:[.,]\d+)?)\s*$",
    re.IGNORECASE,
)

MENU_QUESTION = "👇 <b>Choisissez une section à compléter :</b>"
CONTENTS_QUESTION = "📝 <b>Description du contenu :</b>"

# ── Helper: build the progress card ──────────────────────────────────

def _bar(done: int) -> str:
    filled = "▰" * done
    empty = "▱" * (TOTAL_SECTIONS - done)
    return f"Sections {done}/{TOTAL_SECTIONS}  {filled}{empty}"


def _card(wizard: OrderWizard, question: str = "") -> str:
    """Accumulating summary of the order being entered."""
    order = wizard.order
    done = sum(section_done(order, key) for _, key in SECTIONS)
    lines: list[str] = [
        "<b>Livraison DK2 • Nouvelle commande</b>\n"
        "<i>Estimation immédiate, confirmation par SMS et e-mail</i>\n"
        f"{_bar(done)}\n"
    ]

    pickup = order.pickup_address
    if pickup.street or pickup.city or pickup.postal_code:
        lines.append(f"  ✅ Ramassage : {q(pickup.one_line())}")
    delivery = order.delivery_address
    if delivery.street or delivery.city or delivery.postal_code:
        lines.append(f"  ✅ Livraison : {q(delivery.one_line())}")
    if order.pickup_date:
        when = format_pickup_datetime(order.pickup_datetime) or order.pickup_date
        lines.append(f"  ✅ Ramassage prévu : {when}")
    parcel = order.parcel
    if parcel.weight:
        lines.append(f"  ✅ Poids : {q(parcel.weight)} kg")
    if parcel.length:
        lines.append(f"  ✅ Dimensions : {q(parcel.length)}×{q(parcel.width)}×{q(parcel.height)} cm")
    if parcel.contents:
        lines.append(f"  ✅ Contenu : {q(parcel.contents)} ({parcel.category.value})")
    if parcel.special_instructions:
        lines.append(f"  ✅ Instructions : <i>{q(parcel.special_instructions)}</i>")
    customer = order.customer
    if customer.name:
        lines.append(f"  ✅ Nom : {q(customer.name)}")
    if customer.phone:
        lines.append(f"  ✅ Téléphone : {q(customer.phone)}")
    if customer.email:
        lines.append(f"  ✅ E-mail : {q(customer.email)}")

    estimate = wizard.route_estimate
    if estimate:
        lines.append(
            f"\n💶 <b>Coût estimé : {format_eur(estimate.cost)}</b>\n"
            f"     {estimate.distance_km} km / ~{estimate.time_minutes} minutes"
        )
    if wizard.form_info:
        lines.append(f"\nℹ️ {q(wizard.form_info)}")
    if wizard.form_error:
        lines.append(f"\n⚠️ {q(wizard.form_error)}")

    if question:
        lines.append(f"\n{question}")

    return "\n".join(lines)


def _summary(wizard: OrderWizard) -> str:
    order = wizard.order
    parcel = order.parcel
    customer = order.customer
    dims = (
        f"{q(parcel.length)}×{q(parcel.width)}×{q(parcel.height)} cm"
        if parcel.length else "non précisées"
    )
    lines = [
        "<b>📋 Récapitulatif de la commande</b>\n",
        f"🚚 <b>Ramassage :</b> {q(order.pickup_address.one_line())}",
        f"📍 <b>Livraison :</b> {q(order.delivery_address.one_line())}",
        f"📅 <b>Prévu pour le :</b> {format_pickup_datetime(order.pickup_datetime)}\n",
        f"📦 <b>Colis :</b> {q(parcel.contents)} ({parcel.category.value})",
        f"⚖️ <b>Poids :</b> {q(parcel.weight)} kg · 📐 {dims}",
    ]
    if parcel.special_instructions:
        lines.append(f"📝 <b>Instructions :</b> <i>{q(parcel.special_instructions)}</i>")
    lines += [
        "",
        f"👤 {q(customer.name)}",
        f"📱 {q(customer.phone)}",
        f"✉️ {q(customer.email)}",
    ]
    estimate = wizard.route_estimate
    if estimate:
        lines += [
            "",
            f"💶 <b>Coût estimé : {format_eur(estimate.cost)}</b>",
            f"{estimate.distance_km} km de trajet",
            f"~{estimate.time_minutes} minutes de trajet estimées",
        ]
    if wizard.form_error:
        lines.append(f"\n⚠️ {q(wizard.form_error)}")
    return "\n".join(lines)


async def _safe_edit(
    cb: CallbackQuery,
    text: str,
    reply_markup=None,  # noqa: ANN001
) -> None:
    """Edit the card; old or already-edited messages get a fresh one instead."""
    try:
        await cb.message.edit_text(text, reply_markup=reply_markup)  # type: ignore[union-attr]
    except Exception:
        await cb.message.answer(text, reply_markup=reply_markup)  # type: ignore[union-attr]


async def show_form(message: Message, wizard: OrderWizard, state: FSMContext) -> None:
    await message.answer(
        _card(wizard, MENU_QUESTION),
        reply_markup=form_menu_kb(wizard.order),
    )
    await state.set_state(OrderForm.menu)


async def show_current_step(message: Message, wizard: OrderWizard, state: FSMContext) -> None:
    """Re-send the card matching the wizard's stage."""
    if wizard.stage is WizardStage.SUMMARY:
        await message.answer(_summary(wizard), reply_markup=summary_kb())
        await state.set_state(OrderForm.summary)
    elif wizard.stage is WizardStage.CONFIRMED:
        await message.answer(
            "✅ Votre commande est confirmée.", reply_markup=confirmed_kb(),
        )
        await state.set_state(OrderForm.confirmed)
    else:
        await show_form(message, wizard, state)


async def _back_to_menu(message: Message, wizard: OrderWizard, state: FSMContext) -> None:
    """Clear any leftover reply keyboard, then show the menu card."""
    await message.answer("👍", reply_markup=ReplyKeyboardRemove())
    await show_form(message, wizard, state)


# ── Section menu ─────────────────────────────────────────────────────

@router.callback_query(OrderForm.menu, F.data.startswith("section:"))
async def pick_section(cb: CallbackQuery, state: FSMContext, wizard: OrderWizard) -> None:
    section = cb.data.split(":", 1)[1]  # type: ignore[union-attr]
    wizard.form_error = None

    if section == "pickup":
        await _safe_edit(cb, _card(wizard, "🚚 <b>Point de ramassage</b>"))
        await cb.message.answer(  # type: ignore[union-attr]
            "Partagez votre position ou saisissez la <b>rue</b> de ramassage :",
            reply_markup=location_kb(),
        )
        await state.set_state(OrderForm.pickup_street)
    elif section == "delivery":
        await _safe_edit(cb, _card(wizard, "📍 <b>Rue de livraison :</b>"))
        await state.set_state(OrderForm.delivery_street)
    elif section == "schedule":
        today = date.today()
        shown = date.fromisoformat(wizard.order.pickup_date) if wizard.order.pickup_date else today
        await _safe_edit(
            cb,
            _card(wizard, "📅 <b>Date du ramassage :</b>"),
            reply_markup=calendar_kb(shown.year, shown.month, today),
        )
        await state.set_state(OrderForm.pickup_date)
    elif section == "parcel":
        await _safe_edit(cb, _card(wizard, "⚖️ <b>Poids du colis en kg</b> (ex: 12.5) :"))
        await state.set_state(OrderForm.weight)
    elif section == "customer":
        await _safe_edit(cb, _card(wizard, "👤 <b>Votre nom complet :</b>"))
        await state.set_state(OrderForm.name)
    await cb.answer()


# ── Pickup address (with geolocation) ────────────────────────────────

def _coordinates(message: Message) -> tuple[float, float]:
    location = message.location
    if location is None:
        raise GeolocationError(GeolocationFailure.POSITION_UNAVAILABLE, "no location")
    if location.horizontal_accuracy and location.horizontal_accuracy > MAX_ACCURACY_METERS:
        raise GeolocationError(
            GeolocationFailure.POSITION_UNAVAILABLE,
            f"accuracy {location.horizontal_accuracy:.0f} m",
        )
    return location.latitude, location.longitude


@router.message(OrderForm.pickup_street, F.location)
async def share_location(message: Message, state: FSMContext, wizard: OrderWizard) -> None:
    try:
        latitude, longitude = _coordinates(message)
        wizard.apply_geolocation(latitude, longitude)
    except GeolocationError as exc:
        wizard.report_geolocation_error(exc)
    except Exception as exc:
        logger.error("Geolocation lookup failed: %s", exc, exc_info=True)
        wizard.report_geolocation_error(GeolocationError(GeolocationFailure.OTHER, str(exc)))

    if wizard.form_error:
        await message.answer(
            _card(wizard, "✏️ <b>Saisissez la rue de ramassage :</b>"),
            reply_markup=ReplyKeyboardRemove(),
        )
        return
    await _back_to_menu(message, wizard, state)


@router.message(OrderForm.pickup_street, F.text == MANUAL_ENTRY_BUTTON)
async def manual_pickup(message: Message) -> None:
    await message.answer(
        "✏️ <b>Saisissez la rue de ramassage :</b>",
        reply_markup=ReplyKeyboardRemove(),
    )


async def _address_text(message: Message) -> str | None:
    value = (message.text or "").strip()
    if len(value) < 2:
        await message.answer("⚠️ Veuillez saisir une valeur valide.")
        return None
    return value


async def _postal_code_text(message: Message) -> str | None:
    value = (message.text or "").strip()
    if not is_valid_postal_code(value):
        await message.answer("⚠️ Le code postal doit comporter 5 chiffres (ex: 75001).")
        return None
    return value


@router.message(OrderForm.pickup_street)
async def type_pickup_street(message: Message, state: FSMContext, wizard: OrderWizard) -> None:
    value = await _address_text(message)
    if value is None:
        return
    wizard.set_pickup_address_field("street", value)
    await message.answer(
        _card(wizard, "🏙 <b>Ville de ramassage :</b>"),
        reply_markup=ReplyKeyboardRemove(),
    )
    await state.set_state(OrderForm.pickup_city)


@router.message(OrderForm.pickup_city)
async def type_pickup_city(message: Message, state: FSMContext, wizard: OrderWizard) -> None:
    value = await _address_text(message)
    if value is None:
        return
    wizard.set_pickup_address_field("city", value)
    await message.answer(_card(wizard, "🔢 <b>Code postal de ramassage</b> (5 chiffres) :"))
    await state.set_state(OrderForm.pickup_postal_code)


@router.message(OrderForm.pickup_postal_code)
async def type_pickup_postal_code(message: Message, state: FSMContext, wizard: OrderWizard) -> None:
    value = await _postal_code_text(message)
    if value is None:
        return
    wizard.set_pickup_address_field("postal_code", value)
    wizard.form_info = None
    await show_form(message, wizard, state)


# ── Delivery address ─────────────────────────────────────────────────

@router.message(OrderForm.delivery_street)
async def type_delivery_street(message: Message, state: FSMContext, wizard: OrderWizard) -> None:
    value = await _address_text(message)
    if value is None:
        return
    wizard.set_delivery_address_field("street", value)
    await message.answer(_card(wizard, "🏙 <b>Ville de livraison :</b>"))
    await state.set_state(OrderForm.delivery_city)


@router.message(OrderForm.delivery_city)
async def type_delivery_city(message: Message, state: FSMContext, wizard: OrderWizard) -> None:
    value = await _address_text(message)
    if value is None:
        return
    wizard.set_delivery_address_field("city", value)
    await message.answer(_card(wizard, "🔢 <b>Code postal de livraison</b> (5 chiffres) :"))
    await state.set_state(OrderForm.delivery_postal_code)


@router.message(OrderForm.delivery_postal_code)
async def type_delivery_postal_code(message: Message, state: FSMContext, wizard: OrderWizard) -> None:
    value = await _postal_code_text(message)
    if value is None:
        return
    wizard.set_delivery_address_field("postal_code", value)
    await show_form(message, wizard, state)


# ── Schedule: calendar → time slot ───────────────────────────────────

@router.callback_query(F.data == "cal:noop")
async def calendar_noop(cb: CallbackQuery) -> None:
    await cb.answer()


@router.callback_query(OrderForm.pickup_date, F.data.startswith("cal:nav:"))
async def calendar_navigate(cb: CallbackQuery) -> None:
    year, month = (int(x) for x in cb.data.split(":")[2].split("-"))  # type: ignore[union-attr]
    try:
        await cb.message.edit_reply_markup(reply_markup=calendar_kb(year, month))  # type: ignore[union-attr]
    except Exception as exc:
        logger.debug("Calendar redraw skipped: %s", exc)
    await cb.answer()


@router.callback_query(OrderForm.pickup_date, F.data.startswith("cal:day:"))
async def pick_date(cb: CallbackQuery, state: FSMContext, wizard: OrderWizard) -> None:
    picked = date.fromisoformat(cb.data.split(":")[2])  # type: ignore[union-attr]
    if not is_selectable_day(picked):
        await cb.answer("⛔ Cette date est passée.", show_alert=True)
        return
    wizard.set_pickup_date(picked.isoformat())
    await _safe_edit(
        cb,
        _card(wizard, f"🕗 <b>Heure du ramassage le {picked:%d/%m/%Y} :</b>"),
        reply_markup=time_slots_kb(),
    )
    await state.set_state(OrderForm.pickup_time)
    await cb.answer()


@router.callback_query(OrderForm.pickup_time, F.data.startswith("slot:"))
async def pick_time(cb: CallbackQuery, state: FSMContext, wizard: OrderWizard) -> None:
    wizard.set_pickup_time(cb.data.split(":", 1)[1])  # type: ignore[union-attr]
    await _safe_edit(
        cb,
        _card(wizard, MENU_QUESTION),
        reply_markup=form_menu_kb(wizard.order),
    )
    await state.set_state(OrderForm.menu)
    await cb.answer()


# ── Parcel ───────────────────────────────────────────────────────────

@router.message(OrderForm.weight)
async def type_weight(message: Message, state: FSMContext, wizard: OrderWizard) -> None:
    raw = (message.text or "").replace(",", ".").strip()
    try:
        w = float(raw)
        if not math.isfinite(w) or w <= 0:
            raise ValueError
    except ValueError:
        await message.answer("⚠️ Entrez un nombre supérieur à 0 (ex: 12.5).")
        return
    wizard.set_parcel_field("weight", raw)
    await message.answer(
        _card(
            wizard,
            "📐 <b>Dimensions en cm</b> : longueur x largeur x hauteur (ex: 40x30x20)\n"
            "Facultatif : appuyez sur « ⏭ Passer ».",
        ),
        reply_markup=skip_kb(),
    )
    await state.set_state(OrderForm.dimensions)


@router.callback_query(OrderForm.dimensions, F.data == "skip")
async def skip_dimensions(cb: CallbackQuery, state: FSMContext, wizard: OrderWizard) -> None:
    await _safe_edit(cb, _card(wizard, CONTENTS_QUESTION))
    await state.set_state(OrderForm.contents)
    await cb.answer()


@router.message(OrderForm.dimensions)
async def type_dimensions(message: Message, state: FSMContext, wizard: OrderWizard) -> None:
    match = _DIMENSIONS_RE.match(message.text or "")
    if not match:
        await message.answer(
            "⚠️ Format attendu : longueur x largeur x hauteur (ex: 40x30x20).",
            reply_markup=skip_kb(),
        )
        return
    length, width, height = (v.replace(",", ".") for v in match.groups())
    wizard.set_parcel_field("length", length)
    wizard.set_parcel_field("width", width)
    wizard.set_parcel_field("height", height)
    await message.answer(_card(wizard, CONTENTS_QUESTION))
    await state.set_state(OrderForm.contents)


@router.message(OrderForm.contents)
async def type_contents(message: Message, state: FSMContext, wizard: OrderWizard) -> None:
    contents = (message.text or "").strip()
    if not contents:
        await message.answer("⚠️ La description du contenu est obligatoire.")
        return
    wizard.set_parcel_field("contents", contents)
    await message.answer(
        _card(wizard, "🏷 <b>Catégorie du colis :</b>"),
        reply_markup=category_kb(),
    )
    await state.set_state(OrderForm.category)


@router.callback_query(OrderForm.category, F.data.startswith("cat:"))
async def pick_category(cb: CallbackQuery, state: FSMContext, wizard: OrderWizard) -> None:
    category = ParcelCategory[cb.data.split(":", 1)[1]]  # type: ignore[union-attr]
    wizard.set_parcel_category(category)
    await _safe_edit(
        cb,
        _card(
            wizard,
            "⚠️ <b>Instructions spéciales de manutention</b> (facultatif)\n"
            f"<i>{q(instructions_placeholder(category))}</i>",
        ),
        reply_markup=skip_kb(),
    )
    await state.set_state(OrderForm.instructions)
    await cb.answer()


@router.callback_query(OrderForm.instructions, F.data == "skip")
async def skip_instructions(cb: CallbackQuery, state: FSMContext, wizard: OrderWizard) -> None:
    wizard.set_parcel_field("special_instructions", "")
    await _safe_edit(
        cb,
        _card(wizard, MENU_QUESTION),
        reply_markup=form_menu_kb(wizard.order),
    )
    await state.set_state(OrderForm.menu)
    await cb.answer()


@router.message(OrderForm.instructions)
async def type_instructions(message: Message, state: FSMContext, wizard: OrderWizard) -> None:
    wizard.set_parcel_field("special_instructions", (message.text or "").strip())
    await show_form(message, wizard, state)


# ── Customer ─────────────────────────────────────────────────────────

def _normalize_phone(raw: str) -> str:
    """Shared contacts come as +33XXXXXXXXX; the form expects 0XXXXXXXXX."""
    phone = raw.strip()
    if phone.startswith("+33"):
        return "0" + phone[3:].lstrip()
    if phone.startswith("33") and len(phone) == 11:
        return "0" + phone[2:]
    return phone


@router.message(OrderForm.name)
async def type_name(message: Message, state: FSMContext, wizard: OrderWizard) -> None:
    name = (message.text or "").strip()
    if len(name) < 2:
        await message.answer("⚠️ Veuillez saisir votre nom complet.")
        return
    wizard.set_customer_field("name", name)
    await message.answer(_card(wizard, "📱 <b>Numéro de téléphone :</b>"))
    await message.answer(
        "Appuyez sur le bouton ci-dessous ou saisissez le numéro (ex: 06 12 34 56 78) :",
        reply_markup=phone_kb(),
    )
    await state.set_state(OrderForm.phone)


async def _accept_phone(message: Message, state: FSMContext, wizard: OrderWizard, raw: str) -> None:
    phone = _normalize_phone(raw)
    if not is_valid_phone(phone):
        await message.answer(
            "⚠️ Le numéro doit comporter 10 chiffres et commencer par 0 "
            "(ex: 06 12 34 56 78)."
        )
        return
    wizard.set_customer_field("phone", phone)
    await message.answer(
        _card(wizard, "✉️ <b>Adresse e-mail</b> (pour la confirmation) :"),
        reply_markup=ReplyKeyboardRemove(),
    )
    await state.set_state(OrderForm.email)


@router.message(OrderForm.phone, F.contact)
async def share_phone_contact(message: Message, state: FSMContext, wizard: OrderWizard) -> None:
    await _accept_phone(message, state, wizard, message.contact.phone_number)  # type: ignore[union-attr]


@router.message(OrderForm.phone)
async def type_phone(message: Message, state: FSMContext, wizard: OrderWizard) -> None:
    await _accept_phone(message, state, wizard, message.text or "")


@router.message(OrderForm.email)
async def type_email(message: Message, state: FSMContext, wizard: OrderWizard) -> None:
    email = (message.text or "").strip()
    if not is_valid_email(email):
        await message.answer("⚠️ Le format de l'adresse e-mail est invalide.")
        return
    wizard.set_customer_field("email", email)
    await show_form(message, wizard, state)


# ── Summary ──────────────────────────────────────────────────────────

@router.callback_query(OrderForm.menu, F.data == "form:summary")
async def open_summary(cb: CallbackQuery, state: FSMContext, wizard: OrderWizard) -> None:
    if not wizard.proceed_to_summary():
        await _safe_edit(
            cb,
            _card(wizard, MENU_QUESTION),
            reply_markup=form_menu_kb(wizard.order),
        )
        await cb.answer("⚠️ Formulaire incomplet")
        return
    await _safe_edit(cb, _summary(wizard), reply_markup=summary_kb())
    await state.set_state(OrderForm.summary)
    await cb.answer()


@router.callback_query(OrderForm.summary, F.data == "order:back")
async def back_to_form(cb: CallbackQuery, state: FSMContext, wizard: OrderWizard) -> None:
    if wizard.stage is not WizardStage.SUMMARY:
        await cb.answer("⌛ Ce bouton n'est plus actif")
        return
    wizard.back_to_form()
    await _safe_edit(
        cb,
        _card(wizard, "👇 <b>Choisissez une section à modifier :</b>"),
        reply_markup=form_menu_kb(wizard.order),
    )
    await state.set_state(OrderForm.menu)
    await cb.answer()


@router.callback_query(OrderForm.summary, F.data == "order:confirm")
async def confirm_order(cb: CallbackQuery, state: FSMContext, wizard: OrderWizard, bot: Bot) -> None:
    # A second tap waits for the first one to finish, then lands here.
    if wizard.stage is not WizardStage.SUMMARY:
        await cb.answer("⏳ Commande déjà confirmée")
        return

    await cb.answer()
    await _safe_edit(cb, _summary(wizard) + "\n\n⏳ <i>Confirmation en cours…</i>")
    confirmed = await wizard.confirm()

    if not confirmed:
        await _safe_edit(cb, _summary(wizard), reply_markup=summary_kb())
        return

    # The generated text is Markdown-ish free text: send it unparsed.
    await cb.message.answer(  # type: ignore[union-attr]
        wizard.confirmation_message,
        parse_mode=None,
        reply_markup=confirmed_kb(),
    )
    if wizard.notification_warning:
        await cb.message.answer(f"⚠️ {q(wizard.notification_warning)}")  # type: ignore[union-attr]
    await state.set_state(OrderForm.confirmed)
    await _notify_admins(bot, wizard, cb.from_user.username or "")


async def _notify_admins(bot: Bot, wizard: OrderWizard, username: str) -> None:
    order = wizard.order
    estimate = wizard.route_estimate
    username_part = f" (@{q(username)})" if username else ""
    cost_part = f"\n💶 {format_eur(estimate.cost)} · {estimate.distance_km} km" if estimate else ""
    warning_part = "\n⚠️ Notification client en échec" if wizard.notification_warning else ""
    text = (
        f"🆕 <b>Nouvelle commande</b>\n\n"
        f"👤 {q(order.customer.name)}{username_part}\n"
        f"📱 {q(order.customer.phone)} · ✉️ {q(order.customer.email)}\n\n"
        f"🚚 {q(order.pickup_address.one_line())}\n"
        f"📍 {q(order.delivery_address.one_line())}\n"
        f"📅 {format_pickup_datetime(order.pickup_datetime)}\n"
        f"📦 {q(order.parcel.contents)} ({order.parcel.category.value}) · "
        f"{q(order.parcel.weight)} kg"
        f"{cost_part}{warning_part}"
    )
    for admin_id in settings.admin_ids:
        try:
            await bot.send_message(admin_id, text)
        except Exception as exc:
            logger.error("Failed to notify admin %s: %s", admin_id, exc)


# ── New order ────────────────────────────────────────────────────────

@router.callback_query(F.data == "order:new")
async def new_order(cb: CallbackQuery, state: FSMContext, wizard: OrderWizard) -> None:
    wizard.start_new_order()
    await cb.message.answer(  # type: ignore[union-attr]
        "<b>🔄 Nouvelle commande</b>\n\n"
        + _card(wizard, MENU_QUESTION),
        reply_markup=form_menu_kb(wizard.order),
    )
    await state.set_state(OrderForm.menu)
    await cb.answer()

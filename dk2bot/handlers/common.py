"""Common handlers: /start, /help, error handler, fallback.

The fallback_router also includes a CATCH-ALL for callback queries
so that when FSM state is lost (e.g. after a restart), inline-button
presses start a fresh order instead of silently disappearing.
"""

from __future__ import annotations

import logging

from aiogram import F, Router
from aiogram.filters import Command, CommandStart
from aiogram.fsm.context import FSMContext
from aiogram.types import CallbackQuery, ErrorEvent, Message, ReplyKeyboardRemove

from dk2bot.handlers.order import show_current_step, show_form
from dk2bot.middleware import WIZARD_KEY
from dk2bot.wizard import OrderWizard

logger = logging.getLogger(__name__)
router = Router()
fallback_router = Router()

# ── Visual constants ─────────────────────────────────────────
_DIV = "━" * 20

WELCOME_TEXT = (
    "🚚  <b>Livraison DK2</b>\n"
    f"{_DIV}\n\n"
    "Transport de colis, du ramassage à la livraison.\n\n"
    "✓ Estimation du coût immédiate\n"
    "✓ Ramassage planifié du lundi au dimanche, 8h–17h30\n"
    "✓ Confirmation par SMS et par e-mail\n\n"
    f"{_DIV}"
)


# ═══════════════════════════════════════════════════════════════
# /start
# ═══════════════════════════════════════════════════════════════

@router.message(CommandStart())
async def cmd_start(message: Message, state: FSMContext, wizard: OrderWizard) -> None:
    await state.clear()
    wizard.start_new_order()
    try:
        # Remove any leftover reply keyboard (e.g. location / phone button)
        await message.answer(WELCOME_TEXT, reply_markup=ReplyKeyboardRemove())
        await show_form(message, wizard, state)
    except Exception as exc:
        logger.error("/start failed: %s", exc)
        await message.answer(
            "Le service est momentanément indisponible. Réessayez dans une minute.",
            parse_mode=None,
        )


@router.message(F.text.regexp(r"(?i)^(start|commencer|nouvelle commande|menu)$"))
async def text_start(message: Message, state: FSMContext, wizard: OrderWizard) -> None:
    await cmd_start(message, state, wizard)


# ═══════════════════════════════════════════════════════════════
# /help
# ═══════════════════════════════════════════════════════════════

@router.message(Command("help"))
async def cmd_help(message: Message) -> None:
    await message.answer(
        "🚚 <b>Livraison DK2 — Commande de transport</b>\n\n"
        "▸ /start — Nouvelle commande\n"
        "▸ /help — Aide\n\n"
        "Complétez chaque section, vérifiez le récapitulatif puis confirmez.",
    )


# ═══════════════════════════════════════════════════════════════
# Global error handler
# ═══════════════════════════════════════════════════════════════

@router.error()
async def global_error_handler(event: ErrorEvent) -> None:
    logger.error(
        "Unhandled error in update %s: %s",
        event.update.update_id if event.update else "?",
        event.exception,
        exc_info=event.exception,
    )


# ═══════════════════════════════════════════════════════════════
# FALLBACK: catch-all for expired/lost sessions
# ═══════════════════════════════════════════════════════════════

@fallback_router.callback_query()
async def expired_callback(cb: CallbackQuery, state: FSMContext, wizard: OrderWizard) -> None:
    """Handle any callback that wasn't caught by FSM-state handlers.

    Without a stored order (the bot restarted and MemoryStorage was wiped)
    a new order starts. Otherwise the button belongs to an old card: the
    order is kept and its current step is shown again.
    """
    logger.info(
        "Expired/unmatched callback from user %s: %s",
        cb.from_user.id, cb.data,
    )
    if WIZARD_KEY in await state.get_data():
        await cb.answer("⌛ Bouton expiré", show_alert=False)
        await show_current_step(cb.message, wizard, state)  # type: ignore[arg-type]
        return

    await cb.answer("⏳ Session expirée — nouvelle commande", show_alert=False)
    await state.clear()
    wizard.start_new_order()
    await show_form(cb.message, wizard, state)  # type: ignore[arg-type]


@fallback_router.message()
async def fallback_message(message: Message) -> None:
    """Anything typed outside of a question (e.g. after a restart)."""
    await message.answer(
        "✉️ Message reçu.\n\nPour passer une commande, envoyez /start",
        reply_markup=ReplyKeyboardRemove(),
    )

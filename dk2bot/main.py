"""Livraison DK2 order bot — entry point.

1. Confirmation generator chosen once from settings (LLM or template).
2. Notification providers shared by every chat (dispatcher workflow data).
3. Auto-restart polling on crash with backoff.
"""

from __future__ import annotations

import asyncio
import logging
import sys

from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode
from aiogram.fsm.storage.memory import MemoryStorage
from aiogram.types import BotCommand

from dk2bot.config import Settings, settings
from dk2bot.handlers import common, order
from dk2bot.handlers.common import fallback_router
from dk2bot.llm import build_generator
from dk2bot.middleware import WizardMiddleware
from dk2bot.notifications import (
    NotificationDispatcher,
    SimulatedEmailTransport,
    SimulatedSmsGateway,
)


def _setup_logging() -> None:
    fmt = logging.Formatter(
        "%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(fmt)
    logging.root.handlers = [handler]
    logging.root.setLevel(settings.LOG_LEVEL)


def build_notifier(cfg: Settings) -> NotificationDispatcher:
    return NotificationDispatcher(
        sms=SimulatedSmsGateway(cfg.NOTIFY_LATENCY_SECONDS, cfg.NOTIFY_FAILURE_RATE),
        email=SimulatedEmailTransport(cfg.NOTIFY_LATENCY_SECONDS, cfg.NOTIFY_FAILURE_RATE),
        timeout=cfg.NOTIFY_TIMEOUT_SECONDS,
    )


def build_dispatcher(cfg: Settings) -> Dispatcher:
    dp = Dispatcher(storage=MemoryStorage())
    dp["generator"] = build_generator(cfg)
    dp["notifier"] = build_notifier(cfg)

    # One instance for both: it holds the per-chat locks.
    wizard_middleware = WizardMiddleware()
    dp.message.middleware(wizard_middleware)
    dp.callback_query.middleware(wizard_middleware)

    # Router order matters: common first, then the wizard, fallback last.
    dp.include_router(common.router)
    dp.include_router(order.router)
    dp.include_router(fallback_router)
    return dp


# ═══════════════════════════════════════════════════════════════
# MAIN
# ═══════════════════════════════════════════════════════════════

async def main() -> None:
    _setup_logging()
    logger = logging.getLogger("bot")
    logger.info("Starting Livraison DK2 Bot")

    bot = Bot(
        token=settings.BOT_TOKEN,
        default=DefaultBotProperties(parse_mode=ParseMode.HTML),
    )

    await bot.set_my_commands([
        BotCommand(command="start", description="📦 Nouvelle commande"),
        BotCommand(command="help", description="ℹ️ Aide"),
    ])

    dp = build_dispatcher(settings)

    # ── Polling with auto-restart ─────────────────────────────
    MAX_RETRIES = 100
    for attempt in range(1, MAX_RETRIES + 1):
        try:
            await bot.delete_webhook(drop_pending_updates=False)
            logger.info("Polling started (attempt #%d)", attempt)
            await dp.start_polling(bot, polling_timeout=30)
            # If start_polling returns cleanly → normal shutdown
            logger.info("Polling stopped cleanly")
            break

        except Exception as exc:
            logger.error(
                "Polling crashed (attempt #%d/%d): %s",
                attempt, MAX_RETRIES, exc,
                exc_info=True,
            )
            if attempt < MAX_RETRIES:
                wait = min(attempt * 5, 60)   # 5s → 10s → … → cap at 60s
                logger.info("Restarting polling in %ds…", wait)
                await asyncio.sleep(wait)
            else:
                logger.critical("Max retries (%d) reached — exiting", MAX_RETRIES)

    await bot.session.close()
    logger.info("Bot stopped")


if __name__ == "__main__":
    asyncio.run(main())

"""Wizard middleware: loads the chat's order wizard before each handler.

The wizard lives in FSM storage as a plain-dict snapshot. It is rebuilt
with the shared generator / notifier (dispatcher workflow data), handed
to the handler as ``wizard`` and written back once the handler returns.

Updates of one chat are handled one at a time, so a slow handler
(confirmation) never saves a stale snapshot over newer edits.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Tuple

from aiogram import BaseMiddleware
from aiogram.fsm.context import FSMContext
from aiogram.types import TelegramObject

from dk2bot.wizard import OrderWizard

logger = logging.getLogger(__name__)

WIZARD_KEY = "wizard"


class WizardMiddleware(BaseMiddleware):
    def __init__(self) -> None:
        super().__init__()
        self._locks: Dict[Tuple[int, int], asyncio.Lock] = {}

    async def __call__(
        self,
        handler: Callable[[TelegramObject, Dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: Dict[str, Any],
    ) -> Any:
        state: FSMContext | None = data.get("state")
        if state is None:
            return await handler(event, data)

        lock = self._locks.setdefault((state.key.chat_id, state.key.user_id), asyncio.Lock())
        async with lock:
            stored = await state.get_data()
            try:
                wizard = OrderWizard.restore(
                    stored.get(WIZARD_KEY), data["generator"], data["notifier"],
                )
            except (KeyError, ValueError) as exc:
                # Snapshot written by an older layout: start a fresh order.
                logger.warning("Discarding unreadable wizard snapshot: %s", exc)
                wizard = OrderWizard(data["generator"], data["notifier"])
            data["wizard"] = wizard

            result = await handler(event, data)
            await state.update_data({WIZARD_KEY: wizard.snapshot()})
            return result

"""
Bot middleware.
"""

import logging
from typing import Any, Awaitable, Callable, Dict

from aiogram import BaseMiddleware
from aiogram.types import CallbackQuery, Message, PreCheckoutQuery, TelegramObject

from ..app.services.sessions import SessionRegistry

logger = logging.getLogger(__name__)


class SessionMiddleware(BaseMiddleware):
    """Attaches the chat's client session and runs the first auth check."""

    def __init__(self, registry: SessionRegistry):
        self.registry = registry

    async def __call__(
        self,
        handler: Callable[[TelegramObject, Dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: Dict[str, Any]
    ) -> Any:
        # The storefront is private-chat only
        if isinstance(event, Message):
            if event.chat.type != "private":
                return
        elif isinstance(event, CallbackQuery):
            if event.message and event.message.chat.type != "private":
                return

        user = getattr(event, "from_user", None)
        if user is None:
            return await handler(event, data)

        data["telegram_user"] = {
            "id": user.id,
            "username": user.username,
            "first_name": user.first_name,
            "language_code": user.language_code,
        }

        session = self.registry.get(user.id)
        # Payment callbacks must be answered quickly; skip the network round-trip
        if not isinstance(event, PreCheckoutQuery):
            await session.ensure_auth_checked()
        data["session"] = session
        return await handler(event, data)

"""
Telegram Bot - entry point.
"""

import asyncio
import logging
from typing import Optional

from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode
from aiogram.fsm.storage.memory import MemoryStorage

from ..app.config import settings
from ..app.services.sessions import SessionRegistry
from .handlers import router
from .middlewares import SessionMiddleware

logger = logging.getLogger(__name__)


def log_level(level: Optional[str] = None) -> str:
    """DEBUG mode overrides LOG_LEVEL."""
    if settings.DEBUG:
        return "DEBUG"
    return (level or settings.LOG_LEVEL).upper()


def setup_logging(level: Optional[str] = None) -> None:
    logging.basicConfig(
        level=log_level(level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def create_dispatcher(registry: SessionRegistry) -> Dispatcher:
    """Dispatcher with FSM storage, session middleware and all routers."""
    dp = Dispatcher(storage=MemoryStorage())

    middleware = SessionMiddleware(registry)
    dp.message.middleware(middleware)
    dp.callback_query.middleware(middleware)
    dp.pre_checkout_query.middleware(middleware)

    dp.include_router(router)
    return dp


async def main(bot_token: str, api_base_url: Optional[str] = None):
    """Runs the bot until interrupted."""
    bot = Bot(
        token=bot_token,
        default=DefaultBotProperties(parse_mode=ParseMode.HTML)
    )
    registry = SessionRegistry(api_base_url or settings.API_BASE_URL, timeout=settings.API_TIMEOUT)
    dp = create_dispatcher(registry)

    logger.info("%s bot v%s starting (API: %s)...", settings.APP_NAME, settings.APP_VERSION, registry.base_url)

    sweeper = asyncio.create_task(registry.sweep(settings.SESSION_IDLE_TIMEOUT, settings.SESSION_SWEEP_INTERVAL))

    try:
        webhook_info = await bot.get_webhook_info()
        if webhook_info.url:
            logger.warning("Found active webhook: %s, deleting...", webhook_info.url)
            await bot.delete_webhook(drop_pending_updates=True)

        await dp.start_polling(bot, allowed_updates=["message", "callback_query", "pre_checkout_query"])
    finally:
        sweeper.cancel()
        try:
            await sweeper
        except asyncio.CancelledError:
            pass
        await registry.close_all()
        await bot.session.close()


def run_bot(bot_token: str, api_base_url: Optional[str] = None):
    """Sync wrapper for starting the bot."""
    setup_logging()
    asyncio.run(main(bot_token, api_base_url))

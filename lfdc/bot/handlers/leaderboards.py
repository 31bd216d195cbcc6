"""
Leaderboards.
"""

import logging

from aiogram import F, Router
from aiogram.filters import Command
from aiogram.types import CallbackQuery, Message

from ...app.services.api_client import ApiError
from ...app.services.sessions import Session
from ..keyboards import LEADERBOARD_TABS, leaderboard_tabs
from ..views import render_leaderboard
from .common import Target, show

logger = logging.getLogger(__name__)

router = Router()


@router.message(Command("leaderboards"))
async def cmd_leaderboards(message: Message, session: Session):
    await show_leaderboard(message, session, "users")


@router.callback_query(F.data.startswith("lb:"))
async def callback_leaderboard(callback: CallbackQuery, session: Session):
    tab = callback.data.split(":", 1)[1]
    if tab not in LEADERBOARD_TABS:
        await callback.answer("Unknown leaderboard", show_alert=True)
        return
    await show_leaderboard(callback, session, tab)


async def show_leaderboard(target: Target, session: Session, tab: str):
    try:
        rows = await session.api.leaderboard(tab)
    except ApiError as e:
        logger.error("Could not load %s leaderboard: %s", tab, e.message)
        await show(target, "❌ Failed to load leaderboard.", leaderboard_tabs(tab))
        return
    await show(target, render_leaderboard(tab, rows), leaderboard_tabs(tab, rows))

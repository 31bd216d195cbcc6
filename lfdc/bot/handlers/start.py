"""
/start, home carousel, about and navigation.
"""

import logging

from aiogram import F, Router
from aiogram.filters import Command, CommandObject, CommandStart
from aiogram.fsm.context import FSMContext
from aiogram.types import CallbackQuery, InlineKeyboardMarkup, Message

from ...app.services.api_client import ApiError
from ...app.services.sessions import Session
from ..keyboards import back_button, get_main_keyboard, home_keyboard
from ..views import render_home
from .catalog import show_product
from .common import Target, show

logger = logging.getLogger(__name__)

router = Router()

ABOUT_TEXT = """
<b>ℹ️ About LafdaClub</b>

Streetwear merch drops and a battle arena where anything goes.

🛍 <b>Merch</b>: browse, pick your size, check out in chat.
⚔️ <b>Play</b>: pick two fighters, two weapons, a stage and an announcer. The arena decides the rest.
🏆 <b>Leaderboards</b>: see who fights the most and which gear wins.
"""


@router.message(CommandStart())
async def cmd_start(message: Message, command: CommandObject, session: Session, state: FSMContext):
    """/start, with ``product_<id>`` deep links."""
    await state.clear()
    deep_link = command.args
    if deep_link and deep_link.startswith("product_"):
        await show_product(message, session, deep_link[len("product_"):])
        return
    await show_home(message, session, 0)


@router.message(Command("menu"))
async def cmd_menu(message: Message, session: Session, state: FSMContext):
    await state.clear()
    await show_home(message, session, 0)


@router.callback_query(F.data == "back_to_main")
async def back_to_main(callback: CallbackQuery, session: Session, state: FSMContext):
    """Back to the home screen."""
    await state.clear()
    await show_home(callback, session, 0)


@router.callback_query(F.data.startswith("home:"))
async def callback_home_carousel(callback: CallbackQuery, session: Session):
    try:
        index = int(callback.data.split(":")[1])
    except (IndexError, ValueError):
        index = 0
    await show_home(callback, session, index)


@router.callback_query(F.data == "about")
@router.message(Command("about"))
async def show_about(event: Target):
    await show(event, ABOUT_TEXT, InlineKeyboardMarkup(inline_keyboard=[back_button()]))


@router.callback_query(F.data == "noop")
async def callback_noop(callback: CallbackQuery):
    await callback.answer()


@router.callback_query(F.data == "cancel")
async def callback_cancel(callback: CallbackQuery, session: Session, state: FSMContext):
    """Generic cancel for any form."""
    await state.clear()
    session.modals.close_modals()
    await show(callback, "❌ Cancelled.", get_main_keyboard(session.auth.is_authenticated, _username(session)))


async def show_home(target: Target, session: Session, index: int, answer: bool = True):
    """Home page: tagline, featured product carousel and the navbar."""
    try:
        products = await session.api.list_products()
    except ApiError as e:
        logger.error("Error loading products for home: %s", e.message)
        products = []
    await show(
        target,
        render_home(products, index),
        home_keyboard(products, index, session.auth.is_authenticated, _username(session)),
        answer=answer,
    )


def _username(session: Session):
    return session.user.username if session.user else None

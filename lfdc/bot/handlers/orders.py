"""
Order history.
"""

import logging

from aiogram import F, Router
from aiogram.filters import Command
from aiogram.types import CallbackQuery, InlineKeyboardMarkup

from ...app.services.api_client import ApiError
from ...app.services.sessions import Session
from ..keyboards import back_button, orders_keyboard
from ..views import render_order, render_orders
from .common import Target, callback_parts, require_login, show

logger = logging.getLogger(__name__)

router = Router()


@router.message(Command("orders"))
@router.callback_query(F.data == "orders")
async def show_orders(event: Target, session: Session):
    """/orders."""
    if not await require_login(event, session, "to view your orders"):
        return
    try:
        orders = await session.api.list_orders()
    except ApiError as e:
        logger.error("Could not load orders: %s", e.message)
        await show(event, "❌ Failed to load orders.")
        return
    await show(event, render_orders(orders), orders_keyboard(orders))


@router.callback_query(F.data.startswith("order:"))
async def callback_order(callback: CallbackQuery, session: Session):
    parts = callback_parts(callback, 2)
    if parts is None:
        await callback.answer("Invalid data", show_alert=True)
        return
    if not await require_login(callback, session, "to view your orders"):
        return
    try:
        order = await session.api.get_order(parts[1])
    except ApiError as e:
        logger.error("Could not load order %s: %s", parts[1], e.message)
        await callback.answer("❌ Order not found", show_alert=True)
        return
    await show(callback, render_order(order), InlineKeyboardMarkup(inline_keyboard=[
        back_button("orders", "◀️ Orders"),
    ]))

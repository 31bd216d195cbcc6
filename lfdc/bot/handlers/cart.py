"""
Cart handlers.
"""

import logging
from typing import Optional

from aiogram import F, Router
from aiogram.filters import Command
from aiogram.types import CallbackQuery

from ...app.services.api_client import ApiError
from ...app.services.cart import find_item, line_key
from ...app.services.sessions import Session
from ..keyboards import cart_keyboard, confirm_keyboard, parse_size
from ..views import quote, render_cart
from .common import Target, callback_parts, require_login, show

logger = logging.getLogger(__name__)

router = Router()


@router.message(Command("cart"))
@router.callback_query(F.data == "cart")
async def cmd_cart(event: Target, session: Session):
    """/cart."""
    if not await require_login(event, session, "to view your cart"):
        return
    await show_cart(event, session)


async def show_cart(target: Target, session: Session, answer: bool = True):
    try:
        cart = await session.api.get_cart()
    except ApiError as e:
        logger.error("Could not load cart: %s", e.message)
        await show(target, "❌ Failed to load cart.", answer=answer)
        return
    await show(target, render_cart(cart.items), cart_keyboard(cart.items), answer=answer)


@router.callback_query(F.data.startswith("cart_inc:") | F.data.startswith("cart_dec:"))
async def callback_change_quantity(callback: CallbackQuery, session: Session):
    """Relative quantity change; the backend owns the quantity invariant."""
    parts = callback_parts(callback, 3)
    if parts is None:
        await callback.answer("Invalid data", show_alert=True)
        return
    if not await require_login(callback, session):
        return

    action = "increase" if parts[0] == "cart_inc" else "decrease"
    product_id, size = parts[1], parse_size(parts[2])
    key = f"cart:{line_key(product_id, size)}"

    if not session.flags.acquire(key):
        await callback.answer("Updating…")
        return
    try:
        if action == "decrease":
            cart = await session.api.get_cart()
            item = find_item(cart.items, product_id, size)
            if item is not None and item.quantity <= 1:
                # Quantity never drops below 1; offer removal instead
                await _ask_remove(callback, product_id, parts[2], item.product.name)
                return
        await session.api.update_cart_item(product_id, size, action)
    except ApiError as e:
        logger.error("Could not update quantity: %s", e.message)
        await callback.answer("❌ Failed to update quantity.", show_alert=True)
        return
    finally:
        session.flags.release(key)

    await show_cart(callback, session)


@router.callback_query(F.data.startswith("cart_rm:"))
async def callback_remove_item(callback: CallbackQuery, session: Session):
    parts = callback_parts(callback, 3)
    if parts is None:
        await callback.answer("Invalid data", show_alert=True)
        return
    await _ask_remove(callback, parts[1], parts[2])


async def _ask_remove(callback: CallbackQuery, product_id: str, size: str, name: Optional[str] = None):
    what = f"<b>{quote(name)}</b>" if name else "this item"
    await show(
        callback,
        f"🗑 Remove {what} from cart?",
        confirm_keyboard(f"cart_rm_ok:{product_id}:{size}", "cart", "🗑 Remove", "Keep"),
    )


@router.callback_query(F.data.startswith("cart_rm_ok:"))
async def callback_confirm_remove(callback: CallbackQuery, session: Session):
    parts = callback_parts(callback, 3)
    if parts is None:
        await callback.answer("Invalid data", show_alert=True)
        return
    if not await require_login(callback, session):
        return

    product_id, size = parts[1], parse_size(parts[2])
    key = f"cart:{line_key(product_id, size)}"
    if not session.flags.acquire(key):
        await callback.answer("Removing…")
        return
    try:
        await session.api.remove_cart_item(product_id, size)
    except ApiError as e:
        logger.error("Could not remove item: %s", e.message)
        await callback.answer("❌ Failed to remove item.", show_alert=True)
        return
    finally:
        session.flags.release(key)

    await callback.answer("Removed from cart")
    await show_cart(callback, session, answer=False)

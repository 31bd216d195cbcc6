"""
Merch store: product list and product page.
"""

import logging
from typing import Optional

from aiogram import F, Router
from aiogram.exceptions import TelegramBadRequest
from aiogram.filters import Command
from aiogram.fsm.context import FSMContext
from aiogram.types import CallbackQuery, InputMediaPhoto

from ...app.config import settings
from ...app.services.api_client import ApiError
from ...app.services.sessions import BusyError, Session
from ..keyboards import parse_size, product_keyboard, product_list_keyboard
from ..views import render_product, render_product_list, render_size_chart
from .checkout import start_checkout
from .common import Target, callback_parts, require_login, show

logger = logging.getLogger(__name__)

router = Router()


@router.callback_query(F.data == "merch")
@router.message(Command("merch"))
async def show_merch(event: Target, session: Session):
    """Merch list."""
    try:
        products = await session.api.list_products()
    except ApiError as e:
        logger.error("Could not load products: %s", e.message)
        await show(event, "❌ Failed to load products. Try again later.")
        return
    await show(event, render_product_list(products), product_list_keyboard(products))


@router.callback_query(F.data.startswith("product:"))
async def callback_product(callback: CallbackQuery, session: Session):
    parts = callback_parts(callback, 2)
    if parts is None:
        await callback.answer("Invalid data", show_alert=True)
        return
    await show_product(callback, session, parts[1])


@router.callback_query(F.data.startswith("size:"))
async def callback_select_size(callback: CallbackQuery, session: Session):
    """size:<id>:<size>[:<image>]: re-renders the product with the new selection."""
    parts = callback_parts(callback, 3)
    if parts is None or parts[2] not in settings.PRODUCT_SIZES:
        await callback.answer("Unknown size", show_alert=True)
        return
    image = int(parts[3]) if len(parts) > 3 and parts[3].isdigit() else 0
    await show_product(callback, session, parts[1], size=parts[2], image=image)


@router.callback_query(F.data.startswith("img:"))
async def callback_product_image(callback: CallbackQuery, session: Session):
    """img:<id>:<image>:<size>: carousel arrows."""
    parts = callback_parts(callback, 4)
    if parts is None or not parts[2].isdigit():
        await callback.answer("Invalid data", show_alert=True)
        return
    size = parts[3] if parts[3] in settings.PRODUCT_SIZES else None
    await show_product(callback, session, parts[1], size=size, image=int(parts[2]), swap_photo=True)


@router.callback_query(F.data == "size_chart")
async def callback_size_chart(callback: CallbackQuery):
    await callback.answer(render_size_chart(), show_alert=True)


async def show_product(
    target: Target,
    session: Session,
    product_id: str,
    size: Optional[str] = None,
    image: int = 0,
    swap_photo: bool = False,
):
    """
    Product page.

    Sent as a photo with caption when the product has an image. On a photo
    message, size changes only swap the caption and keyboard, while carousel
    steps (``swap_photo``) replace the photo itself.
    """
    size = size or settings.DEFAULT_SIZE
    try:
        product = await session.api.get_product(product_id)
    except ApiError as e:
        logger.error("Could not load product %s: %s", product_id, e.message)
        await show(target, "❌ Product not found.")
        return

    caption = render_product(product, size)
    keyboard = product_keyboard(product, settings.PRODUCT_SIZES, size, image)
    photo = product.image(image)

    if isinstance(target, CallbackQuery):
        message = target.message
        if message is not None and message.photo:
            try:
                if swap_photo and photo:
                    await message.edit_media(InputMediaPhoto(media=photo, caption=caption), reply_markup=keyboard)
                else:
                    await message.edit_caption(caption=caption, reply_markup=keyboard)
            except TelegramBadRequest as e:
                if "message is not modified" not in str(e):
                    raise
            await target.answer()
            return
        await target.answer()
        message_target = message
    else:
        message_target = target

    if photo:
        try:
            await message_target.answer_photo(photo=photo, caption=caption, reply_markup=keyboard)
            return
        except TelegramBadRequest as e:
            # Telegram could not fetch the image URL; fall back to text
            logger.warning("Could not send product photo %s: %s", photo, e)
    await message_target.answer(caption, reply_markup=keyboard)


@router.callback_query(F.data.startswith("add_cart:"))
async def callback_add_to_cart(callback: CallbackQuery, session: Session):
    """Adds one of the selected size to the cart."""
    parts = callback_parts(callback, 3)
    if parts is None:
        await callback.answer("Invalid data", show_alert=True)
        return
    if not await require_login(callback, session, "to add items to your cart"):
        return

    product_id, size = parts[1], parse_size(parts[2])
    try:
        async with session.flags.busy(f"add_cart:{product_id}"):
            await session.api.add_to_cart(product_id, size, quantity=1)
    except BusyError:
        await callback.answer("Adding…")
        return
    except ApiError as e:
        logger.error("Could not add to cart: %s", e.message)
        await callback.answer("❌ Could not add to cart", show_alert=True)
        return
    logger.info("Added to cart: %s %s", product_id, size)
    await callback.answer(f"✅ Added to cart (size {size})" if size else "✅ Added to cart")


@router.callback_query(F.data.startswith("buy:"))
async def callback_buy_now(callback: CallbackQuery, session: Session, state: FSMContext):
    """Direct buy: checkout for a single product."""
    parts = callback_parts(callback, 2)
    if parts is None:
        await callback.answer("Invalid data", show_alert=True)
        return
    await start_checkout(callback, session, state, product_id=parts[1])

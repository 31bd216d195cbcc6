"""
Checkout: shipping form, order creation and hosted payment.

Flow (cart or single product):
    shipping form -> order/create-order -> Telegram invoice (hosted checkout)
    -> pre-checkout -> successful payment -> order/verify -> order/submit
"""

import logging
from typing import Optional

from aiogram import Bot, F, Router
from aiogram.fsm.context import FSMContext
from aiogram.fsm.state import State, StatesGroup
from aiogram.types import (
    CallbackQuery, InlineKeyboardButton, InlineKeyboardMarkup, LabeledPrice,
    Message, PreCheckoutQuery,
)
from pydantic import ValidationError

from ...app.config import settings
from ...app.models import (
    PaymentConfirmation, ShippingDetails, normalize_phone, normalize_pincode,
)
from ...app.services.api_client import ApiError
from ...app.services.sessions import Session
from ..keyboards import back_button, cancel_keyboard
from ..views import format_minor_units, quote, render_checkout_summary
from .common import Target, require_login, show

logger = logging.getLogger(__name__)

router = Router()

INVOICE_PREFIX = "order:"


class CheckoutStates(StatesGroup):
    """Shipping form and payment wait."""
    waiting_for_name = State()
    waiting_for_address = State()
    waiting_for_phone = State()
    waiting_for_pincode = State()
    confirming = State()
    waiting_for_payment = State()


@router.callback_query(F.data.startswith("checkout:"))
async def callback_checkout(callback: CallbackQuery, session: Session, state: FSMContext):
    """checkout:cart."""
    await start_checkout(callback, session, state)


async def start_checkout(target: Target, session: Session, state: FSMContext, product_id: Optional[str] = None):
    """Checks there is something to buy, then starts the shipping form."""
    if not await require_login(target, session, "to continue"):
        return

    from_cart = product_id is None
    if from_cart:
        try:
            cart = await session.api.get_cart()
        except ApiError as e:
            logger.error("Could not load cart: %s", e.message)
            await show(target, "❌ Could not load cart.")
            return
        if not cart.items:
            await show(target, "Your cart is empty.", InlineKeyboardMarkup(inline_keyboard=[
                [InlineKeyboardButton(text="🛍 Go to Merch Store", callback_data="merch")],
                back_button(),
            ]))
            return
        title = f"Checkout Your Cart ({len(cart.items)} items)"
    else:
        try:
            product = await session.api.get_product(product_id)
        except ApiError as e:
            logger.error("Could not load product %s: %s", product_id, e.message)
            await show(target, "❌ Could not load product.")
            return
        title = f"Checkout: {quote(product.name)}"

    await state.clear()
    await state.update_data(product_id=product_id, from_cart=from_cart)
    await state.set_state(CheckoutStates.waiting_for_name)
    await show(target, f"<b>💳 {title}</b>\n\nShipping details 1/4\nEnter the recipient's full name:", cancel_keyboard())


@router.message(CheckoutStates.waiting_for_name)
async def process_name(message: Message, state: FSMContext):
    name = (message.text or "").strip()
    if not name or len(name) > 100:
        await message.answer("❌ Please enter a name (up to 100 characters):", reply_markup=cancel_keyboard())
        return
    await state.update_data(name=name)
    await state.set_state(CheckoutStates.waiting_for_address)
    await message.answer("Shipping details 2/4\nEnter the full delivery address:", reply_markup=cancel_keyboard())


@router.message(CheckoutStates.waiting_for_address)
async def process_address(message: Message, state: FSMContext):
    address = (message.text or "").strip()
    if not address or len(address) > 500:
        await message.answer("❌ Please enter an address (up to 500 characters):", reply_markup=cancel_keyboard())
        return
    await state.update_data(address=address)
    await state.set_state(CheckoutStates.waiting_for_phone)
    await message.answer("Shipping details 3/4\nEnter a 10-digit phone number:", reply_markup=cancel_keyboard())


@router.message(CheckoutStates.waiting_for_phone)
async def process_phone(message: Message, state: FSMContext):
    try:
        phone = normalize_phone(message.text or "")
    except ValueError as e:
        await message.answer(f"❌ {e}. Try again:", reply_markup=cancel_keyboard())
        return
    await state.update_data(phone=phone)
    await state.set_state(CheckoutStates.waiting_for_pincode)
    await message.answer("Shipping details 4/4\nEnter the 6-digit pincode:", reply_markup=cancel_keyboard())


@router.message(CheckoutStates.waiting_for_pincode)
async def process_pincode(message: Message, state: FSMContext):
    try:
        pincode = normalize_pincode(message.text or "")
    except ValueError as e:
        await message.answer(f"❌ {e}. Try again:", reply_markup=cancel_keyboard())
        return
    await state.update_data(pincode=pincode)
    data = await state.get_data()
    shipping = ShippingDetails(
        name=data["name"], address=data["address"], phone=data["phone"], pincode=pincode,
    )
    await state.set_state(CheckoutStates.confirming)
    keyboard = InlineKeyboardMarkup(inline_keyboard=[
        [InlineKeyboardButton(text="💳 Proceed to payment", callback_data="checkout_pay")],
        [InlineKeyboardButton(text="❌ Cancel", callback_data="cancel")],
    ])
    await message.answer(
        "<b>📦 Shipping to</b>\n\n"
        f"{quote(shipping.name)}\n{quote(shipping.address)}\n"
        f"📞 {shipping.phone} · PIN {shipping.pincode}",
        reply_markup=keyboard,
    )


@router.callback_query(F.data == "checkout_pay", CheckoutStates.confirming)
async def callback_pay(callback: CallbackQuery, session: Session, state: FSMContext):
    """Creates the order and opens the hosted checkout."""
    if not await require_login(callback, session):
        return
    if not settings.PAYMENT_PROVIDER_TOKEN:
        logger.error("PAYMENT_PROVIDER_TOKEN is not configured")
        await callback.answer("Payments are not available right now.", show_alert=True)
        return
    if not session.flags.acquire("checkout"):
        await callback.answer("Creating your order…")
        return

    try:
        data = await state.get_data()
        try:
            shipping = ShippingDetails(
                name=data["name"], address=data["address"],
                phone=data["phone"], pincode=data["pincode"],
            )
        except (KeyError, ValidationError):
            await state.clear()
            await callback.answer("Checkout expired, please start again.", show_alert=True)
            return

        try:
            created = await session.api.create_order(data.get("product_id"))
        except ApiError as e:
            logger.error("Could not create order: %s", e.message)
            await callback.answer("❌ Could not create order. Try again.", show_alert=True)
            return

        gateway = created.razorpay_order
        await state.update_data(
            gateway_order_id=gateway.id,
            order_items=created.order_items,
            shipping=shipping.model_dump(),
        )
        await state.set_state(CheckoutStates.waiting_for_payment)

        from_cart = data.get("from_cart", True)
        if from_cart:
            description = f"Cart ({len(created.order_items)} items) — Total {format_minor_units(gateway.amount)}"
        else:
            description = _first_item_name(created.order_items) or "Merch order"

        await callback.message.answer(render_checkout_summary(created.order_items, gateway.amount, from_cart))
        await callback.message.answer_invoice(
            title=settings.STORE_NAME,
            description=description[:255],
            payload=f"{INVOICE_PREFIX}{gateway.id}",
            provider_token=settings.PAYMENT_PROVIDER_TOKEN,
            currency=gateway.currency or settings.CURRENCY,
            prices=[LabeledPrice(label="Total", amount=gateway.amount)],
            need_email=True,
        )
        await callback.answer()
    finally:
        session.flags.release("checkout")


@router.pre_checkout_query(F.invoice_payload.startswith(INVOICE_PREFIX))
async def pre_checkout_handler(pre_checkout: PreCheckoutQuery, bot: Bot, state: FSMContext):
    """Accepts the payment only for the order this chat is checking out."""
    data = await state.get_data()
    expected = f"{INVOICE_PREFIX}{data.get('gateway_order_id')}"
    if pre_checkout.invoice_payload != expected:
        logger.warning("Stale invoice %s (expected %s)", pre_checkout.invoice_payload, expected)
        await bot.answer_pre_checkout_query(
            pre_checkout.id, ok=False,
            error_message="This checkout has expired. Please start again.",
        )
        return
    await bot.answer_pre_checkout_query(pre_checkout.id, ok=True)


@router.message(F.successful_payment.invoice_payload.startswith(INVOICE_PREFIX))
async def successful_payment_handler(message: Message, session: Session, state: FSMContext):
    """Forwards the gateway confirmation for verification, then submits the order."""
    payment = message.successful_payment
    gateway_order_id = payment.invoice_payload[len(INVOICE_PREFIX):]
    data = await state.get_data()

    confirmation = PaymentConfirmation(
        razorpay_order_id=gateway_order_id,
        razorpay_payment_id=payment.provider_payment_charge_id,
        razorpay_signature=payment.telegram_payment_charge_id,
    )
    try:
        verified = await session.api.verify_payment(confirmation)
        if not verified:
            await message.answer("❌ Payment verification failed.")
            return
        shipping = ShippingDetails.model_validate(data["shipping"])
        await session.api.submit_order(
            payment_id=payment.provider_payment_charge_id,
            shipping=shipping,
            order_items=data.get("order_items", []),
            from_cart=data.get("from_cart", True),
        )
    except (ApiError, KeyError, ValidationError) as e:
        logger.error("Error during verify/submit for %s: %s", gateway_order_id, e)
        await message.answer(
            "❌ Something went wrong while processing your payment.\n"
            f"Payment ID: <code>{quote(payment.provider_payment_charge_id)}</code>"
        )
        return
    finally:
        await state.clear()

    logger.info("Order placed for gateway order %s", gateway_order_id)
    await message.answer(
        "✅ <b>Order placed successfully!</b>",
        reply_markup=InlineKeyboardMarkup(inline_keyboard=[
            [InlineKeyboardButton(text="📦 My orders", callback_data="orders")],
            back_button(text="🏠 Home"),
        ]),
    )


def _first_item_name(order_items: list) -> Optional[str]:
    for item in order_items:
        product = item.get("product") if isinstance(item, dict) else None
        if isinstance(product, dict) and product.get("name"):
            return product["name"]
    return None

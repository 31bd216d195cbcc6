"""
Login, signup and logout modals.
"""

import logging

from aiogram import F, Router
from aiogram.exceptions import TelegramBadRequest
from aiogram.filters import Command
from aiogram.fsm.context import FSMContext
from aiogram.fsm.state import State, StatesGroup
from aiogram.types import CallbackQuery, Message

from ...app.services.modal_store import Modal
from ...app.services.sessions import Session
from ..keyboards import cancel_keyboard, confirm_keyboard, login_prompt_keyboard
from ..views import quote
from .common import Target, show
from .start import show_home

logger = logging.getLogger(__name__)

router = Router()


class AuthStates(StatesGroup):
    """Login / signup form."""
    waiting_for_username = State()
    waiting_for_password = State()


MODAL_TITLES = {
    Modal.LOGIN: "🔑 Login",
    Modal.SIGNUP: "📝 Signup",
}


@router.callback_query(F.data == "login")
@router.message(Command("login"))
async def open_login(event: Target, session: Session, state: FSMContext):
    session.modals.open_login()
    await _ask_username(event, session, state)


@router.callback_query(F.data == "signup")
@router.message(Command("signup"))
async def open_signup(event: Target, session: Session, state: FSMContext):
    session.modals.open_signup()
    await _ask_username(event, session, state)


async def _ask_username(event: Target, session: Session, state: FSMContext):
    if session.auth.is_authenticated:
        await show(event, f"You're already logged in as <b>{quote(session.user.username)}</b>.")
        session.modals.close_modals()
        return
    await state.set_state(AuthStates.waiting_for_username)
    title = MODAL_TITLES[session.modals.current]
    await show(event, f"<b>{title}</b>\n\nEnter your username:", cancel_keyboard())


@router.message(AuthStates.waiting_for_username)
async def process_username(message: Message, session: Session, state: FSMContext):
    username = (message.text or "").strip()
    if not username:
        await message.answer("❌ Username can't be empty. Try again:", reply_markup=cancel_keyboard())
        return
    if len(username) > 32:
        await message.answer("❌ Username is too long (max 32 characters). Try again:", reply_markup=cancel_keyboard())
        return
    await state.update_data(username=username)
    await state.set_state(AuthStates.waiting_for_password)
    await message.answer("Enter your password:", reply_markup=cancel_keyboard())


@router.message(AuthStates.waiting_for_password)
async def process_password(message: Message, session: Session, state: FSMContext):
    password = message.text or ""
    # Don't leave the password in the chat history
    try:
        await message.delete()
    except TelegramBadRequest as e:
        logger.warning("Could not delete password message: %s", e)

    if not password:
        await message.answer("❌ Password can't be empty. Try again:", reply_markup=cancel_keyboard())
        return

    data = await state.get_data()
    username = data.get("username", "")
    modal = session.modals.current

    if modal is Modal.SIGNUP:
        if session.auth.is_signing_up:
            return
        ok = await session.auth.signup(username, password)
        failure = "❌ Signup failed"
    else:
        if session.auth.is_logging_in:
            return
        ok = await session.auth.login(username, password)
        failure = "❌ Login failed"

    if not ok:
        reason = session.auth.last_error or "please try again"
        await state.clear()
        await message.answer(f"{failure}: {reason}", reply_markup=login_prompt_keyboard())
        return

    await state.clear()
    session.modals.close_modals()
    greeting = "Account created successfully" if modal is Modal.SIGNUP else "Logged in successfully"
    await message.answer(f"✅ {greeting}. Welcome, <b>{quote(session.user.username)}</b>!")
    await show_home(message, session, 0)


@router.callback_query(F.data == "logout")
@router.message(Command("logout"))
async def open_logout(event: Target, session: Session):
    if not session.auth.is_authenticated:
        await show(event, "You're not logged in.", login_prompt_keyboard())
        return
    session.modals.open_logout()
    await show(
        event,
        "<b>🚪 Logout</b>\n\nAre you sure you want to log out?",
        confirm_keyboard("logout_ok", "logout_cancel", "🚪 Logout", "Cancel"),
    )


@router.callback_query(F.data == "logout_ok")
async def confirm_logout(callback: CallbackQuery, session: Session, state: FSMContext):
    if session.auth.is_logging_out:
        await callback.answer("Logging out…")
        return
    ok = await session.auth.logout()
    session.modals.close_modals()
    if not ok:
        await callback.answer("Error logging out. Try again.", show_alert=True)
        return
    await state.clear()
    await callback.answer("Logged out successfully")
    await show_home(callback, session, 0, answer=False)


@router.callback_query(F.data == "logout_cancel")
async def cancel_logout(callback: CallbackQuery, session: Session):
    session.modals.close_modals()
    await show_home(callback, session, 0)

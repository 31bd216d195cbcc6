"""
Profiles: public profile by username, own profile editing and stats.
"""

import base64
import logging

from aiogram import Bot, F, Router
from aiogram.filters import Command, CommandObject
from aiogram.fsm.context import FSMContext
from aiogram.fsm.state import State, StatesGroup
from aiogram.types import CallbackQuery, InlineKeyboardMarkup, Message
from pydantic import ValidationError

from ...app.services.api_client import ApiError
from ...app.services.sessions import Session
from ..keyboards import back_button, cancel_keyboard, profile_edit_keyboard, profile_keyboard
from ..views import quote, render_profile, render_stats
from .common import Target, callback_parts, require_login, show

logger = logging.getLogger(__name__)

router = Router()

EDITABLE_FIELDS = {
    "username": "Enter a new username:",
    "email": "Enter a new email:",
    "bio": "Enter a new bio (up to 500 characters):",
    "profile_pic": "Send a photo to use as your profile picture:",
}

# Telegram photos are always re-encoded as JPEG
PHOTO_MIME = "image/jpeg"


class ProfileStates(StatesGroup):
    waiting_for_value = State()


def photo_data_url(raw: bytes, mime: str = PHOTO_MIME) -> str:
    """Uploaded image as the data URL the backend stores."""
    return f"data:{mime};base64,{base64.b64encode(raw).decode('ascii')}"


@router.message(Command("profile"))
async def cmd_profile(message: Message, command: CommandObject, session: Session):
    """/profile [username]."""
    username = (command.args or "").strip()
    if username:
        await show_public_profile(message, session, username)
        return
    if not await require_login(message, session, "to view your profile"):
        return
    await show_own_profile(message, session)


@router.callback_query(F.data == "profile")
async def callback_profile(callback: CallbackQuery, session: Session, state: FSMContext):
    await state.set_state(None)
    if not await require_login(callback, session, "to view your profile"):
        return
    await show_own_profile(callback, session)


@router.callback_query(F.data.startswith("user:"))
async def callback_user_profile(callback: CallbackQuery, session: Session):
    """user:<username> from leaderboards and reviews."""
    username = callback.data.split(":", 1)[1]
    if not username:
        await callback.answer("Invalid data", show_alert=True)
        return
    await show_public_profile(callback, session, username)


async def show_own_profile(target: Target, session: Session, answer: bool = True):
    user = session.user
    await show(target, render_profile(user, is_own=True), profile_keyboard(user.username, True), answer=answer)


async def show_public_profile(target: Target, session: Session, username: str):
    try:
        user = await session.api.get_user(username)
    except ApiError as e:
        logger.info("Profile %s not found: %s", username, e.message)
        await show(target, f"❌ User <b>{quote(username)}</b> not found.")
        return
    is_own = session.user is not None and session.user.id == user.id
    await show(target, render_profile(user, is_own), profile_keyboard(user.username, is_own))


@router.callback_query(F.data == "profile_edit")
async def callback_profile_edit(callback: CallbackQuery, session: Session):
    if not await require_login(callback, session):
        return
    await show(callback, "<b>✏️ Edit profile</b>\n\nWhat do you want to change?", profile_edit_keyboard())


@router.callback_query(F.data.startswith("edit:"))
async def callback_edit_field(callback: CallbackQuery, session: Session, state: FSMContext):
    parts = callback_parts(callback, 2)
    if parts is None or parts[1] not in EDITABLE_FIELDS:
        await callback.answer("Invalid data", show_alert=True)
        return
    if not await require_login(callback, session):
        return
    await state.update_data(edit_field=parts[1])
    await state.set_state(ProfileStates.waiting_for_value)
    await show(callback, EDITABLE_FIELDS[parts[1]], cancel_keyboard("profile"))


@router.message(ProfileStates.waiting_for_value)
async def process_profile_value(message: Message, session: Session, state: FSMContext, bot: Bot):
    field = (await state.get_data()).get("edit_field")
    if field not in EDITABLE_FIELDS:
        await state.set_state(None)
        await message.answer("❌ Edit expired, please start again.")
        return

    if field == "profile_pic":
        if not message.photo:
            await message.answer("❌ Please send a photo.", reply_markup=cancel_keyboard("profile"))
            return
        buffer = await bot.download(message.photo[-1])
        value = photo_data_url(buffer.getvalue())
    else:
        value = (message.text or "").strip()
        if not value:
            await message.answer("❌ Value can't be empty. Try again:", reply_markup=cancel_keyboard("profile"))
            return

    if session.auth.is_updating_profile:
        return
    try:
        ok = await session.auth.update_profile(**{field: value})
    except ValidationError as e:
        reason = e.errors()[0].get("msg", "invalid value")
        await message.answer(f"❌ {quote(reason)}. Try again:", reply_markup=cancel_keyboard("profile"))
        return

    if not ok:
        await message.answer(
            f"❌ Could not update profile: {quote(session.auth.last_error or 'please try again')}",
            reply_markup=cancel_keyboard("profile"),
        )
        return

    await state.set_state(None)
    await message.answer("✅ Profile updated")
    await show_own_profile(message, session)


@router.callback_query(F.data == "stats")
@router.message(Command("stats"))
async def show_stats(event: Target, session: Session):
    """Own battle stats."""
    if not await require_login(event, session, "to view your stats"):
        return
    try:
        stats = await session.api.user_stats()
    except ApiError as e:
        logger.error("Could not load stats: %s", e.message)
        await show(event, "❌ Failed to load stats.")
        return
    await show(event, render_stats(stats, session.user.username), InlineKeyboardMarkup(inline_keyboard=[
        back_button("profile", "◀️ Profile"),
    ]))

"""
Helpers shared by the page handlers.
"""

import logging
from typing import Optional, Union

from aiogram.exceptions import TelegramBadRequest
from aiogram.types import CallbackQuery, InlineKeyboardMarkup, Message

from ...app.services.sessions import Session
from ..keyboards import login_prompt_keyboard

logger = logging.getLogger(__name__)

Target = Union[Message, CallbackQuery]


async def show(
    target: Target,
    text: str,
    reply_markup: Optional[InlineKeyboardMarkup] = None,
    answer: bool = True,
) -> None:
    """
    Renders a page.

    Callbacks edit the message the button belongs to; photo messages can't
    become text, so those get a fresh message instead. Pass ``answer=False``
    when the callback was already answered with a toast.
    """
    if isinstance(target, CallbackQuery):
        message = target.message
        try:
            if message is not None and not message.photo:
                await message.edit_text(text, reply_markup=reply_markup)
            elif message is not None:
                await message.answer(text, reply_markup=reply_markup)
        except TelegramBadRequest as e:
            # Same content re-rendered (e.g. double tap)
            if "message is not modified" not in str(e):
                raise
        if answer:
            await target.answer()
    else:
        await target.answer(text, reply_markup=reply_markup)


async def require_login(target: Target, session: Session, reason: str = "to continue") -> bool:
    """
    Guard for protected pages.

    Returns True when the chat is logged in; otherwise opens the login modal
    and shows the "please log in" prompt.
    """
    if session.auth.is_authenticated:
        return True
    session.modals.open_login()
    text = f"🔒 Please log in {reason}..."
    if isinstance(target, CallbackQuery):
        await target.answer(text)
        if target.message is not None:
            await target.message.answer(text, reply_markup=login_prompt_keyboard())
    else:
        await target.answer(text, reply_markup=login_prompt_keyboard())
    return False


def viewer_id(session: Session) -> Optional[str]:
    return session.user.id if session.user else None


def callback_parts(callback: CallbackQuery, expected: int) -> Optional[list]:
    """Splits ``prefix:a:b`` callback data; None when the shape is wrong."""
    parts = (callback.data or "").split(":")
    if len(parts) < expected:
        logger.warning("Malformed callback data: %s", callback.data)
        return None
    return parts

"""
Reviews and comments.

The last opened review screen (a product's review section or a single
review page) is remembered in FSM data as ``review_view`` so that votes,
deletes and new posts can re-render the same screen.
"""

import logging
from typing import Optional

from aiogram import F, Router
from aiogram.fsm.context import FSMContext
from aiogram.fsm.state import State, StatesGroup
from aiogram.types import CallbackQuery, InlineKeyboardMarkup, Message

from ...app.config import settings
from ...app.models import Review
from ...app.services.api_client import ApiError
from ...app.services.sessions import BusyError, Session
from ..keyboards import (
    back_button, cancel_keyboard, confirm_keyboard, rating_keyboard,
    review_page_keyboard, review_section_keyboard,
)
from ..views import render_review_page, render_review_section, stars
from .common import Target, callback_parts, require_login, show, viewer_id

logger = logging.getLogger(__name__)

router = Router()

MAX_REVIEW_LENGTH = 1000
MAX_COMMENT_LENGTH = 500
MAX_REASON_LENGTH = 500


class ReviewStates(StatesGroup):
    waiting_for_rating = State()
    waiting_for_text = State()


class CommentStates(StatesGroup):
    waiting_for_text = State()


class ReportStates(StatesGroup):
    waiting_for_reason = State()


# ---- rendering ----

async def _view(state: FSMContext) -> dict:
    return (await state.get_data()).get("review_view") or {}


async def _render_section(target: Target, session: Session, product_id: str, reviews, visible: int, answer: bool = True):
    viewer = viewer_id(session)
    await show(
        target,
        render_review_section(reviews, visible, viewer),
        review_section_keyboard(product_id, reviews, visible, viewer, settings.REVIEWS_PAGE_SIZE),
        answer=answer,
    )


async def _render_review(target: Target, session: Session, review: Review, visible: int, answer: bool = True):
    viewer = viewer_id(session)
    await show(
        target,
        render_review_page(review, visible, viewer),
        review_page_keyboard(review, visible, viewer, settings.COMMENTS_PAGE_SIZE),
        answer=answer,
    )


async def show_review_section(target: Target, session: Session, state: FSMContext, product_id: str,
                              visible: Optional[int] = None, answer: bool = True):
    """Reviews of one product, ``visible`` at a time."""
    visible = visible or settings.REVIEWS_PAGE_SIZE
    try:
        reviews = await session.api.list_reviews(product_id)
    except ApiError as e:
        logger.error("Could not load reviews for %s: %s", product_id, e.message)
        await show(target, "❌ Failed to load reviews.", answer=answer)
        return
    await state.update_data(review_view={"kind": "section", "product_id": product_id, "visible": visible})
    await _render_section(target, session, product_id, reviews, visible, answer)


async def show_review(target: Target, session: Session, state: FSMContext, review_id: str,
                      visible: Optional[int] = None, answer: bool = True):
    """Single review page with its comments."""
    visible = visible or settings.COMMENTS_PAGE_SIZE
    try:
        review = await session.api.get_review(review_id)
    except ApiError as e:
        logger.error("Could not load review %s: %s", review_id, e.message)
        await show(target, "❌ Review not found.", answer=answer)
        return
    await state.update_data(review_view={
        "kind": "review", "review_id": review_id, "product_id": review.product, "visible": visible,
    })
    await _render_review(target, session, review, visible, answer)


async def show_current_view(target: Target, session: Session, state: FSMContext, answer: bool = True):
    """Re-renders the remembered review screen."""
    view = await _view(state)
    if view.get("kind") == "section":
        await show_review_section(target, session, state, view["product_id"], view.get("visible"), answer)
    elif view.get("kind") == "review":
        await show_review(target, session, state, view["review_id"], view.get("visible"), answer)
    else:
        await show(target, "Nothing to show here.", InlineKeyboardMarkup(inline_keyboard=[back_button()]), answer=answer)


def _parse_visible(parts: list) -> Optional[int]:
    if len(parts) < 3:
        return None
    try:
        return max(1, int(parts[2]))
    except ValueError:
        return None


@router.callback_query(F.data.startswith("reviews:"))
async def callback_reviews(callback: CallbackQuery, session: Session, state: FSMContext):
    """reviews:<product_id>[:<visible>]."""
    parts = callback_parts(callback, 2)
    if parts is None:
        await callback.answer("Invalid data", show_alert=True)
        return
    await show_review_section(callback, session, state, parts[1], _parse_visible(parts))


@router.callback_query(F.data.startswith("review:"))
async def callback_review(callback: CallbackQuery, session: Session, state: FSMContext):
    """review:<review_id>[:<visible comments>]."""
    parts = callback_parts(callback, 2)
    if parts is None:
        await callback.answer("Invalid data", show_alert=True)
        return
    await show_review(callback, session, state, parts[1], _parse_visible(parts))


@router.callback_query(F.data == "rv_view")
async def callback_back_to_view(callback: CallbackQuery, session: Session, state: FSMContext):
    """Leaves any review form and returns to the remembered screen."""
    await state.set_state(None)
    await show_current_view(callback, session, state)


# ---- votes ----

def _toggle(review: Review, user_id: str, like: bool) -> Review:
    return review.toggle_like(user_id) if like else review.toggle_dislike(user_id)


@router.callback_query(F.data.startswith("rv_like:") | F.data.startswith("rv_dislike:"))
async def callback_vote_review(callback: CallbackQuery, session: Session, state: FSMContext):
    """
    Like/dislike a review.

    The screen is re-rendered with the vote applied before the request is
    sent; if the backend rejects it the original screen is put back.
    """
    parts = callback_parts(callback, 2)
    if parts is None:
        await callback.answer("Invalid data", show_alert=True)
        return
    if not await require_login(callback, session, "to vote"):
        return

    like = parts[0] == "rv_like"
    review_id = parts[1]
    user_id = session.user.id
    view = await _view(state)
    send = session.api.like_review if like else session.api.dislike_review

    try:
        async with session.flags.busy(f"vote:{review_id}"):
            if view.get("kind") == "section":
                product_id, visible = view["product_id"], view.get("visible") or settings.REVIEWS_PAGE_SIZE
                reviews = await session.api.list_reviews(product_id)
                updated = [_toggle(r, user_id, like) if r.id == review_id else r for r in reviews]
                await _render_section(callback, session, product_id, updated, visible, answer=False)
                try:
                    await send(review_id)
                except ApiError:
                    await _render_section(callback, session, product_id, reviews, visible, answer=False)
                    raise
            else:
                visible = view.get("visible") if view.get("review_id") == review_id else None
                visible = visible or settings.COMMENTS_PAGE_SIZE
                review = await session.api.get_review(review_id)
                await _render_review(callback, session, _toggle(review, user_id, like), visible, answer=False)
                try:
                    await send(review_id)
                except ApiError:
                    await _render_review(callback, session, review, visible, answer=False)
                    raise
    except BusyError:
        await callback.answer("…")
        return
    except ApiError as e:
        logger.error("Could not vote on review %s: %s", review_id, e.message)
        await callback.answer(f"❌ {e.message}", show_alert=True)
        return
    await callback.answer()


@router.callback_query(F.data.startswith("cm_like:") | F.data.startswith("cm_dislike:"))
async def callback_vote_comment(callback: CallbackQuery, session: Session, state: FSMContext):
    parts = callback_parts(callback, 2)
    if parts is None:
        await callback.answer("Invalid data", show_alert=True)
        return
    if not await require_login(callback, session, "to vote"):
        return

    comment_id = parts[1]
    send = session.api.like_comment if parts[0] == "cm_like" else session.api.dislike_comment
    try:
        async with session.flags.busy(f"vote:{comment_id}"):
            await send(comment_id)
    except BusyError:
        await callback.answer("…")
        return
    except ApiError as e:
        logger.error("Could not vote on comment %s: %s", comment_id, e.message)
        await callback.answer(f"❌ {e.message}", show_alert=True)
        return
    await callback.answer()
    await show_current_view(callback, session, state, answer=False)


# ---- new review ----

@router.callback_query(F.data.startswith("rv_new:"))
async def callback_new_review(callback: CallbackQuery, session: Session, state: FSMContext):
    parts = callback_parts(callback, 2)
    if parts is None:
        await callback.answer("Invalid data", show_alert=True)
        return
    if not await require_login(callback, session, "to write a review"):
        return
    await state.update_data(new_review_product=parts[1])
    await state.set_state(ReviewStates.waiting_for_rating)
    await show(callback, "<b>✍️ Write a review</b>\n\nRate the product:", rating_keyboard("rv_view"))


@router.callback_query(F.data.startswith("rating:"), ReviewStates.waiting_for_rating)
async def callback_select_rating(callback: CallbackQuery, state: FSMContext):
    try:
        rating = int(callback.data.split(":")[1])
    except (IndexError, ValueError):
        rating = 0
    if not 1 <= rating <= 5:
        await callback.answer("Pick 1 to 5 stars", show_alert=True)
        return
    await state.update_data(new_review_rating=rating)
    await state.set_state(ReviewStates.waiting_for_text)
    await show(callback, f"Rating: {stars(rating)}\n\nNow write your review:", cancel_keyboard("rv_view"))


@router.message(ReviewStates.waiting_for_text)
async def process_review_text(message: Message, session: Session, state: FSMContext):
    text = (message.text or "").strip()
    if not text:
        await message.answer("❌ Review can't be empty. Try again:", reply_markup=cancel_keyboard("rv_view"))
        return
    if len(text) > MAX_REVIEW_LENGTH:
        await message.answer(
            f"❌ Review is too long (max {MAX_REVIEW_LENGTH} characters). Try again:",
            reply_markup=cancel_keyboard("rv_view"),
        )
        return

    data = await state.get_data()
    product_id = data.get("new_review_product")
    rating = data.get("new_review_rating")
    if not product_id or not rating:
        await state.set_state(None)
        await message.answer("❌ Review expired, please start again.")
        return

    try:
        async with session.flags.busy("review:new"):
            await session.api.create_review(product_id, text, rating)
    except BusyError:
        return
    except ApiError as e:
        logger.error("Could not post review: %s", e.message)
        await message.answer(f"❌ Could not post review: {e.message}", reply_markup=cancel_keyboard("rv_view"))
        return

    await state.set_state(None)
    await message.answer("✅ Review posted!")
    await show_review_section(message, session, state, product_id)


# ---- new comment ----

@router.callback_query(F.data.startswith("cm_new:"))
async def callback_new_comment(callback: CallbackQuery, session: Session, state: FSMContext):
    parts = callback_parts(callback, 2)
    if parts is None:
        await callback.answer("Invalid data", show_alert=True)
        return
    if not await require_login(callback, session, "to comment"):
        return
    await state.update_data(comment_review=parts[1])
    await state.set_state(CommentStates.waiting_for_text)
    await show(callback, "<b>💬 Add a comment</b>\n\nWrite your comment:", cancel_keyboard("rv_view"))


@router.message(CommentStates.waiting_for_text)
async def process_comment_text(message: Message, session: Session, state: FSMContext):
    text = (message.text or "").strip()
    if not text or len(text) > MAX_COMMENT_LENGTH:
        await message.answer(
            f"❌ Comment must be 1 to {MAX_COMMENT_LENGTH} characters. Try again:",
            reply_markup=cancel_keyboard("rv_view"),
        )
        return

    review_id = (await state.get_data()).get("comment_review")
    if not review_id:
        await state.set_state(None)
        await message.answer("❌ Comment expired, please start again.")
        return

    try:
        async with session.flags.busy("comment:new"):
            await session.api.create_comment(review_id, text)
    except BusyError:
        return
    except ApiError as e:
        logger.error("Could not post comment: %s", e.message)
        await message.answer(f"❌ Could not post comment: {e.message}", reply_markup=cancel_keyboard("rv_view"))
        return

    await state.set_state(None)
    view = await _view(state)
    visible = view.get("visible") if view.get("review_id") == review_id else None
    await show_review(message, session, state, review_id, visible)


# ---- delete own ----

@router.callback_query(F.data.startswith("rv_del:") | F.data.startswith("cm_del:"))
async def callback_ask_delete(callback: CallbackQuery):
    parts = callback_parts(callback, 2)
    if parts is None:
        await callback.answer("Invalid data", show_alert=True)
        return
    what = "review" if parts[0] == "rv_del" else "comment"
    await show(
        callback,
        f"🗑 Delete this {what}?",
        confirm_keyboard(f"{parts[0]}_ok:{parts[1]}", "rv_view", "🗑 Delete", "Keep"),
    )


@router.callback_query(F.data.startswith("rv_del_ok:") | F.data.startswith("cm_del_ok:"))
async def callback_confirm_delete(callback: CallbackQuery, session: Session, state: FSMContext):
    parts = callback_parts(callback, 2)
    if parts is None:
        await callback.answer("Invalid data", show_alert=True)
        return
    if not await require_login(callback, session):
        return

    is_review = parts[0] == "rv_del_ok"
    target_id = parts[1]
    delete = session.api.delete_review if is_review else session.api.delete_comment
    try:
        async with session.flags.busy(f"delete:{target_id}"):
            await delete(target_id)
    except BusyError:
        await callback.answer("Deleting…")
        return
    except ApiError as e:
        logger.error("Could not delete %s: %s", target_id, e.message)
        await callback.answer(f"❌ {e.message}", show_alert=True)
        return

    await callback.answer("Review deleted" if is_review else "Comment deleted")
    view = await _view(state)
    if is_review and view.get("kind") == "review" and view.get("review_id") == target_id:
        # The open review is gone; fall back to its product's section
        if view.get("product_id"):
            await show_review_section(callback, session, state, view["product_id"], answer=False)
        else:
            await show(callback, "Review deleted.", InlineKeyboardMarkup(inline_keyboard=[back_button()]), answer=False)
        return
    await show_current_view(callback, session, state, answer=False)


# ---- report ----

@router.callback_query(F.data.startswith("rv_report:") | F.data.startswith("cm_report:"))
async def callback_report(callback: CallbackQuery, session: Session, state: FSMContext):
    parts = callback_parts(callback, 2)
    if parts is None:
        await callback.answer("Invalid data", show_alert=True)
        return
    if not await require_login(callback, session, "to report"):
        return
    kind = "review" if parts[0] == "rv_report" else "comment"
    await state.update_data(report={"kind": kind, "id": parts[1]})
    await state.set_state(ReportStates.waiting_for_reason)
    await show(callback, f"<b>🚩 Report {kind}</b>\n\nWhat's wrong with it?", cancel_keyboard("rv_view"))


@router.message(ReportStates.waiting_for_reason)
async def process_report_reason(message: Message, session: Session, state: FSMContext):
    reason = (message.text or "").strip()
    if not reason or len(reason) > MAX_REASON_LENGTH:
        await message.answer(
            f"❌ Reason must be 1 to {MAX_REASON_LENGTH} characters. Try again:",
            reply_markup=cancel_keyboard("rv_view"),
        )
        return

    report = (await state.get_data()).get("report")
    await state.set_state(None)
    if not report:
        await message.answer("❌ Report expired, please start again.")
        return

    send = session.api.report_review if report["kind"] == "review" else session.api.report_comment
    try:
        await send(report["id"], reason)
    except ApiError as e:
        logger.error("Could not report %s %s: %s", report["kind"], report["id"], e.message)
        await message.answer(f"❌ Could not submit report: {e.message}")
        return

    logger.info("Reported %s %s", report["kind"], report["id"])
    await message.answer(
        "✅ Thanks, your report was submitted.",
        reply_markup=InlineKeyboardMarkup(inline_keyboard=[back_button("rv_view", "◀️ Back to reviews")]),
    )

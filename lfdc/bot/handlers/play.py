"""
Battle arena.

Game details and the current line-up live in FSM data so every button press
works from the same option lists.
"""

import logging
from typing import Optional, Tuple

from aiogram import F, Router
from aiogram.filters import Command
from aiogram.fsm.context import FSMContext
from aiogram.types import CallbackQuery

from ...app.models import GameDetails
from ...app.services.api_client import ApiError
from ...app.services.battle import SLOT_TITLES, SLOTS, BattleSetup, options_for, randomize_battle
from ...app.services.sessions import BusyError, Session
from ..keyboards import battle_keyboard, selection_grid
from ..views import quote, render_battle
from .common import Target, callback_parts, show

logger = logging.getLogger(__name__)

router = Router()

# Slots that must not hold the same entity
RIVAL_SLOTS = {"p1": "p2", "p2": "p1", "w1": "w2", "w2": "w1"}


async def _load(state: FSMContext) -> Tuple[Optional[GameDetails], BattleSetup]:
    data = await state.get_data()
    details = GameDetails.model_validate(data["game_details"]) if data.get("game_details") else None
    return details, BattleSetup.from_state(data.get("battle"))


async def _save_setup(state: FSMContext, setup: BattleSetup) -> None:
    await state.update_data(battle=setup.to_state())


@router.callback_query(F.data == "play")
@router.message(Command("play"))
async def show_play(event: Target, session: Session, state: FSMContext):
    """Loads game details and starts from a random line-up."""
    try:
        details = await session.api.game_details()
    except ApiError as e:
        logger.error("Could not load game details: %s", e.message)
        await show(event, "❌ Failed to load the arena. Try again later.")
        return
    try:
        setup = randomize_battle(details)
    except ValueError as e:
        logger.warning("Cannot randomize battle: %s", e)
        setup = BattleSetup()
    await state.update_data(game_details=details.model_dump(by_alias=True))
    await _save_setup(state, setup)
    await show(event, render_battle(setup), battle_keyboard())


@router.callback_query(F.data == "play_show")
async def callback_play_show(callback: CallbackQuery, state: FSMContext):
    _, setup = await _load(state)
    await show(callback, render_battle(setup), battle_keyboard())


@router.callback_query(F.data == "play_random")
async def callback_randomize(callback: CallbackQuery, session: Session, state: FSMContext):
    details, _ = await _load(state)
    if details is None:
        await show_play(callback, session, state)
        return
    try:
        setup = randomize_battle(details)
    except ValueError as e:
        await callback.answer(f"❌ {e}", show_alert=True)
        return
    await _save_setup(state, setup)
    await show(callback, render_battle(setup), battle_keyboard())


@router.callback_query(F.data.startswith("play_slot:"))
async def callback_play_slot(callback: CallbackQuery, session: Session, state: FSMContext):
    """play_slot:<slot>:<page>: selection grid for one slot."""
    parts = callback_parts(callback, 3)
    if parts is None or parts[1] not in SLOTS:
        await callback.answer("Invalid data", show_alert=True)
        return
    details, setup = await _load(state)
    if details is None:
        await show_play(callback, session, state)
        return
    slot = parts[1]
    try:
        page = int(parts[2])
    except ValueError:
        page = 0
    selected = getattr(setup, slot)
    rival = getattr(setup, RIVAL_SLOTS[slot]) if slot in RIVAL_SLOTS else None
    await show(
        callback,
        f"<b>Choose {SLOT_TITLES[slot]}</b>",
        selection_grid(
            slot, options_for(details, slot),
            selected.id if selected else None, page,
            disabled_id=rival.id if rival else None,
        ),
    )


@router.callback_query(F.data.startswith("play_pick:"))
async def callback_play_pick(callback: CallbackQuery, session: Session, state: FSMContext):
    """play_pick:<slot>:<index>."""
    parts = callback_parts(callback, 3)
    if parts is None or parts[1] not in SLOTS:
        await callback.answer("Invalid data", show_alert=True)
        return
    details, setup = await _load(state)
    if details is None:
        await show_play(callback, session, state)
        return
    slot = parts[1]
    options = options_for(details, slot)
    try:
        entity = options[int(parts[2])]
    except (ValueError, IndexError):
        await callback.answer("Invalid choice", show_alert=True)
        return

    rival = getattr(setup, RIVAL_SLOTS[slot]) if slot in RIVAL_SLOTS else None
    if rival is not None and rival.id == entity.id:
        await callback.answer(f"{entity.name} is already picked for {SLOT_TITLES[RIVAL_SLOTS[slot]]}", show_alert=True)
        return

    setup = setup.with_slot(slot, entity)
    await _save_setup(state, setup)
    await show(callback, render_battle(setup), battle_keyboard())


@router.callback_query(F.data == "fight")
async def callback_fight(callback: CallbackQuery, session: Session, state: FSMContext):
    """Sends the line-up to the arena and shows the narration."""
    _, setup = await _load(state)
    try:
        request = setup.to_request()
    except ValueError as e:
        await callback.answer(str(e), show_alert=True)
        return

    try:
        async with session.flags.busy("fight"):
            await callback.answer("⚔️ Fighting…")
            result = await session.api.fight(request)
    except BusyError:
        await callback.answer("The battle is already on!")
        return
    except ApiError as e:
        logger.error("Battle failed: %s", e.message)
        await callback.message.answer("❌ An error occurred. Please try again.")
        return

    narration = result.result
    if result.winner is not None:
        narration = f"{narration}\n\n🏆 Winner: {result.winner.name}"
    # The line-up may have changed while the battle ran
    _, current = await _load(state)
    if not current.same_lineup(setup):
        await callback.message.answer(f"<b>📣 Battle</b>\n{quote(narration)}")
        return
    current.narration = narration
    await _save_setup(state, current)
    await show(callback, render_battle(current), battle_keyboard(), answer=False)

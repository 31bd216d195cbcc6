"""
Battle arena models.
"""

from typing import List, Optional

from pydantic import Field

from .base import BackendModel


class GameEntity(BackendModel):
    """Character, weapon, stage or announcer."""
    id: str = Field(..., alias="_id")
    name: str
    image: Optional[str] = None


Character = GameEntity
Weapon = GameEntity
Stage = GameEntity
Announcer = GameEntity


class GameDetails(BackendModel):
    """Everything selectable on the play screen (game/details)."""
    characters: List[Character] = []
    weapons: List[Weapon] = []
    stages: List[Stage] = []
    announcers: List[Announcer] = []


class BattleRequest(BackendModel):
    """Body of game/fight."""
    character_id1: str
    weapon_id1: str
    character_id2: str
    weapon_id2: str
    stage_id: str
    announcer_id: str


class BattleResult(BackendModel):
    """Server-computed narration and declared winner."""
    result: str
    winner: Optional[GameEntity] = None

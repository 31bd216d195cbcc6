"""
Stats and leaderboard models.
"""

from typing import List, Optional

from pydantic import Field

from .base import BackendModel
from .game import GameEntity
from .user import Author


class BattleSummary(BackendModel):
    """Recent battle entry on the stats page."""
    id: Optional[str] = Field(None, alias="_id")
    character1: Optional[GameEntity] = None
    weapon1: Optional[GameEntity] = None
    character2: Optional[GameEntity] = None
    weapon2: Optional[GameEntity] = None
    stage: Optional[GameEntity] = None
    announcer: Optional[GameEntity] = None
    winner: Optional[GameEntity] = None


class UserStats(BackendModel):
    """Aggregated per-user counters (stats/user)."""
    total_battles: int = 0
    favorite_character: Optional[GameEntity] = None
    favorite_weapon: Optional[GameEntity] = None
    favorite_stage: Optional[GameEntity] = None
    favorite_announcer: Optional[GameEntity] = None
    recent_battles: List[BattleSummary] = []


class UserRanking(BackendModel):
    """Row of the users leaderboard (ranked by battles played)."""
    id: Optional[str] = Field(None, alias="_id")
    user: Author
    battles_won: int = 0
    total_battles: int = 0
    favorite_character: Optional[GameEntity] = None
    favorite_weapon: Optional[GameEntity] = None
    favorite_stage: Optional[GameEntity] = None
    favorite_announcer: Optional[GameEntity] = None


class EntityRanking(BackendModel):
    """Row of a character/stage/weapon/announcer leaderboard."""
    id: str = Field(..., alias="_id")
    name: str
    image: Optional[str] = None
    played: int = 0
    wins: int = 0
    win_ratio: float = 0.0
    # announcers are ranked by how often they were picked
    times_picked: int = 0

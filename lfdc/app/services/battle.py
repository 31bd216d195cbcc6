"""
Battle setup for the play screen.

The battle itself is resolved by the backend; this module only picks the
default line-up and turns a finished setup into a ``game/fight`` request.
"""

import random
from dataclasses import dataclass, field, replace
from typing import List, Optional, Sequence, TypeVar

from ..models import BattleRequest, GameDetails, GameEntity

T = TypeVar("T")

# Slot name -> GameDetails list it is chosen from
SLOTS = {
    "p1": "characters",
    "p2": "characters",
    "w1": "weapons",
    "w2": "weapons",
    "stage": "stages",
    "announcer": "announcers",
}

SLOT_TITLES = {
    "p1": "Player 1",
    "p2": "Player 2",
    "w1": "Weapon 1",
    "w2": "Weapon 2",
    "stage": "Stage",
    "announcer": "Announcer",
}


def pick_distinct(items: Sequence[T], count: int, rng: Optional[random.Random] = None) -> List[T]:
    """Random pick without replacement."""
    if len(items) < count:
        raise ValueError(f"Need at least {count} options, got {len(items)}")
    return (rng or random).sample(list(items), count)


@dataclass
class BattleSetup:
    """Current selection on the play screen. Any slot may be empty."""
    p1: Optional[GameEntity] = None
    p2: Optional[GameEntity] = None
    w1: Optional[GameEntity] = None
    w2: Optional[GameEntity] = None
    stage: Optional[GameEntity] = None
    announcer: Optional[GameEntity] = None
    narration: str = field(default="")

    def is_complete(self) -> bool:
        return all(getattr(self, slot) is not None for slot in SLOTS)

    def same_lineup(self, other: "BattleSetup") -> bool:
        return all(getattr(self, slot) == getattr(other, slot) for slot in SLOTS)

    def with_slot(self, slot: str, entity: Optional[GameEntity]) -> "BattleSetup":
        if slot not in SLOTS:
            raise ValueError(f"Unknown slot: {slot}")
        # Any change invalidates the previous narration
        return replace(self, **{slot: entity}, narration="")

    def to_request(self) -> BattleRequest:
        if not self.is_complete():
            raise ValueError("Please select all options")
        return BattleRequest(
            character_id1=self.p1.id,
            weapon_id1=self.w1.id,
            character_id2=self.p2.id,
            weapon_id2=self.w2.id,
            stage_id=self.stage.id,
            announcer_id=self.announcer.id,
        )

    def to_state(self) -> dict:
        """Plain dict for FSM storage."""
        data = {slot: getattr(self, slot).model_dump(by_alias=True) if getattr(self, slot) else None
                for slot in SLOTS}
        data["narration"] = self.narration
        return data

    @classmethod
    def from_state(cls, data: Optional[dict]) -> "BattleSetup":
        data = data or {}
        slots = {slot: GameEntity.model_validate(data[slot]) if data.get(slot) else None
                 for slot in SLOTS}
        return cls(**slots, narration=data.get("narration", ""))


def randomize_battle(details: GameDetails, rng: Optional[random.Random] = None) -> BattleSetup:
    """Two distinct characters, two distinct weapons, any stage and announcer."""
    p1, p2 = pick_distinct(details.characters, 2, rng)
    w1, w2 = pick_distinct(details.weapons, 2, rng)
    stage, = pick_distinct(details.stages, 1, rng)
    announcer, = pick_distinct(details.announcers, 1, rng)
    return BattleSetup(p1=p1, p2=p2, w1=w1, w2=w2, stage=stage, announcer=announcer)


def options_for(details: GameDetails, slot: str) -> List[GameEntity]:
    return list(getattr(details, SLOTS[slot]))

# tinypet/models/game_state.py
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from tinypet.models.pet import PetAction, PetState, as_utc, utc_now


class ActionCounters(BaseModel):
    total: int = Field(default=0, ge=0)
    feed: int = Field(default=0, ge=0)
    drink: int = Field(default=0, ge=0)
    pet: int = Field(default=0, ge=0)
    walk: int = Field(default=0, ge=0)
    play: int = Field(default=0, ge=0)

    def record(self, action: PetAction) -> None:
        """Count one completed action in its own counter and in the total."""
        setattr(self, action.value, getattr(self, action.value) + 1)
        self.total += 1


class GameState(BaseModel):
    """Everything that survives a restart. Serialized wholesale into one slot."""

    pet: Optional[PetState] = None
    has_completed_onboarding: bool = False
    counters: ActionCounters = Field(default_factory=ActionCounters)
    last_saved_at: datetime = Field(default_factory=utc_now)

    @field_validator("last_saved_at")
    @classmethod
    def normalize_last_saved_at(cls, value: datetime) -> datetime:
        return as_utc(value)

    @classmethod
    def initial(cls, now: Optional[datetime] = None) -> "GameState":
        return cls(last_saved_at=now or utc_now())

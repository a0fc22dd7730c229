# tinypet/services/progression.py
from enum import Enum
from typing import List, Optional

import structlog
from pydantic import BaseModel

from tinypet.models.pet import EvolutionStage, PetState
from tinypet.services.stats import xp_for_next_level

log = structlog.get_logger(__name__)


class ProgressionEventKind(str, Enum):
    LEVEL_UP = "level_up"
    EVOLUTION = "evolution"


class ProgressionEvent(BaseModel):
    kind: ProgressionEventKind
    level: int
    stage: EvolutionStage
    message: str


def check_evolution(pet: PetState) -> Optional[ProgressionEvent]:
    """Advance at most one stage if the pet's level allows it."""
    next_stage = pet.evolution_stage.next_stage
    if next_stage is None or pet.level < next_stage.required_level:
        return None

    pet.evolution_stage = next_stage
    log.info("pet_evolved", pet_id=str(pet.id), level=pet.level, stage=next_stage.value)
    return ProgressionEvent(
        kind=ProgressionEventKind.EVOLUTION,
        level=pet.level,
        stage=next_stage,
        message=f"{pet.name} evolved into {next_stage.value}! {next_stage.emoji}",
    )


def check_level_up(pet: PetState) -> List[ProgressionEvent]:
    """
    Convert banked XP into levels.

    Loops so a single large award can cross several thresholds; evolution
    is re-checked after every level gained.
    """
    events: List[ProgressionEvent] = []
    while pet.xp >= xp_for_next_level(pet.level):
        pet.xp -= xp_for_next_level(pet.level)
        pet.level += 1
        log.info("pet_level_up", pet_id=str(pet.id), level=pet.level, remaining_xp=pet.xp)
        events.append(ProgressionEvent(
            kind=ProgressionEventKind.LEVEL_UP,
            level=pet.level,
            stage=pet.evolution_stage,
            message=f"Level {pet.level} reached! 🎉",
        ))

        evolution = check_evolution(pet)
        if evolution is not None:
            events.append(evolution)
    return events


def award_xp(pet: PetState, amount: int) -> List[ProgressionEvent]:
    pet.xp += max(0, amount)
    return check_level_up(pet)

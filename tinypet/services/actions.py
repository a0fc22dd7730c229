# tinypet/services/actions.py
"""
Resolution of the player's caretaking actions against a GameState.

Every resolver works on a deep copy of the pet and commits it back only
once all deltas, XP and progression have been applied, so a pet is never
left half-updated. Walk and play are two-phase: starting them only
validates and signals the caller; the completion functions apply stats.
"""
from datetime import datetime
from enum import Enum
from typing import List, Optional

import structlog
from pydantic import BaseModel, Field

from tinypet.models.game_state import GameState
from tinypet.models.pet import PetAction, PetAnimation, PetState
from tinypet.services.progression import ProgressionEvent, award_xp
from tinypet.services.stats import MAX_MINI_GAMES_PER_DAY, can_play_mini_game, is_same_day

log = structlog.get_logger(__name__)

BASE_CARE_AMOUNT = 25.0
WALK_BLADDER_BASE = 30.0
WALK_BLADDER_PER_MINUTE = 10.0
WALK_AFFECTION_BASE = 10.0
WALK_AFFECTION_PER_MINUTE = 5.0
WALK_XP_PER_RELIEF = 5

_CARE_ACTIONS = {
    PetAction.FEED: ("hunger", PetAnimation.EATING, "Yum yum! 🍎"),
    PetAction.DRINK: ("thirst", PetAnimation.DRINKING, "Gulp gulp! 💧"),
    PetAction.PET: ("affection", PetAnimation.LOVED, "Purr... ❤️"),
}


class PendingActivity(str, Enum):
    WALK = "walk"
    MINI_GAME = "mini_game"


class ActionResult(BaseModel):
    action: PetAction
    accepted: bool
    message: str = ""
    xp_awarded: int = 0
    animation: Optional[PetAnimation] = None
    pending: Optional[PendingActivity] = None
    events: List[ProgressionEvent] = Field(default_factory=list)

    @property
    def mutated(self) -> bool:
        return self.accepted and self.pending is None


def _clamp(value: float) -> float:
    return max(0.0, min(100.0, value))


def _rejected(action: PetAction, message: str = "") -> ActionResult:
    return ActionResult(action=action, accepted=False, message=message)


def _no_pet(action: PetAction) -> ActionResult:
    log.debug("pet_action_attempt_no_pet", action=action.value)
    return _rejected(action)


def mini_game_limit_message() -> str:
    return f"Already played {MAX_MINI_GAMES_PER_DAY} times today! 🎮"


def _commit(state: GameState, pet: PetState, action: PetAction, now: datetime,
            xp: int) -> List[ProgressionEvent]:
    events = award_xp(pet, xp)
    pet.last_interaction_at = now
    state.pet = pet
    state.counters.record(action)
    return events


def resolve_action(state: GameState, action: PetAction, now: datetime) -> ActionResult:
    """Apply feed/drink/pet, or validate and signal the start of walk/play."""
    if state.pet is None:
        return _no_pet(action)

    if action is PetAction.WALK:
        return ActionResult(action=action, accepted=True, pending=PendingActivity.WALK)

    if action is PetAction.PLAY:
        if not can_play_mini_game(state.pet, now):
            log.info("pet_action_play_rejected_daily_cap", pet_id=str(state.pet.id))
            return _rejected(action, mini_game_limit_message())
        return ActionResult(action=action, accepted=True, pending=PendingActivity.MINI_GAME)

    gauge, animation, message = _CARE_ACTIONS[action]
    pet = state.pet.model_copy(deep=True)
    amount = BASE_CARE_AMOUNT * pet.evolution_stage.care_multiplier
    setattr(pet.needs, gauge, _clamp(getattr(pet.needs, gauge) + amount))

    xp = action.xp_reward
    events = _commit(state, pet, action, now, xp)
    log.info(f"pet_action_{action.value}", pet_id=str(pet.id), gauge=gauge,
             amount=amount, xp=xp, level=pet.level)
    return ActionResult(action=action, accepted=True, message=message, xp_awarded=xp,
                        animation=animation, events=events)


def complete_walk(state: GameState, duration_seconds: float, relief_count: int,
                  now: datetime) -> ActionResult:
    if state.pet is None:
        return _no_pet(PetAction.WALK)

    minutes = max(0.0, duration_seconds) / 60
    relief_count = max(0, relief_count)
    bladder_bonus = min(100.0, WALK_BLADDER_BASE + minutes * WALK_BLADDER_PER_MINUTE)
    affection_bonus = WALK_AFFECTION_BASE + minutes * WALK_AFFECTION_PER_MINUTE
    xp = PetAction.WALK.xp_reward + relief_count * WALK_XP_PER_RELIEF

    pet = state.pet.model_copy(deep=True)
    pet.needs.bladder = _clamp(pet.needs.bladder + bladder_bonus)
    pet.needs.affection = _clamp(pet.needs.affection + affection_bonus)
    pet.total_walks += 1
    pet.last_walk_at = now

    events = _commit(state, pet, PetAction.WALK, now, xp)
    log.info("pet_action_walk_completed", pet_id=str(pet.id), duration_seconds=duration_seconds,
             relief_count=relief_count, xp=xp, level=pet.level)
    return ActionResult(action=PetAction.WALK, accepted=True,
                        message=f"Great walk! 🌳 (+{xp} XP)", xp_awarded=xp,
                        animation=PetAnimation.WALKING, events=events)


def reset_daily_mini_games(pet: PetState, now: datetime) -> bool:
    """Zero the plays-today counter once the calendar day has changed."""
    if pet.last_mini_game_at is None or is_same_day(pet.last_mini_game_at, now):
        return False
    if pet.mini_games_played_today == 0:
        return False
    pet.mini_games_played_today = 0
    return True


def complete_mini_game(state: GameState, score: int, now: datetime) -> ActionResult:
    if state.pet is None:
        return _no_pet(PetAction.PLAY)
    if not can_play_mini_game(state.pet, now):
        log.warning("pet_action_play_completion_over_cap", pet_id=str(state.pet.id), score=score)
        return _rejected(PetAction.PLAY, mini_game_limit_message())

    score = max(0, score)
    xp = PetAction.PLAY.xp_reward + score // 5

    pet = state.pet.model_copy(deep=True)
    reset_daily_mini_games(pet, now)
    pet.needs.affection = _clamp(pet.needs.affection + score / 10.0)
    pet.mini_games_played_today += 1
    pet.total_mini_games_played += 1
    pet.last_mini_game_at = now

    if score > pet.high_score:
        pet.high_score = score
        message = f"New record: {score}! 🏆"
    else:
        message = f"Well played! Score: {score} 🎮"

    events = _commit(state, pet, PetAction.PLAY, now, xp)
    log.info("pet_action_play_completed", pet_id=str(pet.id), score=score, xp=xp,
             high_score=pet.high_score, played_today=pet.mini_games_played_today)
    return ActionResult(action=PetAction.PLAY, accepted=True, message=message, xp_awarded=xp,
                        animation=PetAnimation.CELEBRATE, events=events)

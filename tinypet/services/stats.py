# tinypet/services/stats.py
"""
Derived values over a pet snapshot.

Every function here is pure: it reads the pet (and an explicit `now`) and
never mutates anything, so the session, the action resolver and any
display layer can call them freely.
"""
from datetime import datetime
from typing import Optional

from tinypet.models.pet import PetMood, PetState

LOW_NEED_THRESHOLD = 20.0
TIRED_AVERAGE_THRESHOLD = 30.0
NEUTRAL_AVERAGE_THRESHOLD = 50.0
PLAYFUL_AFFECTION_THRESHOLD = 60.0
LOVING_AFFECTION_THRESHOLD = 80.0
MAX_MINI_GAMES_PER_DAY = 3
SECONDS_PER_DAY = 86400


def xp_for_next_level(level: int) -> int:
    return level * 50 + 50


def level_progress(pet: PetState) -> float:
    """Fraction of the way to the next level, for progress bars."""
    return pet.xp / xp_for_next_level(pet.level)


def happiness_score(pet: PetState) -> float:
    needs = pet.needs
    return (needs.hunger + needs.thirst + needs.affection + needs.bladder) / 4


def is_same_day(first: datetime, second: datetime) -> bool:
    """Compare calendar dates in the local timezone."""
    return first.astimezone().date() == second.astimezone().date()


def can_play_mini_game(pet: PetState, now: datetime) -> bool:
    if pet.last_mini_game_at is None:
        return True
    if not is_same_day(pet.last_mini_game_at, now):
        return True
    return pet.mini_games_played_today < MAX_MINI_GAMES_PER_DAY


def current_mood(pet: PetState, now: datetime) -> PetMood:
    # Order matters: the most urgent need wins.
    needs = pet.needs
    if needs.bladder < LOW_NEED_THRESHOLD:
        return PetMood.NEEDS_WALK
    if needs.hunger < LOW_NEED_THRESHOLD:
        return PetMood.HUNGRY
    if needs.thirst < LOW_NEED_THRESHOLD:
        return PetMood.THIRSTY
    if needs.affection < LOW_NEED_THRESHOLD:
        return PetMood.SAD

    average = happiness_score(pet)
    if average < TIRED_AVERAGE_THRESHOLD:
        return PetMood.TIRED
    if average < NEUTRAL_AVERAGE_THRESHOLD:
        return PetMood.NEUTRAL
    if can_play_mini_game(pet, now) and needs.affection > PLAYFUL_AFFECTION_THRESHOLD:
        return PetMood.PLAYFUL
    if needs.affection > LOVING_AFFECTION_THRESHOLD:
        return PetMood.LOVING
    return PetMood.HAPPY


def days_since_creation(pet: PetState, now: datetime) -> int:
    """Day counter shown to the player; the adoption day is day 1."""
    elapsed_days = int((now - pet.created_at).total_seconds() // SECONDS_PER_DAY)
    return max(1, elapsed_days + 1)


def can_evolve(pet: PetState) -> bool:
    next_stage = pet.evolution_stage.next_stage
    if next_stage is None:
        return False
    return pet.level >= next_stage.required_level


def status_message_for(pet: Optional[PetState], now: datetime) -> str:
    if pet is None:
        return ""
    return current_mood(pet, now).status_message

# tinypet/models/pet.py
from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, field_validator


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive timestamps from older or hand-edited saves as UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Species(str, Enum):
    PIG = "pig"
    DOG = "dog"
    FROG = "frog"

    @property
    def display_name(self) -> str:
        return _SPECIES_INFO[self][0]

    @property
    def emoji(self) -> str:
        return _SPECIES_INFO[self][1]

    @property
    def mini_game_name(self) -> str:
        return _SPECIES_INFO[self][2]

    @property
    def decay_multiplier(self) -> float:
        return _SPECIES_INFO[self][3]


_SPECIES_INFO = {
    Species.PIG: ("Pig", "🐷", "Truffle Hunt", 1.0),
    Species.DOG: ("Dog", "🐶", "Fetch the Ball", 1.0),
    Species.FROG: ("Frog", "🐸", "Mosquito Chase", 1.0),
}


class EvolutionStage(str, Enum):
    """Life stages, in order. A pet only ever moves forward through them."""

    BABY = "baby"
    CHILD = "child"
    ADULT = "adult"
    SENIOR = "senior"

    @property
    def required_level(self) -> int:
        return _STAGE_INFO[self][0]

    @property
    def decay_multiplier(self) -> float:
        """Young pets get hungry and thirsty faster."""
        return _STAGE_INFO[self][1]

    @property
    def care_multiplier(self) -> float:
        """Scales how much a feed/drink/pet action restores."""
        return _STAGE_INFO[self][2]

    @property
    def emoji(self) -> str:
        return _STAGE_INFO[self][3]

    @property
    def next_stage(self) -> Optional["EvolutionStage"]:
        stages = list(EvolutionStage)
        index = stages.index(self)
        return stages[index + 1] if index + 1 < len(stages) else None


_STAGE_INFO = {
    EvolutionStage.BABY: (1, 1.3, 0.8, "🐣"),
    EvolutionStage.CHILD: (5, 1.1, 0.9, "🌱"),
    EvolutionStage.ADULT: (15, 1.0, 1.0, "⭐"),
    EvolutionStage.SENIOR: (30, 0.8, 1.1, "👑"),
}


class PetMood(str, Enum):
    HAPPY = "happy"
    SAD = "sad"
    TIRED = "tired"
    HUNGRY = "hungry"
    THIRSTY = "thirsty"
    LOVING = "loving"
    NEUTRAL = "neutral"
    NEEDS_WALK = "needs_walk"
    PLAYFUL = "playful"

    @property
    def emoji(self) -> str:
        return _MOOD_INFO[self][0]

    @property
    def status_message(self) -> str:
        return _MOOD_INFO[self][1]


_MOOD_INFO = {
    PetMood.HAPPY: ("😊", "I'm so happy!"),
    PetMood.SAD: ("😢", "I feel a little sad..."),
    PetMood.TIRED: ("😴", "I'm tired... Zzz"),
    PetMood.HUNGRY: ("😋", "I'm hungry! 🍎"),
    PetMood.THIRSTY: ("😰", "I'm thirsty! 💧"),
    PetMood.LOVING: ("🥰", "I love you! ❤️"),
    PetMood.NEUTRAL: ("😐", "All good."),
    PetMood.NEEDS_WALK: ("🚶", "I need to go out! 🌳"),
    PetMood.PLAYFUL: ("🤪", "Shall we play? 🎮"),
}


class PetAction(str, Enum):
    FEED = "feed"
    DRINK = "drink"
    PET = "pet"
    WALK = "walk"
    PLAY = "play"

    @property
    def display_name(self) -> str:
        return _ACTION_INFO[self][0]

    @property
    def xp_reward(self) -> int:
        return _ACTION_INFO[self][1]


_ACTION_INFO = {
    PetAction.FEED: ("Feed", 5),
    PetAction.DRINK: ("Drink", 5),
    PetAction.PET: ("Cuddle", 8),
    PetAction.WALK: ("Walk", 15),
    PetAction.PLAY: ("Play", 20),
}


class PetAnimation(str, Enum):
    IDLE = "idle"
    EATING = "eating"
    DRINKING = "drinking"
    LOVED = "loved"
    SAD = "sad"
    CELEBRATE = "celebrate"
    WALKING = "walking"
    PLAYING = "playing"
    EVOLVING = "evolving"


class PetNeeds(BaseModel):
    hunger: float = Field(default=80.0, ge=0, le=100)
    thirst: float = Field(default=80.0, ge=0, le=100)
    affection: float = Field(default=80.0, ge=0, le=100)
    bladder: float = Field(default=80.0, ge=0, le=100)


class PetState(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    name: str
    species: Species
    needs: PetNeeds = Field(default_factory=PetNeeds)
    created_at: datetime = Field(default_factory=utc_now)
    last_interaction_at: datetime = Field(default_factory=utc_now)

    # Progression
    xp: int = Field(default=0, ge=0)
    level: int = Field(default=1, ge=1)
    evolution_stage: EvolutionStage = EvolutionStage.BABY

    # Mini-games
    last_mini_game_at: Optional[datetime] = None
    mini_games_played_today: int = Field(default=0, ge=0)
    total_mini_games_played: int = Field(default=0, ge=0)
    high_score: int = Field(default=0, ge=0)

    # Walks
    total_walks: int = Field(default=0, ge=0)
    last_walk_at: Optional[datetime] = None

    @field_validator("created_at", "last_interaction_at", "last_mini_game_at", "last_walk_at")
    @classmethod
    def normalize_timestamps(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_utc(value)

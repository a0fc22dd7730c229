# tests/conftest.py
from datetime import datetime, timedelta, timezone

import pytest

from tinypet.core.persistence import InMemoryPersistence
from tinypet.core.settings import Settings
from tinypet.models.game_state import GameState
from tinypet.models.pet import PetState, Species
from tinypet.services.session import SessionController

# Midday keeps "same local day" checks stable for small offsets in any timezone
START = datetime(2024, 6, 15, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, now: datetime = START):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


class RecordingFeedback:
    def __init__(self):
        self.played = []

    def play(self, kind):
        self.played.append(kind)


class RecordingReminders:
    def __init__(self):
        self.cancelled = 0

    def cancel_all(self):
        self.cancelled += 1


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def app_settings():
    return Settings(PERSISTENCE_BACKEND="memory", DECAY_TICK_INTERVAL_SECONDS=0.01,
                    AUTOSAVE_INTERVAL_SECONDS=0.02, _env_file=None)


@pytest.fixture
def persistence():
    return InMemoryPersistence()


@pytest.fixture
def feedback():
    return RecordingFeedback()


@pytest.fixture
def reminders():
    return RecordingReminders()


@pytest.fixture
def controller(persistence, feedback, reminders, app_settings, clock):
    return SessionController(persistence, feedback=feedback, reminders=reminders,
                             settings=app_settings, clock=clock)


@pytest.fixture
def pet(clock):
    return PetState(name="Rex", species=Species.DOG, created_at=clock(), last_interaction_at=clock())


@pytest.fixture
def state(pet, clock):
    game = GameState.initial(clock())
    game.pet = pet
    game.has_completed_onboarding = True
    return game

# tinypet/services/session.py
"""
The session controller: single owner of the running game.

It holds the GameState, routes player actions through the resolver and
progression rules, runs the decay and autosave background tasks, and
publishes immutable snapshots to subscribed observers (the UI layer).

All mutating methods are synchronous and never await, so on a single
asyncio loop an action always runs to completion before the next decay
tick, and each periodic task has at most one tick in flight.
"""
import asyncio
from datetime import datetime
from enum import Enum
from typing import Callable, List, Optional

import structlog
from pydantic import BaseModel, ConfigDict

from tinypet.core.persistence import PersistenceGateway
from tinypet.core.settings import Settings, settings as default_settings
from tinypet.models.game_state import ActionCounters, GameState
from tinypet.models.pet import PetAction, PetAnimation, PetMood, PetState, Species, utc_now
from tinypet.services import actions, stats
from tinypet.services.actions import ActionResult, PendingActivity
from tinypet.services.capabilities import (
    FeedbackKind,
    FeedbackPlayer,
    NullFeedbackPlayer,
    NullReminderScheduler,
    ReminderScheduler,
)
from tinypet.services.decay import apply_catch_up_decay, apply_tick_decay
from tinypet.services.progression import ProgressionEvent, ProgressionEventKind
from tinypet.services.storage import clear_game_state, load_game_state, save_game_state

log = structlog.get_logger(__name__)

Clock = Callable[[], datetime]


class SessionEventKind(str, Enum):
    LOADED = "loaded"
    PET_CREATED = "pet_created"
    PET_RENAMED = "pet_renamed"
    ACTION_COMPLETED = "action_completed"
    ACTION_REJECTED = "action_rejected"
    WALK_REQUESTED = "walk_requested"
    MINI_GAME_REQUESTED = "mini_game_requested"
    ACTIVITY_ABANDONED = "activity_abandoned"
    LEVEL_UP = "level_up"
    EVOLUTION = "evolution"
    DECAY_TICK = "decay_tick"
    STATUS_CHANGED = "status_changed"
    RESET = "reset"


class SessionSnapshot(BaseModel):
    """Read-only view of everything the UI layer may display."""

    model_config = ConfigDict(frozen=True)

    pet: Optional[PetState]
    mood: Optional[PetMood]
    status_message: str
    has_completed_onboarding: bool
    counters: ActionCounters
    animation: PetAnimation
    show_walk_session: bool
    show_mini_game: bool
    show_level_up: bool
    show_evolution: bool
    last_mini_game_score: int
    can_play_mini_game: bool
    happiness_score: Optional[float]
    days_since_creation: Optional[int]


class SessionEvent(BaseModel):
    kind: SessionEventKind
    snapshot: SessionSnapshot
    result: Optional[ActionResult] = None
    progression: Optional[ProgressionEvent] = None


Observer = Callable[[SessionEvent], None]


class SessionController:
    def __init__(self,
                 persistence: PersistenceGateway,
                 feedback: Optional[FeedbackPlayer] = None,
                 reminders: Optional[ReminderScheduler] = None,
                 settings: Optional[Settings] = None,
                 clock: Clock = utc_now):
        self.persistence = persistence
        self.feedback = feedback or NullFeedbackPlayer()
        self.reminders = reminders or NullReminderScheduler()
        self.settings = settings or default_settings
        self.clock = clock

        self._state = GameState.initial(clock())
        self._observers: List[Observer] = []
        self._decay_task: Optional[asyncio.Task] = None
        self._autosave_task: Optional[asyncio.Task] = None
        self._reset_transient()

    def _reset_transient(self) -> None:
        self.status_message = ""
        self.animation = PetAnimation.IDLE
        self.show_walk_session = False
        self.show_mini_game = False
        self.show_level_up = False
        self.show_evolution = False
        self.last_mini_game_score = 0

    # --- Read access ---
    @property
    def pet(self) -> Optional[PetState]:
        return self._state.pet

    @property
    def has_completed_onboarding(self) -> bool:
        return self._state.has_completed_onboarding

    @property
    def counters(self) -> ActionCounters:
        return self._state.counters.model_copy()

    @property
    def running(self) -> bool:
        return self._decay_task is not None

    def snapshot(self) -> SessionSnapshot:
        now = self.clock()
        pet = self._state.pet
        has_pet = pet is not None
        return SessionSnapshot(
            pet=pet.model_copy(deep=True) if has_pet else None,
            mood=stats.current_mood(pet, now) if has_pet else None,
            status_message=self.status_message,
            has_completed_onboarding=self._state.has_completed_onboarding,
            counters=self._state.counters.model_copy(),
            animation=self.animation,
            show_walk_session=self.show_walk_session,
            show_mini_game=self.show_mini_game,
            show_level_up=self.show_level_up,
            show_evolution=self.show_evolution,
            last_mini_game_score=self.last_mini_game_score,
            can_play_mini_game=stats.can_play_mini_game(pet, now) if has_pet else False,
            happiness_score=stats.happiness_score(pet) if has_pet else None,
            days_since_creation=stats.days_since_creation(pet, now) if has_pet else None,
        )

    # --- Observers ---
    def subscribe(self, callback: Observer) -> Callable[[], None]:
        """Register an observer; returns a function that unregisters it."""
        if callback not in self._observers:
            self._observers.append(callback)

        def unsubscribe() -> None:
            if callback in self._observers:
                self._observers.remove(callback)

        return unsubscribe

    def _notify(self, kind: SessionEventKind, result: Optional[ActionResult] = None,
                progression: Optional[ProgressionEvent] = None) -> None:
        if not self._observers:
            return
        event = SessionEvent(kind=kind, snapshot=self.snapshot(), result=result, progression=progression)
        for callback in list(self._observers):
            try:
                callback(event)
            except Exception as e:
                log.error("Session observer raised.", event_kind=kind.value, error=str(e), exc_info=True)

    def _play_feedback(self, kind: FeedbackKind) -> None:
        try:
            self.feedback.play(kind)
        except Exception as e:
            log.warning("Feedback player failed.", feedback=kind.value, error=str(e))

    # --- Load / save ---
    def load_game(self) -> GameState:
        """Restore the saved game and apply the decay missed while away."""
        now = self.clock()
        state = load_game_state(self.persistence, now)
        self._state = state
        self._reset_transient()

        if state.pet is not None:
            elapsed = (now - state.last_saved_at).total_seconds()
            decayed = apply_catch_up_decay(state.pet, elapsed, self.settings.BASE_DECAY_RATE)
            log.info("Catch-up decay applied.", pet_id=str(state.pet.id),
                     elapsed_seconds=round(elapsed, 1), decay=round(decayed, 2))
            if actions.reset_daily_mini_games(state.pet, now):
                self.save_game()

        self.status_message = stats.status_message_for(state.pet, now)
        self._notify(SessionEventKind.LOADED)
        return state

    def save_game(self) -> bool:
        self._state.last_saved_at = self.clock()
        return save_game_state(self.persistence, self._state)

    def reset_game(self) -> None:
        """Wipe the pet, counters and saved slot, then start over."""
        was_running = self.running
        self._stop_tasks()

        self._state = GameState.initial(self.clock())
        self._reset_transient()
        clear_game_state(self.persistence)
        try:
            self.reminders.cancel_all()
        except Exception as e:
            log.warning("Failed to cancel pending reminders.", error=str(e))
        log.info("Game reset.")

        if was_running:
            self.start()
        self._notify(SessionEventKind.RESET)

    # --- Pet lifecycle ---
    def create_pet(self, species: Species, name: str = "") -> PetState:
        now = self.clock()
        pet_name = name.strip() or species.display_name
        pet = PetState(name=pet_name, species=species, created_at=now, last_interaction_at=now)

        self._state.pet = pet
        self._state.has_completed_onboarding = True
        self.animation = PetAnimation.CELEBRATE
        self.status_message = f"Welcome {pet_name}! 🎉"
        log.info("pet_created", pet_id=str(pet.id), name=pet_name, species=species.value)

        self.save_game()
        self._notify(SessionEventKind.PET_CREATED)
        return pet.model_copy(deep=True)

    def rename_pet(self, name: str) -> bool:
        new_name = name.strip()
        if not new_name or self._state.pet is None:
            return False
        self._state.pet.name = new_name
        self.status_message = f"Your pet is now called {new_name}!"
        log.info("pet_renamed", pet_id=str(self._state.pet.id), name=new_name)

        self.save_game()
        self._notify(SessionEventKind.PET_RENAMED)
        return True

    # --- Actions ---
    def perform_action(self, action: PetAction) -> ActionResult:
        result = actions.resolve_action(self._state, action, self.clock())

        if result.accepted and result.pending is PendingActivity.WALK:
            self.show_walk_session = True
            self._notify(SessionEventKind.WALK_REQUESTED, result=result)
        elif result.accepted and result.pending is PendingActivity.MINI_GAME:
            self.show_mini_game = True
            self._notify(SessionEventKind.MINI_GAME_REQUESTED, result=result)
        else:
            self._apply_result(result, FeedbackKind.IMPACT)
        return result

    def complete_walk(self, duration_seconds: float, relief_count: int) -> ActionResult:
        self.show_walk_session = False
        result = actions.complete_walk(self._state, duration_seconds, relief_count, self.clock())
        self._apply_result(result, FeedbackKind.SUCCESS)
        return result

    def complete_mini_game(self, score: int) -> ActionResult:
        self.show_mini_game = False
        result = actions.complete_mini_game(self._state, score, self.clock())
        if result.accepted:
            self.last_mini_game_score = max(0, score)
        self._apply_result(result, FeedbackKind.SUCCESS)
        return result

    def abandon_activity(self) -> None:
        """The walk or mini-game screen closed without a result; nothing is recorded."""
        if not (self.show_walk_session or self.show_mini_game):
            return
        self.show_walk_session = False
        self.show_mini_game = False
        self._notify(SessionEventKind.ACTIVITY_ABANDONED)

    def _apply_result(self, result: ActionResult, success_feedback: FeedbackKind) -> None:
        if not result.accepted:
            # An empty message means there was no pet: a silent no-op.
            if result.message:
                self.status_message = result.message
                self._play_feedback(FeedbackKind.WARNING)
                self._notify(SessionEventKind.ACTION_REJECTED, result=result)
            return

        self.animation = result.animation or PetAnimation.IDLE
        self.status_message = result.message
        for event in result.events:
            self.status_message = event.message
            if event.kind is ProgressionEventKind.LEVEL_UP:
                self.show_level_up = True
            else:
                self.show_evolution = True
                self.animation = PetAnimation.EVOLVING

        self._play_feedback(success_feedback)
        self.save_game()

        self._notify(SessionEventKind.ACTION_COMPLETED, result=result)
        for event in result.events:
            kind = (SessionEventKind.LEVEL_UP if event.kind is ProgressionEventKind.LEVEL_UP
                    else SessionEventKind.EVOLUTION)
            self._notify(kind, result=result, progression=event)

    # --- Presentation hand-offs ---
    def refresh_status_message(self) -> None:
        """Go back to idle and show the mood message once an action animation has played."""
        self.animation = PetAnimation.IDLE
        self.status_message = stats.status_message_for(self._state.pet, self.clock())
        self._notify(SessionEventKind.STATUS_CHANGED)

    def clear_celebrations(self) -> None:
        self.show_level_up = False
        self.show_evolution = False
        if self.animation is PetAnimation.EVOLVING:
            self.animation = PetAnimation.IDLE
        self._notify(SessionEventKind.STATUS_CHANGED)

    # --- Decay ---
    def tick_decay(self) -> None:
        pet = self._state.pet
        if pet is None:
            return
        apply_tick_decay(pet, self.settings.BASE_DECAY_RATE)
        self._notify(SessionEventKind.DECAY_TICK)

    # --- Background tasks ---
    async def _run_periodic(self, name: str, interval: float, callback: Callable[[], object]) -> None:
        log.info("Background task started.", task=name, interval_seconds=interval)
        while True:
            try:
                await asyncio.sleep(interval)
            except asyncio.CancelledError:
                log.info("Background task cancelled.", task=name)
                break  # Exit the loop if the task is cancelled
            try:
                callback()
            except Exception as e:
                # Keep ticking; the next interval gets another chance.
                log.error("Background task: Unhandled error during tick.", task=name, error=str(e), exc_info=True)
        log.info("Background task stopped.", task=name)

    def start(self) -> None:
        """Start the decay and autosave tasks on the running event loop."""
        if self.running:
            return
        self._decay_task = asyncio.create_task(
            self._run_periodic("decay", self.settings.DECAY_TICK_INTERVAL_SECONDS, self.tick_decay))
        self._autosave_task = asyncio.create_task(
            self._run_periodic("autosave", self.settings.AUTOSAVE_INTERVAL_SECONDS, self.save_game))

    def _stop_tasks(self) -> List[asyncio.Task]:
        tasks = [t for t in (self._decay_task, self._autosave_task) if t is not None]
        for task in tasks:
            task.cancel()
        self._decay_task = None
        self._autosave_task = None
        return tasks

    async def shutdown(self) -> None:
        """Stop background tasks and write a final save."""
        tasks = self._stop_tasks()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self.save_game()
        log.info("Session shut down.")

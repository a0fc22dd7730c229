# tinypet/services/capabilities.py
"""Outward-facing collaborators the session talks to: device feedback and reminders."""
from enum import Enum
from typing import Protocol


class FeedbackKind(str, Enum):
    IMPACT = "impact"
    SUCCESS = "success"
    WARNING = "warning"


class FeedbackPlayer(Protocol):
    def play(self, kind: FeedbackKind) -> None:
        ...


class ReminderScheduler(Protocol):
    """Push reminders are scheduled by the notification layer; the core only clears them."""

    def cancel_all(self) -> None:
        ...


class NullFeedbackPlayer:
    def play(self, kind: FeedbackKind) -> None:
        pass


class NullReminderScheduler:
    def cancel_all(self) -> None:
        pass

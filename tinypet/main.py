# tinypet/main.py
from typing import Optional

import structlog

from tinypet.core.logging_config import setup_logging
from tinypet.core.persistence import build_persistence
from tinypet.core.settings import Settings, settings as default_settings
from tinypet.services.capabilities import FeedbackPlayer, ReminderScheduler
from tinypet.services.session import SessionController

log = structlog.get_logger(__name__)


async def startup(settings: Optional[Settings] = None,
                  feedback: Optional[FeedbackPlayer] = None,
                  reminders: Optional[ReminderScheduler] = None) -> SessionController:
    """
    Wire a session for the host application and bring it up.

    Loads the saved game (applying the decay missed while closed) and
    starts the decay and autosave tasks on the running event loop.
    """
    settings = settings or default_settings
    setup_logging(log_level_str=settings.LOG_LEVEL)
    log.info("Application startup: loading game and starting background tasks.",
             project=settings.PROJECT_NAME, backend=settings.PERSISTENCE_BACKEND)

    persistence = build_persistence(settings)
    controller = SessionController(persistence, feedback=feedback, reminders=reminders, settings=settings)
    controller.load_game()
    controller.start()
    return controller


async def shutdown(controller: SessionController) -> None:
    log.info("Application shutdown: signalling background tasks to stop.")
    await controller.shutdown()
    log.info("Application shutdown complete.")

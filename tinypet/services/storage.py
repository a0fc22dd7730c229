# tinypet/services/storage.py
from datetime import datetime

import structlog
from pydantic import ValidationError

from tinypet.core.persistence import PersistenceGateway
from tinypet.models.game_state import GameState

log = structlog.get_logger(__name__)


def encode_game_state(state: GameState) -> dict:
    # mode='json' turns UUIDs into strings and datetimes into ISO-8601
    return state.model_dump(mode="json")


def decode_game_state(payload: dict) -> GameState:
    return GameState.model_validate(payload)


def load_game_state(gateway: PersistenceGateway, now: datetime) -> GameState:
    """
    Read the saved game, falling back to a fresh empty state.

    A missing slot is a first run; an unreadable or invalid one is logged
    and discarded. Neither is raised to the caller.
    """
    try:
        payload = gateway.read()
    except Exception as e:
        log.error("Failed to read saved game, starting fresh.", error=str(e), exc_info=True)
        return GameState.initial(now)

    if payload is None:
        log.info("No saved game found, starting fresh.")
        return GameState.initial(now)

    try:
        state = decode_game_state(payload)
    except (ValidationError, TypeError, ValueError) as e:
        log.error("Saved game could not be decoded, starting fresh.", error=str(e))
        return GameState.initial(now)

    log.info("Saved game loaded.", has_pet=state.pet is not None,
             last_saved_at=state.last_saved_at.isoformat())
    return state


def save_game_state(gateway: PersistenceGateway, state: GameState) -> bool:
    """Best-effort write. Returns False (after logging) when the write fails."""
    try:
        gateway.write(encode_game_state(state))
    except Exception as e:
        log.error("Failed to save game.", error=str(e), exc_info=True)
        return False
    log.debug("Game saved.", last_saved_at=state.last_saved_at.isoformat())
    return True


def clear_game_state(gateway: PersistenceGateway) -> bool:
    try:
        gateway.delete()
    except Exception as e:
        log.error("Failed to delete saved game.", error=str(e), exc_info=True)
        return False
    log.info("Saved game deleted.")
    return True

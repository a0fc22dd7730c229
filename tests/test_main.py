# tests/test_main.py
import pytest

from tinypet.core.settings import Settings
from tinypet.main import shutdown, startup
from tinypet.models.pet import PetAction, Species
from tinypet.services.storage import decode_game_state


@pytest.mark.asyncio
async def test_startup_and_shutdown_with_file_backend(tmp_path):
    save_path = tmp_path / "save.json"
    settings = Settings(PERSISTENCE_BACKEND="file", SAVE_FILE_PATH=str(save_path),
                        DECAY_TICK_INTERVAL_SECONDS=0.01, AUTOSAVE_INTERVAL_SECONDS=0.01,
                        _env_file=None)

    controller = await startup(settings)
    assert controller.running
    assert controller.pet is None

    controller.create_pet(Species.FROG, "Kermit")
    controller.perform_action(PetAction.PET)
    await shutdown(controller)
    assert not controller.running

    restored = await startup(settings)
    assert restored.pet.name == "Kermit"
    assert restored.counters.pet == 1
    await shutdown(restored)

    assert decode_game_state(restored.persistence.read()).pet.name == "Kermit"

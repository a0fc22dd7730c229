# tests/test_decay.py
import pytest

from tinypet.models.pet import EvolutionStage, PetNeeds
from tinypet.services.decay import apply_catch_up_decay, apply_tick_decay, decay_rate

BASE_RATE = 0.05


def test_decay_rate_follows_life_stage(pet):
    pet.evolution_stage = EvolutionStage.BABY
    assert decay_rate(pet, BASE_RATE) == pytest.approx(0.065)
    pet.evolution_stage = EvolutionStage.SENIOR
    assert decay_rate(pet, BASE_RATE) == pytest.approx(0.04)


def test_tick_decay_ratios(pet):
    pet.evolution_stage = EvolutionStage.ADULT
    apply_tick_decay(pet, BASE_RATE)

    assert pet.needs.hunger == pytest.approx(80 - 0.05)
    assert pet.needs.thirst == pytest.approx(80 - 0.05)
    assert pet.needs.affection == pytest.approx(80 - 0.05 * 0.3)
    assert pet.needs.bladder == pytest.approx(80 - 0.05 * 0.6)


def test_catch_up_decay_for_an_hour_away(pet):
    pet.evolution_stage = EvolutionStage.ADULT
    pet.needs = PetNeeds(hunger=100, thirst=100, affection=100, bladder=100)

    removed = apply_catch_up_decay(pet, 3600, BASE_RATE)

    assert removed == pytest.approx(180)
    assert pet.needs.hunger == 0
    assert pet.needs.thirst == 0
    assert pet.needs.affection == pytest.approx(10)  # 100 - 90
    assert pet.needs.bladder == 0  # 100 - 126, floored


def test_catch_up_decay_partial(pet):
    pet.evolution_stage = EvolutionStage.ADULT
    apply_catch_up_decay(pet, 100, BASE_RATE)

    assert pet.needs.hunger == pytest.approx(75)
    assert pet.needs.affection == pytest.approx(77.5)
    assert pet.needs.bladder == pytest.approx(76.5)


def test_catch_up_decay_ignores_negative_elapsed(pet):
    before = pet.needs.model_copy()
    assert apply_catch_up_decay(pet, -500, BASE_RATE) == 0
    assert pet.needs == before


def test_repeated_decay_never_goes_below_zero(pet):
    for _ in range(5000):
        apply_tick_decay(pet, BASE_RATE)
    for value in pet.needs.model_dump().values():
        assert value == 0

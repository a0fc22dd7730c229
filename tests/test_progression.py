# tests/test_progression.py
from tinypet.models.pet import EvolutionStage
from tinypet.services.progression import ProgressionEventKind, award_xp, check_evolution
from tinypet.services.stats import xp_for_next_level


def test_single_award_crosses_multiple_levels(pet):
    events = award_xp(pet, xp_for_next_level(1) + xp_for_next_level(2))

    assert pet.level == 3
    assert pet.xp == 0
    assert [e.kind for e in events] == [ProgressionEventKind.LEVEL_UP, ProgressionEventKind.LEVEL_UP]
    assert [e.level for e in events] == [2, 3]
    assert pet.evolution_stage is EvolutionStage.BABY


def test_remainder_xp_is_kept(pet):
    award_xp(pet, 130)
    assert pet.level == 2
    assert pet.xp == 30


def test_below_threshold_is_banked(pet):
    assert award_xp(pet, 99) == []
    assert pet.level == 1
    assert pet.xp == 99


def test_evolution_is_checked_at_each_level(pet):
    # Levels 2..6 in one award: child is reached at level 5, not deferred to the end.
    total = sum(xp_for_next_level(level) for level in range(1, 6))
    events = award_xp(pet, total)

    assert pet.level == 6
    assert pet.evolution_stage is EvolutionStage.CHILD
    evolution = [e for e in events if e.kind is ProgressionEventKind.EVOLUTION]
    assert len(evolution) == 1
    assert evolution[0].level == 5
    assert evolution[0].stage is EvolutionStage.CHILD


def test_late_baby_moves_one_stage_per_check(pet):
    pet.level = 14
    events = award_xp(pet, xp_for_next_level(14))

    assert pet.level == 15
    assert pet.evolution_stage is EvolutionStage.CHILD
    assert [e.kind for e in events] == [ProgressionEventKind.LEVEL_UP, ProgressionEventKind.EVOLUTION]

    # The next level-up re-evaluates and catches up to adult
    award_xp(pet, xp_for_next_level(15))
    assert pet.level == 16
    assert pet.evolution_stage is EvolutionStage.ADULT


def test_senior_is_terminal(pet):
    pet.level = 40
    pet.evolution_stage = EvolutionStage.SENIOR

    assert check_evolution(pet) is None
    events = award_xp(pet, xp_for_next_level(40))
    assert pet.level == 41
    assert pet.evolution_stage is EvolutionStage.SENIOR
    assert all(e.kind is ProgressionEventKind.LEVEL_UP for e in events)


def test_evolution_message_names_the_pet(pet):
    pet.level = 5
    event = check_evolution(pet)
    assert event is not None
    assert "Rex" in event.message
    assert event.stage is EvolutionStage.CHILD

# tinypet/services/decay.py
from tinypet.models.pet import PetState

# Share of the base rate applied to affection and bladder. The catch-up
# ratios are coarser so a long absence leaves the pet needy, not empty.
TICK_AFFECTION_RATIO = 0.3
TICK_BLADDER_RATIO = 0.6
CATCH_UP_AFFECTION_RATIO = 0.5
CATCH_UP_BLADDER_RATIO = 0.7


def decay_rate(pet: PetState, base_rate: float) -> float:
    """Per-second decay for this pet given its life stage and species."""
    return base_rate * pet.evolution_stage.decay_multiplier * pet.species.decay_multiplier


def _drain(pet: PetState, amount: float, affection_ratio: float, bladder_ratio: float) -> None:
    needs = pet.needs
    needs.hunger = max(0.0, needs.hunger - amount)
    needs.thirst = max(0.0, needs.thirst - amount)
    needs.affection = max(0.0, needs.affection - amount * affection_ratio)
    needs.bladder = max(0.0, needs.bladder - amount * bladder_ratio)


def apply_tick_decay(pet: PetState, base_rate: float) -> None:
    """One fixed-interval decay step while the session is running."""
    _drain(pet, decay_rate(pet, base_rate), TICK_AFFECTION_RATIO, TICK_BLADDER_RATIO)


def apply_catch_up_decay(pet: PetState, elapsed_seconds: float, base_rate: float) -> float:
    """
    Bulk decay for time spent away from the game.

    Returns the hunger/thirst amount removed before clamping. A negative
    elapsed time (clock moved backwards) decays nothing.
    """
    amount = max(0.0, elapsed_seconds) * decay_rate(pet, base_rate)
    _drain(pet, amount, CATCH_UP_AFFECTION_RATIO, CATCH_UP_BLADDER_RATIO)
    return amount

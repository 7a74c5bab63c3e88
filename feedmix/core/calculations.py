"""
Core math engine for poultry feed formulation.

Blend:   nutrient% = Σ(nutrient% × weight) / Σ(weight)
         Energy    = Σ(Energy × weight)              (kcal/kg, not renormalized)
Weight:  amount / 100 in percent mode, amount in kg in mass mode
Cost:    cost/kg = Σ(price × weight) / normalizer
         normalizer = 1.0 in percent mode, Σ(amount) in mass mode

All functions are pure: they never mutate their inputs and hold no state.
"""

from typing import Optional, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
import enum

from feedmix.core.reference import (
    ENERGY,
    ENERGY_UNIT,
    PERCENT_UNIT,
    PROTEIN,
    AgeClass,
    Goal,
    Ingredient,
    NormRange,
    NutrientSample,
    Species,
    get_ingredient,
    get_norms,
)
from feedmix.core.units import UnitMode, component_weight


# Percent-mode mixes must add up to 100 within this tolerance
MIX_TOTAL_TOLERANCE = 0.1

# Protein auto-suggest defaults
PROTEIN_SUGGESTION_INGREDIENT = "soybean_meal"
PROTEIN_SUGGESTION_AMOUNT = 10.0

# Birds eat roughly 12% of body weight per day
DAILY_INTAKE_FRACTION = 0.12


class FindingKind(str, enum.Enum):
    DEFICIT = "deficit"
    EXCESS = "excess"
    MISSING = "missing"


class NutrientStatus(str, enum.Enum):
    DEFICIT = "deficit"
    OK = "ok"
    EXCESS = "excess"


@dataclass(frozen=True)
class MixComponent:
    """One ingredient added to a mix."""
    ingredient: Ingredient
    amount: float
    unit: UnitMode = UnitMode.PERCENT


@dataclass(frozen=True)
class Finding:
    """A deficit/excess/missing classification for one nutrient."""
    kind: FindingKind
    nutrient: str
    norm: NormRange
    value: Optional[float] = None

    @property
    def message(self) -> str:
        if self.kind == FindingKind.DEFICIT:
            return f"Deficit in {self.nutrient}: add sources ({self.value:.2f} < {self.norm.min})"
        if self.kind == FindingKind.EXCESS:
            return f"Excess in {self.nutrient}: reduce ({self.value:.2f} > {self.norm.max})"
        return f"{self.nutrient} not calculated"

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.nutrient}"


@dataclass(frozen=True)
class FeedMix:
    """A finalized mix, ready to be persisted. Never mutated after creation."""
    name: str
    species: Species
    goal: Goal
    age_class: AgeClass
    unit_mode: UnitMode
    components: tuple[MixComponent, ...]
    blended_nutrients: Mapping[str, NutrientSample]
    cost_per_kg: float
    bird_weight_kg: Optional[float] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


def blend_nutrients(
    components: list[MixComponent],
    unit_mode: UnitMode
) -> dict[str, NutrientSample]:
    """
    Blend ingredient nutrient profiles into the composition of the mix.

    Args:
        components: Ingredients with their amounts
        unit_mode: Whether amounts are percentages or kilograms

    Returns:
        Mapping nutrient name -> NutrientSample. Empty when the mix has
        no weight (no components or all-zero amounts).
    """
    totals: dict[str, float] = {}
    total_weight = 0.0

    for component in components:
        weight = component_weight(component.amount, unit_mode)
        total_weight += weight
        for name, nutrient in component.ingredient.nutrients.items():
            totals[name] = totals.get(name, 0.0) + nutrient.value * weight

    if total_weight == 0:
        return {}

    blend = {}
    for name, total in totals.items():
        if name == ENERGY:
            # Energy is additive per kg, already weighted
            blend[name] = NutrientSample(name=name, value=total, unit=ENERGY_UNIT)
        else:
            # Weighted average of percentages is already a percentage
            blend[name] = NutrientSample(
                name=name,
                value=total / total_weight,
                unit=PERCENT_UNIT,
            )
    return blend


def nutrient_status(value: float, norm: NormRange) -> NutrientStatus:
    """Classify a single value against its norm range (bounds inclusive)."""
    if norm.contains(value):
        return NutrientStatus.OK
    if value < norm.min:
        return NutrientStatus.DEFICIT
    return NutrientStatus.EXCESS


def evaluate_norms(
    blend: Mapping[str, NutrientSample],
    species: Species,
    goal: Goal,
    age_class: AgeClass,
    norms: Optional[Mapping[str, NormRange]] = None
) -> list[Finding]:
    """
    Check a blended mix against the norm ranges of a bird profile.

    Args:
        blend: Output of blend_nutrients()
        species: Bird species
        goal: Feeding goal
        age_class: Age class of the flock
        norms: Override for the reference norm ranges

    Returns:
        Findings sorted by nutrient name. Empty when no norms exist for
        the profile or every nutrient is within range.
    """
    if norms is None:
        norms = get_norms(species, goal, age_class)
    if not norms:
        return []

    findings = []
    for name in sorted(norms):
        norm = norms[name]
        sample = blend.get(name)
        if sample is None:
            findings.append(Finding(kind=FindingKind.MISSING, nutrient=name, norm=norm))
            continue
        status = nutrient_status(sample.value, norm)
        if status == NutrientStatus.DEFICIT:
            findings.append(Finding(FindingKind.DEFICIT, name, norm, sample.value))
        elif status == NutrientStatus.EXCESS:
            findings.append(Finding(FindingKind.EXCESS, name, norm, sample.value))

    return findings


def compute_cost_per_kg(components: list[MixComponent], unit_mode: UnitMode) -> float:
    """
    Calculate the cost of one kilogram of finished mix.

    Unpriced ingredients add no cost but still count toward the mass
    normalizer. In percent mode the normalizer is fixed at 1.0, so mixes
    that do not sum to 100% yield a cost that is not per actual kg.

    Returns:
        Cost per kg, 0 for mixes without weight
    """
    total_cost = 0.0
    for component in components:
        weight = component_weight(component.amount, unit_mode)
        total_cost += weight * (component.ingredient.price_per_kg or 0)

    if unit_mode == UnitMode.PERCENT:
        total_weight = 1.0
    else:
        total_weight = sum(component.amount for component in components)

    return total_cost / total_weight if total_weight > 0 else 0


def auto_suggest_protein_fix(
    components: list[MixComponent],
    blend: Mapping[str, NutrientSample],
    species: Species,
    goal: Goal,
    age_class: AgeClass,
    suggestion: Optional[Ingredient] = None,
    amount: float = PROTEIN_SUGGESTION_AMOUNT,
    unit_mode: Optional[UnitMode] = None
) -> list[MixComponent]:
    """
    Add a protein-rich ingredient when the mix is below the protein minimum.

    Only Protein is inspected. The suggested ingredient is never added twice.

    Args:
        components: Current mix
        blend: Blend of the current mix
        species: Bird species
        goal: Feeding goal
        age_class: Age class of the flock
        suggestion: Ingredient to add (Soybean Meal by default)
        amount: Amount to add, in the unit of the mix
        unit_mode: Unit of the added component; taken from the mix when omitted

    Returns:
        A new component list, extended by at most one component
    """
    result = list(components)
    norms = get_norms(species, goal, age_class)
    if not norms or PROTEIN not in norms:
        return result

    protein = blend.get(PROTEIN)
    if protein is None or protein.value >= norms[PROTEIN].min:
        return result

    if suggestion is None:
        suggestion = get_ingredient(PROTEIN_SUGGESTION_INGREDIENT)
    if suggestion is None:
        return result
    if any(c.ingredient.id == suggestion.id for c in components):
        return result

    if unit_mode is None:
        unit_mode = components[0].unit if components else UnitMode.PERCENT
    result.append(MixComponent(ingredient=suggestion, amount=amount, unit=unit_mode))
    return result


def mix_total(components: list[MixComponent]) -> float:
    """Sum of component amounts, in the unit of the mix."""
    return sum(component.amount for component in components)


def validate_mix_total(components: list[MixComponent], unit_mode: UnitMode) -> bool:
    """
    Check whether a mix may be saved.

    Percent mixes must add up to 100 (±0.1); mass mixes must be non-empty
    with every amount positive.
    """
    if unit_mode == UnitMode.PERCENT:
        return abs(mix_total(components) - 100) < MIX_TOTAL_TOLERANCE
    return bool(components) and all(c.amount > 0 for c in components)


def finalize_mix(
    name: str,
    species: Species,
    goal: Goal,
    age_class: AgeClass,
    components: list[MixComponent],
    unit_mode: UnitMode,
    bird_weight_kg: Optional[float] = None,
    created_at: Optional[datetime] = None
) -> FeedMix:
    """
    Build the immutable FeedMix record for a mix.

    Callers are expected to check validate_mix_total() first.
    """
    return FeedMix(
        name=name,
        species=species,
        goal=goal,
        age_class=age_class,
        unit_mode=unit_mode,
        components=tuple(components),
        blended_nutrients=blend_nutrients(components, unit_mode),
        cost_per_kg=compute_cost_per_kg(components, unit_mode),
        bird_weight_kg=bird_weight_kg,
        created_at=created_at or datetime.now(timezone.utc),
    )


def daily_feed_kg(
    flock_size: int,
    bird_weight_kg: float,
    intake_fraction: float = DAILY_INTAKE_FRACTION
) -> float:
    """
    Daily feed needed for a flock.

    Formula: feed_kg = flock_size × bird_weight_kg × intake_fraction
    """
    if flock_size < 0:
        raise ValueError("Flock size cannot be negative")
    if bird_weight_kg <= 0:
        raise ValueError("Bird weight must be positive")
    return flock_size * bird_weight_kg * intake_fraction


def daily_feed_cost(feed_kg: float, cost_per_kg: float) -> float:
    """Cost of a day's feed at the given mix price."""
    return feed_kg * cost_per_kg

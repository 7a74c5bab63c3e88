"""
Read-only reference data for feed formulation.

Ingredient nutrient profiles (FAO/NRC typical values) and nutrient norm
ranges (NRC 1994) are shipped as JSON assets under feedmix/data and parsed
once per process. Everything returned from this module is immutable.
"""

import enum
import json
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional

DATA_DIR = Path(__file__).resolve().parent.parent / "data"
INGREDIENTS_FILE = DATA_DIR / "ingredients.json"
NORMS_FILE = DATA_DIR / "norms.json"

# Nutrient vocabulary of the catalog
NUTRIENT_NAMES = (
    "Protein",
    "Fat",
    "Fiber",
    "Ash",
    "Calcium",
    "Phosphorus",
    "Energy",
    "Lysine",
    "Methionine",
)
ENERGY = "Energy"
PROTEIN = "Protein"
PERCENT_UNIT = "%"
ENERGY_UNIT = "kcal/kg"


class Species(str, enum.Enum):
    CHICKEN = "chicken"
    DUCK = "duck"
    TURKEY = "turkey"
    QUAIL = "quail"
    GOOSE = "goose"


class Goal(str, enum.Enum):
    EGG_LAYING = "egg_laying"
    FATTENING = "fattening"
    GROWTH = "growth"
    MAINTENANCE = "maintenance"


class AgeClass(str, enum.Enum):
    YOUNG = "young"
    ADULT = "adult"
    LAYING = "laying"
    BROILER = "broiler"


class ReferenceDataError(ValueError):
    """Raised when a reference data asset is malformed or inconsistent."""


@dataclass(frozen=True)
class NutrientSample:
    """A single nutrient value with its unit."""
    name: str
    value: float
    unit: str


@dataclass(frozen=True)
class Ingredient:
    """Static feed ingredient with its nutrient profile."""
    id: str
    name: str
    nutrients: Mapping[str, NutrientSample]
    category: str
    tag: str
    price_per_kg: Optional[float] = None


@dataclass(frozen=True)
class NormRange:
    """Acceptable [min, max] band for a nutrient, bounds inclusive."""
    min: float
    max: float

    def contains(self, value: float) -> bool:
        return self.min <= value <= self.max


NormKey = tuple[Species, Goal, AgeClass]


def _read_json(path: Path) -> dict:
    try:
        with path.open(encoding="utf-8") as fh:
            return json.load(fh)
    except (OSError, json.JSONDecodeError) as e:
        raise ReferenceDataError(f"Cannot read reference data {path.name}: {e}") from e


def parse_ingredients(payload: dict) -> tuple[Ingredient, ...]:
    """
    Build Ingredient records from a parsed ingredients asset.

    Every nutrient name must use the same unit string across the whole
    catalog, otherwise blended values would mix interpretations.

    Raises:
        ReferenceDataError: on duplicate ids, nutrients outside
            NUTRIENT_NAMES or inconsistent nutrient units
    """
    units_by_nutrient: dict[str, str] = {}
    seen_ids: set[str] = set()
    ingredients = []

    for raw in payload.get("ingredients", []):
        ingredient_id = raw["id"]
        if ingredient_id in seen_ids:
            raise ReferenceDataError(f"Duplicate ingredient id: {ingredient_id}")
        seen_ids.add(ingredient_id)

        nutrients = {}
        for name, (value, unit) in raw.get("nutrients", {}).items():
            if name not in NUTRIENT_NAMES:
                raise ReferenceDataError(f"Unknown nutrient {name} in {ingredient_id}")
            expected = units_by_nutrient.setdefault(name, unit)
            if unit != expected:
                raise ReferenceDataError(
                    f"Nutrient {name} uses unit '{unit}' in {ingredient_id}, "
                    f"expected '{expected}'"
                )
            nutrients[name] = NutrientSample(name=name, value=float(value), unit=unit)

        price = raw.get("price_per_kg")
        ingredients.append(Ingredient(
            id=ingredient_id,
            name=raw["name"],
            nutrients=MappingProxyType(nutrients),
            category=raw.get("category", "Other"),
            tag=raw.get("tag", ""),
            price_per_kg=float(price) if price is not None else None,
        ))

    return tuple(ingredients)


def parse_norms(payload: dict) -> Mapping[NormKey, Mapping[str, NormRange]]:
    """
    Build the composite-key norm table from a parsed norms asset.

    Raises:
        ReferenceDataError: on unknown species/goal/age tags or min > max
    """
    table = {}
    for species, goals in payload.get("norms", {}).items():
        for goal, ages in goals.items():
            for age_class, ranges in ages.items():
                key = _norm_key(species, goal, age_class)
                parsed = {}
                for nutrient, (low, high) in ranges.items():
                    if low > high:
                        raise ReferenceDataError(
                            f"Norm for {nutrient} in {species}/{goal}/{age_class} "
                            f"has min {low} above max {high}"
                        )
                    parsed[nutrient] = NormRange(min=float(low), max=float(high))
                table[key] = MappingProxyType(parsed)
    return MappingProxyType(table)


def _norm_key(species: str, goal: str, age_class: str) -> NormKey:
    try:
        return Species(species), Goal(goal), AgeClass(age_class)
    except ValueError as e:
        raise ReferenceDataError(f"Invalid norm table key: {e}") from e


@lru_cache(maxsize=None)
def load_ingredient_catalog() -> tuple[Ingredient, ...]:
    """Load the ingredient catalog (cached for the process lifetime)."""
    return parse_ingredients(_read_json(INGREDIENTS_FILE))


@lru_cache(maxsize=None)
def load_norm_table() -> Mapping[NormKey, Mapping[str, NormRange]]:
    """Load the nutrient norm table (cached for the process lifetime)."""
    return parse_norms(_read_json(NORMS_FILE))


def get_ingredient(ingredient_id: str) -> Optional[Ingredient]:
    """Look up a catalog ingredient by id."""
    for ingredient in load_ingredient_catalog():
        if ingredient.id == ingredient_id:
            return ingredient
    return None


def search_ingredients(query: Optional[str] = None) -> list[Ingredient]:
    """Case-insensitive search on ingredient name or category."""
    catalog = load_ingredient_catalog()
    if not query:
        return list(catalog)
    needle = query.lower()
    return [
        ing for ing in catalog
        if needle in ing.name.lower() or needle in ing.category.lower()
    ]


def get_norms(
    species: Species,
    goal: Goal,
    age_class: AgeClass,
) -> Optional[Mapping[str, NormRange]]:
    """Norm ranges for a bird profile, or None if the combination is unknown."""
    return load_norm_table().get((species, goal, age_class))

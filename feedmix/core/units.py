"""Mix amount units and mass conversion utilities."""

from enum import Enum


class UnitMode(str, Enum):
    """How component amounts in a mix are expressed."""
    PERCENT = "%"   # Share of the total mix
    MASS = "kg"     # Absolute kilograms


class MassUnit(str, Enum):
    """Unit a mass-mode amount is entered in."""
    G = "g"
    KG = "kg"


GRAMS_PER_KG = 1000


def to_kg(value: float, unit: MassUnit) -> float:
    """Convert an entered mass-mode amount into kilograms."""
    if unit == MassUnit.G:
        return value / GRAMS_PER_KG
    return value


def component_weight(amount: float, mode: UnitMode) -> float:
    """
    Contribution weight of one mix component.

    Percent amounts become a mass fraction of the mix (amount / 100);
    mass amounts are used as raw kilograms.
    """
    if mode == UnitMode.PERCENT:
        return amount / 100
    return amount


def format_amount(value: float, mode: UnitMode) -> str:
    """Format a component amount with its unit suffix."""
    if mode == UnitMode.PERCENT:
        return f"{value:.1f}%"
    return f"{value:.2f} {mode.value}"

"""
Reports for saved feed mixes.

Builds the plain-text mix report (bird profile, nutrient table, findings)
and the flock feeding report (daily feed and daily cost).
"""

import logging
from typing import Optional

from feedmix.core.calculations import (
    daily_feed_cost,
    daily_feed_kg,
    evaluate_norms,
    nutrient_status,
)
from feedmix.core.config import settings
from feedmix.core.reference import NutrientSample, get_norms
from feedmix.core.units import UnitMode, format_amount
from feedmix.models.models import FeedMixRecord

_logger = logging.getLogger(__name__)


def record_nutrients(record: FeedMixRecord) -> dict[str, NutrientSample]:
    """Rebuild the blended nutrient mapping stored on a saved mix."""
    return {
        name: NutrientSample(name=name, value=data["value"], unit=data["unit"])
        for name, data in (record.blended_nutrients or {}).items()
    }


class MixReportService:
    """Service for building reports from saved mixes."""

    def __init__(self, intake_fraction: Optional[float] = None):
        if intake_fraction is None:
            intake_fraction = settings.DAILY_INTAKE_FRACTION
        self.intake_fraction = intake_fraction

    def build_text_report(self, record: FeedMixRecord) -> str:
        """
        Render a saved mix as a plain-text report.

        Args:
            record: Saved mix

        Returns:
            Report text with profile, components, nutrients and findings
        """
        nutrients = record_nutrients(record)
        norms = get_norms(record.species, record.goal, record.age_class) or {}
        findings = evaluate_norms(
            nutrients, record.species, record.goal, record.age_class
        )
        unit_mode = UnitMode(record.unit_mode)

        lines = [
            record.name,
            f"Bird: {record.species.value}, Goal: {record.goal.value}, "
            f"Age: {record.age_class.value}",
        ]
        if record.bird_weight_kg:
            lines.append(f"Bird weight: {record.bird_weight_kg:.2f} kg")
        lines.append(f"Created: {record.created_at:%Y-%m-%d %H:%M}")

        lines.append("")
        lines.append("Ingredients:")
        for component in record.components or []:
            lines.append(
                f"  {component['ingredient_name']}: "
                f"{format_amount(component['amount'], unit_mode)}"
            )

        lines.append("")
        lines.append("Nutrients:")
        for name in sorted(nutrients):
            sample = nutrients[name]
            row = f"  {name}: {sample.value:.2f} {sample.unit}"
            norm = norms.get(name)
            if norm is not None:
                status = nutrient_status(sample.value, norm)
                row += f" [{norm.min}-{norm.max}] {status.value}"
            lines.append(row)

        if record.cost_per_kg is not None:
            lines.append("")
            lines.append(f"Cost per kg: {record.cost_per_kg:.2f} {record.currency}")

        lines.append("")
        lines.append("Recommendations:")
        if not findings:
            lines.append("  None")
        for finding in findings:
            lines.append(f"  {finding.message}")

        return "\n".join(lines)

    def flock_report(
        self,
        flock_size: int,
        bird_weight_kg: float,
        cost_per_kg: Optional[float] = None
    ) -> dict:
        """
        Calculate daily feed and cost for a flock.

        Args:
            flock_size: Number of birds
            bird_weight_kg: Average live weight per bird
            cost_per_kg: Mix price, if known

        Returns:
            Dict with daily feed in kg and daily cost (None without a price)
        """
        feed_kg = daily_feed_kg(flock_size, bird_weight_kg, self.intake_fraction)
        daily_cost = None
        if cost_per_kg is not None:
            daily_cost = round(daily_feed_cost(feed_kg, cost_per_kg), 2)

        _logger.debug(
            "Flock report: birds=%s weight=%.2f feed=%.2f kg", flock_size, bird_weight_kg, feed_kg
        )
        return {
            "flock_size": flock_size,
            "bird_weight_kg": bird_weight_kg,
            "daily_feed_kg": round(feed_kg, 2),
            "cost_per_kg": cost_per_kg,
            "daily_cost": daily_cost,
            "currency": settings.CURRENCY,
        }


report_service = MixReportService()

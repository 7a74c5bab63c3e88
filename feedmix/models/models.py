from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Float, Enum, DateTime, JSON

from feedmix.core.database import Base
from feedmix.core.reference import Species, Goal, AgeClass
from feedmix.core.units import UnitMode


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FeedMixRecord(Base):
    """A saved mix. Rows are only ever appended, never updated."""
    __tablename__ = "feed_mixes"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    species = Column(Enum(Species), nullable=False)
    goal = Column(Enum(Goal), nullable=False)
    age_class = Column(Enum(AgeClass), nullable=False)
    bird_weight_kg = Column(Float, nullable=True)
    unit_mode = Column(Enum(UnitMode), nullable=False, default=UnitMode.PERCENT)
    # [{"ingredient_id", "ingredient_name", "amount", "unit"}]
    components = Column(JSON, nullable=False, default=list)
    # {"Protein": {"value": 19.75, "unit": "%"}, ...}
    blended_nutrients = Column(JSON, nullable=False, default=dict)
    cost_per_kg = Column(Float, nullable=True)
    currency = Column(String, nullable=False, default="USD")
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

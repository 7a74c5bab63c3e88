"""Pydantic schemas for request/response validation."""

from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field

from feedmix.core.calculations import FindingKind, NutrientStatus
from feedmix.core.reference import Species, Goal, AgeClass
from feedmix.core.units import MassUnit, UnitMode


class NutrientSampleResponse(BaseModel):
    name: str
    value: float
    unit: str


# Ingredient schemas
class IngredientResponse(BaseModel):
    id: str
    name: str
    category: str
    tag: str
    price_per_kg: Optional[float]
    nutrients: list[NutrientSampleResponse]


# Norm schemas
class NormRangeResponse(BaseModel):
    nutrient: str
    min: float
    max: float


class NormResponse(BaseModel):
    species: Species
    goal: Goal
    age_class: AgeClass
    ranges: list[NormRangeResponse]


# Mix schemas
class MixComponentIn(BaseModel):
    ingredient_id: str = Field(..., min_length=1)
    amount: float = Field(..., ge=0)


class MixComponentResponse(BaseModel):
    ingredient_id: str
    ingredient_name: str
    amount: float
    unit: UnitMode


class MixRequest(BaseModel):
    species: Species
    goal: Goal
    age_class: AgeClass
    unit_mode: Optional[UnitMode] = None  # Falls back to DEFAULT_UNIT_MODE
    mass_unit: MassUnit = MassUnit.KG  # Entry unit of mass-mode amounts, stored as kg
    components: list[MixComponentIn] = Field(default_factory=list)


class FeedMixCreate(MixRequest):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    bird_weight_kg: Optional[float] = Field(None, gt=0, le=50)


class NutrientRowResponse(BaseModel):
    """Blended nutrient with its norm range and status, if a norm exists."""
    name: str
    value: float
    unit: str
    min: Optional[float] = None
    max: Optional[float] = None
    status: Optional[NutrientStatus] = None


class FindingResponse(BaseModel):
    kind: FindingKind
    nutrient: str
    value: Optional[float]
    min: float
    max: float
    message: str


class MixCalculationResponse(BaseModel):
    unit_mode: UnitMode
    total_amount: float
    is_valid: bool  # Percent mixes sum to 100 (±0.1), mass amounts all positive
    has_norms: bool
    nutrients: list[NutrientRowResponse]
    findings: list[FindingResponse]
    cost_per_kg: float
    currency: str


class AutoSuggestResponse(BaseModel):
    added_ingredient_id: Optional[str]
    components: list[MixComponentResponse]
    calculation: MixCalculationResponse


class FeedMixResponse(BaseModel):
    id: int
    name: str
    species: Species
    goal: Goal
    age_class: AgeClass
    bird_weight_kg: Optional[float]
    unit_mode: UnitMode
    components: list[MixComponentResponse]
    blended_nutrients: list[NutrientSampleResponse]
    cost_per_kg: Optional[float]
    currency: str
    created_at: datetime


# Report schemas
class FlockReportRequest(BaseModel):
    flock_size: int = Field(..., ge=0, le=1_000_000)
    mix_id: Optional[int] = None  # Supplies weight and cost when set
    bird_weight_kg: Optional[float] = Field(None, gt=0, le=50)
    cost_per_kg: Optional[float] = Field(None, ge=0)


class FlockReportResponse(BaseModel):
    flock_size: int
    bird_weight_kg: float
    daily_feed_kg: float
    cost_per_kg: Optional[float]
    daily_cost: Optional[float]
    currency: str

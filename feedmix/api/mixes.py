"""Feed mix API endpoints."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session

from feedmix.core.config import settings
from feedmix.core.database import get_db
from feedmix.core.calculations import (
    MixComponent,
    auto_suggest_protein_fix,
    blend_nutrients,
    compute_cost_per_kg,
    evaluate_norms,
    finalize_mix,
    mix_total,
    nutrient_status,
    validate_mix_total,
)
from feedmix.core.reference import get_ingredient, get_norms
from feedmix.core.units import MassUnit, UnitMode, to_kg
from feedmix.models.models import FeedMixRecord
from feedmix.schemas.schemas import (
    AutoSuggestResponse,
    FeedMixCreate,
    FeedMixResponse,
    FindingResponse,
    MixCalculationResponse,
    MixComponentIn,
    MixComponentResponse,
    MixRequest,
    NutrientRowResponse,
    NutrientSampleResponse,
)
from feedmix.services.report_service import report_service

router = APIRouter(prefix="/mix", tags=["mixes"])

_logger = logging.getLogger(__name__)


@router.post("/calculate", response_model=MixCalculationResponse)
def calculate_mix(request: MixRequest):
    """
    Calculate a mix without saving it.

    Returns:
    - Blended nutrients with their norm ranges and status
    - Deficit/excess/missing findings for the bird profile
    - Cost per kg of mix
    - Whether the mix is complete enough to be saved
    """
    unit_mode = request.unit_mode or settings.DEFAULT_UNIT_MODE
    components = _resolve_components(request.components, unit_mode, request.mass_unit)
    return _calculate(request, components, unit_mode)


@router.post("/auto-suggest", response_model=AutoSuggestResponse)
def auto_suggest(request: MixRequest):
    """
    Add a protein source when the mix is below the protein minimum.

    The suggested ingredient is added at most once.
    """
    unit_mode = request.unit_mode or settings.DEFAULT_UNIT_MODE
    components = _resolve_components(request.components, unit_mode, request.mass_unit)
    blend = blend_nutrients(components, unit_mode)

    suggestion = get_ingredient(settings.PROTEIN_SUGGESTION_INGREDIENT)
    suggested = auto_suggest_protein_fix(
        components,
        blend,
        request.species,
        request.goal,
        request.age_class,
        suggestion=suggestion,
        amount=settings.PROTEIN_SUGGESTION_AMOUNT,
        unit_mode=unit_mode,
    )

    added = None
    if len(suggested) > len(components):
        added = suggested[-1].ingredient.id
        _logger.info("Auto-suggest added %s to the mix", added)

    return AutoSuggestResponse(
        added_ingredient_id=added,
        components=[_component_to_response(c) for c in suggested],
        calculation=_calculate(request, suggested, unit_mode),
    )


@router.post("", response_model=FeedMixResponse, status_code=201)
def create_mix(request: FeedMixCreate, db: Session = Depends(get_db)):
    """Save a mix. Saved mixes are never modified afterwards."""
    unit_mode = request.unit_mode or settings.DEFAULT_UNIT_MODE
    components = _resolve_components(request.components, unit_mode, request.mass_unit)

    if not validate_mix_total(components, unit_mode):
        if unit_mode == UnitMode.PERCENT:
            detail = (
                f"Mix percentages must sum to 100% "
                f"(currently {mix_total(components):.1f}%)"
            )
        else:
            detail = "Mix must contain ingredients with positive amounts"
        raise HTTPException(status_code=400, detail=detail)

    created_at = datetime.now(timezone.utc)
    name = request.name or f"Mix {created_at:%Y-%m-%d %H:%M}"
    mix = finalize_mix(
        name=name,
        species=request.species,
        goal=request.goal,
        age_class=request.age_class,
        components=components,
        unit_mode=unit_mode,
        bird_weight_kg=request.bird_weight_kg,
        created_at=created_at,
    )

    db_mix = FeedMixRecord(
        name=mix.name,
        species=mix.species,
        goal=mix.goal,
        age_class=mix.age_class,
        bird_weight_kg=mix.bird_weight_kg,
        unit_mode=mix.unit_mode,
        components=[
            _component_to_response(c).model_dump(mode="json") for c in mix.components
        ],
        blended_nutrients={
            nutrient: {"value": sample.value, "unit": sample.unit}
            for nutrient, sample in mix.blended_nutrients.items()
        },
        cost_per_kg=mix.cost_per_kg,
        currency=settings.CURRENCY,
        created_at=mix.created_at,
    )
    db.add(db_mix)
    db.commit()
    db.refresh(db_mix)

    _logger.info("Saved mix %s (%s)", db_mix.id, db_mix.name)
    return _mix_to_response(db_mix)


@router.get("", response_model=list[FeedMixResponse])
def list_mixes(db: Session = Depends(get_db)):
    """List saved mixes, oldest first."""
    mixes = db.query(FeedMixRecord).order_by(FeedMixRecord.id).all()
    return [_mix_to_response(m) for m in mixes]


@router.get("/{mix_id}", response_model=FeedMixResponse)
def read_mix(mix_id: int, db: Session = Depends(get_db)):
    """Get a saved mix by ID."""
    return _mix_to_response(get_mix_or_404(db, mix_id))


@router.get("/{mix_id}/report", response_class=PlainTextResponse)
def read_mix_report(mix_id: int, db: Session = Depends(get_db)):
    """Get a plain-text report of a saved mix."""
    return report_service.build_text_report(get_mix_or_404(db, mix_id))


def get_mix_or_404(db: Session, mix_id: int) -> FeedMixRecord:
    mix = db.query(FeedMixRecord).filter(FeedMixRecord.id == mix_id).first()
    if not mix:
        raise HTTPException(status_code=404, detail="Mix not found")
    return mix


def _resolve_components(
    items: list[MixComponentIn],
    unit_mode: UnitMode,
    mass_unit: MassUnit = MassUnit.KG
) -> list[MixComponent]:
    """
    Look up catalog ingredients for the requested components.

    Mass-mode amounts entered in grams are converted to kg here, so the
    engine and saved mixes only ever see kilograms.
    """
    components = []
    for item in items:
        ingredient = get_ingredient(item.ingredient_id)
        if not ingredient:
            raise HTTPException(
                status_code=404,
                detail=f"Ingredient not found: {item.ingredient_id}"
            )
        amount = item.amount
        if unit_mode == UnitMode.MASS:
            amount = to_kg(amount, mass_unit)
        components.append(MixComponent(ingredient=ingredient, amount=amount, unit=unit_mode))
    return components


def _calculate(
    request: MixRequest,
    components: list[MixComponent],
    unit_mode: UnitMode
) -> MixCalculationResponse:
    """Run blend, norm evaluation and cost for a mix."""
    blend = blend_nutrients(components, unit_mode)
    norms = get_norms(request.species, request.goal, request.age_class) or {}

    # Norm checks and cost are meaningless until the mix has weight
    if blend:
        findings = evaluate_norms(blend, request.species, request.goal, request.age_class)
    else:
        findings = []
    cost = compute_cost_per_kg(components, unit_mode)

    for finding in findings:
        _logger.warning("Nutrient alert: %s", finding.message)

    rows = []
    for name in sorted(blend):
        sample = blend[name]
        norm = norms.get(name)
        rows.append(NutrientRowResponse(
            name=name,
            value=round(sample.value, 4),
            unit=sample.unit,
            min=norm.min if norm else None,
            max=norm.max if norm else None,
            status=nutrient_status(sample.value, norm) if norm else None,
        ))

    return MixCalculationResponse(
        unit_mode=unit_mode,
        total_amount=mix_total(components),
        is_valid=validate_mix_total(components, unit_mode),
        has_norms=bool(norms),
        nutrients=rows,
        findings=[
            FindingResponse(
                kind=f.kind,
                nutrient=f.nutrient,
                value=f.value,
                min=f.norm.min,
                max=f.norm.max,
                message=f.message,
            )
            for f in findings
        ],
        cost_per_kg=round(cost, 4),
        currency=settings.CURRENCY,
    )


def _component_to_response(component: MixComponent) -> MixComponentResponse:
    return MixComponentResponse(
        ingredient_id=component.ingredient.id,
        ingredient_name=component.ingredient.name,
        amount=component.amount,
        unit=component.unit,
    )


def _mix_to_response(mix: FeedMixRecord) -> FeedMixResponse:
    """Convert FeedMixRecord model to response schema."""
    return FeedMixResponse(
        id=mix.id,
        name=mix.name,
        species=mix.species,
        goal=mix.goal,
        age_class=mix.age_class,
        bird_weight_kg=mix.bird_weight_kg,
        unit_mode=mix.unit_mode,
        components=[MixComponentResponse(**c) for c in mix.components or []],
        blended_nutrients=[
            NutrientSampleResponse(name=name, value=data["value"], unit=data["unit"])
            for name, data in sorted((mix.blended_nutrients or {}).items())
        ],
        cost_per_kg=mix.cost_per_kg,
        currency=mix.currency,
        created_at=mix.created_at,
    )

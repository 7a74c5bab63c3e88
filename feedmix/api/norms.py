"""Nutrient norm API endpoints."""

from fastapi import APIRouter, HTTPException

from feedmix.core.reference import Species, Goal, AgeClass, get_norms
from feedmix.schemas.schemas import NormResponse, NormRangeResponse

router = APIRouter(prefix="/norm", tags=["norms"])


@router.get("/{species}/{goal}/{age_class}", response_model=NormResponse)
def read_norms(species: Species, goal: Goal, age_class: AgeClass):
    """Get the nutrient norm ranges for a bird profile."""
    norms = get_norms(species, goal, age_class)
    if not norms:
        raise HTTPException(
            status_code=404,
            detail=f"No norms for {species.value}/{goal.value}/{age_class.value}"
        )
    return NormResponse(
        species=species,
        goal=goal,
        age_class=age_class,
        ranges=[
            NormRangeResponse(nutrient=name, min=norm.min, max=norm.max)
            for name, norm in sorted(norms.items())
        ],
    )

"""Flock feeding report API endpoints."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from feedmix.api.mixes import get_mix_or_404
from feedmix.core.database import get_db
from feedmix.schemas.schemas import FlockReportRequest, FlockReportResponse
from feedmix.services.report_service import report_service

router = APIRouter(prefix="/report", tags=["reports"])


@router.post("/flock", response_model=FlockReportResponse)
def flock_report(request: FlockReportRequest, db: Session = Depends(get_db)):
    """
    Compute the daily feed and cost for a flock.

    Bird weight and cost per kg come from the saved mix when mix_id is
    given; explicit values in the request take precedence.
    """
    bird_weight_kg = request.bird_weight_kg
    cost_per_kg = request.cost_per_kg

    if request.mix_id is not None:
        mix = get_mix_or_404(db, request.mix_id)
        bird_weight_kg = bird_weight_kg or mix.bird_weight_kg
        if cost_per_kg is None:
            cost_per_kg = mix.cost_per_kg

    if not bird_weight_kg:
        raise HTTPException(status_code=400, detail="Bird weight is required for a flock report")

    return report_service.flock_report(request.flock_size, bird_weight_kg, cost_per_kg)

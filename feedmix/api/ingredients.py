"""Ingredient catalog API endpoints."""

from typing import Optional
from fastapi import APIRouter, HTTPException, Query

from feedmix.core.reference import Ingredient, get_ingredient, search_ingredients
from feedmix.schemas.schemas import IngredientResponse, NutrientSampleResponse

router = APIRouter(prefix="/ingredient", tags=["ingredients"])


@router.get("", response_model=list[IngredientResponse])
def list_ingredients(
    q: Optional[str] = Query(None, description="Filter by name or category")
):
    """List catalog ingredients, optionally filtered by name or category."""
    return [ingredient_to_response(ing) for ing in search_ingredients(q)]


@router.get("/{ingredient_id}", response_model=IngredientResponse)
def read_ingredient(ingredient_id: str):
    """Get a catalog ingredient with its nutrient profile."""
    ingredient = get_ingredient(ingredient_id)
    if not ingredient:
        raise HTTPException(status_code=404, detail="Ingredient not found")
    return ingredient_to_response(ingredient)


def ingredient_to_response(ingredient: Ingredient) -> IngredientResponse:
    """Convert a catalog Ingredient to its response schema."""
    return IngredientResponse(
        id=ingredient.id,
        name=ingredient.name,
        category=ingredient.category,
        tag=ingredient.tag,
        price_per_kg=ingredient.price_per_kg,
        nutrients=[
            NutrientSampleResponse(name=n.name, value=n.value, unit=n.unit)
            for n in sorted(ingredient.nutrients.values(), key=lambda n: n.name)
        ],
    )

"""
Poultry Feed Formulation API - Main Application

Formulates poultry feed mixes from a catalog of feed ingredients and checks
them against NRC nutrient norms for the selected bird profile.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from feedmix.core.config import settings
from feedmix.core.database import init_db
from feedmix.core.logging_config import configure_logging
from feedmix.api import ingredients, norms, mixes, reports

configure_logging(settings.LOG_LEVEL)

# Create database tables
init_db()

# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    description="""
    ## Poultry Feed Formulation API

    Formulate feed mixes for chickens, ducks, turkeys, quails and geese.

    ### Features
    - Nutrient blending in percent or kilogram mode
    - NRC 1994 norm checks per species, goal and age class
    - Cost per kg of finished mix
    - Protein auto-suggest
    - Saved mixes with text and flock feeding reports

    ### Core Endpoints
    - `/ingredient` - Browse the ingredient catalog
    - `/norm` - Nutrient norm ranges per bird profile
    - `/mix/calculate` - Calculate a mix
    - `/mix` - Save and list mixes
    - `/report/flock` - Daily feed and cost for a flock
    """,
    version="1.0.0",
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(ingredients.router)
app.include_router(norms.router)
app.include_router(mixes.router)
app.include_router(reports.router)


@app.get("/")
def root():
    """Root endpoint with API information."""
    return {
        "name": settings.APP_NAME,
        "version": "1.0.0",
        "docs": "/docs",
        "endpoints": {
            "ingredients": "/ingredient",
            "norms": "/norm/{species}/{goal}/{age_class}",
            "mixes": "/mix",
            "reports": "/report/flock",
        }
    }


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}

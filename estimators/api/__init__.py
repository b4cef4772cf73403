"""
API routes for the estimators.
"""

from fastapi import APIRouter

from estimators.api import calculations, catalog, scenarios

router = APIRouter()

# Include sub-routers
router.include_router(calculations.router, prefix="/calculate", tags=["calculations"])
router.include_router(catalog.router, prefix="/catalog", tags=["catalog"])
router.include_router(scenarios.router, prefix="/scenarios", tags=["scenarios"])

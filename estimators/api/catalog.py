"""
Asset category catalog API endpoints.
"""

from fastapi import APIRouter, Body, Depends
from typing import Any, Dict, Optional

from estimators.catalog.registry import CatalogRegistry, get_catalog_registry

router = APIRouter()


@router.get("/")
async def get_catalog(registry: CatalogRegistry = Depends(get_catalog_registry)):
    """Full catalog document, keyed by regime."""
    snapshot = registry.snapshot()
    return {"version": snapshot.version, "regimes": snapshot.export()}


@router.put("/")
async def replace_catalog(
    document: Dict[str, Any] = Body(...),
    registry: CatalogRegistry = Depends(get_catalog_registry),
):
    """Replace every regime table at once; rejected wholesale if invalid."""
    snapshot = registry.replace_all(document)
    return {
        "version": snapshot.version,
        "regimes": {regime: len(table) for regime, table in snapshot.tables.items()},
    }


@router.get("/{regime}")
async def list_regime_categories(
    regime: str,
    family: Optional[str] = None,
    q: Optional[str] = None,
    registry: CatalogRegistry = Depends(get_catalog_registry),
):
    """Categories of one regime, optionally by family or search text."""
    if q:
        categories = registry.search(regime, q)
        if family:
            categories = [c for c in categories if c.family == family]
    else:
        categories = registry.list_categories(regime, family)

    return {
        "regime": regime,
        "families": registry.families(regime),
        "categories": [c.to_dict() for c in categories],
        "total": len(categories),
    }


@router.get("/{regime}/{category_id}")
async def get_category(
    regime: str,
    category_id: str,
    registry: CatalogRegistry = Depends(get_catalog_registry),
):
    """A single category."""
    return registry.get(regime, category_id).to_dict()

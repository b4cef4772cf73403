"""
Asset category catalogs for the depreciation planner.
"""

from estimators.catalog.registry import (
    AssetCategory,
    CatalogRegistry,
    CatalogSnapshot,
    get_catalog_registry,
)

__all__ = ["AssetCategory", "CatalogRegistry", "CatalogSnapshot", "get_catalog_registry"]

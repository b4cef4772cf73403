"""
Asset category registry.

Tables are immutable once published. ``replace_all`` validates a complete
replacement document, builds a new snapshot and swaps it in under a lock;
readers grab the current snapshot reference without locking, so a caller
holding a snapshot keeps seeing one consistent table.
"""

import json
import logging
import threading
from dataclasses import asdict, dataclass
from functools import lru_cache
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

from pydantic import BaseModel, Field, ValidationError as SchemaError, field_validator

from estimators.catalog.presets import PRESET_CATALOG, REQUIRED_REGIMES
from estimators.config import get_settings
from estimators.errors import ConfigurationError, NotFoundError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AssetCategory:
    """One row of an official depreciation table."""

    id: str
    family: str
    name: str
    max_rate_percent: float
    max_period_years: int
    allows_incentive: bool = False

    def to_dict(self) -> dict:
        return asdict(self)


class CategoryRecord(BaseModel):
    """Schema for a category in a catalog import document."""

    id: str = Field(min_length=1)
    family: str = Field(min_length=1)
    name: str = Field(min_length=1)
    max_rate_percent: float = Field(gt=0, le=100)
    max_period_years: int = Field(ge=1)
    allows_incentive: bool = False

    @field_validator("id", "family", "name")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value


@dataclass(frozen=True)
class CatalogSnapshot:
    """An immutable, versioned view of every regime table."""

    version: int
    tables: Mapping[str, Tuple[AssetCategory, ...]]

    def regimes(self) -> List[str]:
        return list(self.tables)

    def categories(self, regime: str) -> Tuple[AssetCategory, ...]:
        try:
            return self.tables[regime]
        except KeyError:
            raise NotFoundError(f"unknown regime {regime!r}")

    def get(self, regime: str, category_id: str) -> AssetCategory:
        for category in self.categories(regime):
            if category.id == category_id:
                return category
        raise NotFoundError(f"unknown category {category_id!r} in regime {regime!r}")

    def export(self) -> Dict[str, List[dict]]:
        return {
            regime: [c.to_dict() for c in categories]
            for regime, categories in self.tables.items()
        }


def build_snapshot(document, version: int) -> CatalogSnapshot:
    """
    Validate a full replacement document and freeze it.

    Raises:
        ConfigurationError: If a required regime is missing or any record is
            invalid; nothing is built in that case
    """
    if not isinstance(document, Mapping):
        raise ConfigurationError("catalog document must be an object keyed by regime")

    missing = [regime for regime in REQUIRED_REGIMES if regime not in document]
    if missing:
        raise ConfigurationError(f"catalog is missing regimes: {', '.join(missing)}")

    tables = {}
    for regime, records in document.items():
        if not isinstance(records, list):
            raise ConfigurationError(f"regime {regime!r} must be a list of categories")
        seen = set()
        categories = []
        for index, raw in enumerate(records):
            try:
                record = CategoryRecord.model_validate(raw)
            except SchemaError as e:
                error = e.errors()[0]
                location = ".".join(str(part) for part in error["loc"])
                raise ConfigurationError(
                    f"invalid category {regime}[{index}] {location}: {error['msg']}"
                )
            if record.id in seen:
                raise ConfigurationError(f"duplicate category id {record.id!r} in {regime}")
            seen.add(record.id)
            categories.append(AssetCategory(**record.model_dump()))
        tables[regime] = tuple(categories)

    return CatalogSnapshot(version=version, tables=MappingProxyType(tables))


class CatalogRegistry:
    """Holds the live category tables consumed by the depreciation planner."""

    def __init__(self, document: Optional[Mapping] = None):
        self._swap_lock = threading.Lock()
        self._snapshot = build_snapshot(
            PRESET_CATALOG if document is None else document, version=1
        )

    @property
    def version(self) -> int:
        return self._snapshot.version

    def snapshot(self) -> CatalogSnapshot:
        """Current table; stays valid and unchanged after later replacements."""
        return self._snapshot

    def get(self, regime: str, category_id: str) -> AssetCategory:
        return self._snapshot.get(regime, category_id)

    def regimes(self) -> List[str]:
        return self._snapshot.regimes()

    def list_categories(
        self, regime: str, family: Optional[str] = None
    ) -> List[AssetCategory]:
        categories = self._snapshot.categories(regime)
        if family is None:
            return list(categories)
        return [c for c in categories if c.family == family]

    def families(self, regime: str) -> List[str]:
        """Distinct families in table order."""
        return list(dict.fromkeys(c.family for c in self._snapshot.categories(regime)))

    def search(self, regime: str, query: str) -> List[AssetCategory]:
        """Case-insensitive match on family and name; blank query lists all."""
        categories = self._snapshot.categories(regime)
        needle = query.strip().lower()
        if not needle:
            return list(categories)
        return [c for c in categories if needle in f"{c.family} {c.name}".lower()]

    def export(self) -> Dict[str, List[dict]]:
        return self._snapshot.export()

    def replace_all(self, document: Mapping) -> CatalogSnapshot:
        """
        Replace every table at once.

        Args:
            document: Mapping of regime name to a list of category records

        Returns:
            The newly published snapshot

        Raises:
            ConfigurationError: If validation fails (live table untouched)
        """
        with self._swap_lock:
            try:
                snapshot = build_snapshot(document, version=self._snapshot.version + 1)
            except ConfigurationError as e:
                logger.warning(f"Rejected catalog replacement: {e.message}")
                raise
            self._snapshot = snapshot

        logger.info(
            f"Catalog replaced (version {snapshot.version}, "
            f"{sum(len(t) for t in snapshot.tables.values())} categories)"
        )
        return snapshot


def load_document(path: str) -> dict:
    """Read a catalog replacement document from a JSON file."""
    try:
        with open(path, encoding="utf-8") as fh:
            return json.load(fh)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"cannot read catalog {path}: {e}")


@lru_cache()
def get_catalog_registry() -> CatalogRegistry:
    """Get the process-wide registry, seeded from ``catalog_path`` if set."""
    settings = get_settings()
    if settings.catalog_path:
        return CatalogRegistry(load_document(settings.catalog_path))
    return CatalogRegistry()

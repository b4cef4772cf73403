"""
Validate a catalog replacement document and print what it contains.

Usage: python scripts/import_catalog.py path/to/catalog.json

Point CATALOG_PATH at the file to have the API load it at startup.
"""
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from estimators.catalog.registry import CatalogRegistry, load_document
from estimators.errors import ConfigurationError


def main(argv):
    if len(argv) != 2:
        print("Usage: python scripts/import_catalog.py <catalog.json>")
        return 2

    try:
        registry = CatalogRegistry(load_document(argv[1]))
    except ConfigurationError as e:
        print(f"Catalog rejected: {e.message}")
        return 1

    for regime in registry.regimes():
        categories = registry.list_categories(regime)
        print(f"{regime}: {len(categories)} categories")
        for family in registry.families(regime):
            names = [c.name for c in registry.list_categories(regime, family)]
            print(f"  {family}: {', '.join(names)}")

    print("Catalog is valid.")
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv))

#!/usr/bin/env python3
"""Merge duplicate material catalog entries, joining their EANs."""

import argparse
import shutil
import sys
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from backend.app.core.config import settings
from backend.app.services.material_catalog import CatalogNotFoundError, MaterialCatalog


def aggregate_catalog(path: Path, backup: bool = True) -> int:
    """Aggregate the catalog at ``path``. Returns the number of entries removed."""
    catalog = MaterialCatalog.load(path)
    before = len(catalog.entries)
    print(f"Catalog: {path}")
    print(f"Entries before: {before}")

    if backup:
        backup_path = path.with_name(f"{path.name}.bak")
        shutil.copy2(path, backup_path)
        print(f"Backup written to {backup_path}")

    removed = catalog.aggregate_duplicates()
    print(f"Entries after: {len(catalog.entries)}")
    if removed:
        print(f"✓ Merged {removed} duplicate entries")
    else:
        print("No duplicates found")
    return removed


def main():
    parser = argparse.ArgumentParser(description="Merge duplicate material catalog entries")
    parser.add_argument(
        "path",
        nargs="?",
        type=Path,
        default=settings.catalog_path,
        help=f"Catalog file (default: {settings.catalog_path})",
    )
    parser.add_argument("--no-backup", action="store_true", help="Do not write a .bak copy first")

    args = parser.parse_args()

    try:
        aggregate_catalog(args.path, backup=not args.no_backup)
    except CatalogNotFoundError as e:
        print(e)
        sys.exit(1)


if __name__ == "__main__":
    main()

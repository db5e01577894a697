"""
Flower catalog service.

Loads the static flower catalog once and serves it as a read-only mapping.
"""

import json
import logging
from collections.abc import Mapping
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType

from floris.config import settings
from floris.models.failure import CatalogError
from floris.models.flower import ItemDefinition, Rarity

logger = logging.getLogger(__name__)

Catalog = Mapping[int, ItemDefinition]


def load_catalog(path: Path | None = None) -> Catalog:
    """
    Load the flower catalog from a JSON file.

    Args:
        path: Path to JSON file. Defaults to settings.catalog_path

    Returns:
        Read-only mapping of flower id to definition.

    Raises:
        FileNotFoundError: If the catalog file doesn't exist
        CatalogError: If an entry is malformed or an id repeats
    """
    if path is None:
        path = settings.catalog_path

    if not path.exists():
        raise FileNotFoundError(f"Flower catalog not found at {path}")

    with open(path, encoding="utf-8") as f:
        entries = json.load(f)

    flowers: dict[int, ItemDefinition] = {}
    for entry in entries:
        try:
            flower = ItemDefinition(
                id=int(entry["id"]),
                name=entry.get("name", ""),
                rarity=Rarity(entry["rarity"]),
                price=int(entry["price"]),
                image=entry["image"],
                description=entry.get("description", ""),
            )
        except (KeyError, ValueError, TypeError) as e:
            raise CatalogError("Flower catalog entry is malformed", detail=repr(entry)) from e

        if flower.id in flowers:
            raise CatalogError(f"Duplicate flower id {flower.id} in catalog")
        flowers[flower.id] = flower

    logger.info("Loaded %d flowers from %s", len(flowers), path)
    return MappingProxyType(flowers)


@lru_cache(maxsize=1)
def get_catalog() -> Catalog:
    """
    Get the cached flower catalog.

    Cached after first load; the FastAPI dependency and the app lifespan
    both go through here.
    """
    return load_catalog()


def get_flower(catalog: Catalog, flower_id: int) -> ItemDefinition | None:
    """Look up a flower, returning None when the id is unknown."""
    return catalog.get(flower_id)


def flowers_by_rarity(catalog: Catalog, rarity: Rarity) -> list[ItemDefinition]:
    """All catalog flowers of one rarity, in id order."""
    ordered = sorted(catalog.values(), key=lambda f: f.id)
    return [flower for flower in ordered if flower.rarity == rarity]

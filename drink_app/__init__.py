"""
Drink tracker: alcohol and caffeine log with BAC and caffeine-decay estimates.
Use from project root: python -m drink_app.main
"""

from drink_app.drinks import (
    ETHANOL_DENSITY,
    STANDARD_DRINK_GRAMS,
    Category,
    Entry,
    alcohol_entry,
    caffeine_entry,
)
from drink_app.profile import Sex, UserProfile
from drink_app.calculations import (
    bac_at,
    caffeine_at,
    caffeine_half_life,
    clean_time,
    sober_time,
)
from drink_app.ledger import Ledger
from drink_app.storage import MemoryKeyValueStore, SqliteKeyValueStore, StorageError
from drink_app.catalog import CatalogService, ReferenceDrink, build_catalog_service

__all__ = [
    "Ledger",
    "Entry",
    "Category",
    "UserProfile",
    "Sex",
    "alcohol_entry",
    "caffeine_entry",
    "bac_at",
    "sober_time",
    "caffeine_at",
    "caffeine_half_life",
    "clean_time",
    "MemoryKeyValueStore",
    "SqliteKeyValueStore",
    "StorageError",
    "CatalogService",
    "ReferenceDrink",
    "build_catalog_service",
    "ETHANOL_DENSITY",
    "STANDARD_DRINK_GRAMS",
]

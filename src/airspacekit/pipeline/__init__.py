"""Dataset loading and the queryable airspace database.

Typical usage:
    from airspacekit.pipeline import AirspaceDatabase

    db = AirspaceDatabase()
    db.load_openair_file("airspace.txt")
"""

from airspacekit.pipeline.database import AirspaceDatabase
from airspacekit.pipeline.loader import (
    BUILT_IN_FILES,
    AirspaceLoader,
    built_in_metadata,
)

__all__ = [
    "BUILT_IN_FILES",
    "AirspaceDatabase",
    "AirspaceLoader",
    "built_in_metadata",
]

"""
sqlrow - row-level data model for a lightweight SQLite ORM.

A Row is one record of an Entity: lazy field and relation access, change
tracking for minimal updates, cycle-safe serialization, and persistence
delegated to its entity.
"""

from .config import ConfigLoader, Settings, configure_logging
from .db import Database
from .faults import (
    Fault,
    InvalidRelationFault,
    MissingIdentityFault,
    NotPersistedFault,
    QueryFault,
    UnknownRelationFault,
)
from .models import (
    BaseRow,
    Entity,
    EntityRegistry,
    Relation,
    Row,
    RowCollection,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Config
    "ConfigLoader",
    "Settings",
    "configure_logging",
    # Database
    "Database",
    # Models
    "BaseRow",
    "Entity",
    "EntityRegistry",
    "Relation",
    "Row",
    "RowCollection",
    # Faults
    "Fault",
    "InvalidRelationFault",
    "MissingIdentityFault",
    "NotPersistedFault",
    "QueryFault",
    "UnknownRelationFault",
]

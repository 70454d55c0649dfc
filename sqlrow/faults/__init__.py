"""
sqlrow faults - structured error types.

Every failure surfaced by sqlrow is a ``Fault``: a typed exception carrying a
stable code, a domain, a severity and metadata about the failing operation.

Core exports:
- Fault: Base fault class
- FaultDomain: Domain enumeration
- Severity: Severity levels
- Domain faults for configuration, entities/database and rows
"""

from .core import (
    DOMAIN_DEFAULTS,
    Fault,
    FaultDomain,
    Severity,
)

from .domains import (
    ConfigFault,
    ConfigInvalidFault,
    ConfigMissingFault,
    DatabaseConnectionFault,
    InvalidRelationFault,
    MissingIdentityFault,
    ModelFault,
    NotPersistedFault,
    QueryFault,
    RowFault,
    UnknownRelationFault,
)

__all__ = [
    # Core types
    "DOMAIN_DEFAULTS",
    "Fault",
    "FaultDomain",
    "Severity",

    # Configuration
    "ConfigFault",
    "ConfigInvalidFault",
    "ConfigMissingFault",

    # Entity / database
    "ModelFault",
    "QueryFault",
    "DatabaseConnectionFault",

    # Rows
    "RowFault",
    "UnknownRelationFault",
    "InvalidRelationFault",
    "MissingIdentityFault",
    "NotPersistedFault",
]

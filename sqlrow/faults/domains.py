"""
sqlrow faults - Domain-specific fault types.

Provides concrete fault classes for each domain:
- CONFIG faults
- MODEL faults (entity, query, connection)
- ROW faults (relations, identity, persistence state)
"""

from typing import Any, Optional
from .core import Fault, FaultDomain, Severity


# ============================================================================
# CONFIG Faults
# ============================================================================

class ConfigFault(Fault):
    """Base class for configuration faults."""

    def __init__(
        self,
        code: str,
        message: str,
        *,
        severity: Severity = Severity.FATAL,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            domain=FaultDomain.CONFIG,
            severity=severity,
            retryable=False,
            metadata=metadata,
        )


class ConfigMissingFault(ConfigFault):
    """Required configuration is missing."""

    def __init__(self, key: str, **kwargs):
        super().__init__(
            code="CONFIG_MISSING",
            message=f"Required configuration key '{key}' is missing",
            metadata={"key": key, **kwargs.get("metadata", {})},
        )


class ConfigInvalidFault(ConfigFault):
    """Configuration value is invalid."""

    def __init__(self, key: str, reason: str, **kwargs):
        super().__init__(
            code="CONFIG_INVALID",
            message=f"Configuration key '{key}' is invalid: {reason}",
            metadata={"key": key, "reason": reason, **kwargs.get("metadata", {})},
        )


# ============================================================================
# MODEL Faults (Entity / Database)
# ============================================================================

class ModelFault(Fault):
    """Base class for entity and database faults."""

    def __init__(
        self,
        code: str,
        message: str,
        *,
        severity: Severity = Severity.ERROR,
        retryable: bool = False,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            domain=FaultDomain.MODEL,
            severity=severity,
            retryable=retryable,
            metadata=metadata,
        )


class QueryFault(ModelFault):
    """Query execution failed."""

    def __init__(self, model: str, operation: str, reason: str, **kwargs):
        super().__init__(
            code="QUERY_FAILED",
            message=f"Query on '{model}' ({operation}) failed: {reason}",
            retryable=True,
            metadata={"model": model, "operation": operation, "reason": reason, **kwargs.get("metadata", {})},
        )


class DatabaseConnectionFault(ModelFault):
    """Database connection failed."""

    def __init__(self, url: str, reason: str, **kwargs):
        super().__init__(
            code="DB_CONNECTION_FAILED",
            message=f"Cannot connect to '{url}': {reason}",
            severity=Severity.FATAL,
            retryable=True,
            metadata={"url": url, "reason": reason, **kwargs.get("metadata", {})},
        )


# ============================================================================
# ROW Faults
# ============================================================================

class RowFault(Fault):
    """Base class for faults raised by row operations."""

    def __init__(
        self,
        code: str,
        message: str,
        *,
        severity: Severity = Severity.ERROR,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            domain=FaultDomain.ROW,
            severity=severity,
            retryable=False,
            metadata=metadata,
        )


class UnknownRelationFault(RowFault):
    """A name resolves to neither a field, a getter nor a registered entity."""

    def __init__(self, entity: str, name: str, **kwargs):
        super().__init__(
            code="UNKNOWN_RELATION",
            message=f"'{entity}' has no field, getter or relation named '{name}'",
            metadata={"entity": entity, "name": name, **kwargs.get("metadata", {})},
        )


class InvalidRelationFault(RowFault):
    """Two entities are not related the way the operation requires."""

    def __init__(self, entity: str, other: str, expected: str = "has_one", **kwargs):
        super().__init__(
            code="INVALID_RELATION",
            message=f"'{entity}' is not in a {expected} relation with '{other}'",
            metadata={"entity": entity, "other": other, "expected": expected, **kwargs.get("metadata", {})},
        )


class MissingIdentityFault(RowFault):
    """A row without a persisted identity cannot be referenced by foreign key."""

    def __init__(self, entity: str, **kwargs):
        super().__init__(
            code="MISSING_IDENTITY",
            message=f"Rows of '{entity}' without an identity value cannot be related",
            metadata={"entity": entity, **kwargs.get("metadata", {})},
        )


class NotPersistedFault(RowFault):
    """The row has no identity, or its identity no longer resolves in storage."""

    def __init__(self, entity: str, identity: Any = None, **kwargs):
        super().__init__(
            code="NOT_PERSISTED",
            message=f"Row of '{entity}' with identity {identity!r} does not exist in database",
            metadata={"entity": entity, "identity": identity, **kwargs.get("metadata", {})},
        )

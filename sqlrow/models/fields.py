"""
sqlrow Fields — declared columns of an entity.

A field knows its default value and how to convert values across the
database boundary. Field definitions are supplied by the caller; sqlrow
never introspects the schema.

Usage:
    from sqlrow.models.fields import CharField, IntegerField, JSONField

    fields = {
        "id": IntegerField(primary_key=True),
        "title": CharField(default=""),
        "meta": JSONField(default=dict),
    }
"""

from __future__ import annotations

import copy
import datetime
import json
from typing import Any, Optional

__all__ = [
    "Field",
    "IntegerField",
    "FloatField",
    "CharField",
    "BooleanField",
    "DateTimeField",
    "JSONField",
]


class Field:
    """
    Base field — all sqlrow fields inherit from this.

    Parameters:
        default     – Default value or zero-argument callable (default None)
        null        – Column accepts NULL (default True)
        unique      – Column carries a UNIQUE constraint; used by upserts
        primary_key – Column is the entity identity
    """

    def __init__(
        self,
        *,
        default: Any = None,
        null: bool = True,
        unique: bool = False,
        primary_key: bool = False,
    ):
        self.default = default
        self.null = null
        self.unique = unique
        self.primary_key = primary_key
        # Set by Entity
        self.name: str = ""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}: {self.name}>"

    def get_default(self) -> Any:
        """Get default value, calling it if callable."""
        if callable(self.default):
            return self.default()
        return copy.deepcopy(self.default)

    def to_python(self, value: Any) -> Any:
        """Convert database value to Python object."""
        return value

    def to_db(self, value: Any) -> Any:
        """Convert Python value to database-ready value."""
        return value


class IntegerField(Field):
    def to_python(self, value: Any) -> Any:
        if value is None:
            return None
        return int(value)


class FloatField(Field):
    def to_python(self, value: Any) -> Any:
        if value is None:
            return None
        return float(value)


class CharField(Field):
    def __init__(self, *, max_length: Optional[int] = None, **kwargs: Any):
        self.max_length = max_length
        super().__init__(**kwargs)


class BooleanField(Field):
    """Boolean field — stored as INTEGER 0/1 in SQLite."""

    def to_python(self, value: Any) -> Any:
        if value is None:
            return None
        return bool(value)

    def to_db(self, value: Any) -> Any:
        if value is None:
            return None
        return 1 if value else 0


class DateTimeField(Field):
    """Datetime stored as ISO 8601 text."""

    def to_python(self, value: Any) -> Any:
        if isinstance(value, str):
            return datetime.datetime.fromisoformat(value)
        return value

    def to_db(self, value: Any) -> Any:
        if isinstance(value, datetime.datetime):
            return value.isoformat()
        return value


class JSONField(Field):
    """JSON data stored as TEXT."""

    def __init__(self, *, encoder: Optional[type] = None, **kwargs: Any):
        self.encoder = encoder
        super().__init__(**kwargs)

    def to_python(self, value: Any) -> Any:
        if isinstance(value, str):
            try:
                return json.loads(value)
            except json.JSONDecodeError:
                return value
        return value

    def to_db(self, value: Any) -> Any:
        if value is None or isinstance(value, str):
            return value
        return json.dumps(value, cls=self.encoder)

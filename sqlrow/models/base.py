"""
sqlrow BaseRow — common base of Row and RowCollection.

Anything deriving from BaseRow is "row-like": it is bound to one entity and
can flatten itself into plain Python data with ``to_array``, honoring the
entity-type cycle guard.
"""

from __future__ import annotations

import datetime
import decimal
import json
import uuid
from abc import ABC, abstractmethod
from typing import Any, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .entity import Entity
    from .registry import EntityRegistry

__all__ = ["BaseRow"]


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime.datetime, datetime.date, datetime.time)):
        return value.isoformat()
    if isinstance(value, (decimal.Decimal, uuid.UUID)):
        return str(value)
    if isinstance(value, bytes):
        return value.hex()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class BaseRow(ABC):
    """Holds the (non-owning) entity handle shared by rows and collections."""

    __slots__ = ("_entity",)

    def __init__(self, entity: Entity):
        object.__setattr__(self, "_entity", entity)

    @property
    def entity(self) -> Entity:
        return self._entity

    @property
    def registry(self) -> Optional[EntityRegistry]:
        """The registry the entity belongs to, used to resolve relations."""
        return self._entity.registry

    @abstractmethod
    def to_array(self, keys_as_id: bool = False, parents: Optional[List[str]] = None) -> Any:
        """
        Flatten into plain data.

        Args:
            keys_as_id: Key collections by row identity instead of position
            parents: Entity names already visited on this path; if this
                     object's entity is among them the result is None
        """

    def to_json(self, **kwargs: Any) -> str:
        """JSON text of ``to_array()``; kwargs go to ``json.dumps``."""
        kwargs.setdefault("default", _json_default)
        return json.dumps(self.to_array(), **kwargs)

    def _visited(self, parents: Optional[List[str]]) -> bool:
        return bool(parents) and self._entity.name in parents

"""
sqlrow Row — in-memory representation of one record of an entity.

A row keeps two pieces of state:

- a value store: ordered ``dict`` of field name → value, seeded with the
  entity defaults and overridden by explicit data. Values may also be other
  rows or row collections once a relation has been resolved.
- a change log: ``set`` of names assigned since construction or since the
  last ``save()`` / ``reload()``. Updates only send these fields.

Usage:
    post = registry["post"].create({"title": "Hello"})
    post.body = "First!"            # marks "body" dirty
    post.save()                     # INSERT, identity reconciled
    post.comment                    # lazy has-many relation, cached
    post.set_relation(category)     # writes post.category_id
    post.to_array()                 # nested plain dict, cycle-safe

Attribute and item access share one resolution chain (see ``resolve``).
Field names that collide with Row methods (``get``, ``save``, ...) are
reachable through item access: ``row["save"]``.
"""

from __future__ import annotations

import logging
import pprint
from typing import Any, Dict, List, Optional, Set, TYPE_CHECKING

from ..faults.domains import (
    InvalidRelationFault,
    MissingIdentityFault,
    NotPersistedFault,
    UnknownRelationFault,
)
from .base import BaseRow

if TYPE_CHECKING:
    from .entity import Entity

logger = logging.getLogger("sqlrow.models.row")

__all__ = ["Row"]


class Row(BaseRow):
    """
    One record of an entity.

    Subclasses may define ``get_<name>(self)`` methods; reading ``row.<name>``
    when no value is stored calls the getter once and caches the result.

        class PostRow(Row):
            def get_summary(self):
                return self.title[:20]
    """

    __slots__ = ("_values", "_changes")

    def __init__(self, entity: Entity, data: Optional[Dict[str, Any]] = None):
        super().__init__(entity)
        values: Dict[str, Any] = dict(data) if data else {}
        for name, default in entity.get_defaults().items():
            values.setdefault(name, default)
        object.__setattr__(self, "_values", values)
        object.__setattr__(self, "_changes", set())

    # ── Attribute / item protocol ────────────────────────────────────

    def __getattr__(self, name: str) -> Any:
        # Only reached when normal lookup fails
        if name.startswith("_"):
            raise AttributeError(name)
        return self.resolve(name)

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_") or hasattr(type(self), name):
            object.__setattr__(self, name, value)
            return
        self._assign(name, value)

    def __getitem__(self, name: str) -> Any:
        return self.resolve(name)

    def __setitem__(self, name: str, value: Any) -> None:
        self._assign(name, value)

    def __contains__(self, name: str) -> bool:
        return name in self._values

    def __iter__(self):
        return iter(list(self._values))

    def is_set(self, name: str) -> bool:
        """True if a non-empty value is stored under ``name``."""
        return bool(self._values.get(name))

    def _assign(self, name: str, value: Any) -> None:
        self._changes.add(name)
        self._values[name] = value

    # ── Capability checks ────────────────────────────────────────────

    def has_field(self, name: str) -> bool:
        return name in self._entity.fields

    def has_getter(self, name: str) -> bool:
        return callable(getattr(type(self), f"get_{name}", None))

    def has_relation(self, name: str) -> bool:
        return self._entity.is_related(name)

    def resolve(self, name: str) -> Any:
        """
        Read ``name`` through the lazy resolution chain.

        Priority: stored value → ``get_<name>`` getter → relation of that
        name → None. Getter and relation results are cached in the value
        store without being marked dirty; a miss caches nothing.
        """
        if name in self._values:
            return self._values[name]

        if self.has_getter(name):
            value = getattr(self, f"get_{name}")()
        elif self.has_relation(name):
            value = self.related(name)
        else:
            return None

        self._values[name] = value
        return value

    def related(self, name: str, *args: Any, **kwargs: Any) -> Any:
        """
        Fetch the rows of entity ``name`` related to this row.

        With no extra arguments an already stored value is returned as is.
        Otherwise the entity is looked up in the registry and its
        ``select_by(self, *args, **kwargs)`` result returned verbatim
        (a Row, a RowCollection or None).

        Raises:
            UnknownRelationFault: No entity called ``name`` is registered
        """
        if not args and not kwargs and name in self._values:
            return self._values[name]

        registry = self.registry
        entity = registry.get(name) if registry is not None else None
        if entity is None:
            raise UnknownRelationFault(entity=self._entity.name, name=name)

        logger.debug(f"Resolving relation {self._entity.name}.{name}")
        return entity.select_by(self, *args, **kwargs)

    # ── Values and changes ───────────────────────────────────────────

    @property
    def identity(self) -> Any:
        return self._values.get(self._entity.primary_key)

    def get(self, name: Any = None, only_changed: bool = False) -> Any:
        """
        Return one or all values of the row.

        Args:
            name: None for all values, True for declared fields only, or a
                  field name (unknown names give None)
            only_changed: Restrict to dirty fields before any other filtering
        """
        if only_changed:
            values = {k: v for k, v in self._values.items() if k in self._changes}
        else:
            values = dict(self._values)

        if name is True:
            fields = self._entity.fields
            return {k: v for k, v in values.items() if k in fields}

        if name is None:
            return values

        return values.get(name)

    def set(self, data: Dict[str, Any], only_declared_fields: bool = False) -> Row:
        """Assign several values at once, marking each one dirty."""
        if only_declared_fields:
            fields = self._entity.fields
            data = {k: v for k, v in data.items() if k in fields}

        for name, value in data.items():
            self._assign(name, value)

        return self

    def changed(self) -> bool:
        """True if any value was assigned since construction, save or reload."""
        return bool(self._changes)

    # ── Relations ────────────────────────────────────────────────────

    def set_relation(self, *rows: Row) -> Row:
        """
        Point this row's foreign keys at one or more has-one targets.

        Every target is validated before anything is written, so a failure
        leaves this row untouched.

        Raises:
            InvalidRelationFault: This entity does not have-one the target's
            MissingIdentityFault: The target has no identity value
        """
        from .entity import Relation

        for row in rows:
            if self._entity.get_relation(row.entity) is not Relation.HAS_ONE:
                raise InvalidRelationFault(
                    entity=self._entity.name,
                    other=row.entity.name,
                    expected=Relation.HAS_ONE.value,
                )
            if not row.identity:
                raise MissingIdentityFault(entity=row.entity.name)

        for row in rows:
            self._assign(row.entity.foreign_key, row.identity)

        return self

    # ── Serialization ────────────────────────────────────────────────

    def to_array(self, keys_as_id: bool = False, parents: Optional[List[str]] = None) -> Optional[Dict[str, Any]]:
        if self._visited(parents):
            return None

        path = list(parents or []) + [self._entity.name]
        data = dict(self._values)

        for name, value in data.items():
            if isinstance(value, BaseRow):
                data[name] = value.to_array(keys_as_id, path)

        return data

    def __str__(self) -> str:
        return f"\n{self._entity.name}:\n{pprint.pformat(self.to_array())}\n"

    def __repr__(self) -> str:
        return f"<Row {self._entity.name} {self._entity.primary_key}={self.identity!r}>"

    # ── Persistence ──────────────────────────────────────────────────

    def _where_identity(self) -> tuple:
        return f'"{self._entity.primary_key}" = ?', [self.identity]

    def save(self, handle_duplications: bool = False, only_changed_values: bool = True) -> Row:
        """
        Insert or update this row.

        Rows without identity are inserted with every declared field;
        otherwise only dirty fields are updated (all of them when
        ``only_changed_values`` is False). The canonical values returned by
        the entity are applied and the change log cleared.
        """
        data = self.get(True)

        if not self.identity:
            logger.debug(f"Inserting {self._entity.name} row")
            data = self._entity.insert(data, handle_duplications)
        else:
            where, params = self._where_identity()
            changed: Optional[Set[str]] = set(self._changes) if only_changed_values else None
            logger.debug(f"Updating {self._entity.name} {self.identity!r}, changed={changed}")
            data = self._entity.update(data, where, params, 1, changed)

        self.set(data)
        object.__setattr__(self, "_changes", set())

        return self

    def delete(self) -> Row:
        """Delete the stored record; a row without identity is left alone."""
        if self.identity:
            where, params = self._where_identity()
            logger.debug(f"Deleting {self._entity.name} {self.identity!r}")
            self._entity.delete(where, params, 1)

        return self

    def reload(self) -> Row:
        """
        Replace all values with the stored record, dropping changes and
        cached relations.

        Raises:
            NotPersistedFault: No identity, or no stored record for it
        """
        identity = self.identity
        fresh = self._entity.select_by(identity) if identity else None

        if fresh is None:
            raise NotPersistedFault(entity=self._entity.name, identity=identity)

        object.__setattr__(self, "_values", fresh.get())
        object.__setattr__(self, "_changes", set())

        return self

"""
sqlrow Entity — schema and persistence primitives for one table.

The entity owns the declared fields and their defaults, builds rows, and
implements the storage primitives rows delegate to: ``insert``, ``update``,
``delete`` and ``select_by``. Relations between entities are inferred from
foreign-key naming: ``comment.post_id`` makes comment have-one post and post
have-many comment.

Usage:
    post = registry.define("post", {
        "id": IntegerField(primary_key=True),
        "title": CharField(default=""),
        "category_id": IntegerField(),
    })
    row = post.create({"title": "Hello"}).save()
    same = post.select_by(row.id)
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence, Set, Type, Union, TYPE_CHECKING

from ..faults.domains import InvalidRelationFault, QueryFault
from .collection import RowCollection
from .fields import Field
from .row import Row

if TYPE_CHECKING:
    from ..db.engine import Database
    from .registry import EntityRegistry

logger = logging.getLogger("sqlrow.models.entity")

__all__ = ["Entity", "Relation"]


class Relation(str, Enum):
    """How one entity points at another."""

    HAS_ONE = "has_one"
    HAS_MANY = "has_many"


class Entity:
    """
    One table: field definitions, defaults and storage primitives.

    Attributes:
        name: Entity name, also used to resolve relations by name
        table: Table name (defaults to ``name``)
        fields: Mapping of field name → Field
        primary_key: Identity field name
        foreign_key: Column other entities use to reference this one
        row_class: Row subclass instantiated for this entity
        registry: Owning EntityRegistry (None for a detached entity)
    """

    def __init__(
        self,
        name: str,
        fields: Mapping[str, Field],
        *,
        registry: Optional[EntityRegistry] = None,
        table: Optional[str] = None,
        primary_key: str = "id",
        foreign_key: Optional[str] = None,
        row_class: Type[Row] = Row,
    ):
        self.name = name
        self.table = table or name
        self.fields: Dict[str, Field] = dict(fields)
        self.primary_key = primary_key
        self.foreign_key = foreign_key or f"{name}_id"
        self.row_class = row_class
        self.registry = registry

        for field_name, field in self.fields.items():
            field.name = field_name
            if field.primary_key:
                self.primary_key = field_name

    def __repr__(self) -> str:
        return f"<Entity {self.name} table={self.table!r}>"

    @property
    def db(self) -> Database:
        if self.registry is None or self.registry.database is None:
            raise QueryFault(
                model=self.name,
                operation="connect",
                reason="Entity is not attached to a registry with a database",
            )
        return self.registry.database

    def get_defaults(self) -> Dict[str, Any]:
        return {name: field.get_default() for name, field in self.fields.items()}

    def create(self, data: Optional[Dict[str, Any]] = None) -> Row:
        """Build a new, unsaved row."""
        return self.row_class(self, data)

    # ── Conversion ───────────────────────────────────────────────────

    def _to_db(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        return {
            name: self.fields[name].to_db(value)
            for name, value in data.items()
            if name in self.fields
        }

    def _to_python(self, record: Mapping[str, Any]) -> Dict[str, Any]:
        return {
            name: (self.fields[name].to_python(value) if name in self.fields else value)
            for name, value in record.items()
        }

    def _from_record(self, record: Mapping[str, Any]) -> Row:
        return self.row_class(self, self._to_python(record))

    def _scoped(self, where: str, limit: Optional[int]) -> str:
        """rowid subquery so UPDATE/DELETE honor a limit on stock SQLite."""
        sql = f'SELECT rowid FROM "{self.table}" WHERE {where}'
        if limit is not None:
            sql += f" LIMIT {int(limit)}"
        return f"rowid IN ({sql})"

    # ── Relations ────────────────────────────────────────────────────

    def get_relation(self, other: Entity) -> Optional[Relation]:
        """Classify how this entity relates to ``other`` (None if unrelated)."""
        if other.foreign_key in self.fields:
            return Relation.HAS_ONE
        if self.foreign_key in other.fields:
            return Relation.HAS_MANY
        return None

    def is_related(self, name: str) -> bool:
        if self.registry is None:
            return False
        other = self.registry.get(name)
        return other is not None and self.get_relation(other) is not None

    # ── Reading ──────────────────────────────────────────────────────

    def select(
        self,
        where: Optional[str] = None,
        params: Optional[Sequence[Any]] = None,
        *,
        order: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> RowCollection:
        """Return the rows matching a raw WHERE clause with ``?`` params."""
        sql = f'SELECT * FROM "{self.table}"'
        if where:
            sql += f" WHERE {where}"
        if order:
            sql += f" ORDER BY {order}"
        if limit is not None:
            sql += f" LIMIT {int(limit)}"

        records = self.db.fetch_all(sql, params)
        return RowCollection(self, [self._from_record(r) for r in records])

    def select_one(
        self,
        where: Optional[str] = None,
        params: Optional[Sequence[Any]] = None,
        *,
        order: Optional[str] = None,
    ) -> Optional[Row]:
        rows = self.select(where, params, order=order, limit=1)
        return rows[0] if rows else None

    def select_by(
        self,
        target: Union[Row, Iterable[Any], Any],
        where: Optional[str] = None,
        params: Optional[Sequence[Any]] = None,
        *,
        order: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> Union[Row, RowCollection, None]:
        """
        Select rows of this entity by identity or by relation to a row.

        - Row of an entity that has-one this entity → the referenced Row
          (None if its foreign key is empty or dangling)
        - Row of an entity that has-many this entity → RowCollection
        - list/tuple of identities → RowCollection
        - single identity → Row or None

        ``where``/``params``/``order``/``limit`` narrow relation and list
        queries further.

        Raises:
            InvalidRelationFault: ``target`` is a row of an unrelated entity
        """
        if isinstance(target, Row):
            return self._select_related(target, where, params, order, limit)

        pk = f'"{self.primary_key}"'

        if isinstance(target, (list, tuple, set)):
            ids = list(target)
            if not ids:
                return RowCollection(self)
            clause = f"{pk} IN ({', '.join('?' for _ in ids)})"
            return self.select(*self._narrow(clause, ids, where, params), order=order, limit=limit)

        return self.select_one(f"{pk} = ?", [target])

    def _select_related(self, row, where, params, order, limit):
        relation = row.entity.get_relation(self)

        if relation is Relation.HAS_ONE:
            key = row.get(self.foreign_key)
            if not key:
                return None
            clause = f'"{self.primary_key}" = ?'
            return self.select_one(*self._narrow(clause, [key], where, params), order=order)

        if relation is Relation.HAS_MANY:
            clause = f'"{row.entity.foreign_key}" = ?'
            return self.select(
                *self._narrow(clause, [row.identity], where, params),
                order=order,
                limit=limit,
            )

        raise InvalidRelationFault(entity=row.entity.name, other=self.name, expected="any")

    @staticmethod
    def _narrow(clause, clause_params, where, params):
        if not where:
            return clause, list(clause_params)
        return f"({clause}) AND ({where})", list(clause_params) + list(params or [])

    # ── Writing ──────────────────────────────────────────────────────

    def insert(self, payload: Mapping[str, Any], handle_duplications: bool = False) -> Dict[str, Any]:
        """
        Insert a record and return its canonical stored values.

        With ``handle_duplications``, a conflict on a unique field updates
        the existing record instead of failing.
        """
        data = self._to_db(payload)
        if data.get(self.primary_key) is None:
            data.pop(self.primary_key, None)

        if data:
            cols = ", ".join(f'"{c}"' for c in data)
            placeholders = ", ".join("?" for _ in data)
            sql = f'INSERT INTO "{self.table}" ({cols}) VALUES ({placeholders})'
        else:
            sql = f'INSERT INTO "{self.table}" DEFAULT VALUES'

        unique = self._unique_field(data) if handle_duplications else None
        if unique is not None:
            assignments = [f'"{c}" = excluded."{c}"' for c in data if c != unique]
            action = f"DO UPDATE SET {', '.join(assignments)}" if assignments else "DO NOTHING"
            sql += f' ON CONFLICT ("{unique}") {action}'

        cursor = self.db.execute(sql, list(data.values()))

        if unique is not None:
            record = self.db.fetch_one(
                f'SELECT * FROM "{self.table}" WHERE "{unique}" = ?', [data[unique]]
            )
        else:
            identity = data.get(self.primary_key, cursor.lastrowid)
            record = self.db.fetch_one(
                f'SELECT * FROM "{self.table}" WHERE "{self.primary_key}" = ?', [identity]
            )

        logger.debug(f"Inserted into {self.table}: {record}")
        return self._to_python(record) if record else {}

    def _unique_field(self, data: Mapping[str, Any]) -> Optional[str]:
        for name, field in self.fields.items():
            if field.unique and not field.primary_key and data.get(name) is not None:
                return name
        return None

    def update(
        self,
        payload: Mapping[str, Any],
        where: str,
        params: Sequence[Any],
        limit: Optional[int] = None,
        changed: Optional[Set[str]] = None,
    ) -> Dict[str, Any]:
        """
        Update records matching ``where`` and return the canonical values of
        the first one.

        Args:
            changed: Names to write; None writes every declared field
        """
        data = self._to_db(payload)
        data.pop(self.primary_key, None)
        if changed is not None:
            data = {k: v for k, v in data.items() if k in changed}

        if data:
            assignments = ", ".join(f'"{c}" = ?' for c in data)
            sql = f'UPDATE "{self.table}" SET {assignments} WHERE {self._scoped(where, limit)}'
            self.db.execute(sql, list(data.values()) + list(params))
        else:
            logger.debug(f"Nothing to update in {self.table}")

        record = self.db.fetch_one(f'SELECT * FROM "{self.table}" WHERE {where} LIMIT 1', params)
        return self._to_python(record) if record else {}

    def delete(self, where: str, params: Sequence[Any], limit: Optional[int] = None) -> int:
        """Delete records matching ``where``; returns the affected count."""
        sql = f'DELETE FROM "{self.table}" WHERE {self._scoped(where, limit)}'
        cursor = self.db.execute(sql, params)
        logger.debug(f"Deleted {cursor.rowcount} record(s) from {self.table}")
        return cursor.rowcount

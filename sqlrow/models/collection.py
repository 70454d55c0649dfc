"""
sqlrow RowCollection — ordered rows of a single entity.

Returned by has-many relations and by ``Entity.select``. A collection is
row-like: nested inside a row it is flattened by ``to_array`` under the same
entity-type cycle guard.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Iterator, List, Optional, TYPE_CHECKING

from .base import BaseRow

if TYPE_CHECKING:
    from .entity import Entity
    from .row import Row

__all__ = ["RowCollection"]


class RowCollection(BaseRow):
    """
    Sequence of rows sharing one entity.

    Usage:
        comments = post.comment          # RowCollection
        len(comments), comments[0]
        comments.ids()                   # [3, 4, 9]
        comments.get("text")             # {3: "...", 4: "...", 9: "..."}
    """

    __slots__ = ("_rows",)

    def __init__(self, entity: Entity, rows: Iterable[Row] = ()):
        super().__init__(entity)
        self._rows: List[Row] = []
        for row in rows:
            self.add(row)

    def add(self, row: Row) -> RowCollection:
        if row.entity is not self._entity:
            raise ValueError(
                f"Cannot add a '{row.entity.name}' row to a '{self._entity.name}' collection"
            )
        self._rows.append(row)
        return self

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self) -> Iterator[Row]:
        return iter(self._rows)

    def __getitem__(self, index: int) -> Row:
        return self._rows[index]

    def __bool__(self) -> bool:
        return bool(self._rows)

    def __repr__(self) -> str:
        return f"<RowCollection {self._entity.name} rows={len(self._rows)}>"

    def ids(self) -> List[Any]:
        return [row.identity for row in self._rows]

    def get(self, name: Optional[str] = None) -> Any:
        """
        All values of every row (list of dicts), or one field keyed by
        row identity.
        """
        if name is None:
            return [row.get() for row in self._rows]
        return {row.identity: row.get(name) for row in self._rows}

    def to_array(self, keys_as_id: bool = False, parents: Optional[List[str]] = None) -> Any:
        if self._visited(parents):
            return None

        if keys_as_id:
            result: Dict[Any, Any] = {}
            for row in self._rows:
                result[row.identity] = row.to_array(keys_as_id, parents)
            return result

        return [row.to_array(keys_as_id, parents) for row in self._rows]

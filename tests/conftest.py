"""
Shared test fixtures and helpers for the sqlrow test suite.
"""

import pytest
from typing import Any, Dict, Optional

from sqlrow.db import Database
from sqlrow.models import EntityRegistry, Row
from sqlrow.models.fields import (
    BooleanField,
    CharField,
    DateTimeField,
    IntegerField,
    JSONField,
)


# ============================================================================
# Recording Entity (no database)
# ============================================================================


class StubEntity:
    """
    Minimal entity double that records every primitive call.

    ``insert_result`` / ``update_result`` are returned as the canonical
    values; ``records`` maps identity → Row for ``select_by``;
    ``relations`` maps other entity name → Relation.
    """

    def __init__(
        self,
        name: str = "post",
        defaults: Optional[Dict[str, Any]] = None,
        *,
        primary_key: str = "id",
        registry: Any = None,
    ):
        self.name = name
        self._defaults = defaults if defaults is not None else {"id": None, "title": ""}
        self.fields = set(self._defaults)
        self.primary_key = primary_key
        self.foreign_key = f"{name}_id"
        self.registry = registry
        self.calls = []
        self.insert_result: Dict[str, Any] = {}
        self.update_result: Dict[str, Any] = {}
        self.records: Dict[Any, Row] = {}
        self.relations: Dict[str, Any] = {}
        self.related_result: Any = None

    def get_defaults(self) -> Dict[str, Any]:
        return dict(self._defaults)

    def insert(self, payload, handle_duplications):
        self.calls.append(("insert", dict(payload), handle_duplications))
        return dict(self.insert_result)

    def update(self, payload, where, params, limit, changed):
        self.calls.append(("update", dict(payload), where, list(params), limit, changed))
        return dict(self.update_result)

    def delete(self, where, params, limit):
        self.calls.append(("delete", where, list(params), limit))
        return 1

    def select_by(self, target, *args, **kwargs):
        self.calls.append(("select_by", target, args, kwargs))
        if isinstance(target, Row):
            return self.related_result
        return self.records.get(target)

    def get_relation(self, other):
        return self.relations.get(other.name)

    def is_related(self, name):
        return name in self.relations


class StubRegistry:
    """Name → entity lookup for StubEntity graphs."""

    def __init__(self, *entities):
        self._entities = {}
        for entity in entities:
            self.add(entity)

    def add(self, entity):
        entity.registry = self
        self._entities[entity.name] = entity
        return entity

    def get(self, name):
        return self._entities.get(name)


@pytest.fixture
def stub_entity():
    """Entity double for 'post' with defaults {id: None, title: ''}."""
    return StubEntity()


@pytest.fixture
def make_stub():
    """Factory for StubEntity instances."""
    return StubEntity


@pytest.fixture
def stub_registry():
    return StubRegistry


# ============================================================================
# SQLite-backed registry
# ============================================================================


SCHEMA = [
    '''CREATE TABLE "category" (
        "id" INTEGER PRIMARY KEY AUTOINCREMENT,
        "name" TEXT NOT NULL UNIQUE,
        "position" INTEGER
    )''',
    '''CREATE TABLE "post" (
        "id" INTEGER PRIMARY KEY AUTOINCREMENT,
        "title" TEXT NOT NULL DEFAULT '',
        "body" TEXT,
        "published" INTEGER NOT NULL DEFAULT 0,
        "meta" TEXT,
        "created_at" TEXT,
        "category_id" INTEGER
    )''',
    '''CREATE TABLE "comment" (
        "id" INTEGER PRIMARY KEY AUTOINCREMENT,
        "text" TEXT NOT NULL DEFAULT '',
        "post_id" INTEGER
    )''',
    '''CREATE TABLE "tag" (
        "id" INTEGER PRIMARY KEY AUTOINCREMENT,
        "name" TEXT
    )''',
]


@pytest.fixture
def db():
    """In-memory SQLite database with the blog schema."""
    database = Database("sqlite:///:memory:")
    database.connect()
    for statement in SCHEMA:
        database.execute(statement)
    yield database
    database.disconnect()


@pytest.fixture
def registry(db):
    """Registry with category, post, comment and tag entities."""
    reg = EntityRegistry(db)
    reg.define("category", {
        "id": IntegerField(primary_key=True),
        "name": CharField(max_length=100, unique=True),
        "position": IntegerField(),
    })
    reg.define("post", {
        "id": IntegerField(primary_key=True),
        "title": CharField(default=""),
        "body": CharField(),
        "published": BooleanField(default=False),
        "meta": JSONField(default=dict),
        "created_at": DateTimeField(),
        "category_id": IntegerField(),
    })
    reg.define("comment", {
        "id": IntegerField(primary_key=True),
        "text": CharField(default=""),
        "post_id": IntegerField(),
    })
    reg.define("tag", {
        "id": IntegerField(primary_key=True),
        "name": CharField(),
    })
    return reg

"""
sqlrow models — rows, entities and their registry.

Usage:
    from sqlrow.models import EntityRegistry
    from sqlrow.models.fields import CharField, IntegerField

    registry = EntityRegistry(Database("sqlite:///:memory:"))
    post = registry.define("post", {
        "id": IntegerField(primary_key=True),
        "title": CharField(default=""),
    })
    row = post.create({"title": "Hello"}).save()
"""

from .base import BaseRow
from .collection import RowCollection
from .entity import Entity, Relation
from .fields import (
    BooleanField,
    CharField,
    DateTimeField,
    Field,
    FloatField,
    IntegerField,
    JSONField,
)
from .registry import EntityRegistry
from .row import Row

__all__ = [
    "BaseRow",
    "Row",
    "RowCollection",
    "Entity",
    "Relation",
    "EntityRegistry",
    # Fields
    "Field",
    "IntegerField",
    "FloatField",
    "CharField",
    "BooleanField",
    "DateTimeField",
    "JSONField",
]

"""
sqlrow Entity Registry — resolves entity names to Entity instances.

The registry owns the entities and the database connection they share.
Rows only hold a reference to their entity and reach the registry through
it when a relation has to be resolved by name.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, TYPE_CHECKING

from ..db.engine import Database
from ..faults.domains import UnknownRelationFault
from .entity import Entity
from .fields import Field

if TYPE_CHECKING:
    from ..config import Settings

logger = logging.getLogger("sqlrow.models.registry")

__all__ = ["EntityRegistry"]


class EntityRegistry:
    """
    Registry of entities sharing one database.

    Usage:
        registry = EntityRegistry(Database("sqlite:///app.db"))
        registry.define("post", {"id": IntegerField(primary_key=True), ...})
        post = registry["post"]
    """

    def __init__(self, database: Optional[Database] = None, *, primary_key: str = "id"):
        self.database = database
        self.primary_key = primary_key
        self._entities: Dict[str, Entity] = {}

    @classmethod
    def from_settings(cls, settings: Settings) -> EntityRegistry:
        """Build a registry and its database from loaded settings."""
        return cls(Database.from_settings(settings), primary_key=settings.primary_key)

    def define(self, name: str, fields: Mapping[str, Field], **options: Any) -> Entity:
        """Create an entity bound to this registry and register it."""
        options.setdefault("primary_key", self.primary_key)
        entity = Entity(name, fields, registry=self, **options)
        return self.register(entity)

    def register(self, entity: Entity) -> Entity:
        """Register an entity (replacing any previous one with that name)."""
        if entity.name in self._entities:
            logger.warning(f"Entity '{entity.name}' re-registered")
        entity.registry = self
        self._entities[entity.name] = entity
        logger.debug(f"Registered entity '{entity.name}' (table {entity.table!r})")
        return entity

    def get(self, name: str) -> Optional[Entity]:
        """Get entity by name, or None."""
        return self._entities.get(name)

    def __getitem__(self, name: str) -> Entity:
        entity = self._entities.get(name)
        if entity is None:
            raise UnknownRelationFault(entity="<registry>", name=name)
        return entity

    def __contains__(self, name: str) -> bool:
        return name in self._entities

    def names(self) -> List[str]:
        return list(self._entities)

    def reset(self) -> None:
        """Clear registry (for testing)."""
        self._entities.clear()

"""
Entity primitives, fields and the registry.
"""

import datetime

import pytest

from sqlrow.db import Database
from sqlrow.config import Settings
from sqlrow.faults import QueryFault, UnknownRelationFault
from sqlrow.models import Entity, EntityRegistry, Row, RowCollection
from sqlrow.models.fields import (
    BooleanField,
    CharField,
    DateTimeField,
    Field,
    FloatField,
    IntegerField,
    JSONField,
)


# ── Helpers ──────────────────────────────────────────────────────────────────

@pytest.fixture
def posts(registry):
    entity = registry["post"]
    for title in ("a", "b", "c"):
        entity.create({"title": title}).save()
    return entity


# ============================================================================
# Fields
# ============================================================================

class TestFields:

    def test_default_value(self):
        assert CharField(default="x").get_default() == "x"
        assert IntegerField().get_default() is None

    def test_callable_default(self):
        assert JSONField(default=dict).get_default() == {}

    def test_mutable_default_copied(self):
        field = JSONField(default={"tags": []})
        first = field.get_default()
        first["tags"].append("x")
        assert field.get_default() == {"tags": []}

    def test_integer_and_float(self):
        assert IntegerField().to_python("4") == 4
        assert FloatField().to_python(2) == 2.0
        assert IntegerField().to_python(None) is None

    def test_boolean(self):
        field = BooleanField()
        assert field.to_db(True) == 1
        assert field.to_db(False) == 0
        assert field.to_python(0) is False
        assert field.to_db(None) is None

    def test_datetime(self):
        field = DateTimeField()
        when = datetime.datetime(2024, 5, 1, 8, 0)
        assert field.to_db(when) == "2024-05-01T08:00:00"
        assert field.to_python("2024-05-01T08:00:00") == when

    def test_json(self):
        field = JSONField()
        assert field.to_db({"a": 1}) == '{"a": 1}'
        assert field.to_db('{"raw": true}') == '{"raw": true}'
        assert field.to_python('[1, 2]') == [1, 2]
        assert field.to_python("not json") == "not json"

    def test_options(self):
        field = CharField(max_length=10, null=False, unique=True)
        assert field.max_length == 10
        assert field.null is False
        assert field.unique is True

    def test_name_set_by_entity(self):
        field = Field()
        Entity("thing", {"label": field})
        assert field.name == "label"
        assert repr(field) == "<Field: label>"


# ============================================================================
# Entity basics
# ============================================================================

class TestEntity:

    def test_defaults(self, registry):
        assert registry["post"].get_defaults() == {
            "id": None,
            "title": "",
            "body": None,
            "published": False,
            "meta": {},
            "created_at": None,
            "category_id": None,
        }

    def test_names(self):
        entity = Entity("post", {"id": IntegerField()})
        assert entity.table == "post"
        assert entity.foreign_key == "post_id"
        assert entity.primary_key == "id"
        assert repr(entity) == "<Entity post table='post'>"

    def test_primary_key_from_field(self):
        entity = Entity("page", {"slug": CharField(primary_key=True)})
        assert entity.primary_key == "slug"

    def test_create_uses_row_class(self):
        class PageRow(Row):
            __slots__ = ()

        entity = Entity("page", {"id": IntegerField()}, row_class=PageRow)
        row = entity.create({"id": 1})
        assert isinstance(row, PageRow)
        assert row.entity is entity

    def test_detached_entity_has_no_database(self):
        entity = Entity("page", {"id": IntegerField()})
        with pytest.raises(QueryFault):
            entity.select()

    def test_custom_table(self, db):
        db.execute('CREATE TABLE "pages" ("id" INTEGER PRIMARY KEY, "title" TEXT)')
        registry = EntityRegistry(db)
        page = registry.define("page", {"id": IntegerField(primary_key=True), "title": CharField()}, table="pages")
        row = page.create({"title": "x"}).save()
        assert db.fetch_val('SELECT "title" FROM "pages" WHERE "id" = ?', [row.id]) == "x"


# ============================================================================
# Reading
# ============================================================================

class TestSelect:

    def test_select_all(self, posts):
        rows = posts.select()
        assert isinstance(rows, RowCollection)
        assert rows.get("title") == {1: "a", 2: "b", 3: "c"}

    def test_select_where_order_limit(self, posts):
        rows = posts.select('"title" != ?', ["a"], order='"id" DESC', limit=1)
        assert rows.ids() == [3]

    def test_select_one(self, posts):
        assert posts.select_one('"title" = ?', ["b"]).id == 2
        assert posts.select_one('"title" = ?', ["z"]) is None

    def test_loaded_rows_are_clean(self, posts):
        row = posts.select_one('"id" = ?', [1])
        assert row.changed() is False
        assert row.published is False

    def test_select_by_identity(self, posts):
        assert posts.select_by(2).title == "b"
        assert posts.select_by(99) is None

    def test_select_by_identities(self, posts):
        rows = posts.select_by([3, 1])
        assert sorted(rows.ids()) == [1, 3]

    def test_select_by_identities_narrowed(self, posts):
        rows = posts.select_by((1, 2, 3), '"title" = ?', ["c"])
        assert rows.ids() == [3]

    def test_select_by_empty_list(self, posts):
        rows = posts.select_by([])
        assert isinstance(rows, RowCollection)
        assert len(rows) == 0


# ============================================================================
# Writing primitives
# ============================================================================

class TestPrimitives:

    def test_insert_returns_canonical(self, registry):
        data = registry["post"].insert({"id": None, "title": "x", "unknown": 1})
        assert data["id"] == 1
        assert data["title"] == "x"
        assert "unknown" not in data

    def test_insert_default_values(self, registry):
        data = registry["tag"].insert({})
        assert data == {"id": 1, "name": None}

    def test_insert_explicit_identity(self, registry):
        data = registry["tag"].insert({"id": 40, "name": "x"})
        assert data["id"] == 40

    def test_update_limit(self, posts, db):
        posts.update({"title": "z"}, '"title" != ?', ["nothing"], limit=1)
        titles = [r["title"] for r in db.fetch_all('SELECT "title" FROM "post" ORDER BY "id"')]
        assert titles.count("z") == 1

    def test_update_never_writes_identity(self, posts):
        data = posts.update({"id": 50, "title": "z"}, '"id" = ?', [1])
        assert data["id"] == 1
        assert data["title"] == "z"

    def test_update_changed_filter(self, posts):
        data = posts.update({"title": "z", "body": "ignored"}, '"id" = ?', [1], 1, {"body"})
        assert data["title"] == "a"
        assert data["body"] == "ignored"

    def test_update_no_match(self, posts):
        assert posts.update({"title": "z"}, '"id" = ?', [99]) == {}

    def test_delete_count_and_limit(self, posts, db):
        assert posts.delete('"id" > ?', [0], limit=2) == 2
        assert db.fetch_val('SELECT COUNT(*) FROM "post"') == 1

    def test_delete_all_matching(self, posts):
        assert posts.delete('"id" > ?', [1]) == 2


# ============================================================================
# Registry
# ============================================================================

class TestRegistry:

    def test_lookup(self, registry):
        assert registry.get("post").name == "post"
        assert registry.get("ghost") is None
        assert "post" in registry
        assert "ghost" not in registry
        assert registry.names() == ["category", "post", "comment", "tag"]

    def test_getitem_unknown(self, registry):
        with pytest.raises(UnknownRelationFault):
            registry["ghost"]

    def test_entities_bound(self, registry, db):
        assert registry["post"].registry is registry
        assert registry["post"].db is db

    def test_register_replaces(self, registry, caplog):
        replacement = Entity("tag", {"id": IntegerField(primary_key=True)})
        with caplog.at_level("WARNING", logger="sqlrow.models.registry"):
            registry.register(replacement)
        assert registry["tag"] is replacement
        assert replacement.registry is registry
        assert "re-registered" in caplog.text

    def test_registry_primary_key(self):
        registry = EntityRegistry(primary_key="uid")
        entity = registry.define("user", {"uid": IntegerField(), "name": CharField()})
        assert entity.primary_key == "uid"

    def test_from_settings(self):
        settings = Settings(database_url="sqlite:///:memory:", echo_sql=True, primary_key="pk")
        registry = EntityRegistry.from_settings(settings)
        assert isinstance(registry.database, Database)
        assert registry.database.url == "sqlite:///:memory:"
        assert registry.primary_key == "pk"

    def test_reset(self, registry):
        registry.reset()
        assert registry.names() == []

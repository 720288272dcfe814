"""Tests for the schema catalog and its sources."""

import sqlite3

import pytest

from .lib import (
    DESIGNER_CONTROL_TYPES,
    ControlKind,
    InMemorySchemaSource,
    SchemaCatalog,
    SchemaEntry,
    SchemaSourceError,
    designer_source,
    load_catalog,
)
from .storage import SQLiteSchemaSource, initialize_schema_db

# =============================================================================
# SchemaEntry / SchemaCatalog
# =============================================================================


class TestSchemaEntry:
    """Tests for SchemaEntry."""

    @pytest.mark.unit
    def test_allows_is_case_sensitive(self):
        entry = SchemaEntry("MenuItem", True, ("Header", "ToolTip"))
        assert entry.allows("Header")
        assert not entry.allows("header")

    @pytest.mark.unit
    def test_is_frozen(self):
        entry = SchemaEntry("Separator")
        with pytest.raises(AttributeError):
            entry.kind = "Other"  # type: ignore[misc]

    @pytest.mark.unit
    def test_to_dict(self):
        entry = SchemaEntry("MenuItem", True, ("Header",), "Menu item")
        assert entry.to_dict() == {
            "kind": "MenuItem",
            "can_have_children": True,
            "allowed_properties": ["Header"],
            "description": "Menu item",
        }


class TestSchemaCatalog:
    """Tests for the immutable catalog."""

    @pytest.mark.unit
    def test_exact_lookup(self, menu_catalog):
        assert "MenuItem" in menu_catalog
        assert "menuitem" not in menu_catalog
        assert menu_catalog["MenuItem"].can_have_children is True
        assert menu_catalog["Separator"].can_have_children is False

    @pytest.mark.unit
    def test_preserves_source_order(self, menu_catalog):
        assert menu_catalog.kinds == ("Menu", "MenuItem", "Separator")
        assert list(menu_catalog) == ["Menu", "MenuItem", "Separator"]

    @pytest.mark.unit
    def test_properties_loaded(self, menu_catalog):
        assert menu_catalog["MenuItem"].allowed_properties == (
            "Header",
            "InputGesture",
            "ToolTip",
            "IsEnabled",
        )

    @pytest.mark.unit
    def test_duplicate_kind_keeps_first(self):
        catalog = SchemaCatalog(
            [SchemaEntry("Button", False, ("Content",)), SchemaEntry("Button", True)]
        )
        assert len(catalog) == 1
        assert catalog["Button"].allowed_properties == ("Content",)

    @pytest.mark.unit
    def test_empty_source_raises(self):
        with pytest.raises(SchemaSourceError):
            SchemaCatalog.load(InMemorySchemaSource([]))

    @pytest.mark.unit
    def test_load_accepts_any_source(self):
        """Anything with the two fetch methods works as a source."""

        class FixedSource:
            def fetch_control_kinds(self):
                return [ControlKind("Button", False)]

            def fetch_allowed_properties(self, kind):
                return ["Content"] if kind == "Button" else []

        catalog = SchemaCatalog.load(FixedSource())
        assert catalog["Button"].allowed_properties == ("Content",)
        assert catalog["Button"].description is None

    @pytest.mark.unit
    def test_to_dict(self, menu_catalog):
        data = menu_catalog.to_dict()
        assert data["Separator"]["allowed_properties"] == []


class TestDesignerSource:
    """Tests for the built-in designer controls."""

    @pytest.mark.unit
    def test_all_control_types_present(self, designer_catalog):
        assert len(designer_catalog) == len(DESIGNER_CONTROL_TYPES)
        assert designer_catalog.kinds[0] == "MenuItem"

    @pytest.mark.unit
    def test_properties_grouped_per_kind(self, designer_catalog):
        assert designer_catalog["Button"].allowed_properties[:2] == (
            "Content",
            "Width",
        )
        assert "Canvas.Left" in designer_catalog["Button"].allowed_properties
        assert designer_catalog["Grid"].allowed_properties == ()

    @pytest.mark.unit
    def test_descriptions_carried(self):
        kinds = designer_source().fetch_control_kinds()
        assert kinds[1] == ControlKind("Separator", False, "Menu separator")

    @pytest.mark.unit
    def test_unknown_kind_has_no_properties(self):
        assert designer_source().fetch_allowed_properties("Nope") == []


# =============================================================================
# SQLite storage
# =============================================================================


class TestSQLiteSchemaSource:
    """Tests for the SQLite designer database source."""

    @pytest.mark.unit
    def test_initialize_creates_seeded_db(self, tmp_path):
        path = initialize_schema_db(tmp_path / "nested" / "designer.db")
        assert path.exists()

        with sqlite3.connect(path) as conn:
            count = conn.execute("SELECT COUNT(*) FROM control_types").fetchone()[0]
        assert count == len(DESIGNER_CONTROL_TYPES)

    @pytest.mark.unit
    def test_initialize_is_idempotent(self, designer_db):
        initialize_schema_db(designer_db)
        with sqlite3.connect(designer_db) as conn:
            count = conn.execute("SELECT COUNT(*) FROM control_types").fetchone()[0]
        assert count == len(DESIGNER_CONTROL_TYPES)

    @pytest.mark.unit
    def test_fetch_matches_designer_source(self, designer_db, designer_catalog):
        with SQLiteSchemaSource(designer_db) as source:
            catalog = SchemaCatalog.load(source)
        assert catalog.kinds == designer_catalog.kinds
        assert catalog["MenuItem"] == designer_catalog["MenuItem"]

    @pytest.mark.unit
    def test_closed_after_context(self, designer_db):
        source = SQLiteSchemaSource(designer_db)
        with source:
            source.fetch_control_kinds()
        with pytest.raises(RuntimeError):
            source.fetch_control_kinds()

    @pytest.mark.unit
    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(SchemaSourceError, match="not found"):
            SQLiteSchemaSource(tmp_path / "missing.db").open()

    @pytest.mark.unit
    def test_missing_tables_raise(self, tmp_path):
        path = tmp_path / "empty.db"
        sqlite3.connect(path).close()
        with SQLiteSchemaSource(path) as source:
            with pytest.raises(SchemaSourceError) as exc_info:
                source.fetch_control_kinds()
        assert isinstance(exc_info.value.__cause__, sqlite3.Error)

    @pytest.mark.unit
    def test_unseeded_db_is_empty(self, tmp_path):
        path = initialize_schema_db(tmp_path / "bare.db", seed=False)
        with pytest.raises(SchemaSourceError, match="no control kinds"):
            load_catalog(path)


class TestLoadCatalog:
    """Tests for the load_catalog entry point."""

    @pytest.mark.unit
    def test_from_path(self, designer_db):
        catalog = load_catalog(designer_db)
        assert "Window" in catalog

    @pytest.mark.unit
    def test_from_str_path(self, designer_db):
        assert "Window" in load_catalog(str(designer_db))

    @pytest.mark.unit
    def test_from_source(self):
        source = InMemorySchemaSource.from_mapping({"Button": ["Content"]})
        assert load_catalog(source).kinds == ("Button",)

    @pytest.mark.unit
    def test_from_environment(self, designer_db, monkeypatch):
        monkeypatch.setenv("AVML_SCHEMA_DB", str(designer_db))
        assert "Window" in load_catalog()

    @pytest.mark.unit
    def test_environment_points_to_missing_file(self, tmp_path, monkeypatch):
        monkeypatch.setenv("AVML_SCHEMA_DB", str(tmp_path / "missing.db"))
        with pytest.raises(SchemaSourceError):
            load_catalog()

    @pytest.mark.unit
    def test_defaults_to_designer_controls(self):
        catalog = load_catalog()
        assert len(catalog) == len(DESIGNER_CONTROL_TYPES)

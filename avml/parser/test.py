"""Tests for the parse pipeline."""

import json

import pytest

from avml.schema import SchemaSourceError
from avml.validation import StrictValidationError, ValidationMode

from .lib import AVMLParser, ParseResult, parse_text


@pytest.fixture
def parser(menu_catalog) -> AVMLParser:
    return AVMLParser(menu_catalog)


class TestAVMLParser:
    """Tests for the pipeline orchestrator."""

    @pytest.mark.unit
    def test_casing_example(self, parser):
        result = parser.parse("menuitem: X\n  header: Hi")

        assert isinstance(result, ParseResult)
        assert result.node_count == 1
        node = result.tree.children[0]
        assert (node.kind, node.name) == ("MenuItem", "X")
        assert node.properties == {"Header": "Hi"}
        assert len(result.corrections) == 2
        assert result.warnings == []

    @pytest.mark.unit
    def test_typo_and_nonsense(self, parser):
        result = parser.parse("MenuIten: Y\nXyzNonsense: Z")

        assert [n.kind for n in result.tree.children] == ["MenuItem", "XyzNonsense"]
        assert len(result.corrections) == 1
        assert [w.line for w in result.warnings] == [1]

    @pytest.mark.unit
    def test_all_stage_warnings_collected_in_order(self, parser):
        result = parser.parse("MenuItem: A\n   Header: x\nSeparator:\nBogus: q")

        messages = [w.message for w in result.warnings]
        assert messages[0].startswith("Irregular indentation")
        assert messages[1] == "Control 'Separator' has no name, using 'Separator3'"
        assert messages[2] == "Unknown control kind 'Bogus'"

    @pytest.mark.unit
    def test_empty_document(self, parser):
        result = parser.parse("")
        assert result.tree.is_root
        assert result.node_count == 0
        assert not result.diagnostics

    @pytest.mark.unit
    def test_counts(self, parser, sample_menu):
        result = parser.parse(sample_menu)
        assert result.node_count == 4
        assert result.property_count == 4

    @pytest.mark.unit
    def test_tabs_and_spaces_equivalent(self, parser, sample_menu):
        tabbed = sample_menu.replace("  ", "\t")
        assert (
            parser.parse(tabbed).tree.signature()
            == parser.parse(sample_menu).tree.signature()
        )

    @pytest.mark.unit
    def test_custom_indentation(self, menu_catalog):
        parser = AVMLParser(menu_catalog, tab_width=4, indent_unit=4)
        result = parser.parse("MenuItem: A\n\tHeader: x\n    ToolTip: y")
        assert result.tree.children[0].properties == {"Header": "x", "ToolTip": "y"}
        assert result.warnings == []

    @pytest.mark.unit
    def test_strict_mode_raises(self, menu_catalog):
        parser = AVMLParser(menu_catalog, ValidationMode.STRICT)
        with pytest.raises(StrictValidationError) as exc_info:
            parser.parse("MenuItem: A\n  Headr: x")
        assert exc_info.value.line == 0

    @pytest.mark.unit
    def test_runs_are_independent(self, parser):
        first = parser.parse("MenuIten: A")
        second = parser.parse("MenuItem: B")
        assert len(first.corrections) == 1
        assert second.corrections == []

    @pytest.mark.unit
    def test_parse_file(self, parser, tmp_path, sample_menu):
        path = tmp_path / "menu.avml"
        path.write_text(sample_menu, encoding="utf-8")
        result = parser.parse_file(path)
        assert result.tree.children[0].name == "File"

    @pytest.mark.unit
    def test_parse_missing_file(self, parser, tmp_path):
        with pytest.raises(FileNotFoundError):
            parser.parse_file(tmp_path / "missing.avml")


class TestConfiguration:
    """Tests for configuration fallbacks."""

    @pytest.mark.unit
    def test_mode_from_environment(self, menu_catalog, monkeypatch):
        monkeypatch.setenv("AVML_VALIDATION_MODE", "Strict")
        assert AVMLParser(menu_catalog).mode is ValidationMode.STRICT

    @pytest.mark.unit
    def test_explicit_mode_wins(self, menu_catalog, monkeypatch):
        monkeypatch.setenv("AVML_VALIDATION_MODE", "strict")
        assert AVMLParser(menu_catalog, "forgiving").mode is ValidationMode.FORGIVING

    @pytest.mark.unit
    def test_invalid_mode(self, menu_catalog):
        with pytest.raises(ValueError):
            AVMLParser(menu_catalog, "sloppy")

    @pytest.mark.unit
    def test_threshold_from_environment(self, menu_catalog, monkeypatch):
        monkeypatch.setenv("AVML_FUZZY_MAX_DISTANCE", "0")
        result = AVMLParser(menu_catalog).parse("MenuIten: A")
        assert result.tree.children[0].kind == "MenuIten"

    @pytest.mark.unit
    def test_indent_unit_from_environment(self, menu_catalog, monkeypatch):
        monkeypatch.setenv("AVML_INDENT_UNIT", "4")
        result = AVMLParser(menu_catalog).parse("MenuItem: A\n  Header: x")
        assert result.warnings[0].message.startswith("Irregular indentation")


class TestResultExport:
    """Tests for ParseResult export helpers."""

    @pytest.mark.unit
    def test_records(self, parser, sample_menu):
        records = parser.parse(sample_menu).to_records()
        assert [r.name for r in records] == ["File", "New", "Sep1", "Exit"]
        assert [r.parent_index for r in records] == [None, 0, 0, 0]
        assert [r.display_order for r in records] == [0, 0, 1, 2]

    @pytest.mark.unit
    def test_json(self, parser):
        data = json.loads(parser.parse("MenuIten: A").to_json())
        assert data[0]["kind"] == "MenuItem"
        assert data[0]["was_corrected"] is True

    @pytest.mark.unit
    def test_to_dict(self, parser):
        data = parser.parse("MenuIten: A").to_dict()
        assert data["mode"] == "forgiving"
        assert data["nodes"][0]["kind"] == "MenuItem"
        assert data["corrections"] == ["Line 1: Kind 'MenuIten' -> 'MenuItem' (distance 1)"]


class TestParseText:
    """Tests for the one-call entry point."""

    @pytest.mark.unit
    def test_with_database(self, designer_db):
        result = parse_text("Windw: Main\n  title: Hello", designer_db)
        window = result.tree.children[0]
        assert window.kind == "Window"
        assert window.properties == {"Title": "Hello"}

    @pytest.mark.unit
    def test_default_catalog(self):
        result = parse_text("Button: Ok\n  Content: OK")
        assert result.corrections == []
        assert result.warnings == []

    @pytest.mark.unit
    def test_mode_argument(self):
        with pytest.raises(StrictValidationError):
            parse_text("Buton: Ok", mode="strict")

    @pytest.mark.unit
    def test_schema_failure_before_parsing(self, tmp_path):
        with pytest.raises(SchemaSourceError):
            parse_text("Button: Ok", tmp_path / "missing.db")

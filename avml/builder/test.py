"""Unit tests for the tree builder."""

import pytest

from avml.tokenizer import Token, TokenKind, tokenize

from .lib import TreeBuilder, build

K = TokenKind


def build_text(text: str):
    tokens, _ = tokenize(text)
    return build(tokens)


class TestBuildBasics:
    """Tests for simple documents."""

    @pytest.mark.unit
    def test_empty_input_yields_root(self):
        root, warnings = build([])
        assert root.is_root
        assert root.children == []
        assert warnings == []

    @pytest.mark.unit
    def test_trivia_only(self):
        root, warnings = build_text("# just a comment\n\n// another\n")
        assert root.children == []
        assert warnings == []

    @pytest.mark.unit
    def test_single_node_with_property(self):
        root, warnings = build_text("MenuItem: File\n  Header: _File")

        assert len(root.children) == 1
        node = root.children[0]
        assert node.kind == "MenuItem"
        assert node.name == "File"
        assert node.properties == {"Header": "_File"}
        assert node.source_line == 0
        assert warnings == []
        assert node.source_kind is None

    @pytest.mark.unit
    def test_all_top_level_nodes_collected(self):
        root, _ = build_text("MenuItem: A\nMenuItem: B\n\nMenuItem: C")
        assert [n.name for n in root.children] == ["A", "B", "C"]

    @pytest.mark.unit
    def test_kind_first_letter_capitalized(self):
        """Only the first letter is touched; the validator does the rest."""
        root, _ = build_text("menuitem: X\n  header: Hi")
        node = root.children[0]
        assert node.kind == "Menuitem"
        assert node.source_kind == "menuitem"
        assert list(node.properties) == ["header"]

    @pytest.mark.unit
    def test_source_lines_are_zero_based(self):
        root, _ = build_text("# header comment\nMenuItem: A")
        assert root.children[0].source_line == 1


class TestNesting:
    """Tests for parent/child inference."""

    @pytest.mark.unit
    def test_nested_node_by_indentation(self):
        root, warnings = build_text(
            "Menu: Main\n"
            "  MenuItem: File\n"
            "    Header: _File\n"
            "  MenuItem: Edit\n"
            "    Header: _Edit\n"
        )
        menu = root.children[0]
        assert [c.name for c in menu.children] == ["File", "Edit"]
        assert menu.children[1].properties["Header"] == "_Edit"
        assert warnings == []

    @pytest.mark.unit
    def test_children_block_with_markers(self):
        root, warnings = build_text(
            "MenuItem: File\n"
            "  Header: _File\n"
            "  Children:\n"
            "    - MenuItem: New\n"
            "      Header: _New\n"
            "    - Separator: Sep1\n"
            "    - MenuItem: Exit\n"
        )
        file_item = root.children[0]
        assert file_item.properties == {"Header": "_File"}
        assert "Children" not in file_item.properties
        assert [(c.kind, c.name) for c in file_item.children] == [
            ("MenuItem", "New"),
            ("Separator", "Sep1"),
            ("MenuItem", "Exit"),
        ]
        assert file_item.children[0].properties == {"Header": "_New"}
        assert warnings == []

    @pytest.mark.unit
    def test_flush_list_items_under_children(self):
        """List items level with the Children key still attach to the owner."""
        root, _ = build_text(
            "MenuItem: File\n"
            "  Children:\n"
            "  - MenuItem: New\n"
            "    Header: _New\n"
            "  - MenuItem: Open\n"
        )
        file_item = root.children[0]
        assert [c.name for c in file_item.children] == ["New", "Open"]
        assert file_item.children[0].properties == {"Header": "_New"}

    @pytest.mark.unit
    def test_children_block_ends_at_dedent(self):
        root, _ = build_text(
            "Menu: M\n"
            "  Children:\n"
            "    MenuItem: A\n"
            "    MenuItem: B\n"
            "MenuItem: Top\n"
        )
        assert [n.name for n in root.children] == ["M", "Top"]
        assert [c.name for c in root.children[0].children] == ["A", "B"]

    @pytest.mark.unit
    def test_over_indented_child_attached_with_warning(self):
        root, warnings = build_text("Menu: M\n      MenuItem: Deep\n        Header: h")
        menu = root.children[0]
        assert [c.name for c in menu.children] == ["Deep"]
        assert menu.children[0].properties == {"Header": "h"}
        assert len(warnings) == 1
        assert warnings[0].line == 1
        assert "Over-indented" in warnings[0].message

    @pytest.mark.unit
    def test_tabs_and_spaces_build_same_tree(self):
        spaced, _ = build_text(
            "Menu: M\n  MenuItem: F\n    Header: h\n  Separator: S\n"
        )
        tabbed, _ = build_text("Menu: M\n\tMenuItem: F\n\t\tHeader: h\n\tSeparator: S\n")
        assert spaced.signature() == tabbed.signature()


class TestForgiveness:
    """Tests for structural anomalies."""

    @pytest.mark.unit
    def test_missing_name_synthesized(self):
        root, warnings = build_text("\nSeparator:")
        node = root.children[0]
        assert node.name == "Separator2"
        assert "no name" in warnings[0].message
        assert warnings[0].line == 1

    @pytest.mark.unit
    def test_orphan_attribute_skipped_with_value(self):
        tokens = [
            Token(K.ATTRIBUTE_NAME, "Header", 0, 0),
            Token(K.ATTRIBUTE_VALUE, "lost", 0, 0),
            Token(K.NODE_KIND, "MenuItem", 1, 0),
            Token(K.NODE_NAME, "A", 1, 0),
        ]
        root, warnings = build(tokens)
        assert [n.name for n in root.children] == ["A"]
        assert root.children[0].properties == {}
        assert len(warnings) == 1
        assert "no parent control" in warnings[0].message

    @pytest.mark.unit
    def test_repeated_keys_kept_as_attribute_lines(self):
        """The property map keeps the last value; every line is kept for the validator."""
        root, warnings = build_text("StackPanel: S\n  Button: Save\n  Button: Open")
        node = root.children[0]
        assert node.properties == {"Button": "Open"}
        assert [(a.key, a.value, a.line) for a in node.attribute_lines] == [
            ("Button", "Save", 1),
            ("Button", "Open", 2),
        ]
        assert warnings == []

    @pytest.mark.unit
    def test_attribute_line_levels(self):
        root, _ = build_text("StackPanel: S\n  Orientation: Horizontal\n      Button: Ok")
        lines = root.children[0].attribute_lines
        assert [(a.level, a.expected_level) for a in lines] == [(1, 1), (3, 1)]
        assert [a.over_indented for a in lines] == [False, True]

    @pytest.mark.unit
    def test_children_value_ignored(self):
        root, warnings = build_text("Menu: M\n  Children: junk\n    MenuItem: A")
        menu = root.children[0]
        assert [c.name for c in menu.children] == ["A"]
        assert "Children" not in menu.properties
        assert "Ignoring value 'junk'" in warnings[0].message

    @pytest.mark.unit
    def test_stray_value_is_skipped(self):
        root, warnings = build_text("MenuItem: A\n  : orphan\n  Header: h")
        assert root.children[0].properties == {"Header": "h"}
        assert warnings == []

    @pytest.mark.unit
    def test_empty_attribute_from_missing_colon(self):
        root, _ = build_text("MenuItem: A\n  IsCheckable")
        assert root.children[0].properties == {"IsCheckable": ""}

    @pytest.mark.unit
    def test_builder_consumes_everything(self):
        """Malformed trailing input terminates."""
        tokens = [
            Token(K.NODE_KIND, "MenuItem", 0, 0),
            Token(K.ATTRIBUTE_NAME, "Header", 1, 1),
            Token(K.NODE_NAME, "stray", 2, 1),
            Token(K.ATTRIBUTE_VALUE, "dangling", 3, 1),
            Token(K.LIST_MARKER, "-", 4, 0),
        ]
        builder = TreeBuilder(tokens)
        root, _ = builder.build()
        assert root.children[0].properties == {"Header": ""}

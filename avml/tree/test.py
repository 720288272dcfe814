"""Unit tests for the tree model and record export."""

import json

import pytest

from .lib import (
    Node,
    NodeRecord,
    PropertyMap,
    count_nodes,
    count_properties,
    export_record_schema,
    export_records_json,
    iter_nodes,
    to_records,
)


@pytest.fixture
def menu_tree() -> Node:
    """Root -> File(Header) -> [New(Header, InputGesture), Separator]."""
    root = Node.root()
    file_item = Node("MenuItem", "File", {"Header": "_File"}, source_line=0)
    file_item.children.append(
        Node(
            "MenuItem",
            "New",
            {"Header": "_New", "InputGesture": "Ctrl+N"},
            source_line=3,
        )
    )
    file_item.children.append(Node("Separator", "Sep1", source_line=6))
    root.children.append(file_item)
    return root


# =============================================================================
# PropertyMap
# =============================================================================


class TestPropertyMap:
    """Tests for the case-insensitive property map."""

    @pytest.mark.unit
    def test_lookup_ignores_case(self):
        props = PropertyMap({"Header": "_File"})
        assert props["header"] == "_File"
        assert props["HEADER"] == "_File"
        assert "hEaDeR" in props

    @pytest.mark.unit
    def test_keys_keep_written_casing(self):
        props = PropertyMap()
        props["header"] = "a"
        assert list(props) == ["header"]
        assert props.canonical_key("HEADER") == "header"

    @pytest.mark.unit
    def test_overwrite_keeps_position_and_updates_casing(self):
        props = PropertyMap([("Header", "a"), ("Width", "10")])
        props["HEADER"] = "b"
        assert list(props.items()) == [("HEADER", "b"), ("Width", "10")]

    @pytest.mark.unit
    def test_missing_key_raises(self):
        with pytest.raises(KeyError):
            PropertyMap()["Header"]
        assert PropertyMap().canonical_key("Header") is None

    @pytest.mark.unit
    def test_non_string_key_not_contained(self):
        assert 1 not in PropertyMap({"Header": "x"})

    @pytest.mark.unit
    def test_delete_ignores_case(self):
        props = PropertyMap({"Header": "x"})
        del props["header"]
        assert len(props) == 0

    @pytest.mark.unit
    def test_rename_preserves_order(self):
        props = PropertyMap([("a", "1"), ("hedaer", "2"), ("c", "3")])
        displaced = props.rename("hedaer", "Header")
        assert displaced is False
        assert list(props.items()) == [("a", "1"), ("Header", "2"), ("c", "3")]

    @pytest.mark.unit
    def test_rename_casing_only(self):
        props = PropertyMap({"header": "Hi"})
        assert props.rename("header", "Header") is False
        assert list(props) == ["Header"]

    @pytest.mark.unit
    def test_rename_onto_existing_key_displaces_it(self):
        props = PropertyMap([("Header", "old"), ("Hedaer", "new")])
        displaced = props.rename("Hedaer", "Header")
        assert displaced is True
        assert list(props.items()) == [("Header", "new")]

    @pytest.mark.unit
    def test_equals_plain_dict(self):
        assert PropertyMap({"Header": "x"}) == {"Header": "x"}

    @pytest.mark.unit
    def test_copy_is_independent(self):
        props = PropertyMap({"Header": "x"})
        clone = props.copy()
        clone["Header"] = "y"
        assert props["Header"] == "x"


# =============================================================================
# Node
# =============================================================================


class TestNode:
    """Tests for the Node dataclass."""

    @pytest.mark.unit
    def test_dict_properties_are_wrapped(self):
        node = Node("MenuItem", "File", {"Header": "_File"})
        assert isinstance(node.properties, PropertyMap)
        assert node.properties["header"] == "_File"

    @pytest.mark.unit
    def test_root(self):
        root = Node.root()
        assert root.is_root
        assert root.kind == "Root"
        assert root.children == []
        assert not Node("MenuItem").is_root

    @pytest.mark.unit
    def test_mark_corrected_accumulates_notes(self):
        node = Node("MenuItem", "File")
        assert node.was_corrected is False
        assert node.correction_note is None

        node.mark_corrected("kind 'menuitem' -> 'MenuItem'")
        node.mark_corrected("property 'header' -> 'Header'")

        assert node.was_corrected is True
        assert node.correction_note == (
            "kind 'menuitem' -> 'MenuItem'; property 'header' -> 'Header'"
        )

    @pytest.mark.unit
    def test_walk_is_preorder(self, menu_tree):
        names = [node.name for node in menu_tree.walk()]
        assert names == ["Root", "File", "New", "Sep1"]

    @pytest.mark.unit
    def test_signature_ignores_lines(self):
        a = Node("MenuItem", "File", {"Header": "x"}, source_line=1)
        b = Node("MenuItem", "File", {"Header": "x"}, source_line=7)
        b.was_corrected = True
        assert a.signature() == b.signature()

    @pytest.mark.unit
    def test_signature_sees_child_differences(self):
        a = Node("Menu", "M", children=[Node("MenuItem", "A")])
        b = Node("Menu", "M", children=[Node("MenuItem", "B")])
        assert a.signature() != b.signature()

    @pytest.mark.unit
    def test_to_dict(self, menu_tree):
        data = menu_tree.children[0].to_dict()
        assert data["kind"] == "MenuItem"
        assert data["properties"] == {"Header": "_File"}
        assert [c["name"] for c in data["children"]] == ["New", "Sep1"]
        json.dumps(data)

    @pytest.mark.unit
    def test_str(self):
        node = Node("MenuItem", "File", {"Header": "x"})
        assert str(node) == "MenuItem:File (1 props, 0 children)"


# =============================================================================
# Traversal and export
# =============================================================================


class TestTraversal:
    """Tests for counting helpers."""

    @pytest.mark.unit
    def test_iter_nodes_excludes_root(self, menu_tree):
        assert [n.name for n in iter_nodes(menu_tree)] == ["File", "New", "Sep1"]

    @pytest.mark.unit
    def test_counts(self, menu_tree):
        assert count_nodes(menu_tree) == 3
        assert count_properties(menu_tree) == 3

    @pytest.mark.unit
    def test_empty_root(self):
        root = Node.root()
        assert count_nodes(root) == 0
        assert to_records(root) == []


class TestRecords:
    """Tests for the flat downstream export."""

    @pytest.mark.unit
    def test_records_preorder_with_linkage(self, menu_tree):
        records = to_records(menu_tree)

        assert [r.name for r in records] == ["File", "New", "Sep1"]
        assert [r.index for r in records] == [0, 1, 2]
        assert [r.parent_index for r in records] == [None, 0, 0]
        assert [r.display_order for r in records] == [0, 0, 1]

    @pytest.mark.unit
    def test_record_properties_keep_order(self, menu_tree):
        new_item = to_records(menu_tree)[1]
        assert list(new_item.properties) == ["Header", "InputGesture"]
        assert new_item.source_line == 3

    @pytest.mark.unit
    def test_sibling_display_order_at_top_level(self):
        root = Node.root()
        root.children.extend([Node("MenuItem", "A"), Node("MenuItem", "B")])
        records = to_records(root)
        assert [(r.name, r.display_order) for r in records] == [("A", 0), ("B", 1)]

    @pytest.mark.unit
    def test_subtree_export(self, menu_tree):
        records = to_records(menu_tree.children[0])
        assert records[0].name == "File"
        assert records[0].parent_index is None

    @pytest.mark.unit
    def test_correction_fields_exported(self):
        root = Node.root()
        node = Node("MenuItem", "File")
        node.mark_corrected("kind fixed")
        root.children.append(node)

        record = to_records(root)[0]
        assert record.was_corrected is True
        assert record.correction_note == "kind fixed"

    @pytest.mark.unit
    def test_export_json(self, menu_tree):
        data = json.loads(export_records_json(menu_tree))
        assert len(data) == 3
        assert data[1]["kind"] == "MenuItem"
        assert data[1]["parent_index"] == 0
        assert data[1]["properties"] == {"Header": "_New", "InputGesture": "Ctrl+N"}

    @pytest.mark.unit
    def test_record_validation(self):
        with pytest.raises(ValueError):
            NodeRecord(index=-1, kind="A", name="B", display_order=0)

    @pytest.mark.unit
    def test_record_schema(self):
        schema = export_record_schema()
        assert schema["title"] == "NodeRecord"
        assert "parent_index" in schema["properties"]

"""Tests for output module."""

import pytest

from avml.diagnostics import Diagnostic, Diagnostics
from avml.parser import AVMLParser, ParseResult
from avml.tree import Node

from .lib import format_diagnostics, format_summary, format_tree


@pytest.fixture
def sample_tree() -> Node:
    """Root -> File -> [New, Sep1]."""
    root = Node.root()
    file_item = Node("MenuItem", "File", {"Header": "_File"})
    file_item.children.append(
        Node("MenuItem", "New", {"Header": "_New", "InputGesture": "Ctrl+N"})
    )
    file_item.children.append(Node("Separator", "Sep1"))
    root.children.append(file_item)
    return root


class TestFormatTree:
    """Tests for format_tree function."""

    @pytest.mark.unit
    def test_single_node(self):
        """Test formatting a node without properties."""
        assert format_tree(Node("Separator", "Sep1")) == "Separator:Sep1"

    @pytest.mark.unit
    def test_nested_tree(self, sample_tree):
        """Test formatting nested tree with connectors."""
        assert format_tree(sample_tree).splitlines() == [
            "MenuItem:File {Header=_File}",
            "├── MenuItem:New {Header=_New, InputGesture=Ctrl+N}",
            "└── Separator:Sep1",
        ]

    @pytest.mark.unit
    def test_deep_prefixes(self):
        root = Node.root()
        menu = Node("Menu", "M")
        first = Node("MenuItem", "A", children=[Node("MenuItem", "A1")])
        menu.children.extend([first, Node("MenuItem", "B")])
        root.children.append(menu)

        assert format_tree(root).splitlines() == [
            "Menu:M",
            "├── MenuItem:A",
            "│   └── MenuItem:A1",
            "└── MenuItem:B",
        ]

    @pytest.mark.unit
    def test_corrected_marker(self):
        node = Node("MenuItem", "File")
        node.mark_corrected("fixed")
        assert format_tree(node) == "MenuItem:File *"

    @pytest.mark.unit
    def test_multiple_top_level_nodes(self):
        root = Node.root()
        root.children.extend([Node("MenuItem", "A"), Node("MenuItem", "B")])
        assert format_tree(root).splitlines() == ["MenuItem:A", "MenuItem:B"]

    @pytest.mark.unit
    def test_empty_root(self):
        assert format_tree(Node.root()) == "(empty)"


class TestFormatSummary:
    """Tests for run summaries."""

    @pytest.mark.unit
    def test_diagnostics_truncated(self):
        entries = [Diagnostic(i, f"issue {i}") for i in range(8)]
        lines = format_diagnostics("Warnings", entries).splitlines()

        assert lines[0] == "Warnings (8):"
        assert lines[1] == "  Line 1: issue 0"
        assert len(lines) == 7
        assert lines[-1] == "  ... and 3 more"

    @pytest.mark.unit
    def test_diagnostics_within_limit(self):
        lines = format_diagnostics("Corrections", [Diagnostic(0, "x")]).splitlines()
        assert lines == ["Corrections (1):", "  Line 1: x"]

    @pytest.mark.unit
    def test_clean_run(self, sample_tree):
        result = ParseResult(tree=sample_tree, diagnostics=Diagnostics())
        assert format_summary(result) == "Nodes: 3 | Properties: 3 | Mode: forgiving"

    @pytest.mark.unit
    def test_summary_from_parse(self, menu_catalog):
        result = AVMLParser(menu_catalog).parse("menuitem: X\n  header: Hi\nBogus: q")
        summary = format_summary(result)

        assert summary.startswith("Nodes: 2 | Properties: 1 | Mode: forgiving")
        assert "Corrections (2):" in summary
        assert "Warnings (1):" in summary
        assert "Line 3: Unknown control kind 'Bogus'" in summary

"""Unit tests for the tokenizer module."""

import pytest

from .lib import Token, TokenKind, Tokenizer, split_key_value, tokenize

K = TokenKind


def kinds(tokens: list[Token]) -> list[TokenKind]:
    return [t.kind for t in tokens]


def structural(tokens: list[Token]) -> list[tuple[TokenKind, str, int]]:
    """Tokens without trivia, as (kind, text, indent_level) triples."""
    return [
        (t.kind, t.text, t.indent_level)
        for t in tokens
        if t.kind not in (K.COMMENT, K.BLANK_LINE)
    ]


class TestSplitKeyValue:
    """Tests for key/value splitting."""

    @pytest.mark.unit
    def test_simple_pair(self):
        assert split_key_value("Header: _File") == ("Header", "_File", True)

    @pytest.mark.unit
    def test_splits_on_first_colon_only(self):
        """Later colons stay in the value."""
        assert split_key_value("InputGesture: Ctrl:N") == (
            "InputGesture",
            "Ctrl:N",
            True,
        )

    @pytest.mark.unit
    def test_escaped_colon_in_key(self):
        """A backslash-escaped colon does not split."""
        assert split_key_value("Canvas\\:Left: 10") == ("Canvas:Left", "10", True)

    @pytest.mark.unit
    def test_quotes_removed_from_value(self):
        assert split_key_value('Header: "Save: All"') == ("Header", "Save: All", True)

    @pytest.mark.unit
    def test_no_colon(self):
        assert split_key_value("Separator") == ("Separator", "", False)

    @pytest.mark.unit
    def test_missing_space_after_colon(self):
        assert split_key_value("kind:Pod") == ("kind", "Pod", True)


class TestTrivia:
    """Tests for comment and blank-line handling."""

    @pytest.mark.unit
    def test_empty_input(self):
        """Empty text yields no tokens and no warnings."""
        assert tokenize("") == ([], [])

    @pytest.mark.unit
    def test_comments_and_blanks(self):
        """Both comment styles and blank lines become trivia tokens."""
        tokens, warnings = tokenize("# hash\n    // slashes\n\nMenuItem: A")
        assert kinds(tokens) == [
            K.COMMENT,
            K.COMMENT,
            K.BLANK_LINE,
            K.NODE_KIND,
            K.NODE_NAME,
        ]
        assert tokens[1].text == "// slashes"
        assert tokens[1].indent_level == 0
        assert warnings == []

    @pytest.mark.unit
    def test_line_numbers_are_zero_based(self):
        tokens, _ = tokenize("\nMenuItem: A")
        assert tokens[0].line == 0
        assert tokens[1].line == 1


class TestIndentation:
    """Tests for indentation measurement."""

    @pytest.mark.unit
    def test_spaces(self):
        tokens, _ = tokenize("MenuItem: File\n  Header: _File")
        assert structural(tokens) == [
            (K.NODE_KIND, "MenuItem", 0),
            (K.NODE_NAME, "File", 0),
            (K.ATTRIBUTE_NAME, "Header", 1),
            (K.ATTRIBUTE_VALUE, "_File", 1),
        ]

    @pytest.mark.unit
    def test_tabs_expand_to_same_levels(self):
        """A tab counts as tab_width columns."""
        spaced, _ = tokenize("Menu: M\n  MenuItem: F\n    Header: h")
        tabbed, _ = tokenize("Menu: M\n\tMenuItem: F\n\t\tHeader: h")
        assert structural(spaced) == structural(tabbed)

    @pytest.mark.unit
    def test_mixed_tabs_and_spaces(self):
        """A tab followed by spaces adds up column-wise."""
        tokens, warnings = tokenize("Menu: M\n\t  MenuItem: F\n\t    Header: h")
        assert [t.indent_level for t in tokens if t.kind == K.NODE_KIND] == [0, 2]
        assert warnings == []

    @pytest.mark.unit
    def test_custom_tab_width(self):
        tokenizer = Tokenizer(tab_width=4, indent_unit=4)
        tokens, _ = tokenizer.tokenize("Window: W\n\tTitle: t")
        assert tokens[-1].indent_level == 1

    @pytest.mark.unit
    def test_irregular_indentation_clamped_down(self):
        """Partial indentation rounds down and warns."""
        tokens, warnings = tokenize("MenuItem: File\n   Header: _File")
        assert tokens[2].indent_level == 1
        assert len(warnings) == 1
        assert warnings[0].line == 1
        assert "Irregular indentation" in warnings[0].message


class TestListMarkers:
    """Tests for list marker recognition."""

    SAMPLE = (
        "MenuItem: File\n"
        "  Children:\n"
        "    - MenuItem: New\n"
        "      Header: _New\n"
        "    - Separator: Sep1\n"
    )

    @pytest.mark.unit
    def test_children_list(self):
        tokens, warnings = tokenize(self.SAMPLE)
        assert structural(tokens) == [
            (K.NODE_KIND, "MenuItem", 0),
            (K.NODE_NAME, "File", 0),
            (K.ATTRIBUTE_NAME, "Children", 1),
            (K.ATTRIBUTE_VALUE, "", 1),
            (K.LIST_MARKER, "-", 2),
            (K.NODE_KIND, "MenuItem", 2),
            (K.NODE_NAME, "New", 2),
            (K.ATTRIBUTE_NAME, "Header", 3),
            (K.ATTRIBUTE_VALUE, "_New", 3),
            (K.LIST_MARKER, "-", 2),
            (K.NODE_KIND, "Separator", 2),
            (K.NODE_NAME, "Sep1", 2),
        ]
        assert warnings == []

    @pytest.mark.unit
    def test_stuck_marker_repaired(self):
        """'-Kind: X' is read as a list item with a warning."""
        tokens, warnings = tokenize("-MenuItem: A")
        assert kinds(tokens) == [K.LIST_MARKER, K.NODE_KIND, K.NODE_NAME]
        assert "list marker" in warnings[0].message

    @pytest.mark.unit
    def test_repeated_markers_stripped(self):
        tokens, warnings = tokenize("- - MenuItem: Z")
        assert structural(tokens) == [
            (K.LIST_MARKER, "-", 0),
            (K.NODE_KIND, "MenuItem", 0),
            (K.NODE_NAME, "Z", 0),
        ]
        assert [w.message for w in warnings] == ["Ignoring 1 repeated list marker(s)"]

    @pytest.mark.unit
    def test_bare_marker_opens_next_line(self):
        """A lone '-' makes the following key a node."""
        tokens, _ = tokenize("Menu: M\n  Children:\n    -\n      MenuItem: A")
        assert (K.NODE_KIND, "MenuItem", 3) in structural(tokens)


class TestClassification:
    """Tests for positional node/attribute proposals."""

    @pytest.mark.unit
    def test_top_level_keys_are_nodes(self):
        tokens, _ = tokenize("MenuItem: A\nMenuItem: B")
        assert kinds(tokens) == [K.NODE_KIND, K.NODE_NAME] * 2

    @pytest.mark.unit
    def test_key_owning_block_is_node(self):
        """A key followed by deeper lines opens a nested node."""
        tokens, _ = tokenize("Menu: Main\n  MenuItem: File\n    Header: _File")
        assert structural(tokens)[2] == (K.NODE_KIND, "MenuItem", 1)
        assert structural(tokens)[4] == (K.ATTRIBUTE_NAME, "Header", 2)

    @pytest.mark.unit
    def test_children_keyword_any_casing(self):
        tokens, _ = tokenize("Menu: M\n  CHILDREN:\n    MenuItem: A")
        assert structural(tokens)[2] == (K.ATTRIBUTE_NAME, "CHILDREN", 1)
        assert structural(tokens)[4] == (K.NODE_KIND, "MenuItem", 2)

    @pytest.mark.unit
    def test_children_block_without_markers(self):
        """Keys directly inside a Children block are nodes."""
        tokens, _ = tokenize(
            "Menu: M\n  Children:\n    MenuItem: A\n    MenuItem: B"
        )
        node_kinds = [t.text for t in tokens if t.kind == K.NODE_KIND]
        assert node_kinds == ["Menu", "MenuItem", "MenuItem"]

    @pytest.mark.unit
    def test_node_without_name(self):
        """An empty node value emits no name token."""
        tokens, _ = tokenize("Separator:")
        assert kinds(tokens) == [K.NODE_KIND]

    @pytest.mark.unit
    def test_missing_colon_is_empty_attribute(self):
        tokens, warnings = tokenize("MenuItem: A\n  IsEnabled")
        assert structural(tokens)[2:] == [
            (K.ATTRIBUTE_NAME, "IsEnabled", 1),
            (K.ATTRIBUTE_VALUE, "", 1),
        ]
        assert "Missing ':'" in warnings[0].message

    @pytest.mark.unit
    def test_value_without_key(self):
        tokens, warnings = tokenize("MenuItem: A\n  : orphan")
        assert structural(tokens)[-1] == (K.ATTRIBUTE_VALUE, "orphan", 1)
        assert "no key" in warnings[0].message


class TestArtifacts:
    """Tests for input cleanup."""

    @pytest.mark.unit
    def test_bom_and_crlf(self):
        tokens, warnings = tokenize("\ufeffMenuItem: A\r\n  Header: B\r\n")
        assert structural(tokens) == [
            (K.NODE_KIND, "MenuItem", 0),
            (K.NODE_NAME, "A", 0),
            (K.ATTRIBUTE_NAME, "Header", 1),
            (K.ATTRIBUTE_VALUE, "B", 1),
        ]
        assert warnings == []

    @pytest.mark.unit
    def test_token_str(self):
        token = Token(K.NODE_KIND, "MenuItem", 4, 0)
        assert str(token) == "[Line 5] node_kind: MenuItem"

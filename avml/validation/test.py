"""Tests for schema validation and correction."""

import pytest

from avml.builder import build
from avml.schema import SchemaCatalog, SchemaEntry
from avml.tokenizer import tokenize
from avml.tree import Node

from .lib import (
    SchemaValidator,
    StrictValidationError,
    ValidationMode,
    closest_match,
    find_case_insensitive,
    levenshtein,
    validate,
)


def parse_tree(text: str) -> Node:
    tokens, _ = tokenize(text)
    root, _ = build(tokens)
    return root


# =============================================================================
# Approximate matching
# =============================================================================


class TestLevenshtein:
    """Tests for the edit distance."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "a,b,expected",
        [
            ("", "", 0),
            ("", "abc", 3),
            ("abc", "", 3),
            ("MenuItem", "MenuItem", 0),
            ("MenuIten", "MenuItem", 1),
            ("Headr", "Header", 1),
            ("kitten", "sitting", 3),
            ("flaw", "lawn", 2),
        ],
    )
    def test_distance(self, a, b, expected):
        assert levenshtein(a, b) == expected

    @pytest.mark.unit
    def test_symmetric(self):
        assert levenshtein("Separator", "Seperatr") == levenshtein(
            "Seperatr", "Separator"
        )

    @pytest.mark.unit
    def test_case_sensitive(self):
        assert levenshtein("header", "Header") == 1


class TestClosestMatch:
    """Tests for fuzzy candidate selection."""

    @pytest.mark.unit
    def test_case_insensitive_comparison(self):
        assert closest_match("HEADR", ["Header", "ToolTip"]) == ("Header", 1)

    @pytest.mark.unit
    def test_accepts_distance_two(self):
        assert closest_match("Buttonxx", ["Button"]) == ("Button", 2)

    @pytest.mark.unit
    def test_rejects_distance_three(self):
        assert closest_match("Buttonxxx", ["Button"]) is None

    @pytest.mark.unit
    def test_custom_threshold(self):
        assert closest_match("Buttonxxx", ["Button"], max_distance=3) == ("Button", 3)
        assert closest_match("Buttn", ["Button"], max_distance=0) is None

    @pytest.mark.unit
    def test_prefers_smaller_distance(self):
        assert closest_match("Menu", ["MenuItem", "Menu"]) == ("Menu", 0)

    @pytest.mark.unit
    def test_tie_broken_lexicographically(self):
        """Equal distances resolve to the alphabetically first candidate."""
        assert closest_match("Cat", ["Cot", "Bat"]) == ("Bat", 1)
        assert closest_match("Cat", ["Bat", "Cot"]) == ("Bat", 1)

    @pytest.mark.unit
    def test_no_candidates(self):
        assert closest_match("Anything", []) is None


class TestFindCaseInsensitive:
    """Tests for casing lookup."""

    @pytest.mark.unit
    def test_found(self):
        assert find_case_insensitive("inputgesture", ["Header", "InputGesture"]) == (
            "InputGesture"
        )

    @pytest.mark.unit
    def test_missing(self):
        assert find_case_insensitive("Headr", ["Header"]) is None


class TestValidationMode:
    """Tests for mode parsing."""

    @pytest.mark.unit
    def test_from_name(self):
        assert ValidationMode.from_name("Strict") is ValidationMode.STRICT
        assert ValidationMode.from_name(" forgiving ") is ValidationMode.FORGIVING
        assert ValidationMode.from_name(ValidationMode.INTERACTIVE) is (
            ValidationMode.INTERACTIVE
        )

    @pytest.mark.unit
    def test_unknown_name(self):
        with pytest.raises(ValueError, match="Options"):
            ValidationMode.from_name("lenient")

    @pytest.mark.unit
    def test_fuzzy_permission(self):
        assert not ValidationMode.STRICT.allows_fuzzy
        assert ValidationMode.FORGIVING.allows_fuzzy
        assert ValidationMode.INTERACTIVE.allows_fuzzy


# =============================================================================
# Kind and property resolution
# =============================================================================


class TestNameResolution:
    """Tests for casing normalization and fuzzy correction."""

    @pytest.mark.unit
    def test_casing_example(self, menu_catalog):
        """Lower-cased kind and property are both normalized."""
        tree, diagnostics = validate(parse_tree("menuitem: X\n  header: Hi"), menu_catalog)

        assert len(tree.children) == 1
        node = tree.children[0]
        assert node.kind == "MenuItem"
        assert node.name == "X"
        assert node.properties == {"Header": "Hi"}
        assert list(node.properties) == ["Header"]
        assert len(diagnostics.corrections) == 2
        assert diagnostics.warnings == []
        assert node.was_corrected is True
        assert node.correction_note == (
            "Kind 'menuitem' -> 'MenuItem' (casing); "
            "Property 'header' -> 'Header' (casing)"
        )

    @pytest.mark.unit
    def test_correction_shows_kind_as_written(self, menu_catalog):
        _, diagnostics = validate(parse_tree("menuIten: A\nseparator: S"), menu_catalog)
        assert [c.message for c in diagnostics.corrections] == [
            "Kind 'menuIten' -> 'MenuItem' (distance 1)",
            "Kind 'separator' -> 'Separator' (casing)",
        ]

    @pytest.mark.unit
    def test_kind_typo_corrected(self, menu_catalog):
        tree, diagnostics = validate(parse_tree("MenuIten: Y"), menu_catalog)

        assert tree.children[0].kind == "MenuItem"
        assert len(diagnostics.corrections) == 1
        correction = diagnostics.corrections[0]
        assert correction.line == 0
        assert "'MenuIten' -> 'MenuItem'" in correction.message
        assert "distance 1" in correction.message

    @pytest.mark.unit
    def test_unknown_kind_left_with_warning(self, menu_catalog):
        tree, diagnostics = validate(parse_tree("XyzNonsense: Z"), menu_catalog)

        node = tree.children[0]
        assert node.kind == "XyzNonsense"
        assert node.was_corrected is False
        assert diagnostics.corrections == []
        assert [w.message for w in diagnostics.warnings] == [
            "Unknown control kind 'XyzNonsense'"
        ]

    @pytest.mark.unit
    def test_distance_threshold(self, menu_catalog):
        """Two edits are corrected, three are not."""
        tree, _ = validate(parse_tree("MenuItxx: A\nMenuIxxx: B"), menu_catalog)
        assert [n.kind for n in tree.children] == ["MenuItem", "MenuIxxx"]

    @pytest.mark.unit
    def test_zero_threshold_disables_guessing(self, menu_catalog):
        tree, diagnostics = validate(
            parse_tree("MenuIten: Y"), menu_catalog, max_distance=0
        )
        assert tree.children[0].kind == "MenuIten"
        assert len(diagnostics.warnings) == 1

    @pytest.mark.unit
    def test_property_typo_corrected(self, menu_catalog):
        tree, diagnostics = validate(
            parse_tree("MenuItem: A\n  Headr: x\n  IsEnabled: false"), menu_catalog
        )
        node = tree.children[0]
        assert list(node.properties.items()) == [("Header", "x"), ("IsEnabled", "false")]
        assert "Property 'Headr' -> 'Header'" in diagnostics.corrections[0].message

    @pytest.mark.unit
    def test_unknown_property_warned_and_kept(self, menu_catalog):
        tree, diagnostics = validate(parse_tree("MenuItem: A\n  Colour: red"), menu_catalog)
        assert tree.children[0].properties == {"Colour": "red"}
        assert diagnostics.warnings[0].message == "Unknown property 'Colour' for MenuItem"
        assert diagnostics.corrections == []

    @pytest.mark.unit
    def test_corrected_key_collision(self, menu_catalog):
        tree, diagnostics = validate(
            parse_tree("MenuItem: A\n  Header: one\n  Headr: two"), menu_catalog
        )
        assert tree.children[0].properties == {"Header": "two"}
        assert len(diagnostics.corrections) == 1
        assert "set twice" in diagnostics.warnings[0].message

    @pytest.mark.unit
    def test_tie_break_independent_of_catalog_order(self):
        catalog = SchemaCatalog([SchemaEntry("Cot"), SchemaEntry("Bat")])
        tree, _ = validate(parse_tree("Cat: C"), catalog)
        assert tree.children[0].kind == "Bat"

    @pytest.mark.unit
    def test_unresolved_node_children_still_visited(self, menu_catalog):
        tree, diagnostics = validate(
            parse_tree("Xyzzy: Q\n  Children:\n    - menuitem: A"), menu_catalog
        )
        assert tree.children[0].kind == "Xyzzy"
        assert tree.children[0].children[0].kind == "MenuItem"
        assert len(diagnostics.corrections) == 1

    @pytest.mark.unit
    def test_root_is_not_validated(self, menu_catalog):
        tree, diagnostics = validate(Node.root(), menu_catalog)
        assert tree.kind == "Root"
        assert not diagnostics


# =============================================================================
# Structural repair and checks
# =============================================================================


class TestPromotion:
    """Tests for folding property-shaped children into their parent."""

    @pytest.mark.unit
    def test_misplaced_attribute_promoted(self, menu_catalog):
        root = Node.root()
        parent = Node("MenuItem", "File", {"Header": "_File"})
        parent.children.append(Node("Hint", "Hint3", {"ToolTip": "Opens"}, source_line=2))
        root.children.append(parent)

        _, diagnostics = validate(root, menu_catalog)

        assert parent.properties == {"Header": "_File", "ToolTip": "Opens"}
        assert parent.children == []
        assert len(diagnostics.corrections) == 1
        assert diagnostics.corrections[0].line == 2
        assert "Moved 'ToolTip'" in diagnostics.corrections[0].message
        assert diagnostics.warnings == []

    @pytest.mark.unit
    def test_promotion_from_text(self, menu_catalog):
        tree, diagnostics = validate(
            parse_tree(
                "MenuItem: File\n"
                "  Header: _File\n"
                "  Extra: tip\n"
                "    tooltip: Opens the file menu\n"
            ),
            menu_catalog,
        )
        node = tree.children[0]
        assert node.properties == {
            "Header": "_File",
            "ToolTip": "Opens the file menu",
        }
        assert node.children == []
        assert len(diagnostics.corrections) == 1

    @pytest.mark.unit
    def test_real_controls_are_not_promoted(self, menu_catalog):
        """A known control with a single allowed property stays a child."""
        tree, diagnostics = validate(
            parse_tree(
                "MenuItem: File\n"
                "  Header: _File\n"
                "  Children:\n"
                "    - MenuItem: Exit\n"
                "      Header: E_xit\n"
            ),
            menu_catalog,
        )
        file_item = tree.children[0]
        assert file_item.properties == {"Header": "_File"}
        assert [c.name for c in file_item.children] == ["Exit"]
        assert diagnostics.corrections == []

    @pytest.mark.unit
    def test_promotion_over_existing_property_warns(self, designer_catalog):
        tree, diagnostics = validate(
            parse_tree("Button: Ok\n  Content: Keep\n  Wrap: W\n    Content: Other\n"),
            designer_catalog,
        )
        button = tree.children[0]
        assert button.properties == {"Content": "Other"}
        assert button.children == []
        assert [w.message for w in diagnostics.warnings] == [
            "Property 'Content' on 'Ok' set twice, replacing 'Keep' with 'Other'"
        ]
        assert diagnostics.warnings[0].line == 2

    @pytest.mark.unit
    def test_child_with_two_properties_not_promoted(self, menu_catalog):
        root = Node.root()
        parent = Node("MenuItem", "File")
        parent.children.append(Node("Hint", "H", {"ToolTip": "a", "Header": "b"}))
        root.children.append(parent)

        validate(root, menu_catalog)
        assert len(parent.children) == 1

    @pytest.mark.unit
    def test_no_promotion_in_strict_mode(self, menu_catalog):
        root = Node.root()
        parent = Node("MenuItem", "File")
        parent.children.append(Node("Hint", "H", {"ToolTip": "a"}))
        root.children.append(parent)

        with pytest.raises(StrictValidationError) as exc_info:
            validate(root, menu_catalog, ValidationMode.STRICT)
        assert exc_info.value.name == "Hint"


class TestLeafControlLines:
    """Tests for `Kind: Name` lines written directly inside a node."""

    TOOLBAR = (
        "StackPanel: Toolbar\n"
        "  Orientation: Horizontal\n"
        "  Button: Save\n"
        "  Button: Open\n"
    )

    @pytest.mark.unit
    def test_leaf_siblings_become_children(self, designer_catalog):
        tree, diagnostics = validate(parse_tree(self.TOOLBAR), designer_catalog)

        panel = tree.children[0]
        assert panel.properties == {"Orientation": "Horizontal"}
        assert [(c.kind, c.name) for c in panel.children] == [
            ("Button", "Save"),
            ("Button", "Open"),
        ]
        assert [c.source_line for c in panel.children] == [2, 3]
        assert diagnostics.corrections == []
        assert diagnostics.warnings == []

    @pytest.mark.unit
    def test_leaf_children_identical_in_all_modes(self, designer_catalog):
        signatures = set()
        for mode in ValidationMode:
            tree, diagnostics = validate(parse_tree(self.TOOLBAR), designer_catalog, mode)
            assert not diagnostics
            signatures.add(tree.signature())
        assert len(signatures) == 1

    @pytest.mark.unit
    def test_leaf_children_keep_source_order(self, designer_catalog):
        tree, _ = validate(
            parse_tree(
                "StackPanel: S\n"
                "  Label: Title\n"
                "  Border: Frame\n"
                "    Background: Gray\n"
                "  Button: Ok\n"
            ),
            designer_catalog,
        )
        assert [c.name for c in tree.children[0].children] == ["Title", "Frame", "Ok"]

    @pytest.mark.unit
    def test_over_indented_leaf_attached_with_warning(self, designer_catalog):
        tree, diagnostics = validate(
            parse_tree("StackPanel: S\n      Button: Ok"), designer_catalog
        )
        panel = tree.children[0]
        assert [(c.kind, c.name) for c in panel.children] == [("Button", "Ok")]
        assert panel.properties == {}
        assert [w.message for w in diagnostics.warnings] == [
            "Over-indented control 'Button', adjusting to level 1"
        ]

    @pytest.mark.unit
    def test_leaf_casing_corrected_on_child(self, designer_catalog):
        tree, diagnostics = validate(
            parse_tree("StackPanel: S\n  button: Ok"), designer_catalog
        )
        child = tree.children[0].children[0]
        assert child.kind == "Button"
        assert [c.message for c in diagnostics.corrections] == [
            "Kind 'button' -> 'Button' (casing)"
        ]

    @pytest.mark.unit
    def test_leaf_without_name(self, designer_catalog):
        tree, diagnostics = validate(
            parse_tree("StackPanel: S\n  Separator:"), designer_catalog
        )
        assert tree.children[0].children[0].name == "Separator2"
        assert diagnostics.warnings[0].message == (
            "Control 'Separator' has no name, using 'Separator2'"
        )

    @pytest.mark.unit
    def test_allowed_property_wins_over_kind(self):
        catalog = SchemaCatalog(
            [
                SchemaEntry("Panel", True, ("Label",)),
                SchemaEntry("Label", False, ("Content",)),
            ]
        )
        tree, _ = validate(parse_tree("Panel: P\n  Label: caption"), catalog)
        panel = tree.children[0]
        assert panel.properties == {"Label": "caption"}
        assert panel.children == []

    @pytest.mark.unit
    def test_leaf_in_childless_parent_warned(self, designer_catalog):
        tree, diagnostics = validate(
            parse_tree("Button: Ok\n  Content: OK\n  Label: Hint"), designer_catalog
        )
        button = tree.children[0]
        assert button.properties == {"Content": "OK"}
        assert [c.kind for c in button.children] == ["Label"]
        assert [w.message for w in diagnostics.warnings] == [
            "Button 'Ok' cannot have children"
        ]

    @pytest.mark.unit
    def test_duplicate_property_keeps_last(self, menu_catalog):
        tree, diagnostics = validate(
            parse_tree("MenuItem: A\n  Header: one\n  Header: two"), menu_catalog
        )
        node = tree.children[0]
        assert node.properties == {"Header": "two"}
        assert node.children == []
        assert [(w.line, w.message) for w in diagnostics.warnings] == [
            (2, "Duplicate property 'Header' on 'A', keeping the last value")
        ]

    @pytest.mark.unit
    def test_lines_settled_once(self, designer_catalog):
        validator = SchemaValidator(designer_catalog)
        tree, _ = validator.validate(parse_tree(self.TOOLBAR))
        tree, second = validator.validate(tree)

        assert len(tree.children[0].children) == 2
        assert tree.children[0].attribute_lines == []
        assert not second


class TestStructuralChecks:
    """Tests for child permission and child-shape checks."""

    @pytest.mark.unit
    def test_forbidden_children_warned_not_removed(self, menu_catalog):
        tree, diagnostics = validate(
            parse_tree("Separator: S\n  Children:\n    MenuItem: A"), menu_catalog
        )
        separator = tree.children[0]
        assert [c.name for c in separator.children] == ["A"]
        assert [w.message for w in diagnostics.warnings] == [
            "Separator 'S' cannot have children"
        ]

    @pytest.mark.unit
    def test_unexpected_kind_in_menu(self, designer_catalog):
        tree, diagnostics = validate(
            parse_tree(
                "Menu: Main\n"
                "  Children:\n"
                "    - MenuItem: File\n"
                "      Header: _File\n"
                "      InputGesture: Alt+F\n"
                "    - Button: Oops\n"
                "      Content: Click\n"
                "      Width: 10\n"
            ),
            designer_catalog,
        )
        assert len(tree.children[0].children) == 2
        assert len(diagnostics.warnings) == 1
        warning = diagnostics.warnings[0]
        assert warning.message == "Unexpected Button 'Oops' in Menu"
        assert warning.line == 5

    @pytest.mark.unit
    def test_custom_child_shapes(self, designer_catalog):
        validator = SchemaValidator(
            designer_catalog, child_shapes={"StackPanel": frozenset({"Button"})}
        )
        root = Node.root()
        panel = Node("StackPanel", "P", children=[Node("Label", "L")])
        root.children.append(panel)

        _, diagnostics = validator.validate(root)
        assert diagnostics.warnings[0].message == "Unexpected Label 'L' in StackPanel"


# =============================================================================
# Modes
# =============================================================================


class TestStrictMode:
    """Tests for Strict mode aborts."""

    @pytest.mark.unit
    def test_unknown_kind_raises(self, menu_catalog):
        with pytest.raises(StrictValidationError) as exc_info:
            validate(parse_tree("\nMenuIten: Y"), menu_catalog, ValidationMode.STRICT)
        error = exc_info.value
        assert error.line == 1
        assert error.name == "MenuIten"
        assert str(error) == "Line 2: Unknown control kind 'MenuIten'"

    @pytest.mark.unit
    def test_unknown_property_raises(self, menu_catalog):
        with pytest.raises(StrictValidationError) as exc_info:
            validate(parse_tree("MenuItem: A\n  Headr: x"), menu_catalog, "strict")
        assert exc_info.value.name == "Headr"

    @pytest.mark.unit
    def test_forbidden_children_raise(self, menu_catalog):
        with pytest.raises(StrictValidationError, match="cannot have children"):
            validate(
                parse_tree("Separator: S\n  Children:\n    MenuItem: A"),
                menu_catalog,
                ValidationMode.STRICT,
            )

    @pytest.mark.unit
    def test_casing_normalized_in_strict_mode(self, menu_catalog):
        tree, diagnostics = validate(
            parse_tree("menuitem: X\n  header: Hi"), menu_catalog, ValidationMode.STRICT
        )
        assert tree.children[0].kind == "MenuItem"
        assert len(diagnostics.corrections) == 2

    @pytest.mark.unit
    def test_leaf_children_accepted(self, designer_catalog):
        tree, _ = validate(
            parse_tree(TestLeafControlLines.TOOLBAR),
            designer_catalog,
            ValidationMode.STRICT,
        )
        assert [c.name for c in tree.children[0].children] == ["Save", "Open"]

    @pytest.mark.unit
    def test_is_avml_error(self):
        from avml.diagnostics import AVMLError

        assert issubclass(StrictValidationError, AVMLError)


class TestModeEquivalence:
    """Tests for properties that hold across modes and runs."""

    @pytest.mark.unit
    def test_canonical_input_identical_in_all_modes(self, menu_catalog, sample_menu):
        results = {}
        for mode in ValidationMode:
            tree, diagnostics = validate(parse_tree(sample_menu), menu_catalog, mode)
            assert diagnostics.corrections == []
            assert diagnostics.warnings == []
            results[mode] = tree.signature()
        assert len(set(results.values())) == 1

    @pytest.mark.unit
    def test_interactive_matches_forgiving(self, menu_catalog, sloppy_menu):
        forgiving, f_diag = validate(parse_tree(sloppy_menu), menu_catalog, "forgiving")
        interactive, i_diag = validate(
            parse_tree(sloppy_menu), menu_catalog, "interactive"
        )
        assert forgiving.signature() == interactive.signature()
        assert f_diag == i_diag

    @pytest.mark.unit
    def test_sloppy_menu_corrected(self, menu_catalog, sloppy_menu):
        tree, diagnostics = validate(parse_tree(sloppy_menu), menu_catalog)

        file_item = tree.children[0]
        assert file_item.kind == "MenuItem"
        assert file_item.properties == {"Header": "_File"}
        new_item, separator = file_item.children
        assert (new_item.kind, new_item.name) == ("MenuItem", "New")
        assert new_item.properties == {"Header": "_New"}
        assert separator.kind == "Separator"
        assert len(diagnostics.corrections) == 5
        assert diagnostics.warnings == []

    @pytest.mark.unit
    def test_validation_is_idempotent(self, menu_catalog, sloppy_menu):
        validator = SchemaValidator(menu_catalog)
        tree, first = validator.validate(parse_tree(sloppy_menu))
        signature = tree.signature()

        tree, second = validator.validate(tree)

        assert first.corrections
        assert second.corrections == []
        assert tree.signature() == signature

    @pytest.mark.unit
    def test_runs_own_their_diagnostics(self, menu_catalog):
        validator = SchemaValidator(menu_catalog)
        _, first = validator.validate(parse_tree("MenuIten: A"))
        _, second = validator.validate(parse_tree("MenuItem: B"))
        assert len(first.corrections) == 1
        assert second.corrections == []

    @pytest.mark.unit
    def test_single_node_validation(self, menu_catalog):
        node = Node("menuitem", "Solo", {"header": "x"})
        result, diagnostics = validate(node, menu_catalog)
        assert result is node
        assert node.kind == "MenuItem"
        assert len(diagnostics.corrections) == 2

"""Schema-driven validation and correction of AVML trees.

The validator walks a built tree depth-first and reconciles it with the
schema catalog:
    - `Key: Value` lines naming a control kind rather than a property of
      their node become leaf children
    - kind and property names are normalized to their canonical casing
    - unknown names are fuzzy-corrected to the closest catalog entry
      (edit distance within a threshold)
    - children written where a property belongs are folded back into the
      parent's properties
    - child permission and kind-specific child shapes are checked

Every fix is recorded as a correction and every unfixable issue as a
warning. Strict mode turns unresolved names and structural violations into
a StrictValidationError instead.
"""

import logging
from collections.abc import Iterable, Mapping
from enum import Enum

from avml.diagnostics import AVMLError, Diagnostics
from avml.schema import SchemaEntry
from avml.tree import AttributeLine, Node, PropertyMap, count_nodes

logger = logging.getLogger(__name__)

DEFAULT_MAX_DISTANCE = 2

# Kinds whose children are restricted to a fixed set of kinds
CHILD_SHAPE_RULES: dict[str, frozenset[str]] = {
    "Menu": frozenset({"MenuItem", "Separator"}),
    "MenuItem": frozenset({"MenuItem", "Separator"}),
}


class ValidationMode(str, Enum):
    """How the validator reacts to schema mismatches.

    - STRICT: unresolved names and structural violations raise
    - FORGIVING: fix what can be fixed, warn about the rest
    - INTERACTIVE: reserved for human-in-the-loop resolution; behaves
      like FORGIVING
    """

    STRICT = "strict"
    FORGIVING = "forgiving"
    INTERACTIVE = "interactive"

    @property
    def allows_fuzzy(self) -> bool:
        """Whether guessing (fuzzy correction, promotion) is permitted."""
        return self is not ValidationMode.STRICT

    @classmethod
    def from_name(cls, name: "str | ValidationMode") -> "ValidationMode":
        """Parse a mode name case-insensitively.

        Raises:
            ValueError: If the name is not a known mode.
        """
        if isinstance(name, cls):
            return name
        try:
            return cls(str(name).strip().lower())
        except ValueError:
            options = ", ".join(m.value for m in cls)
            raise ValueError(
                f"Unknown validation mode '{name}'. Options: {options}"
            ) from None


class StrictValidationError(AVMLError):
    """A schema mismatch that Strict mode refuses to repair.

    Attributes:
        line: 0-based source line of the offending node.
        name: The offending kind or property name.
        message: Description without the line prefix.
    """

    def __init__(self, line: int, name: str, message: str):
        super().__init__(f"Line {line + 1}: {message}")
        self.line = line
        self.name = name
        self.message = message


# =============================================================================
# Approximate matching
# =============================================================================


def levenshtein(a: str, b: str) -> int:
    """Edit distance between two strings (Wagner-Fischer, two rows).

    Args:
        a: First string.
        b: Second string.

    Returns:
        Minimum number of single-character insertions, deletions and
        substitutions turning ``a`` into ``b``.
    """
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)

    prev_row = list(range(len(b) + 1))
    curr_row = [0] * (len(b) + 1)
    for i in range(1, len(a) + 1):
        curr_row[0] = i
        for j in range(1, len(b) + 1):
            cost = 0 if a[i - 1] == b[j - 1] else 1
            curr_row[j] = min(
                prev_row[j] + 1,
                curr_row[j - 1] + 1,
                prev_row[j - 1] + cost,
            )
        prev_row, curr_row = curr_row, prev_row
    return prev_row[len(b)]


def find_case_insensitive(name: str, candidates: Iterable[str]) -> str | None:
    """Return the first candidate equal to ``name`` ignoring case."""
    folded = name.casefold()
    for candidate in candidates:
        if candidate.casefold() == folded:
            return candidate
    return None


def closest_match(
    name: str,
    candidates: Iterable[str],
    max_distance: int = DEFAULT_MAX_DISTANCE,
) -> tuple[str, int] | None:
    """Find the candidate closest to ``name`` by case-insensitive edit distance.

    Ties on distance are broken lexicographically on the candidate name, so
    the result does not depend on catalog order.

    Args:
        name: Unresolved name.
        candidates: Canonical names to compare against.
        max_distance: Largest accepted distance.

    Returns:
        Tuple of (candidate, distance), or None if nothing is close enough.
    """
    folded = name.casefold()
    best: tuple[int, str] | None = None
    for candidate in candidates:
        distance = levenshtein(folded, candidate.casefold())
        if distance > max_distance:
            continue
        if best is None or (distance, candidate) < best:
            best = (distance, candidate)
    if best is None:
        return None
    return best[1], best[0]


# =============================================================================
# Validator
# =============================================================================


class SchemaValidator:
    """Validates and corrects node trees against a schema catalog.

    The validator holds no per-run state; each `validate()` call returns its
    own Diagnostics, so one instance may be reused across trees.

    Args:
        catalog: Mapping of canonical kind name to SchemaEntry.
        mode: Validation mode.
        max_distance: Largest edit distance accepted for fuzzy correction.
        child_shapes: Allowed child kinds per parent kind.

    Example:
        >>> validator = SchemaValidator(catalog)
        >>> tree, diagnostics = validator.validate(root)
        >>> for correction in diagnostics.corrections:
        ...     print(correction)
    """

    def __init__(
        self,
        catalog: Mapping[str, SchemaEntry],
        mode: ValidationMode | str = ValidationMode.FORGIVING,
        max_distance: int = DEFAULT_MAX_DISTANCE,
        child_shapes: Mapping[str, frozenset[str]] | None = None,
    ):
        self.catalog = catalog
        self.mode = ValidationMode.from_name(mode)
        self.max_distance = max(0, max_distance)
        self.child_shapes = CHILD_SHAPE_RULES if child_shapes is None else child_shapes

        self._kind_index: dict[str, str] = {}
        for kind in catalog:
            self._kind_index.setdefault(kind.casefold(), kind)

    def validate(self, tree: Node) -> tuple[Node, Diagnostics]:
        """Validate and correct a tree in place.

        Args:
            tree: Synthetic root (never validated itself) or a single node.

        Returns:
            Tuple of (the same tree, diagnostics of this run).

        Raises:
            StrictValidationError: In Strict mode, on the first violation.
        """
        diagnostics = Diagnostics()
        for node in tree.children if tree.is_root else [tree]:
            self._validate_node(node, diagnostics)

        logger.debug(
            f"Validated {count_nodes(tree)} nodes in {self.mode.value} mode: "
            f"{len(diagnostics.corrections)} corrections, "
            f"{len(diagnostics.warnings)} warnings"
        )
        return tree, diagnostics

    def _validate_node(self, node: Node, diagnostics: Diagnostics) -> None:
        entry = self._resolve_kind(node, diagnostics)
        self._settle_attribute_lines(node, entry, diagnostics)
        if entry is not None:
            self._resolve_properties(node, entry, diagnostics)
            if self.mode.allows_fuzzy:
                self._promote_misplaced_attributes(node, entry, diagnostics)

        for child in node.children:
            self._validate_node(child, diagnostics)

        if entry is None:
            return
        self._check_child_permission(node, entry, diagnostics)
        self._check_child_shape(node, diagnostics)

    # =========================================================================
    # Name resolution
    # =========================================================================

    def _correct(
        self, node: Node, diagnostics: Diagnostics, line: int, message: str
    ) -> None:
        diagnostics.correct(line, message)
        node.mark_corrected(message)

    def _lookup_kind(self, kind: str) -> tuple[str, int] | None:
        """Resolve a kind name without side effects.

        Returns:
            Tuple of (canonical kind, distance), or None. Distance 0 means an
            exact or case-insensitive match.
        """
        if kind in self.catalog:
            return kind, 0
        canonical = self._kind_index.get(kind.casefold())
        if canonical is not None:
            return canonical, 0
        if self.mode.allows_fuzzy:
            return closest_match(kind, self.catalog, self.max_distance)
        return None

    def _resolve_kind(self, node: Node, diagnostics: Diagnostics) -> SchemaEntry | None:
        """Resolve the node's kind, correcting it if needed."""
        written = node.source_kind or node.kind
        match = self._lookup_kind(node.kind)
        if match is None:
            message = f"Unknown control kind '{written}'"
            if self.mode is ValidationMode.STRICT:
                raise StrictValidationError(node.source_line, written, message)
            diagnostics.warn(node.source_line, message)
            return None

        canonical, distance = match
        if canonical != written:
            if distance == 0:
                message = f"Kind '{written}' -> '{canonical}' (casing)"
            else:
                message = f"Kind '{written}' -> '{canonical}' (distance {distance})"
            self._correct(node, diagnostics, node.source_line, message)
        node.kind = canonical
        node.source_kind = None
        return self.catalog[canonical]

    # =========================================================================
    # Property lines
    # =========================================================================

    def _names_control(self, key: str, allowed: Iterable[str]) -> bool:
        """True if ``key`` names a control kind rather than an allowed property.

        Only exact and case-insensitive kind matches count; a key that matches
        nothing stays a property and is reported as unknown.
        """
        if find_case_insensitive(key, allowed) is not None:
            return False
        return key.casefold() in self._kind_index

    def _settle_attribute_lines(
        self, node: Node, entry: SchemaEntry | None, diagnostics: Diagnostics
    ) -> None:
        """Split the builder's attribute lines into properties and leaf children.

        A `Kind: Name` line inside a node reads exactly like a property; it
        becomes a child when its key is a catalog kind and not a property of
        the node. Repeated property keys keep the last value.
        """
        lines, node.attribute_lines = node.attribute_lines, []
        if not lines:
            return

        allowed = entry.allowed_properties if entry is not None else ()
        properties = PropertyMap()
        controls: list[Node] = []
        for attr in lines:
            if self._names_control(attr.key, allowed):
                controls.append(self._leaf_control(node, attr, diagnostics))
                continue
            if attr.key in properties:
                diagnostics.warn(
                    attr.line,
                    f"Duplicate property '{attr.key}' on '{node.name}', "
                    "keeping the last value",
                )
            properties[attr.key] = attr.value

        node.properties = properties
        if controls:
            # Stable sort: source order among nested and leaf children
            node.children = sorted(
                node.children + controls, key=lambda child: child.source_line
            )

    def _leaf_control(
        self, parent: Node, attr: AttributeLine, diagnostics: Diagnostics
    ) -> Node:
        name = attr.value
        if not name:
            name = f"{attr.key}{attr.line + 1}"
            diagnostics.warn(
                attr.line, f"Control '{attr.key}' has no name, using '{name}'"
            )
        if attr.over_indented:
            diagnostics.warn(
                attr.line,
                f"Over-indented control '{attr.key}', adjusting to "
                f"level {attr.expected_level}",
            )
        logger.debug(
            f"Line {attr.line + 1}: '{attr.key}' is a child control of "
            f"{parent.kind} '{parent.name}'"
        )
        return Node(kind=attr.key, name=name, source_line=attr.line)

    def _resolve_property(self, key: str, entry: SchemaEntry) -> tuple[str, int] | None:
        if entry.allows(key):
            return key, 0
        canonical = find_case_insensitive(key, entry.allowed_properties)
        if canonical is not None:
            return canonical, 0
        if self.mode.allows_fuzzy:
            return closest_match(key, entry.allowed_properties, self.max_distance)
        return None

    def _resolve_properties(
        self, node: Node, entry: SchemaEntry, diagnostics: Diagnostics
    ) -> None:
        """Normalize every property key of the node against its schema."""
        for key in list(node.properties):
            # A previous rename may have displaced this key
            if key not in node.properties or node.properties.canonical_key(key) != key:
                continue

            match = self._resolve_property(key, entry)
            if match is None:
                message = f"Unknown property '{key}' for {node.kind}"
                if self.mode is ValidationMode.STRICT:
                    raise StrictValidationError(node.source_line, key, message)
                diagnostics.warn(node.source_line, message)
                continue

            canonical, distance = match
            if canonical == key:
                continue

            if distance == 0:
                message = f"Property '{key}' -> '{canonical}' (casing)"
            else:
                message = f"Property '{key}' -> '{canonical}' (distance {distance})"
            self._correct(node, diagnostics, node.source_line, message)
            if node.properties.rename(key, canonical):
                diagnostics.warn(
                    node.source_line,
                    f"Property '{canonical}' on '{node.name}' set twice, "
                    f"keeping the value of '{key}'",
                )

    # =========================================================================
    # Structural repair and checks
    # =========================================================================

    def _promote_misplaced_attributes(
        self, node: Node, entry: SchemaEntry, diagnostics: Diagnostics
    ) -> None:
        """Fold property-shaped children back into the node's properties.

        A child qualifies when it has no children, exactly one property that
        the node's schema allows, and a kind that resolves to no control.
        """
        promoted: set[int] = set()
        for child in node.children:
            if child.children or len(child.properties) != 1:
                continue
            key, value = next(iter(child.properties.items()))
            canonical = find_case_insensitive(key, entry.allowed_properties)
            if canonical is None or self._lookup_kind(child.kind) is not None:
                continue

            written = child.source_kind or child.kind
            message = (
                f"Moved '{canonical}' from {written} '{child.name}' "
                f"into {node.kind} '{node.name}' properties"
            )
            self._correct(node, diagnostics, child.source_line, message)
            if canonical in node.properties:
                diagnostics.warn(
                    child.source_line,
                    f"Property '{canonical}' on '{node.name}' set twice, "
                    f"replacing '{node.properties[canonical]}' with '{value}'",
                )
            node.properties[canonical] = value
            promoted.add(id(child))

        if promoted:
            node.children = [c for c in node.children if id(c) not in promoted]

    def _check_child_permission(
        self, node: Node, entry: SchemaEntry, diagnostics: Diagnostics
    ) -> None:
        if not node.children or entry.can_have_children:
            return
        message = f"{node.kind} '{node.name}' cannot have children"
        if self.mode is ValidationMode.STRICT:
            raise StrictValidationError(node.source_line, node.kind, message)
        diagnostics.warn(node.source_line, message)

    def _check_child_shape(self, node: Node, diagnostics: Diagnostics) -> None:
        allowed = self.child_shapes.get(node.kind)
        if allowed is None:
            return
        for child in node.children:
            if child.kind in allowed:
                continue
            message = f"Unexpected {child.kind} '{child.name}' in {node.kind}"
            if self.mode is ValidationMode.STRICT:
                raise StrictValidationError(child.source_line, child.kind, message)
            diagnostics.warn(child.source_line, message)


def validate(
    tree: Node,
    catalog: Mapping[str, SchemaEntry],
    mode: ValidationMode | str = ValidationMode.FORGIVING,
    max_distance: int = DEFAULT_MAX_DISTANCE,
) -> tuple[Node, Diagnostics]:
    """Validate and correct a tree in place with a one-off SchemaValidator.

    Args:
        tree: Tree from the builder.
        catalog: Schema catalog.
        mode: Validation mode.
        max_distance: Fuzzy correction threshold.

    Returns:
        Tuple of (the same tree, diagnostics).
    """
    validator = SchemaValidator(catalog, mode=mode, max_distance=max_distance)
    return validator.validate(tree)


__all__ = [
    "CHILD_SHAPE_RULES",
    "DEFAULT_MAX_DISTANCE",
    "SchemaValidator",
    "StrictValidationError",
    "ValidationMode",
    "closest_match",
    "find_case_insensitive",
    "levenshtein",
    "validate",
]

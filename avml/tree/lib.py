"""UI tree model produced by the builder and corrected by the validator.

The tree is plain mutable data: the builder creates nodes, the validator
fixes them in place, and downstream consumers read them through
`to_records()`. Node identity is positional; no persistent ids are assigned
here.
"""

import json
from collections.abc import Iterable, Iterator, Mapping, MutableMapping
from dataclasses import dataclass, field
from typing import Any, ClassVar

from pydantic import BaseModel, Field


class PropertyMap(MutableMapping[str, str]):
    """Insertion-ordered string map with case-insensitive keys.

    Keys are indexed by their case-folded form and keep the casing they were
    last written with, so ``props["header"]`` finds ``"Header"``.
    """

    def __init__(self, items: Mapping[str, str] | Iterable[tuple[str, str]] = ()):
        self._entries: dict[str, tuple[str, str]] = {}
        self.update(items)

    @staticmethod
    def _fold(key: str) -> str:
        return key.casefold()

    def __getitem__(self, key: str) -> str:
        return self._entries[self._fold(key)][1]

    def __setitem__(self, key: str, value: str) -> None:
        self._entries[self._fold(key)] = (key, value)

    def __delitem__(self, key: str) -> None:
        del self._entries[self._fold(key)]

    def __iter__(self) -> Iterator[str]:
        return (key for key, _ in self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self._fold(key) in self._entries

    def __repr__(self) -> str:
        return f"PropertyMap({dict(self.items())!r})"

    def canonical_key(self, key: str) -> str | None:
        """Return the stored casing of ``key``, or None if absent."""
        entry = self._entries.get(self._fold(key))
        return entry[0] if entry else None

    def rename(self, old: str, new: str) -> bool:
        """Rename a key in place, keeping its position.

        If ``new`` case-insensitively matches a different existing key, that
        entry is dropped in favour of the renamed one.

        Returns:
            True if another entry was displaced.
        """
        old_fold, new_fold = self._fold(old), self._fold(new)
        value = self._entries[old_fold][1]
        displaced = new_fold != old_fold and new_fold in self._entries

        rebuilt: dict[str, tuple[str, str]] = {}
        for fold, entry in self._entries.items():
            if fold == old_fold:
                rebuilt[new_fold] = (new, value)
            elif fold != new_fold:
                rebuilt[fold] = entry
        self._entries = rebuilt
        return displaced

    def copy(self) -> "PropertyMap":
        return PropertyMap(self.items())


@dataclass(frozen=True)
class AttributeLine:
    """One ``Key: Value`` line as the builder read it inside a node.

    Without the schema a property and a leaf child control look alike, so
    the builder keeps every line, repeated keys included, for the validator
    to settle.

    Attributes:
        key: Key text as written.
        value: Value text (empty when missing).
        line: 0-based source line.
        level: Indentation level of the line.
        expected_level: Level of a direct child line of the node.
    """

    key: str
    value: str
    line: int
    level: int = 0
    expected_level: int = 0

    @property
    def over_indented(self) -> bool:
        return self.level > self.expected_level


@dataclass
class Node:
    """One UI element: a control kind instance with properties and children.

    Attributes:
        kind: Control type name (e.g. "MenuItem").
        name: Instance name (e.g. "FileMenu").
        properties: Case-insensitive property map.
        children: Ordered child nodes (order becomes display order).
        source_line: 0-based line the node was declared on.
        was_corrected: True once any automatic fix touched this node.
        correction_note: Accumulated description of the fixes applied.
        source_kind: Kind exactly as written, when the builder changed it.
        attribute_lines: Raw attribute lines awaiting schema validation.
    """

    ROOT_KIND: ClassVar[str] = "Root"

    kind: str
    name: str = ""
    properties: PropertyMap = field(default_factory=PropertyMap)
    children: list["Node"] = field(default_factory=list)
    source_line: int = 0
    was_corrected: bool = False
    correction_note: str | None = None
    source_kind: str | None = field(default=None, repr=False, compare=False)
    attribute_lines: list[AttributeLine] = field(
        default_factory=list, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        if not isinstance(self.properties, PropertyMap):
            self.properties = PropertyMap(self.properties)

    @classmethod
    def root(cls) -> "Node":
        """Create the synthetic root that wraps top-level nodes."""
        return cls(kind=cls.ROOT_KIND, name=cls.ROOT_KIND, source_line=0)

    @property
    def is_root(self) -> bool:
        return self.kind == self.ROOT_KIND

    def mark_corrected(self, note: str) -> None:
        """Flag the node as corrected and append ``note``."""
        self.was_corrected = True
        if self.correction_note:
            self.correction_note = f"{self.correction_note}; {note}"
        else:
            self.correction_note = note

    def walk(self) -> Iterator["Node"]:
        """Yield this node and all descendants in pre-order."""
        yield self
        for child in self.children:
            yield from child.walk()

    def signature(self) -> tuple[Any, ...]:
        """Structural fingerprint ignoring source lines and correction flags."""
        return (
            self.kind,
            self.name,
            tuple(self.properties.items()),
            tuple(child.signature() for child in self.children),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert the subtree to nested JSON-serializable dicts."""
        return {
            "kind": self.kind,
            "name": self.name,
            "properties": dict(self.properties.items()),
            "children": [child.to_dict() for child in self.children],
            "source_line": self.source_line,
            "was_corrected": self.was_corrected,
            "correction_note": self.correction_note,
        }

    def __str__(self) -> str:
        return (
            f"{self.kind}:{self.name} "
            f"({len(self.properties)} props, {len(self.children)} children)"
        )


# === DOWNSTREAM EXPORT ===


class NodeRecord(BaseModel):
    """Flat, persistence-ready view of one corrected node.

    Parent linkage is expressed through record indexes, not stored ids;
    assigning persistent identity is left to the consumer.
    """

    index: int = Field(..., ge=0, description="Pre-order position in the export")
    parent_index: int | None = Field(
        None, description="Index of the parent record (None for top-level nodes)"
    )
    kind: str = Field(..., description="Control type name")
    name: str = Field(..., description="Control instance name")
    display_order: int = Field(..., ge=0, description="Position among siblings")
    properties: dict[str, str] = Field(
        default_factory=dict, description="Property map in insertion order"
    )
    source_line: int = Field(0, description="0-based declaration line")
    was_corrected: bool = Field(False, description="Whether fixes were applied")
    correction_note: str | None = Field(None, description="Applied fixes")


def iter_nodes(root: Node) -> Iterator[Node]:
    """Yield every node below the synthetic root in pre-order."""
    for child in root.children:
        yield from child.walk()


def count_nodes(root: Node) -> int:
    """Count nodes excluding the synthetic root."""
    return sum(1 for _ in iter_nodes(root))


def count_properties(root: Node) -> int:
    """Count properties across the whole tree."""
    return sum(len(node.properties) for node in root.walk())


def to_records(root: Node) -> list[NodeRecord]:
    """Flatten a corrected tree into records, excluding the synthetic root.

    Args:
        root: Tree root (the synthetic root or any subtree head).

    Returns:
        Records in pre-order with parent indexes and sibling display order.
    """
    records: list[NodeRecord] = []

    def visit(node: Node, parent_index: int | None, order: int) -> None:
        index = len(records)
        records.append(
            NodeRecord(
                index=index,
                parent_index=parent_index,
                kind=node.kind,
                name=node.name,
                display_order=order,
                properties=dict(node.properties.items()),
                source_line=node.source_line,
                was_corrected=node.was_corrected,
                correction_note=node.correction_note,
            )
        )
        for child_order, child in enumerate(node.children):
            visit(child, index, child_order)

    tops = root.children if root.is_root else [root]
    for order, node in enumerate(tops):
        visit(node, None, order)
    return records


def export_records_json(root: Node, indent: int | None = 2) -> str:
    """Serialize `to_records()` output as a JSON array."""
    return json.dumps(
        [record.model_dump() for record in to_records(root)], indent=indent
    )


def export_record_schema() -> dict[str, Any]:
    """Export the JSON Schema of a NodeRecord."""
    return NodeRecord.model_json_schema()


__all__ = [
    "AttributeLine",
    "Node",
    "NodeRecord",
    "PropertyMap",
    "count_nodes",
    "count_properties",
    "export_record_schema",
    "export_records_json",
    "iter_nodes",
    "to_records",
]

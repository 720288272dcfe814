"""Schema catalog of known control kinds and their allowed properties.

The catalog is loaded once from a schema source before validation and is
read-only afterwards, so one catalog can back any number of parse runs.
Lookups are exact and case-sensitive; case-insensitive and fuzzy matching
belong to the validator.
"""

import logging
from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, NamedTuple, Protocol

from avml.config import get_schema_db
from avml.diagnostics import AVMLError

logger = logging.getLogger(__name__)


class SchemaSourceError(AVMLError):
    """The schema source is missing, unreadable or empty."""


class ControlKind(NamedTuple):
    """One row of a schema source's kind listing."""

    kind: str
    can_have_children: bool
    description: str | None = None


@dataclass(frozen=True)
class SchemaEntry:
    """Schema knowledge about one control kind.

    Attributes:
        kind: Canonical kind name.
        can_have_children: Whether nodes of this kind may contain children.
        allowed_properties: Canonical property names, in source order.
        description: Optional human description.
    """

    kind: str
    can_have_children: bool = False
    allowed_properties: tuple[str, ...] = ()
    description: str | None = None

    def allows(self, property_name: str) -> bool:
        """Exact (case-sensitive) membership test."""
        return property_name in self.allowed_properties

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "can_have_children": self.can_have_children,
            "allowed_properties": list(self.allowed_properties),
            "description": self.description,
        }


class SchemaSource(Protocol):
    """Interface a schema store must provide to populate a catalog."""

    def fetch_control_kinds(self) -> Sequence[ControlKind]:
        """Return known kinds in their stable source order."""
        ...

    def fetch_allowed_properties(self, kind: str) -> Sequence[str]:
        """Return the allowed property names for ``kind``."""
        ...


class InMemorySchemaSource:
    """Schema source backed by a fixed list of entries.

    Args:
        entries: Schema entries in catalog order.
    """

    def __init__(self, entries: Iterable[SchemaEntry]):
        self._entries = {entry.kind: entry for entry in entries}

    @classmethod
    def from_mapping(
        cls,
        properties: Mapping[str, Iterable[str]],
        containers: Iterable[str] = (),
    ) -> "InMemorySchemaSource":
        """Build a source from ``{kind: [property, ...]}``.

        Args:
            properties: Allowed properties per kind, in catalog order.
            containers: Kinds that may have children.
        """
        containers = set(containers)
        return cls(
            SchemaEntry(kind, kind in containers, tuple(props))
            for kind, props in properties.items()
        )

    def fetch_control_kinds(self) -> list[ControlKind]:
        return [
            ControlKind(e.kind, e.can_have_children, e.description)
            for e in self._entries.values()
        ]

    def fetch_allowed_properties(self, kind: str) -> list[str]:
        entry = self._entries.get(kind)
        return list(entry.allowed_properties) if entry else []


class SchemaCatalog(Mapping[str, SchemaEntry]):
    """Immutable index of kind name to SchemaEntry.

    Iteration follows the source order of kinds.

    Example:
        >>> catalog = SchemaCatalog([SchemaEntry("MenuItem", True, ("Header",))])
        >>> catalog["MenuItem"].allows("Header")
        True
    """

    def __init__(self, entries: Iterable[SchemaEntry] = ()):
        self._entries: dict[str, SchemaEntry] = {}
        for entry in entries:
            if entry.kind in self._entries:
                logger.warning(f"Duplicate schema kind '{entry.kind}', keeping first")
                continue
            self._entries[entry.kind] = entry

    def __getitem__(self, kind: str) -> SchemaEntry:
        return self._entries[kind]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"SchemaCatalog({list(self._entries)!r})"

    @property
    def kinds(self) -> tuple[str, ...]:
        return tuple(self._entries)

    @classmethod
    def load(cls, source: SchemaSource) -> "SchemaCatalog":
        """Populate a catalog from a schema source.

        Args:
            source: Any object implementing SchemaSource.

        Returns:
            Loaded catalog.

        Raises:
            SchemaSourceError: If the source yields no kinds.
        """
        entries = []
        for row in source.fetch_control_kinds():
            properties = tuple(source.fetch_allowed_properties(row.kind))
            entries.append(
                SchemaEntry(
                    kind=row.kind,
                    can_have_children=bool(row.can_have_children),
                    allowed_properties=properties,
                    description=row.description,
                )
            )
        if not entries:
            raise SchemaSourceError("Schema source returned no control kinds")

        catalog = cls(entries)
        logger.info(f"Loaded schema catalog with {len(catalog)} control kinds")
        return catalog

    def to_dict(self) -> dict[str, dict[str, Any]]:
        return {kind: entry.to_dict() for kind, entry in self._entries.items()}


# =============================================================================
# Designer controls
# =============================================================================

# (kind, can_have_children, description)
DESIGNER_CONTROL_TYPES: list[tuple[str, bool, str]] = [
    # Menus
    ("MenuItem", True, "Menu item with optional submenu"),
    ("Separator", False, "Menu separator"),
    ("Menu", True, "Top-level menu bar"),
    # Layout containers
    ("Window", True, "Top-level window"),
    ("DockPanel", True, "Dock-based layout panel"),
    ("StackPanel", True, "Vertical or horizontal stack"),
    ("Panel", True, "Generic panel"),
    ("Canvas", True, "Absolute positioning canvas"),
    ("Grid", True, "Grid-based layout"),
    ("Border", True, "Border with single child"),
    ("ScrollViewer", True, "Scrollable container"),
    ("TabControl", True, "Tab container"),
    ("TabItem", True, "Single tab page"),
    # Basic controls
    ("Button", False, "Clickable button"),
    ("TextBox", False, "Text input field"),
    ("TextBlock", False, "Read-only text display"),
    ("Label", False, "Text label"),
    ("CheckBox", False, "Checkbox control"),
    ("RadioButton", False, "Radio button control"),
    ("ComboBox", False, "Dropdown selection"),
]

# (kind, property, property type, default value)
DESIGNER_CONTROL_PROPERTIES: list[tuple[str, str, str, str]] = [
    ("Window", "Title", "string", "Avalised Window"),
    ("Window", "Width", "double", "800"),
    ("Window", "Height", "double", "600"),
    ("Window", "MinWidth", "double", "0"),
    ("Window", "MinHeight", "double", "0"),
    ("Window", "CanResize", "bool", "true"),
    ("Window", "ShowInTaskbar", "bool", "true"),
    ("Window", "WindowStartupLocation", "string", "CenterScreen"),
    ("DockPanel", "LastChildFill", "bool", "true"),
    ("DockPanel", "Background", "string", "#FFFFFF"),
    ("StackPanel", "Orientation", "string", "Vertical"),
    ("StackPanel", "Spacing", "double", "0"),
    ("StackPanel", "Background", "string", "#FFFFFF"),
    ("Canvas", "Width", "double", "800"),
    ("Canvas", "Height", "double", "600"),
    ("Canvas", "Background", "string", "#F5F5F5"),
    ("Border", "Background", "string", "#FFFFFF"),
    ("Border", "BorderThickness", "double", "1"),
    ("Border", "BorderBrush", "string", "#CCCCCC"),
    ("Border", "CornerRadius", "double", "0"),
    ("Border", "Padding", "string", "0"),
    ("Button", "Content", "string", "Button"),
    ("Button", "Width", "double", "100"),
    ("Button", "Height", "double", "30"),
    ("Button", "Margin", "string", "0"),
    ("Button", "HorizontalAlignment", "string", "Left"),
    ("Button", "VerticalAlignment", "string", "Top"),
    ("TextBox", "Text", "string", ""),
    ("TextBox", "Width", "double", "200"),
    ("TextBox", "Height", "double", "30"),
    ("TextBox", "Watermark", "string", ""),
    ("TextBlock", "Text", "string", "TextBlock"),
    ("TextBlock", "FontSize", "double", "12"),
    ("TextBlock", "FontWeight", "string", "Normal"),
    ("TextBlock", "Foreground", "string", "#000000"),
    ("Label", "Content", "string", "Label"),
    ("Label", "FontSize", "double", "12"),
    ("CheckBox", "Content", "string", "CheckBox"),
    ("CheckBox", "IsChecked", "bool", "false"),
    ("MenuItem", "Header", "string", "Menu Item"),
    ("MenuItem", "InputGesture", "string", ""),
    ("MenuItem", "ToolTip", "string", ""),
    ("MenuItem", "IsEnabled", "bool", "true"),
    ("Button", "Canvas.Left", "double", "0"),
    ("Button", "Canvas.Top", "double", "0"),
    ("TextBox", "Canvas.Left", "double", "0"),
    ("TextBox", "Canvas.Top", "double", "0"),
    ("Label", "Canvas.Left", "double", "0"),
    ("Label", "Canvas.Top", "double", "0"),
    ("TextBlock", "Canvas.Left", "double", "0"),
    ("TextBlock", "Canvas.Top", "double", "0"),
    ("Menu", "DockPanel.Dock", "string", "Top"),
    ("Border", "DockPanel.Dock", "string", "Bottom"),
    ("Panel", "DockPanel.Dock", "string", "Left"),
    ("StackPanel", "DockPanel.Dock", "string", "Right"),
]


def designer_source() -> InMemorySchemaSource:
    """In-memory source holding the standard designer controls."""
    properties: dict[str, list[str]] = {}
    for kind, name, _, _ in DESIGNER_CONTROL_PROPERTIES:
        properties.setdefault(kind, []).append(name)
    return InMemorySchemaSource(
        SchemaEntry(kind, children, tuple(properties.get(kind, ())), description)
        for kind, children, description in DESIGNER_CONTROL_TYPES
    )


def load_catalog(source: SchemaSource | Path | str | None = None) -> SchemaCatalog:
    """Load a schema catalog.

    Args:
        source: A SchemaSource, a path to a designer SQLite database, or None
            to use AVML_SCHEMA_DB (falling back to the built-in designer
            controls when it is unset).

    Returns:
        Loaded catalog.

    Raises:
        SchemaSourceError: If the source cannot be read or is empty.
    """
    from .storage import SQLiteSchemaSource

    if source is None:
        source = get_schema_db()
        if source is None:
            logger.info("No schema database configured, using designer controls")
            return SchemaCatalog.load(designer_source())

    if isinstance(source, (str, Path)):
        with SQLiteSchemaSource(source) as db_source:
            return SchemaCatalog.load(db_source)

    return SchemaCatalog.load(source)


__all__ = [
    "ControlKind",
    "DESIGNER_CONTROL_PROPERTIES",
    "DESIGNER_CONTROL_TYPES",
    "InMemorySchemaSource",
    "SchemaCatalog",
    "SchemaEntry",
    "SchemaSource",
    "SchemaSourceError",
    "designer_source",
    "load_catalog",
]

"""Parse orchestration: text in, corrected tree and diagnostics out.

Sequences the three pipeline stages (tokenize, build, validate) over one
schema catalog. The catalog is loaded up front, so schema-source failures
surface before any text is processed.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from avml.builder import build
from avml.config import (
    get_fuzzy_max_distance,
    get_indent_unit,
    get_tab_width,
    get_validation_mode,
)
from avml.diagnostics import Diagnostic, Diagnostics
from avml.schema import SchemaEntry, SchemaSource, load_catalog
from avml.tokenizer import Tokenizer
from avml.tree import (
    Node,
    NodeRecord,
    count_nodes,
    count_properties,
    export_records_json,
    to_records,
)
from avml.validation import SchemaValidator, ValidationMode

logger = logging.getLogger(__name__)


@dataclass
class ParseResult:
    """Outcome of one successful parse run.

    Attributes:
        tree: Corrected tree under the synthetic root.
        diagnostics: Warnings and corrections of this run.
        mode: Validation mode the run used.
    """

    tree: Node
    diagnostics: Diagnostics
    mode: ValidationMode = ValidationMode.FORGIVING

    @property
    def warnings(self) -> list[Diagnostic]:
        return self.diagnostics.warnings

    @property
    def corrections(self) -> list[Diagnostic]:
        return self.diagnostics.corrections

    @property
    def node_count(self) -> int:
        """Nodes in the tree, excluding the synthetic root."""
        return count_nodes(self.tree)

    @property
    def property_count(self) -> int:
        return count_properties(self.tree)

    def to_records(self) -> list[NodeRecord]:
        """Flatten the tree for a downstream persistence layer."""
        return to_records(self.tree)

    def to_json(self, indent: int | None = 2) -> str:
        return export_records_json(self.tree, indent=indent)

    def to_dict(self) -> dict[str, Any]:
        """Nested tree plus diagnostics as JSON-serializable data."""
        return {
            "mode": self.mode.value,
            "nodes": [child.to_dict() for child in self.tree.children],
            "warnings": [str(w) for w in self.warnings],
            "corrections": [str(c) for c in self.corrections],
        }


class AVMLParser:
    """Parses AVML text against a schema catalog.

    Unset options fall back to the AVML_* configuration values.

    Args:
        catalog: Loaded schema catalog (shared read-only across runs).
        mode: Validation mode or its name.
        tab_width: Columns a tab expands to.
        indent_unit: Columns per indentation level.
        max_distance: Fuzzy correction threshold.

    Example:
        >>> parser = AVMLParser(load_catalog())
        >>> result = parser.parse("MenuIten: File\\n  Header: _File")
        >>> result.tree.children[0].kind
        'MenuItem'
    """

    def __init__(
        self,
        catalog: Mapping[str, SchemaEntry],
        mode: ValidationMode | str | None = None,
        *,
        tab_width: int | None = None,
        indent_unit: int | None = None,
        max_distance: int | None = None,
    ):
        self.catalog = catalog
        self.mode = ValidationMode.from_name(
            mode if mode is not None else get_validation_mode()
        )
        self.tokenizer = Tokenizer(
            tab_width=get_tab_width(tab_width),
            indent_unit=get_indent_unit(indent_unit),
        )
        self.validator = SchemaValidator(
            catalog,
            mode=self.mode,
            max_distance=get_fuzzy_max_distance(max_distance),
        )

    def parse(self, text: str) -> ParseResult:
        """Run the full pipeline over ``text``.

        Args:
            text: AVML markup.

        Returns:
            ParseResult with the corrected tree and this run's diagnostics.

        Raises:
            StrictValidationError: In Strict mode, on the first violation.
        """
        diagnostics = Diagnostics()

        tokens, warnings = self.tokenizer.tokenize(text)
        diagnostics.extend(warnings)
        logger.info(f"Tokenized {len(tokens)} tokens ({len(warnings)} warnings)")

        tree, warnings = build(tokens)
        diagnostics.extend(warnings)
        logger.info(f"Built tree with {count_nodes(tree)} nodes")

        tree, validation = self.validator.validate(tree)
        diagnostics.merge(validation)
        logger.info(
            f"Validated in {self.mode.value} mode: "
            f"{len(validation.corrections)} corrections, "
            f"{len(validation.warnings)} warnings"
        )

        return ParseResult(tree=tree, diagnostics=diagnostics, mode=self.mode)

    def parse_file(self, path: Path | str) -> ParseResult:
        """Read and parse an AVML file.

        Raises:
            FileNotFoundError: If the file does not exist.
        """
        path = Path(path)
        logger.info(f"Parsing {path}")
        return self.parse(path.read_text(encoding="utf-8"))


def parse_text(
    text: str,
    source: SchemaSource | Path | str | None = None,
    mode: ValidationMode | str | None = None,
) -> ParseResult:
    """Load a catalog and parse ``text`` in one call.

    Args:
        text: AVML markup.
        source: Schema source, designer database path, or None for the
            configured default (see `load_catalog`).
        mode: Validation mode; None uses AVML_VALIDATION_MODE.

    Returns:
        ParseResult of the run.

    Raises:
        SchemaSourceError: If the schema cannot be loaded.
        StrictValidationError: In Strict mode, on the first violation.
    """
    catalog = load_catalog(source)
    return AVMLParser(catalog, mode).parse(text)


__all__ = ["AVMLParser", "ParseResult", "parse_text"]

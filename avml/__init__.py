"""avml: forgiving, schema-driven parser for indentation-based UI markup."""

from avml.builder import build
from avml.parser import AVMLParser, ParseResult, parse_text
from avml.schema import SchemaCatalog, SchemaEntry, load_catalog
from avml.tokenizer import tokenize
from avml.tree import Node
from avml.validation import ValidationMode, validate

__all__ = [
    # Pipeline stages
    "tokenize",
    "build",
    "validate",
    # Model
    "Node",
    "SchemaCatalog",
    "SchemaEntry",
    "load_catalog",
    "ValidationMode",
    # Orchestration
    "AVMLParser",
    "ParseResult",
    "parse_text",
]

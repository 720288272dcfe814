"""Schema module - catalog of control kinds and their allowed properties.

Example usage:
    >>> from avml.schema import load_catalog
    >>> catalog = load_catalog()  # AVML_SCHEMA_DB or built-in designer controls
    >>> catalog["MenuItem"].allows("Header")
    True
"""

from .lib import (
    DESIGNER_CONTROL_PROPERTIES,
    DESIGNER_CONTROL_TYPES,
    ControlKind,
    InMemorySchemaSource,
    SchemaCatalog,
    SchemaEntry,
    SchemaSource,
    SchemaSourceError,
    designer_source,
    load_catalog,
)
from .storage import SQLiteSchemaSource, initialize_schema_db

__all__ = [
    # Model
    "ControlKind",
    "SchemaCatalog",
    "SchemaEntry",
    "SchemaSourceError",
    # Sources
    "SchemaSource",
    "InMemorySchemaSource",
    "SQLiteSchemaSource",
    "designer_source",
    "initialize_schema_db",
    "load_catalog",
    # Designer data
    "DESIGNER_CONTROL_PROPERTIES",
    "DESIGNER_CONTROL_TYPES",
]

"""Storage backends for schema catalogs.

Available backends:
- SQLiteSchemaSource: designer SQLite database (control_types/control_properties)
- InMemorySchemaSource: fixed entries for tests and demos (see avml.schema)
"""

from .sqlite import SCHEMA_SQL, SQLiteSchemaSource, initialize_schema_db

__all__ = [
    "SCHEMA_SQL",
    "SQLiteSchemaSource",
    "initialize_schema_db",
]

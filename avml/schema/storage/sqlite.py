"""SQLite schema source for the designer database.

Reads control kinds and their allowed properties from the designer's
``control_types`` and ``control_properties`` tables. The connection is held
only for the duration of a catalog load.
"""

import logging
import sqlite3
from contextlib import closing
from pathlib import Path

from ..lib import (
    DESIGNER_CONTROL_PROPERTIES,
    DESIGNER_CONTROL_TYPES,
    ControlKind,
    SchemaSourceError,
)

logger = logging.getLogger(__name__)

# SQL Schema
SCHEMA_SQL = """
-- Known control kinds
CREATE TABLE IF NOT EXISTS control_types (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL UNIQUE,
    can_have_children INTEGER NOT NULL DEFAULT 0,
    description TEXT
);

-- Allowed properties per control kind
CREATE TABLE IF NOT EXISTS control_properties (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    control_type TEXT NOT NULL,
    property_name TEXT NOT NULL,
    property_type TEXT,
    default_value TEXT,
    UNIQUE(control_type, property_name)
);

CREATE INDEX IF NOT EXISTS idx_control_properties_type
    ON control_properties(control_type);
"""


class SQLiteSchemaSource:
    """Read-only schema source over a designer SQLite database.

    Use as a context manager, or call `open()`/`close()` explicitly.

    Args:
        db_path: Path to the designer database file.

    Example:
        >>> with SQLiteSchemaSource("designer.db") as source:
        ...     catalog = SchemaCatalog.load(source)
    """

    def __init__(self, db_path: Path | str):
        self.db_path = Path(db_path)
        self._conn: sqlite3.Connection | None = None

    def __enter__(self) -> "SQLiteSchemaSource":
        self.open()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _get_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise RuntimeError("Schema source not open. Call open() first.")
        return self._conn

    def open(self) -> None:
        """Open the database read-only.

        Raises:
            SchemaSourceError: If the file is missing or cannot be opened.
        """
        if not self.db_path.is_file():
            raise SchemaSourceError(f"Schema database not found: {self.db_path}")

        uri = f"{self.db_path.resolve().as_uri()}?mode=ro"
        try:
            self._conn = sqlite3.connect(uri, uri=True)
        except sqlite3.Error as e:
            raise SchemaSourceError(
                f"Cannot open schema database {self.db_path}: {e}"
            ) from e
        logger.debug(f"Opened schema database {self.db_path}")

    def close(self) -> None:
        """Close the database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None

    def fetch_control_kinds(self) -> list[ControlKind]:
        """Return all control kinds ordered by insertion id."""
        try:
            rows = (
                self._get_conn()
                .execute(
                    "SELECT name, can_have_children, description "
                    "FROM control_types ORDER BY id"
                )
                .fetchall()
            )
        except sqlite3.Error as e:
            raise SchemaSourceError(
                f"Cannot read control types from {self.db_path}: {e}"
            ) from e
        return [ControlKind(name, bool(children), desc) for name, children, desc in rows]

    def fetch_allowed_properties(self, kind: str) -> list[str]:
        """Return the property names registered for ``kind``."""
        try:
            rows = (
                self._get_conn()
                .execute(
                    "SELECT property_name FROM control_properties "
                    "WHERE control_type = ? ORDER BY id",
                    (kind,),
                )
                .fetchall()
            )
        except sqlite3.Error as e:
            raise SchemaSourceError(
                f"Cannot read properties of '{kind}' from {self.db_path}: {e}"
            ) from e
        return [row[0] for row in rows]


def initialize_schema_db(db_path: Path | str, seed: bool = True) -> Path:
    """Create the designer schema tables, optionally seeding standard controls.

    Safe to run against an existing database; seed rows are inserted with
    ``INSERT OR IGNORE``.

    Args:
        db_path: Database file to create or update.
        seed: Insert the standard designer controls and properties.

    Returns:
        The database path.

    Raises:
        SchemaSourceError: If the database cannot be written.
    """
    path = Path(db_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    try:
        with closing(sqlite3.connect(str(path))) as conn:
            conn.executescript(SCHEMA_SQL)
            if seed:
                conn.executemany(
                    "INSERT OR IGNORE INTO control_types "
                    "(name, can_have_children, description) VALUES (?, ?, ?)",
                    [
                        (name, int(children), desc)
                        for name, children, desc in DESIGNER_CONTROL_TYPES
                    ],
                )
                conn.executemany(
                    "INSERT OR IGNORE INTO control_properties "
                    "(control_type, property_name, property_type, default_value) "
                    "VALUES (?, ?, ?, ?)",
                    DESIGNER_CONTROL_PROPERTIES,
                )
            conn.commit()
    except sqlite3.Error as e:
        raise SchemaSourceError(f"Cannot initialize schema database {path}: {e}") from e

    logger.info(f"Initialized schema database at {path}")
    return path

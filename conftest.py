"""Root pytest configuration and fixtures.

This module provides:
- Environment setup (loads .env)
- Isolation from a developer's AVML_* environment
- Shared schema catalogs and sample documents
"""

from __future__ import annotations

import os
from pathlib import Path

import pytest
from dotenv import load_dotenv

from avml.schema import (
    InMemorySchemaSource,
    SchemaCatalog,
    designer_source,
    initialize_schema_db,
)

# Load environment variables from .env file
load_dotenv()


# =============================================================================
# Configuration Constants
# =============================================================================

MENU_PROPERTIES = {
    "Menu": ["DockPanel.Dock"],
    "MenuItem": ["Header", "InputGesture", "ToolTip", "IsEnabled"],
    "Separator": [],
}
MENU_CONTAINERS = ("Menu", "MenuItem")

SAMPLE_MENU = """\
# File menu
MenuItem: File
  Header: _File
  Children:
    - MenuItem: New
      Header: _New
      InputGesture: Ctrl+N
    - Separator: Sep1
    - MenuItem: Exit
      Header: E_xit
"""

SLOPPY_MENU = """\
menuitem: File
\theader: _File
\tChildren:
\t\t- MenuIten: New
\t\t\tHeadr: _New
\t\t- separator: Sep1
"""


# =============================================================================
# Pytest Hooks
# =============================================================================


@pytest.fixture(autouse=True)
def _clean_avml_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep AVML_* variables from .env or the shell out of unit tests."""
    for name in list(os.environ):
        if name.startswith("AVML_"):
            monkeypatch.delenv(name, raising=False)


# =============================================================================
# Schema Fixtures
# =============================================================================


@pytest.fixture
def menu_catalog() -> SchemaCatalog:
    """Small menu-only catalog (Menu, MenuItem, Separator).

    Returns:
        Catalog loaded from an in-memory source.
    """
    source = InMemorySchemaSource.from_mapping(MENU_PROPERTIES, MENU_CONTAINERS)
    return SchemaCatalog.load(source)


@pytest.fixture
def designer_catalog() -> SchemaCatalog:
    """Full catalog of the standard designer controls."""
    return SchemaCatalog.load(designer_source())


@pytest.fixture
def designer_db(tmp_path: Path) -> Path:
    """Seeded designer SQLite database in a temporary directory."""
    return initialize_schema_db(tmp_path / "designer.db")


# =============================================================================
# Sample Documents
# =============================================================================


@pytest.fixture
def sample_menu() -> str:
    """Canonical, well-formed menu document."""
    return SAMPLE_MENU


@pytest.fixture
def sloppy_menu() -> str:
    """Menu document with tabs, casing errors and typos."""
    return SLOPPY_MENU

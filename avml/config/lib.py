"""Centralized environment configuration management for avml.

Provides a unified interface for all environment variables with:
- Single `get_environment()` function for all configuration
- Type-safe enum with metadata (default, type, description)
- Consistent resolution: override > environment > default

Example:
    >>> from avml.config import EnvVar, get_environment
    >>>
    >>> # Get values with automatic type conversion
    >>> width = get_environment(EnvVar.AVML_TAB_WIDTH)  # Returns int
    >>> db = get_environment(EnvVar.AVML_SCHEMA_DB)  # Returns Path | None
    >>>
    >>> # Override at runtime
    >>> width = get_environment(EnvVar.AVML_TAB_WIDTH, override=4)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, overload

# =============================================================================
# Environment Variable Configuration
# =============================================================================


@dataclass(frozen=True)
class EnvConfig:
    """Metadata for an environment variable.

    Attributes:
        name: Environment variable name (e.g., "AVML_TAB_WIDTH").
        default: Default value if not set in environment.
        var_type: Python type for value conversion (str, int, Path).
        description: Human-readable description.
        category: Grouping category for documentation.
    """

    name: str
    default: Any
    var_type: type
    description: str = ""
    category: str = "general"


class EnvVar(Enum):
    """All environment variables used by avml.

    Each member contains an EnvConfig with name, default, type, and description.
    Use with `get_environment()` for type-safe access.

    Categories:
        - schema: Where the schema catalog is loaded from
        - parser: Tokenizer and validator tuning
        - logging: Log output
    """

    # -------------------------------------------------------------------------
    # Schema Source
    # -------------------------------------------------------------------------
    AVML_SCHEMA_DB = EnvConfig(
        name="AVML_SCHEMA_DB",
        default=None,
        var_type=Path,
        description="SQLite designer database providing control types/properties",
        category="schema",
    )

    # -------------------------------------------------------------------------
    # Parser Tuning
    # -------------------------------------------------------------------------
    AVML_VALIDATION_MODE = EnvConfig(
        name="AVML_VALIDATION_MODE",
        default="forgiving",
        var_type=str,
        description="Validation mode: strict, forgiving, or interactive",
        category="parser",
    )
    AVML_TAB_WIDTH = EnvConfig(
        name="AVML_TAB_WIDTH",
        default=2,
        var_type=int,
        description="Number of columns a tab expands to in leading whitespace",
        category="parser",
    )
    AVML_INDENT_UNIT = EnvConfig(
        name="AVML_INDENT_UNIT",
        default=2,
        var_type=int,
        description="Number of columns per indentation level",
        category="parser",
    )
    AVML_FUZZY_MAX_DISTANCE = EnvConfig(
        name="AVML_FUZZY_MAX_DISTANCE",
        default=2,
        var_type=int,
        description="Maximum edit distance accepted for fuzzy name correction",
        category="parser",
    )

    # -------------------------------------------------------------------------
    # Logging
    # -------------------------------------------------------------------------
    AVML_LOG_LEVEL = EnvConfig(
        name="AVML_LOG_LEVEL",
        default="INFO",
        var_type=str,
        description="Log level for the command line interface",
        category="logging",
    )


# =============================================================================
# Type Conversion Helpers
# =============================================================================


def _convert_value(value: str | None, var_type: type, default: Any) -> Any:
    """Convert string value to target type.

    Args:
        value: Raw string value from environment (or None).
        var_type: Target Python type.
        default: Default value if conversion fails or value is None.

    Returns:
        Converted value or default.
    """
    if value is None:
        return default

    if var_type is str:
        return value

    if var_type is int:
        try:
            return int(value)
        except ValueError:
            return default

    if var_type is Path:
        return Path(value) if value else default

    # Unknown type, return as-is
    return value


# =============================================================================
# Main Interface
# =============================================================================


@overload
def get_environment(env_var: EnvVar, override: int) -> int: ...
@overload
def get_environment(env_var: EnvVar, override: str) -> str: ...
@overload
def get_environment(env_var: EnvVar, override: Path) -> Path: ...
@overload
def get_environment(env_var: EnvVar, override: None = None) -> Any: ...


def get_environment(env_var: EnvVar, override: Any = None) -> Any:
    """Get environment variable value with type conversion.

    Resolution priority:
        1. Explicit override parameter (highest)
        2. Environment variable value
        3. Default from EnvConfig (lowest)

    Args:
        env_var: Environment variable enum member.
        override: Optional override value (bypasses env lookup).

    Returns:
        Value converted to the appropriate type (str, int, or Path).

    Example:
        >>> get_environment(EnvVar.AVML_TAB_WIDTH)
        2
        >>> get_environment(EnvVar.AVML_TAB_WIDTH, override=4)
        4
    """
    config: EnvConfig = env_var.value

    if override is not None:
        return override

    raw_value = os.environ.get(config.name)

    return _convert_value(raw_value, config.var_type, config.default)


def get_environment_info(env_var: EnvVar) -> EnvConfig:
    """Get metadata for an environment variable.

    Args:
        env_var: Environment variable enum member.

    Returns:
        EnvConfig with name, default, type, and description.
    """
    return env_var.value


# =============================================================================
# Convenience Functions
# =============================================================================


def get_schema_db(override: Path | str | None = None) -> Path | None:
    """Get the designer database path, or None when not configured."""
    if override is not None:
        return Path(override)
    return get_environment(EnvVar.AVML_SCHEMA_DB)


def get_validation_mode(override: str | None = None) -> str:
    """Get the configured validation mode name (lower-cased)."""
    return get_environment(EnvVar.AVML_VALIDATION_MODE, override).lower().strip()


def get_tab_width(override: int | None = None) -> int:
    """Get the tab expansion width, never less than 1."""
    return max(1, get_environment(EnvVar.AVML_TAB_WIDTH, override))


def get_indent_unit(override: int | None = None) -> int:
    """Get the number of columns per indentation level, never less than 1."""
    return max(1, get_environment(EnvVar.AVML_INDENT_UNIT, override))


def get_fuzzy_max_distance(override: int | None = None) -> int:
    """Get the fuzzy-correction edit distance threshold."""
    return max(0, get_environment(EnvVar.AVML_FUZZY_MAX_DISTANCE, override))


def get_log_level(override: str | None = None) -> str:
    """Get the configured log level name (upper-cased)."""
    return get_environment(EnvVar.AVML_LOG_LEVEL, override).upper()


def list_environment_variables(category: str | None = None) -> list[EnvVar]:
    """List all environment variables, optionally filtered by category.

    Args:
        category: Filter by category (schema, parser, logging).
                 None returns all variables.

    Returns:
        List of EnvVar enum members.
    """
    if category is None:
        return list(EnvVar)

    return [var for var in EnvVar if var.value.category == category]


__all__ = [
    # Core types
    "EnvConfig",
    "EnvVar",
    # Main interface
    "get_environment",
    "get_environment_info",
    # Convenience functions
    "get_schema_db",
    "get_validation_mode",
    "get_tab_width",
    "get_indent_unit",
    "get_fuzzy_max_distance",
    "get_log_level",
    # Introspection
    "list_environment_variables",
]

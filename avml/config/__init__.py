"""Centralized configuration management for avml.

Provides unified access to all configuration via the `get_environment()` function.

Example:
    >>> from avml.config import EnvVar, get_environment
    >>>
    >>> unit = get_environment(EnvVar.AVML_INDENT_UNIT)  # Returns int: 2
    >>> mode = get_environment(EnvVar.AVML_VALIDATION_MODE)  # "forgiving"
    >>>
    >>> # Override at runtime
    >>> unit = get_environment(EnvVar.AVML_INDENT_UNIT, override=4)

Environment Variable Categories:
    schema: Designer database used as the schema source
    parser: Tab width, indent unit, fuzzy threshold, validation mode
    logging: CLI log level
"""

from .lib import (
    # Core types
    EnvConfig,
    EnvVar,
    # Main interface
    get_environment,
    get_environment_info,
    get_fuzzy_max_distance,
    get_indent_unit,
    get_log_level,
    get_schema_db,
    get_tab_width,
    get_validation_mode,
    # Introspection
    list_environment_variables,
)

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

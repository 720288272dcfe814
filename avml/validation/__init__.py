"""Validation module - schema-driven correction of AVML trees.

Example usage:
    >>> from avml.validation import ValidationMode, validate
    >>> tree, diagnostics = validate(root, catalog, ValidationMode.FORGIVING)
    >>> [str(c) for c in diagnostics.corrections]
    ["Line 1: Kind 'MenuIten' -> 'MenuItem' (distance 1)"]
"""

from .lib import (
    CHILD_SHAPE_RULES,
    DEFAULT_MAX_DISTANCE,
    SchemaValidator,
    StrictValidationError,
    ValidationMode,
    closest_match,
    find_case_insensitive,
    levenshtein,
    validate,
)

__all__ = [
    "CHILD_SHAPE_RULES",
    "DEFAULT_MAX_DISTANCE",
    "SchemaValidator",
    "StrictValidationError",
    "ValidationMode",
    "closest_match",
    "find_case_insensitive",
    "levenshtein",
    "validate",
]

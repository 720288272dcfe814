"""Output module for human-readable parse results.

Example usage:
    >>> from avml.output import format_tree, format_summary
    >>> print(format_tree(result.tree))
    >>> print(format_summary(result))
"""

from .lib import format_diagnostics, format_summary, format_tree

__all__ = [
    "format_diagnostics",
    "format_summary",
    "format_tree",
]

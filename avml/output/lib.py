"""Output formatting for parse results.

Generates human-readable text representations of corrected trees and their
diagnostics for console review.
"""

from collections.abc import Sequence

from avml.diagnostics import Diagnostic
from avml.parser import ParseResult
from avml.tree import Node

DEFAULT_SUMMARY_LIMIT = 5


def format_tree(node: Node) -> str:
    """Format a node tree as a human-readable tree.

    Example output:
        MenuItem:File {Header=_File} *
        ├── MenuItem:New {Header=_New, InputGesture=Ctrl+N}
        ├── Separator:Sep1
        └── MenuItem:Exit {Header=E_xit}

    A trailing ``*`` marks nodes that received corrections. The synthetic
    root is not shown; each top-level node starts its own tree.

    Args:
        node: Synthetic root or any node.

    Returns:
        Formatted tree string ("(empty)" for a root without children).
    """
    lines: list[str] = []
    tops = node.children if node.is_root else [node]
    for top in tops:
        _format_node(top, lines, "", is_last=True, is_top=True)
    return "\n".join(lines) if lines else "(empty)"


def _format_label(node: Node) -> str:
    label = f"{node.kind}:{node.name}"
    if node.properties:
        props = ", ".join(f"{k}={v}" for k, v in node.properties.items())
        label = f"{label} {{{props}}}"
    if node.was_corrected:
        label = f"{label} *"
    return label


def _format_node(
    node: Node,
    lines: list[str],
    prefix: str,
    is_last: bool,
    is_top: bool = False,
) -> None:
    """Recursively format a node and its children."""
    if is_top:
        connector = ""
        child_prefix = ""
    else:
        connector = "└── " if is_last else "├── "
        child_prefix = prefix + ("    " if is_last else "│   ")

    lines.append(f"{prefix}{connector}{_format_label(node)}")

    for i, child in enumerate(node.children):
        is_last_child = i == len(node.children) - 1
        _format_node(child, lines, child_prefix, is_last_child)


def format_diagnostics(
    title: str,
    diagnostics: Sequence[Diagnostic],
    limit: int = DEFAULT_SUMMARY_LIMIT,
) -> str:
    """Format a titled diagnostic list, truncated after ``limit`` entries."""
    lines = [f"{title} ({len(diagnostics)}):"]
    lines.extend(f"  {d}" for d in diagnostics[:limit])
    if len(diagnostics) > limit:
        lines.append(f"  ... and {len(diagnostics) - limit} more")
    return "\n".join(lines)


def format_summary(result: ParseResult, limit: int = DEFAULT_SUMMARY_LIMIT) -> str:
    """Format counts plus the first corrections and warnings of a run.

    Args:
        result: Parse result to summarize.
        limit: Entries shown per diagnostic list.

    Returns:
        Multi-line summary.
    """
    sections = [
        f"Nodes: {result.node_count} | Properties: {result.property_count} "
        f"| Mode: {result.mode.value}"
    ]
    if result.corrections:
        sections.append(format_diagnostics("Corrections", result.corrections, limit))
    if result.warnings:
        sections.append(format_diagnostics("Warnings", result.warnings, limit))
    return "\n".join(sections)


__all__ = [
    "format_diagnostics",
    "format_summary",
    "format_tree",
]

"""Diagnostics module - warning and correction logs for a parse run."""

from .lib import AVMLError, Diagnostic, Diagnostics

__all__ = ["AVMLError", "Diagnostic", "Diagnostics"]

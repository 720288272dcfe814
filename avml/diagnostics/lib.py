"""Per-run diagnostic logs and the root error type.

Every stage of the pipeline reports what it noticed (warnings) and what it
changed (corrections) as line-anchored records. The logs are owned by a
single parse run and handed back to the caller alongside the tree.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable

logger = logging.getLogger(__name__)


class AVMLError(Exception):
    """Base class for fatal errors raised by the avml pipeline."""


@dataclass(frozen=True)
class Diagnostic:
    """A single line-anchored diagnostic message.

    Attributes:
        line: 0-based source line the message refers to.
        message: Human-readable description.
    """

    line: int
    message: str

    def __str__(self) -> str:
        return f"Line {self.line + 1}: {self.message}"


@dataclass
class Diagnostics:
    """Append-only warning and correction logs for one parse run.

    Attributes:
        warnings: Non-fixable or informational issues.
        corrections: Every automatic fix that was applied.
    """

    warnings: list[Diagnostic] = field(default_factory=list)
    corrections: list[Diagnostic] = field(default_factory=list)

    def warn(self, line: int, message: str) -> Diagnostic:
        """Record a warning."""
        diagnostic = Diagnostic(line, message)
        self.warnings.append(diagnostic)
        logger.debug(f"warning: {diagnostic}")
        return diagnostic

    def correct(self, line: int, message: str) -> Diagnostic:
        """Record an applied correction."""
        diagnostic = Diagnostic(line, message)
        self.corrections.append(diagnostic)
        logger.debug(f"correction: {diagnostic}")
        return diagnostic

    def extend(self, warnings: Iterable[Diagnostic]) -> None:
        """Append warnings produced by another stage."""
        self.warnings.extend(warnings)

    def merge(self, other: "Diagnostics") -> None:
        """Append both logs of another run, preserving order."""
        self.warnings.extend(other.warnings)
        self.corrections.extend(other.corrections)

    def __bool__(self) -> bool:
        return bool(self.warnings or self.corrections)


__all__ = ["AVMLError", "Diagnostic", "Diagnostics"]

"""Unit tests for diagnostics module."""

import pytest

from .lib import Diagnostic, Diagnostics


class TestDiagnostic:
    """Tests for the Diagnostic record."""

    @pytest.mark.unit
    def test_str_uses_one_based_line(self):
        """Rendering shows the human (1-based) line number."""
        assert str(Diagnostic(0, "irregular indentation")) == (
            "Line 1: irregular indentation"
        )

    @pytest.mark.unit
    def test_is_immutable(self):
        """Diagnostics cannot be altered once recorded."""
        diagnostic = Diagnostic(3, "x")
        with pytest.raises(AttributeError):
            diagnostic.line = 4  # type: ignore[misc]


class TestDiagnostics:
    """Tests for the per-run aggregator."""

    @pytest.mark.unit
    def test_starts_empty(self):
        """A fresh aggregator has no records and is falsy."""
        diagnostics = Diagnostics()
        assert diagnostics.warnings == []
        assert diagnostics.corrections == []
        assert not diagnostics

    @pytest.mark.unit
    def test_warn_and_correct_keep_order(self):
        """Records are appended in the order they are reported."""
        diagnostics = Diagnostics()
        diagnostics.warn(2, "first")
        diagnostics.correct(1, "fixed")
        diagnostics.warn(0, "second")
        assert [d.message for d in diagnostics.warnings] == ["first", "second"]
        assert diagnostics.corrections == [Diagnostic(1, "fixed")]
        assert diagnostics

    @pytest.mark.unit
    def test_runs_do_not_share_state(self):
        """Two aggregators never share their lists."""
        first = Diagnostics()
        second = Diagnostics()
        first.warn(0, "only here")
        assert second.warnings == []

    @pytest.mark.unit
    def test_extend_and_merge(self):
        """Stage outputs are folded into one run log."""
        run = Diagnostics()
        run.extend([Diagnostic(0, "lexical")])
        stage = Diagnostics()
        stage.warn(1, "schema")
        stage.correct(1, "casing")
        run.merge(stage)
        assert [d.message for d in run.warnings] == ["lexical", "schema"]
        assert [d.message for d in run.corrections] == ["casing"]

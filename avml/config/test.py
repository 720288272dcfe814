"""Tests for configuration management."""

from pathlib import Path

import pytest

from .lib import (
    EnvConfig,
    EnvVar,
    get_environment,
    get_environment_info,
    get_fuzzy_max_distance,
    get_indent_unit,
    get_log_level,
    get_schema_db,
    get_tab_width,
    get_validation_mode,
    list_environment_variables,
)

# =============================================================================
# Tests for get_environment (main interface)
# =============================================================================


class TestGetEnvironment:
    """Tests for the unified get_environment interface."""

    @pytest.mark.unit
    def test_returns_default_when_not_set(self, monkeypatch):
        """Returns default value when env var is not set."""
        monkeypatch.delenv("AVML_TAB_WIDTH", raising=False)
        assert get_environment(EnvVar.AVML_TAB_WIDTH) == 2

    @pytest.mark.unit
    def test_override_takes_priority(self, monkeypatch):
        """Override parameter takes highest priority."""
        monkeypatch.setenv("AVML_TAB_WIDTH", "8")
        assert get_environment(EnvVar.AVML_TAB_WIDTH, override=4) == 4

    @pytest.mark.unit
    def test_env_var_overrides_default(self, monkeypatch):
        """Environment variable overrides default value."""
        monkeypatch.setenv("AVML_INDENT_UNIT", "4")
        result = get_environment(EnvVar.AVML_INDENT_UNIT)
        assert result == 4
        assert isinstance(result, int)

    @pytest.mark.unit
    def test_invalid_int_falls_back_to_default(self, monkeypatch):
        """Unparseable integers fall back to the default."""
        monkeypatch.setenv("AVML_FUZZY_MAX_DISTANCE", "two")
        assert get_environment(EnvVar.AVML_FUZZY_MAX_DISTANCE) == 2

    @pytest.mark.unit
    def test_every_variable_has_a_converted_type(self):
        """Each registered type has a conversion branch."""
        assert {var.value.var_type for var in EnvVar} <= {str, int, Path}

    @pytest.mark.unit
    def test_path_type_conversion(self, monkeypatch, tmp_path):
        """Path variables convert to Path objects."""
        monkeypatch.setenv("AVML_SCHEMA_DB", str(tmp_path / "designer.db"))
        result = get_environment(EnvVar.AVML_SCHEMA_DB)
        assert isinstance(result, Path)
        assert result.name == "designer.db"

    @pytest.mark.unit
    def test_empty_path_is_default(self, monkeypatch):
        """An empty path value is treated as unset."""
        monkeypatch.setenv("AVML_SCHEMA_DB", "")
        assert get_environment(EnvVar.AVML_SCHEMA_DB) is None


class TestConvenienceGetters:
    """Tests for the typed convenience getters."""

    @pytest.mark.unit
    def test_validation_mode_normalized(self, monkeypatch):
        """Validation mode is lower-cased and stripped."""
        monkeypatch.setenv("AVML_VALIDATION_MODE", " Strict ")
        assert get_validation_mode() == "strict"

    @pytest.mark.unit
    def test_tab_width_never_below_one(self):
        """Tab width is clamped to at least one column."""
        assert get_tab_width(0) == 1

    @pytest.mark.unit
    def test_indent_unit_never_below_one(self):
        """Indent unit is clamped to at least one column."""
        assert get_indent_unit(-3) == 1

    @pytest.mark.unit
    def test_fuzzy_distance_never_negative(self):
        """Fuzzy threshold is clamped to zero."""
        assert get_fuzzy_max_distance(-1) == 0

    @pytest.mark.unit
    def test_log_level_upper(self, monkeypatch):
        """Log level names are upper-cased."""
        monkeypatch.setenv("AVML_LOG_LEVEL", "debug")
        assert get_log_level() == "DEBUG"

    @pytest.mark.unit
    def test_schema_db_override(self, monkeypatch):
        """Override path wins over the environment."""
        monkeypatch.setenv("AVML_SCHEMA_DB", "/elsewhere.db")
        assert get_schema_db("designer.db") == Path("designer.db")


class TestIntrospection:
    """Tests for variable metadata and listing."""

    @pytest.mark.unit
    def test_environment_info(self):
        """EnvConfig metadata is exposed."""
        info = get_environment_info(EnvVar.AVML_INDENT_UNIT)
        assert isinstance(info, EnvConfig)
        assert info.name == "AVML_INDENT_UNIT"
        assert info.var_type is int
        assert info.description

    @pytest.mark.unit
    def test_list_by_category(self):
        """Category filter returns only matching variables."""
        parser_vars = list_environment_variables("parser")
        assert EnvVar.AVML_TAB_WIDTH in parser_vars
        assert EnvVar.AVML_SCHEMA_DB not in parser_vars

    @pytest.mark.unit
    def test_list_all(self):
        """No filter returns every variable."""
        assert len(list_environment_variables()) == len(EnvVar)

    @pytest.mark.unit
    def test_names_match_members(self):
        """Every EnvConfig name matches its enum member name."""
        for var in EnvVar:
            assert var.value.name == var.name

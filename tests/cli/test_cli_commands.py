"""Tests for the python . CLI commands."""

import json
import os
import subprocess
import sys
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).resolve().parents[2]

SAMPLE = """\
menuitem: File
  header: _File
  Children:
    - MenuIten: New
      Header: _New
"""


def run_cli(
    *args: str, cwd: Path = REPO_ROOT, extra_env: dict[str, str] | None = None
) -> subprocess.CompletedProcess:
    env = {k: v for k, v in os.environ.items() if not k.startswith("AVML_")}
    env.update(extra_env or {})
    return subprocess.run(
        [sys.executable, str(REPO_ROOT), *args],
        capture_output=True,
        text=True,
        cwd=cwd,
        env=env,
        timeout=60,
    )


@pytest.fixture
def sample_file(tmp_path: Path) -> Path:
    path = tmp_path / "menu.avml"
    path.write_text(SAMPLE, encoding="utf-8")
    return path


@pytest.mark.integration
def test_help_lists_commands():
    result = run_cli("--help")
    assert result.returncode == 0
    assert "parse" in result.stdout
    assert "schema" in result.stdout


@pytest.mark.integration
def test_unknown_command_fails():
    assert run_cli("frobnicate").returncode == 1


@pytest.mark.integration
def test_parse_tree_output(sample_file):
    result = run_cli("parse", str(sample_file))
    assert result.returncode == 0
    assert "MenuItem:File {Header=_File} *" in result.stdout
    assert "└── MenuItem:New {Header=_New} *" in result.stdout
    assert "Corrections (3):" in result.stdout


@pytest.mark.integration
def test_parse_records_to_file(sample_file, tmp_path):
    output = tmp_path / "records.json"
    result = run_cli("parse", str(sample_file), "-f", "records", "-o", str(output))
    assert result.returncode == 0

    records = json.loads(output.read_text(encoding="utf-8"))
    assert [r["name"] for r in records] == ["File", "New"]
    assert records[1]["parent_index"] == 0


@pytest.mark.integration
def test_parse_strict_fails(sample_file):
    result = run_cli("parse", str(sample_file), "--mode", "strict")
    assert result.returncode == 1
    assert "MenuIten" in result.stderr


@pytest.mark.integration
def test_parse_missing_file(tmp_path):
    result = run_cli("parse", str(tmp_path / "nope.avml"))
    assert result.returncode == 1


@pytest.mark.integration
def test_schema_init_and_show(tmp_path, sample_file):
    db = tmp_path / "designer.db"
    assert run_cli("schema", "init", str(db)).returncode == 0

    shown = run_cli("schema", "show", "--db", str(db), "--kind", "MenuItem", "--json")
    assert shown.returncode == 0
    assert json.loads(shown.stdout)["MenuItem"]["allowed_properties"][0] == "Header"

    parsed = run_cli("parse", str(sample_file), "--db", str(db), "-f", "json")
    assert parsed.returncode == 0
    assert json.loads(parsed.stdout)["nodes"][0]["kind"] == "MenuItem"


@pytest.mark.integration
def test_schema_show_missing_db(tmp_path):
    result = run_cli("schema", "show", "--db", str(tmp_path / "missing.db"))
    assert result.returncode == 1


@pytest.mark.integration
def test_demo_runs():
    result = run_cli("demo")
    assert result.returncode == 0
    assert "## Corrected tree" in result.stdout
    assert "Menu:MainMenu" in result.stdout


@pytest.mark.integration
def test_env_lists_variables():
    result = run_cli("env", "--category", "parser")
    assert result.returncode == 0
    assert "AVML_TAB_WIDTH = 2" in result.stdout
    assert "AVML_SCHEMA_DB" not in result.stdout


@pytest.mark.integration
@pytest.mark.parametrize("command", ["parse", "demo"])
def test_invalid_mode_from_environment(command, sample_file):
    args = [command, str(sample_file)] if command == "parse" else [command]
    result = run_cli(*args, extra_env={"AVML_VALIDATION_MODE": "sloppy"})
    assert result.returncode == 1
    assert "Invalid validation mode" in result.stderr
    assert "Traceback" not in result.stderr

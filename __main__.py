"""CLI entry point for avml.

This module acts as the central entry point for the project's CLI tools.
It delegates commands to the appropriate submodules or runs specific tasks.
"""

import argparse
import json
import logging
import subprocess
import sys
from pathlib import Path

from dotenv import load_dotenv

from avml.config import (
    get_environment,
    get_log_level,
    get_validation_mode,
    list_environment_variables,
)
from avml.core import get_logger, setup_logging
from avml.diagnostics import AVMLError
from avml.output import format_summary, format_tree
from avml.parser import AVMLParser, ParseResult
from avml.schema import SchemaCatalog, designer_source, initialize_schema_db, load_catalog
from avml.validation import ValidationMode

# Load environment variables from .env file
load_dotenv()

logger = get_logger("cli")

MODE_CHOICES = [mode.value for mode in ValidationMode]

DEMO_DOCUMENT = """\
# Sloppy input: tabs, lower-case names, typos, a misplaced attribute
menu: MainMenu
\tChildren:
\t\t- menuitem: File
\t\t\theader: _File
\t\t\tChildren:
\t\t\t\t- MenuIten: New
\t\t\t\t\tHeadr: _New
\t\t\t\t\tInputGesture: Ctrl+N
\t\t\t\t- separator: Sep1
\t\t\t\t- MenuItem: Exit
\t\t\t\t\tHeader: E_xit
\t\t\t\t\tIsEnabled: true
\t\t- MenuItem: Help
\t\t\tHeader: _Help
\t\t\tHint: about
\t\t\t\tToolTip: Show version information
"""


def _render(result: ParseResult, output_format: str) -> str:
    if output_format == "json":
        return json.dumps(result.to_dict(), indent=2)
    if output_format == "records":
        return result.to_json()
    return f"{format_tree(result.tree)}\n\n{format_summary(result)}"


def _write(text: str, output: Path | None) -> None:
    if output:
        output.write_text(text + "\n", encoding="utf-8")
        logger.info(f"Result saved to {output}")
    else:
        print(text)


def _resolve_mode(name: str | None) -> ValidationMode | None:
    """Resolve a mode option, falling back to AVML_VALIDATION_MODE."""
    try:
        return ValidationMode.from_name(name or get_validation_mode())
    except ValueError as e:
        logger.error(f"Invalid validation mode: {e}")
        return None


# =============================================================================
# Parse Command
# =============================================================================


def cmd_parse(args: argparse.Namespace) -> int:
    """Handle the parse command."""
    if args.verbose:
        setup_logging(logging.DEBUG)

    mode = _resolve_mode(args.mode)
    if mode is None:
        return 1

    try:
        catalog = load_catalog(args.db)
        result = AVMLParser(catalog, mode).parse_file(args.file)
    except FileNotFoundError:
        logger.error(f"File not found: {args.file}")
        return 1
    except UnicodeDecodeError as e:
        logger.error(f"Cannot decode {args.file} as UTF-8: {e}")
        return 1
    except AVMLError as e:
        logger.error(f"Parse failed: {e}")
        return 1

    _write(_render(result, args.format), args.output)
    return 0


def handle_parse_command(argv: list[str]) -> int:
    """Handle parse-specific arguments."""
    parser = argparse.ArgumentParser(
        prog="python . parse",
        description="Parse an AVML file into a corrected UI tree",
    )
    parser.add_argument("file", type=Path, help="AVML file to parse")
    parser.add_argument(
        "--db",
        type=Path,
        default=None,
        help="Designer schema database (default: AVML_SCHEMA_DB or built-in)",
    )
    parser.add_argument(
        "--mode",
        "-m",
        type=str,
        default=None,
        choices=MODE_CHOICES,
        help="Validation mode (default: AVML_VALIDATION_MODE)",
    )
    parser.add_argument(
        "--format",
        "-f",
        type=str,
        default="tree",
        choices=["tree", "json", "records"],
        help="Output format (default: tree)",
    )
    parser.add_argument(
        "--output",
        "-o",
        type=Path,
        default=None,
        help="Output file path (prints to stdout if not specified)",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )

    args = parser.parse_args(argv)
    return cmd_parse(args)


# =============================================================================
# Schema Command
# =============================================================================


def cmd_schema_init(args: argparse.Namespace) -> int:
    """Create (and by default seed) a designer schema database."""
    try:
        path = initialize_schema_db(args.db, seed=not args.no_seed)
    except AVMLError as e:
        logger.error(f"Schema init failed: {e}")
        return 1
    logger.info(f"Schema database ready: {path}")
    return 0


def cmd_schema_show(args: argparse.Namespace) -> int:
    """Print the control kinds of a schema catalog."""
    try:
        catalog = load_catalog(args.db)
    except AVMLError as e:
        logger.error(f"Schema load failed: {e}")
        return 1

    kinds = [args.kind] if args.kind else list(catalog)
    missing = [kind for kind in kinds if kind not in catalog]
    if missing:
        logger.error(f"Unknown control kind: {', '.join(missing)}")
        return 1

    if args.json:
        print(json.dumps({kind: catalog[kind].to_dict() for kind in kinds}, indent=2))
        return 0

    for kind in kinds:
        entry = catalog[kind]
        children = "children" if entry.can_have_children else "leaf"
        description = f" - {entry.description}" if entry.description else ""
        print(f"{kind} [{children}]{description}")
        for name in entry.allowed_properties:
            print(f"    {name}")
    return 0


def handle_schema_command(argv: list[str]) -> int:
    """Handle schema-specific commands."""
    parser = argparse.ArgumentParser(
        prog="python . schema",
        description="Manage the designer schema database",
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    init_parser = subparsers.add_parser("init", help="Create a schema database")
    init_parser.add_argument("db", type=Path, help="Database file to create")
    init_parser.add_argument(
        "--no-seed",
        action="store_true",
        help="Create empty tables without the standard designer controls",
    )

    show_parser = subparsers.add_parser("show", help="Show known control kinds")
    show_parser.add_argument(
        "--db",
        type=Path,
        default=None,
        help="Designer schema database (default: AVML_SCHEMA_DB or built-in)",
    )
    show_parser.add_argument("--kind", "-k", type=str, default=None, help="Single kind")
    show_parser.add_argument("--json", action="store_true", help="Output as JSON")

    args = parser.parse_args(argv)

    if args.command == "init":
        return cmd_schema_init(args)
    if args.command == "show":
        return cmd_schema_show(args)

    parser.print_help()
    return 1


# =============================================================================
# Demo Command
# =============================================================================


def handle_demo_command(argv: list[str]) -> int:
    """Parse the bundled sloppy menu against the built-in designer controls."""
    parser = argparse.ArgumentParser(
        prog="python . demo",
        description="Show the forgiving parser correcting a sloppy document",
    )
    parser.add_argument(
        "--mode",
        "-m",
        type=str,
        default=None,
        choices=MODE_CHOICES,
        help="Validation mode (default: AVML_VALIDATION_MODE)",
    )
    args = parser.parse_args(argv)

    mode = _resolve_mode(args.mode)
    if mode is None:
        return 1

    catalog = SchemaCatalog.load(designer_source())
    print("## Input")
    print(DEMO_DOCUMENT.expandtabs(4))

    try:
        result = AVMLParser(catalog, mode).parse(DEMO_DOCUMENT)
    except AVMLError as e:
        logger.error(f"Parse failed: {e}")
        return 1

    print("## Corrected tree")
    print(format_tree(result.tree))
    print()
    print(format_summary(result, limit=20))
    return 0


# =============================================================================
# Env Command
# =============================================================================


def handle_env_command(argv: list[str]) -> int:
    """List configuration variables with their current values."""
    parser = argparse.ArgumentParser(
        prog="python . env",
        description="Show AVML_* configuration",
    )
    parser.add_argument(
        "--category",
        "-c",
        type=str,
        default=None,
        choices=["schema", "parser", "logging"],
        help="Only show one category",
    )
    args = parser.parse_args(argv)

    for var in list_environment_variables(args.category):
        config = var.value
        print(f"{config.name} = {get_environment(var)!s}")
        print(f"    [{config.category}] {config.description}")
    return 0


# =============================================================================
# Test Command
# =============================================================================


def cmd_test(extra_args: list[str]) -> int:
    """Run pytest with provided arguments and test tier options.

    Usage:
        python . test                # Run all tests
        python . test --unit         # Run only unit tests
        python . test --integration  # Run integration tests (CLI, file system)
        python . test -v             # Run with verbose output
        python . test -k "strict"    # Run tests matching pattern
    """
    tier_markers = {
        "--unit": ["-m", "unit"],
        "--integration": ["-m", "integration"],
        "--all": [],
    }

    pytest_args: list[str] = []
    remaining_args: list[str] = []

    for arg in extra_args:
        if arg in tier_markers:
            pytest_args.extend(tier_markers[arg])
        else:
            remaining_args.append(arg)

    cmd = [sys.executable, "-m", "pytest", *pytest_args, *remaining_args]
    logger.info(f"Running: {' '.join(cmd)}")

    try:
        return subprocess.call(cmd)
    except KeyboardInterrupt:
        return 130


# =============================================================================
# Main
# =============================================================================


def show_help() -> None:
    """Display CLI help message."""
    print("Usage: python . {command} [args]")
    print("\n=== Parsing ===")
    print("  parse      Parse an AVML file into a corrected UI tree")
    print("  demo       Parse a bundled sloppy sample")
    print("\n=== Schema ===")
    print("  schema     Create or inspect the designer schema database")
    print("  env        Show AVML_* configuration")
    print("\n=== Development ===")
    print("  test       Run the test suite")
    print("\nExamples:")
    print("  python . parse menu.avml                   # Tree plus summary")
    print("  python . parse menu.avml --mode strict     # Fail on first mismatch")
    print("  python . parse menu.avml -f records -o out.json")
    print("  python . schema init designer.db           # Seeded schema database")
    print("  python . schema show --kind MenuItem")
    print("  python . test --unit")


def main() -> int:
    """Main entry point for the CLI."""
    if len(sys.argv) < 2:
        show_help()
        return 1

    command = sys.argv[1]
    rest_args = sys.argv[2:]

    if command in ("-h", "--help"):
        show_help()
        return 0

    commands = {
        "parse": lambda: handle_parse_command(rest_args),
        "schema": lambda: handle_schema_command(rest_args),
        "demo": lambda: handle_demo_command(rest_args),
        "env": lambda: handle_env_command(rest_args),
        "test": lambda: cmd_test(rest_args),
    }

    if command in commands:
        setup_logging(get_log_level())
        return commands[command]()

    logger.error(f"Unknown command: {command}")
    show_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())

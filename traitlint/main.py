#!/usr/bin/env python3
"""traitlint/main.py — CLI entry-point for traitlint.

Usage examples
--------------
    # Lint one or more item dumps written by the compiler front end
    traitlint check target/lib.items

    # Deny a lint (its findings become errors) and emit JSON lines
    traitlint check target/lib.items -D partialeq_ne_impl --format json

    # Allow a lint for this run
    traitlint check target/lib.items -A partialeq_ne_impl

    # List registered lints with their default level
    traitlint lints

    # Show version and exit
    traitlint --version

Exit codes
----------
    0   Success (no error-severity diagnostics).
    1   One or more diagnostics with severity ERROR were emitted.
    2   Infrastructure failure (bad dump, missing lang item, ...).

The module doubles as ``python -m traitlint`` via the companion
``traitlint/__main__.py``.
"""

from __future__ import annotations

import argparse
import logging
import sys
import textwrap
from pathlib import Path
from typing import List, Optional, Sequence, TextIO

from traitlint import __version__
from traitlint.checkers import (
    CheckerRunner,
    CheckerRunResults,
    LintConfig,
    SuppressionManager,
    default_registry,
)
from traitlint.dump import load_dump
from traitlint.errors import DumpError, FatalError
from traitlint.hir import CompilationUnit

_log = logging.getLogger("traitlint")

# Exit codes ----------------------------------------------------------------

EXIT_OK: int = 0
EXIT_ERROR: int = 1
EXIT_INFRA: int = 2


# ===========================================================================
# Utility helpers
# ===========================================================================

def _configure_logging(verbosity: int) -> None:
    """Set up the ``traitlint`` logger.

    Parameters
    ----------
    verbosity:
        0 → WARNING, 1 → INFO, 2+ → DEBUG.
    """
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s [%(levelname)-5.5s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    root = logging.getLogger("traitlint")
    root.setLevel(level)
    for old in list(root.handlers):
        root.removeHandler(old)
    root.addHandler(handler)


def _open_output(dest: Optional[str]) -> TextIO:
    """Return a writable text stream.

    *dest* ``None`` or ``"-"`` → ``sys.stdout``; otherwise open the path
    for writing (creating parent directories as needed).
    """
    if dest is None or dest == "-":
        return sys.stdout
    p = Path(dest).expanduser().resolve()
    p.parent.mkdir(parents=True, exist_ok=True)
    return open(p, "w", encoding="utf-8")


def _emit_results(results: CheckerRunResults, fmt: str, stream: TextIO) -> None:
    """Write *results* to *stream* in the chosen format."""
    if fmt == "json":
        for diag in results.diagnostics:
            stream.write(diag.to_json_str() + "\n")
    elif fmt == "gcc":
        for diag in results.diagnostics:
            stream.write(diag.to_gcc_format() + "\n")
    else:
        for diag in results.diagnostics:
            stream.write(diag.to_gcc_format() + "\n")
        stream.write(results.summary() + "\n")


# ===========================================================================
# Sub-command implementations
# ===========================================================================

def cmd_check(args: argparse.Namespace) -> int:
    """Run the registered lints over one or more item dumps."""
    units: List[CompilationUnit] = []
    for raw in args.dumps:
        try:
            units.append(load_dump(raw))
        except DumpError as exc:
            _log.error("%s", exc)
            return EXIT_INFRA

    registry = default_registry()
    suppressions = SuppressionManager()
    for lint_id in args.suppress or ():
        suppressions.add_global_suppression(lint_id)
    config = LintConfig.from_flags(
        allow=args.allow or (),
        warn=args.warn or (),
        deny=args.deny or (),
    )
    runner = CheckerRunner(registry, suppressions=suppressions, config=config)

    try:
        results = runner.run_all(units, lints=args.lints)
    except FatalError as exc:
        _log.error("analysis aborted: %s", exc)
        return EXIT_INFRA

    _log.info(
        "%d unit(s) checked: %d diagnostic(s)", len(units), results.total_count
    )

    out = _open_output(args.output)
    try:
        _emit_results(results, args.format, out)
    finally:
        if out is not sys.stdout:
            out.close()

    return EXIT_ERROR if results.error_count > 0 else EXIT_OK


def cmd_lints(args: argparse.Namespace) -> int:
    """List the registered lints."""
    registry = default_registry()
    out = _open_output(args.output)
    try:
        for name in registry.names:
            reg = registry.get_by_name(name)
            out.write(f"  {name:25s} {reg.default_level.value:6s} {reg.description}\n")
            if args.explain and reg.explanation:
                out.write(textwrap.indent(textwrap.fill(reg.explanation, 64), " " * 29))
                out.write("\n")
        out.write(f"\n{len(registry)} lint(s) available.\n")
    finally:
        if out is not sys.stdout:
            out.close()
    return EXIT_OK


# ===========================================================================
# Argument parser construction
# ===========================================================================

def _build_parser() -> argparse.ArgumentParser:
    """Construct the full CLI argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="traitlint",
        description="traitlint — trait implementation lints over resolved item dumps.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""\
            examples:
              traitlint check target/lib.items
              traitlint check target/*.items -D partialeq_ne_impl -f json
              traitlint lints --explain
        """),
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v info, -vv debug).",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        title="commands",
        metavar="<command>",
    )

    def _add_output_args(p: argparse.ArgumentParser) -> None:
        p.add_argument(
            "-o", "--output",
            default=None,
            metavar="FILE",
            help='Output file ("-" or omit for stdout).',
        )

    # --- check -------------------------------------------------------------
    p_check = subparsers.add_parser(
        "check",
        help="Lint item dumps.",
        description="Parse item dumps and run the registered lints over them.",
    )
    p_check.add_argument("dumps", nargs="+", metavar="DUMP", help="Item dump file(s).")
    _add_output_args(p_check)
    p_check.add_argument(
        "-f", "--format",
        choices=["json", "gcc", "summary"],
        default="gcc",
        help="Output format (default: gcc).",
    )
    g = p_check.add_argument_group("lint levels")
    g.add_argument("-A", "--allow", action="append", metavar="LINT",
                   help="Do not run LINT.")
    g.add_argument("-W", "--warn", action="append", metavar="LINT",
                   help="Report LINT findings as warnings.")
    g.add_argument("-D", "--deny", action="append", metavar="LINT",
                   help="Report LINT findings as errors.")
    p_check.add_argument(
        "--lint", dest="lints", action="append", metavar="LINT", default=None,
        help="Run only LINT (repeatable; default: all registered lints).",
    )
    p_check.add_argument(
        "--suppress", action="append", metavar="LINT", default=None,
        help="Drop every finding of LINT.",
    )
    p_check.set_defaults(func=cmd_check)

    # --- lints -------------------------------------------------------------
    p_lints = subparsers.add_parser("lints", help="List registered lints.")
    _add_output_args(p_lints)
    p_lints.add_argument(
        "--explain", action="store_true",
        help="Also print why each lint exists.",
    )
    p_lints.set_defaults(func=cmd_lints)

    return parser


# ===========================================================================
# Main entry point
# ===========================================================================

def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the traitlint CLI.

    Parameters
    ----------
    argv:
        Command-line arguments.  ``None`` → ``sys.argv[1:]``.

    Returns
    -------
    int
        Exit code (see module docstring for semantics).
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)

    if not hasattr(args, "func"):
        parser.print_help(sys.stderr)
        return EXIT_INFRA

    try:
        return args.func(args)
    except KeyboardInterrupt:
        _log.info("Interrupted by user.")
        return 130


if __name__ == "__main__":
    raise SystemExit(main())

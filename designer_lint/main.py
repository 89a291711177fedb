#!/usr/bin/env python3
"""designer_lint/main.py — CLI entry-point.

Usage examples
--------------
    # Check designer files (directories are searched for *.Designer.cs)
    designer-lint check src/ MainForm.Designer.cs

    # Machine-readable output, four worker threads
    designer-lint check src/ --format json --jobs 4

    # Promote a rule to error, disable another
    designer-lint check src/ --severity InconsistentOrder=error --severity SWFA0001=none

    # Show how a file is split into statements (debugging aid)
    designer-lint parse MainForm.Designer.cs --format sexp

    # List rules
    designer-lint rules

Exit codes
----------
    0   Success (no diagnostics at the failing severity).
    1   Diagnostics with severity ERROR (or WARNING with ``--strict``).
    2   Infrastructure failure (bad configuration, unreadable file, ...).
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence, TextIO

from designer_lint import __version__
from designer_lint.checkers import CheckerRunner, CheckerRunResults
from designer_lint.classifier import classify
from designer_lint.config import LintConfig, find_config, load_config
from designer_lint.diagnostics import RULES, DiagnosticSeverity
from designer_lint.errors import DesignerLintError
from designer_lint.parser import iter_source_files, parse_file
from designer_lint.syntax import dumps_sexp

_log = logging.getLogger("designer_lint")

EXIT_OK: int = 0
EXIT_FINDINGS: int = 1
EXIT_INFRA: int = 2


# ===========================================================================
# Utility helpers
# ===========================================================================

def _configure_logging(verbosity: int) -> None:
    """Set up the ``designer_lint`` logger.

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
    root = logging.getLogger("designer_lint")
    root.setLevel(level)
    root.handlers = [h for h in root.handlers if not getattr(h, "_cli_handler", False)]
    handler._cli_handler = True  # type: ignore[attr-defined]
    root.addHandler(handler)


def _open_output(dest: Optional[str]) -> TextIO:
    """``None`` or ``"-"`` → ``sys.stdout``; otherwise open the path for writing."""
    if dest is None or dest == "-":
        return sys.stdout
    p = Path(dest).expanduser().resolve()
    p.parent.mkdir(parents=True, exist_ok=True)
    return open(p, "w", encoding="utf-8")


def _emit_results(results: CheckerRunResults, fmt: str, stream: TextIO) -> None:
    if fmt == "json":
        for diag in results.diagnostics:
            stream.write(diag.to_json_str() + "\n")
    elif fmt == "gcc":
        for diag in results.diagnostics:
            stream.write(diag.to_gcc_format() + "\n")
    else:
        for diag in results.diagnostics:
            stream.write(str(diag) + "\n")
        stream.write(f"\n--- {results.summary()} ---\n")


def _build_config(args: argparse.Namespace) -> LintConfig:
    if args.config:
        config = load_config(args.config)
    else:
        start = Path(args.paths[0]) if args.paths else Path.cwd()
        found = find_config(start if start.exists() else Path.cwd())
        config = load_config(found) if found else LintConfig()

    for level_spec in args.severity or []:
        rule, sep, level = level_spec.partition("=")
        if not sep:
            raise DesignerLintError(f"--severity expects RULE=LEVEL, got {level_spec!r}")
        config.set_severity(rule, level)
    config.suppress = [*config.suppress, *(args.suppress or [])]
    config = config.with_overrides(
        jobs=args.jobs,
        strict=True if args.strict else None,
        method_names=tuple(args.method) if args.method else None,
    )
    problems = config.validate()
    if problems:
        raise DesignerLintError("; ".join(problems))
    return config


# ===========================================================================
# Sub-command implementations
# ===========================================================================

def cmd_check(args: argparse.Namespace) -> int:
    """Check designer files and report tab order diagnostics."""
    config = _build_config(args)
    files = iter_source_files(args.paths)
    if not files:
        _log.warning("No designer files found in: %s", ", ".join(args.paths))

    runner = CheckerRunner(config=config)
    results = runner.run_files(files, jobs=config.jobs)
    _log.info("Checked %d file(s) in %.1fms", len(files), results.stats.get("elapsed_ms", 0.0))

    out = _open_output(args.output)
    try:
        _emit_results(results, args.format, out)
    finally:
        if out is not sys.stdout:
            out.close()

    if results.failures:
        return EXIT_INFRA
    failing = {DiagnosticSeverity.ERROR}
    if config.strict:
        failing.add(DiagnosticSeverity.WARNING)
    if any(d.severity in failing for d in results.diagnostics):
        return EXIT_FINDINGS
    return EXIT_OK


def cmd_parse(args: argparse.Namespace) -> int:
    """Dump the scopes and statements found in a designer file."""
    parsed = parse_file(args.source_file, tuple(args.method) if args.method else
                        LintConfig().method_names)
    out = _open_output(args.output)
    try:
        if args.format == "sexp":
            for scope in parsed.scopes:
                out.write(dumps_sexp(scope) + "\n")
        elif args.format == "json":
            payload = {
                "file": parsed.file,
                "suppressions": [list(s) for s in parsed.suppressions],
                "scopes": [
                    {
                        "name": scope.name,
                        "statements": [
                            {
                                "line": stmt.loc.line,
                                "column": stmt.loc.column,
                                "kind": type(stmt).__name__,
                                "text": stmt.render(),
                                "op": type(op).__name__ if op is not None else None,
                            }
                            for stmt, op in ((s, classify(s)) for s in scope.statements)
                        ],
                    }
                    for scope in parsed.scopes
                ],
            }
            out.write(json.dumps(payload, indent=2) + "\n")
        else:
            for scope in parsed.scopes:
                out.write(f"{scope.name}:\n")
                for stmt in scope.statements:
                    out.write(f"  {stmt!r}\n")
    finally:
        if out is not sys.stdout:
            out.close()
    return EXIT_OK


def cmd_rules(args: argparse.Namespace) -> int:
    """List the rules this tool reports."""
    for rule in RULES.values():
        print(f"  {rule.code}  {rule.rule_id:22s} {rule.default_severity.value:8s} {rule.title}")
        if args.long:
            print(f"  {'':32s} {rule.help_text}")
    return EXIT_OK


# ===========================================================================
# Argument parser
# ===========================================================================

def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="designer-lint",
        description="Tab order checks for Windows Forms InitializeComponent() code.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity (-v INFO, -vv DEBUG).",
    )
    subparsers = parser.add_subparsers(title="commands", metavar="COMMAND")

    # --- check -------------------------------------------------------------
    p_check = subparsers.add_parser(
        "check",
        help="Check designer files.",
        description="Report controls whose TabIndex disagrees with their attach order.",
    )
    p_check.add_argument("paths", nargs="+", metavar="PATH",
                         help="Designer files or directories to search.")
    p_check.add_argument("-c", "--config", default=None, metavar="FILE",
                         help="JSON configuration file (default: nearest .designer-lint.json).")
    p_check.add_argument("-f", "--format", choices=["json", "gcc", "summary"], default="gcc",
                         help="Diagnostic output format (default: gcc).")
    p_check.add_argument("-s", "--suppress", action="append", metavar="RULE",
                         help="Suppress a rule by identifier or code (repeatable).")
    p_check.add_argument("--severity", action="append", metavar="RULE=LEVEL",
                         help="Override a rule's severity; LEVEL 'none' disables it.")
    p_check.add_argument("-j", "--jobs", type=int, default=None, metavar="N",
                         help="Number of files checked concurrently.")
    p_check.add_argument("--strict", action="store_true",
                         help="Exit with status 1 on warnings too.")
    p_check.add_argument("--method", action="append", metavar="NAME",
                         help="Initialization method name (default: InitializeComponent).")
    p_check.add_argument("-o", "--output", default=None, metavar="FILE",
                         help='Output file ("-" or omit for stdout).')
    p_check.set_defaults(func=cmd_check)

    # --- parse -------------------------------------------------------------
    p_parse = subparsers.add_parser(
        "parse",
        help="Dump the statements of a designer file.",
        description="Show how InitializeComponent() is split and classified.",
    )
    p_parse.add_argument("source_file", metavar="SOURCE", help="Designer source file.")
    p_parse.add_argument("-f", "--format", choices=["sexp", "json", "repr"], default="sexp",
                         help="Output format (default: sexp).")
    p_parse.add_argument("--method", action="append", metavar="NAME",
                         help="Initialization method name (default: InitializeComponent).")
    p_parse.add_argument("-o", "--output", default=None, metavar="FILE",
                         help='Output file ("-" or omit for stdout).')
    p_parse.set_defaults(func=cmd_parse)

    # --- rules -------------------------------------------------------------
    p_rules = subparsers.add_parser("rules", help="List rules.")
    p_rules.add_argument("-l", "--long", action="store_true", help="Include help text.")
    p_rules.set_defaults(func=cmd_rules)

    return parser


# ===========================================================================
# Main entry point
# ===========================================================================

def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the designer-lint CLI and return its exit code."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)

    if not hasattr(args, "func"):
        parser.print_help(sys.stderr)
        return EXIT_INFRA

    try:
        return args.func(args)
    except DesignerLintError as exc:
        _log.error("%s", exc)
        return EXIT_INFRA
    except KeyboardInterrupt:
        _log.info("Interrupted by user.")
        return 130
    except Exception as exc:
        _log.error("Unhandled exception: %s", exc, exc_info=True)
        return EXIT_INFRA


if __name__ == "__main__":
    raise SystemExit(main())

#!/usr/bin/env python3
"""
autolens: lens derivation for frozen dataclasses

Command-line interface for the expander.

Usage:
    autolens expand <module.py> [-o OUT]     Write the expanded module
    autolens plan <module.py> [--json]       Show what would be generated
    autolens check <module.py> <expanded>    Fail if <expanded> is stale
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import textwrap
from pathlib import Path
from typing import Optional

from autolens.diagnostics import Diagnostic
from autolens.expand import ExpansionResult, expand_source
from autolens.frontend import FrontendError


# ============================================================================
# Formatting helpers
# ============================================================================

class C:
    """ANSI colors."""
    BOLD = "\033[1m"
    DIM = "\033[2m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    CYAN = "\033[36m"
    RESET = "\033[0m"

    @staticmethod
    def off():
        C.BOLD = C.DIM = C.RED = C.GREEN = C.YELLOW = C.CYAN = C.RESET = ""


def header(text: str) -> str:
    return f"\n{C.BOLD}{C.CYAN}{'─' * 60}{C.RESET}\n{C.BOLD}  {text}{C.RESET}\n{C.BOLD}{C.CYAN}{'─' * 60}{C.RESET}"


def ok(text: str) -> str:
    return f"  {C.GREEN}✓{C.RESET} {text}"


def warn(text: str) -> str:
    return f"  {C.YELLOW}⚠{C.RESET} {text}"


def fail(text: str) -> str:
    return f"  {C.RED}✗{C.RESET} {text}"


def dim(text: str) -> str:
    return f"{C.DIM}{text}{C.RESET}"


def report(diagnostics: list[Diagnostic]) -> None:
    for d in diagnostics:
        line = d.format()
        print(fail(line) if d.is_error else warn(line), file=sys.stderr)


def run_expansion(path: str) -> ExpansionResult:
    source = Path(path).read_text(encoding="utf-8")
    return expand_source(source, filename=path)


# ============================================================================
# Commands
# ============================================================================

def cmd_expand(args) -> int:
    result = run_expansion(args.file)
    report(result.diagnostics)
    if not result.success:
        print(fail(f"{args.file}: {len(result.errors)} error(s), nothing written"), file=sys.stderr)
        return 1

    if args.output:
        Path(args.output).write_text(result.source, encoding="utf-8")
        print(ok(f"{args.file} → {args.output} ({len(result.plans)} declaration(s))"))
    else:
        sys.stdout.write(result.source)
    return 0


def cmd_plan(args) -> int:
    result = run_expansion(args.file)

    if args.json:
        payload = {
            "file": args.file,
            "plans": [plan.summary() for plan in result.plans],
            "diagnostics": [
                {
                    "severity": d.severity.value,
                    "domain": d.domain,
                    "id": d.id,
                    "message": d.message,
                    "line": d.location.line,
                }
                for d in result.diagnostics
            ],
        }
        print(json.dumps(payload, indent=2))
        return 0 if result.success else 1

    print(header(f"Generation plan: {args.file}"))
    for plan in result.plans:
        decl = plan.declaration
        print(f"\n  {C.BOLD}{decl.path}{C.RESET} {dim(f'line {decl.location.line}')}")
        for f in plan.fields:
            mark = f"{C.GREEN}lens{C.RESET}" if f.is_public else dim("----")
            origin = dim(" (inferred)") if f.inferred else ""
            print(f"    {mark}  {f.access.name.lower():8s} {f.name}: {f.type}{origin}")
        if plan.emits_initializer:
            params = ", ".join(str(p) for p in plan.initializer.parameters)
            print(f"    init  {C.YELLOW}synthesized{C.RESET} _autolens_init({params})")
        else:
            line = plan.reused_initializer.line
            print(f"    init  {C.GREEN}reused{C.RESET} __init__ at line {line}")
        print(f"    registry: {len(plan.lenses)} entr{'y' if len(plan.lenses) == 1 else 'ies'}")

    if result.diagnostics:
        print()
        report(result.diagnostics)
    if not result.plans and not result.diagnostics:
        print(dim("\n  No @autolens declarations found."))
    return 0 if result.success else 1


def cmd_check(args) -> int:
    result = run_expansion(args.file)
    report(result.diagnostics)
    if not result.success:
        return 1

    expanded = Path(args.expanded)
    if not expanded.exists():
        print(fail(f"{expanded} does not exist"))
        return 1
    if expanded.read_text(encoding="utf-8") != result.source:
        print(fail(f"{expanded} is out of date; rerun: autolens expand {args.file} -o {expanded}"))
        return 1
    print(ok(f"{expanded} is up to date"))
    return 0


# ============================================================================
# CLI setup
# ============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="autolens",
        description="autolens: derive lenses for frozen dataclasses",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""
        examples:
          autolens expand models.py -o models_gen.py
          autolens plan models.py --json
          autolens check models.py models_gen.py
        """),
    )
    parser.add_argument("--no-color", action="store_true", help="Disable colored output")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log derivation details")

    sub = parser.add_subparsers(dest="command", help="Command to run")

    # expand
    p = sub.add_parser("expand", help="Write the module with generated members")
    p.add_argument("file", help="Python module to expand")
    p.add_argument("-o", "--output", help="Output file path (default: stdout)")

    # plan
    p = sub.add_parser("plan", help="Show fields, constructor and lenses per declaration")
    p.add_argument("file", help="Python module to analyze")
    p.add_argument("--json", action="store_true", help="Machine-readable output")

    # check
    p = sub.add_parser("check", help="Verify an expanded module is up to date")
    p.add_argument("file", help="Python module with @autolens declarations")
    p.add_argument("expanded", help="Previously expanded module")

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.no_color:
        C.off()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        return 0

    commands = {
        "expand": cmd_expand,
        "plan": cmd_plan,
        "check": cmd_check,
    }

    handler = commands[args.command]
    try:
        return handler(args)
    except FileNotFoundError as e:
        print(fail(f"File not found: {e.filename}"), file=sys.stderr)
        return 1
    except FrontendError as e:
        print(fail(f"Syntax error: {e}"), file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())

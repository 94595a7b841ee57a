"""
autolens Expander

Source-to-source transform: derives every @autolens declaration of a module
and splices the generated members into the class bodies.

Expansion phases:
1. Frontend   → Declarations from the module's syntax tree
2. Derive     → one GenerationPlan (or error diagnostics) per declaration
3. Fields     → inferred members rewritten as annotated dataclass fields
4. Emit       → member source text per plan
5. Splice     → text inserted after the last line of each class body,
                bottom-up so earlier line numbers stay valid
6. Imports    → `from __future__ import annotations` and `import dataclasses`
                when missing, and the runtime names the generated members use

A class whose body already holds the generated-members marker is skipped
with a note, so expanding an expanded module changes nothing.

If any declaration is rejected the module is left untouched: the result
carries the diagnostics and the original source.
"""

from __future__ import annotations

import ast
import logging
from dataclasses import dataclass, field
from typing import Optional

from autolens.derive import GenerationPlan, derive
from autolens.declaration import Declaration
from autolens.diagnostics import Diagnostic, DiagnosticSink, already_expanded
from autolens.emit import MARKER, emit_members
from autolens.frontend import parse_module, parse_tree

logger = logging.getLogger(__name__)

RUNTIME_NAMES = ("FieldRef", "FocusT", "Lens", "LensRegistry")
RUNTIME_IMPORT = f"from autolens import {', '.join(RUNTIME_NAMES)}"
FUTURE_IMPORT = "from __future__ import annotations"
DATACLASSES_IMPORT = "import dataclasses"


@dataclass
class ExpansionResult:
    """The outcome of expanding one module."""
    source: str
    plans: list[GenerationPlan] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not any(d.is_error for d in self.diagnostics)

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.is_error]

    @property
    def warnings(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if not d.is_error]

    def __repr__(self) -> str:
        status = "OK" if self.success else "FAIL"
        return (
            f"<ExpansionResult: {status} plans={len(self.plans)} "
            f"diagnostics={len(self.diagnostics)}>"
        )


def _imported_names(tree: ast.Module, module: str) -> set[str]:
    """Names bound by top-level ``from <module> import ...`` statements."""
    names: set[str] = set()
    for stmt in tree.body:
        if isinstance(stmt, ast.ImportFrom) and stmt.module == module and not stmt.level:
            names.update(alias.name for alias in stmt.names if alias.asname is None)
    return names


def _header_end(tree: ast.Module, lines: list[str]) -> int:
    """Index of the first line after the docstring and __future__ imports.

    With neither present, the index after leading comment lines (shebang,
    encoding cookie, license header).
    """
    end = 0
    for i, stmt in enumerate(tree.body):
        is_docstring = (
            i == 0
            and isinstance(stmt, ast.Expr)
            and isinstance(stmt.value, ast.Constant)
            and isinstance(stmt.value.value, str)
        )
        is_future = isinstance(stmt, ast.ImportFrom) and stmt.module == "__future__"
        if not (is_docstring or is_future):
            break
        end = stmt.end_lineno or stmt.lineno
    if end == 0:
        while end < len(lines) and lines[end].startswith("#"):
            end += 1
    return end


def _imports_dataclasses(tree: ast.Module) -> bool:
    for stmt in tree.body:
        if isinstance(stmt, ast.Import):
            if any(alias.name == "dataclasses" and alias.asname is None for alias in stmt.names):
                return True
    return False


def _import_block(
    tree: ast.Module, lines: list[str], needs_dataclasses: bool = False,
) -> tuple[int, list[str]]:
    """Where to insert the missing imports, and the lines to insert."""
    at = _header_end(tree, lines)
    statements: list[str] = []
    if "annotations" not in _imported_names(tree, "__future__"):
        statements.append(FUTURE_IMPORT)
    if needs_dataclasses and not _imports_dataclasses(tree):
        statements.append(DATACLASSES_IMPORT)
    if not set(RUNTIME_NAMES) <= _imported_names(tree, "autolens"):
        statements.append(RUNTIME_IMPORT)
    if not statements:
        return at, []

    block: list[str] = [""] if at > 0 else []
    for statement in statements:
        block += [statement, ""]
    block.pop()
    if at >= len(lines) or lines[at].strip():
        block.append("")
    return at, block


def _already_expanded(decl: Declaration, lines: list[str]) -> bool:
    """Whether the body of ``decl`` (not a nested class) holds the marker."""
    loc = decl.location
    marker = loc.indent + MARKER
    return any(line == marker for line in lines[loc.line - 1:loc.end_line])


def _field_insertions(tree: ast.Module, plans: list[GenerationPlan]) -> list[tuple[int, int, str]]:
    """(line, byte column, text) insertions turning every inferred member into
    a dataclass field: ``name = "x"`` becomes
    ``name: str = dataclasses.field(default="x", kw_only=True)``.

    Keyword-only fields may precede fields without defaults. Only text is
    inserted, so line numbers stay valid for splicing.
    """
    classes = {node.lineno: node for node in ast.walk(tree) if isinstance(node, ast.ClassDef)}
    insertions: list[tuple[int, int, str]] = []
    for plan in plans:
        inferred = {(f.line, f.name): f for f in plan.fields if f.inferred}
        if not inferred:
            continue
        node = classes[plan.declaration.location.line]
        for stmt in node.body:
            if not (
                isinstance(stmt, ast.Assign)
                and len(stmt.targets) == 1
                and isinstance(stmt.targets[0], ast.Name)
            ):
                continue
            target, value = stmt.targets[0], stmt.value
            f = inferred.get((stmt.lineno, target.id))
            if f is None:
                continue
            insertions += [
                (target.end_lineno, target.end_col_offset, f": {f.type}"),
                (value.lineno, value.col_offset, "dataclasses.field(default="),
                (value.end_lineno, value.end_col_offset, ", kw_only=True)"),
            ]
    return insertions


def _insert(lines: list[str], line: int, col: int, text: str) -> None:
    raw = lines[line - 1].encode("utf-8")
    lines[line - 1] = (raw[:col] + text.encode("utf-8") + raw[col:]).decode("utf-8")


def expand_source(
    source: str,
    filename: str = "<source>",
    sink: Optional[DiagnosticSink] = None,
) -> ExpansionResult:
    """Expand every @autolens declaration in ``source``.

    Raises FrontendError when ``source`` is not valid Python.
    """
    tree = parse_tree(source, filename)
    declarations = parse_module(source, filename)
    result = ExpansionResult(source=source)

    lines = source.splitlines()
    for decl in declarations:
        if _already_expanded(decl, lines):
            diagnostic = already_expanded(decl)
            result.diagnostics.append(diagnostic)
            if sink is not None:
                sink.emit(diagnostic)
            logger.info("%s:%d: %s already expanded, skipped", filename, decl.location.line, decl.path)
            continue
        derived = derive(decl, sink)
        result.diagnostics += derived.diagnostics
        if derived.plan is not None:
            result.plans.append(derived.plan)

    if not result.success or not result.plans:
        return result

    insertions = _field_insertions(tree, result.plans)
    for line, col, text in sorted(insertions, reverse=True):
        _insert(lines, line, col, text)

    # Bottom-up; on a shared last line the enclosing class goes first so the
    # nested class's members end up directly after its own body.
    ordered = sorted(
        result.plans,
        key=lambda p: (-p.declaration.location.end_line, p.declaration.location.line),
    )
    for plan in ordered:
        loc = plan.declaration.location
        members = emit_members(plan, indent=loc.indent).rstrip("\n").split("\n")
        lines[loc.end_line:loc.end_line] = members
        logger.info(
            "%s:%d: expanded %s (%d lens(es), initializer %s)",
            filename, loc.line, plan.declaration.path, len(plan.lenses),
            "synthesized" if plan.emits_initializer else "reused",
        )

    at, block = _import_block(tree, lines, needs_dataclasses=bool(insertions))
    lines[at:at] = block

    result.source = "\n".join(lines) + "\n"
    return result

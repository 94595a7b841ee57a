"""
autolens Frontend

Reads Python source and builds a Declaration for every definition decorated
with @autolens.

    @autolens
    @dataclass(frozen=True)
    class Person:
        __public__ = ("name", "active")

        name = "Anonymous"        # type inferred from the literal: str
        age: int                  # no modifier: private
        active: bool

Visibility modifiers are declared in the class body with the tuples
__public__, __internal__ and __private__. A field listed in none of them
is private.
"""

from __future__ import annotations

import ast
from typing import Iterator, Optional, Union

from autolens.declaration import (
    Binding,
    Declaration,
    DeclKind,
    Expression,
    ExprKind,
    Initializer,
    Location,
    Member,
    Parameter,
    ParamKind,
)

DECORATOR = "autolens"

ENUM_BASES = {"Enum", "IntEnum", "StrEnum", "Flag", "IntFlag", "ReprEnum"}
PROTOCOL_BASES = {"Protocol"}

# Class-body tuples carrying visibility modifiers, in lookup order
MODIFIER_TUPLES = {
    "__public__": "public",
    "__internal__": "internal",
    "__private__": "private",
}

DefNode = Union[ast.ClassDef, ast.FunctionDef, ast.AsyncFunctionDef]


class FrontendError(Exception):
    def __init__(self, message: str, filename: str = "<source>", line: int = 0):
        super().__init__(f"{filename}:{line}: {message}")
        self.filename = filename
        self.line = line


# ============================================================================
# Helpers
# ============================================================================

def _dotted_tail(node: ast.expr) -> Optional[str]:
    """Last component of a name, attribute or subscripted generic."""
    if isinstance(node, ast.Subscript):
        node = node.value
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Attribute):
        return node.attr
    return None


def _is_dunder(name: str) -> bool:
    return name.startswith("__") and name.endswith("__")


def is_autolens_decorator(node: ast.expr) -> bool:
    if isinstance(node, ast.Call):
        node = node.func
    return _dotted_tail(node) == DECORATOR


def _is_frozen_dataclass(node: ast.expr) -> bool:
    if not isinstance(node, ast.Call) or _dotted_tail(node.func) != "dataclass":
        return False
    for kw in node.keywords:
        if kw.arg == "frozen" and isinstance(kw.value, ast.Constant):
            return kw.value.value is True
    return False


def classify(node: DefNode) -> DeclKind:
    if not isinstance(node, ast.ClassDef):
        return DeclKind.FUNCTION
    bases = {_dotted_tail(base) for base in node.bases}
    if bases & ENUM_BASES:
        return DeclKind.ENUM
    if bases & PROTOCOL_BASES:
        return DeclKind.PROTOCOL
    if any(_is_frozen_dataclass(dec) for dec in node.decorator_list):
        return DeclKind.STRUCT
    return DeclKind.CLASS


def classify_expression(node: ast.expr) -> Expression:
    text = ast.unparse(node)
    value = node
    if (
        isinstance(node, ast.UnaryOp)
        and isinstance(node.op, (ast.USub, ast.UAdd))
        and isinstance(node.operand, ast.Constant)
    ):
        value = node.operand
        if isinstance(value.value, bool):
            return Expression(ExprKind.OTHER, text)
    if isinstance(value, ast.Constant):
        v = value.value
        if isinstance(v, bool):
            return Expression(ExprKind.BOOLEAN, text)
        if isinstance(v, int):
            return Expression(ExprKind.INTEGER, text)
        if isinstance(v, float):
            return Expression(ExprKind.FLOAT, text)
        if isinstance(v, str) and value is node:
            return Expression(ExprKind.STRING, text)
    return Expression(ExprKind.OTHER, text)


def _is_class_var(annotation: ast.expr) -> bool:
    return _dotted_tail(annotation) == "ClassVar"


def _string_items(node: ast.expr) -> list[str]:
    if isinstance(node, ast.Constant) and isinstance(node.value, str):
        return [node.value]
    if isinstance(node, (ast.Tuple, ast.List, ast.Set)):
        return [
            elt.value for elt in node.elts
            if isinstance(elt, ast.Constant) and isinstance(elt.value, str)
        ]
    return []


# ============================================================================
# Members
# ============================================================================

def collect_modifiers(body: list[ast.stmt]) -> dict[str, tuple[str, ...]]:
    """Field name → modifiers, from the __public__/__internal__/__private__ tuples."""
    modifiers: dict[str, list[str]] = {}
    for stmt in body:
        if isinstance(stmt, ast.Assign):
            targets, value = stmt.targets, stmt.value
        elif isinstance(stmt, ast.AnnAssign) and stmt.value is not None:
            targets, value = [stmt.target], stmt.value
        else:
            continue
        for target in targets:
            if isinstance(target, ast.Name) and target.id in MODIFIER_TUPLES:
                for name in _string_items(value):
                    modifiers.setdefault(name, []).append(MODIFIER_TUPLES[target.id])
    return {name: tuple(mods) for name, mods in modifiers.items()}


def _binding(target: ast.expr) -> Binding:
    if isinstance(target, ast.Name):
        return Binding(target.id)
    return Binding(ast.unparse(target), is_identifier=False)


def collect_members(body: list[ast.stmt]) -> list[Member]:
    modifiers = collect_modifiers(body)
    members: list[Member] = []

    for stmt in body:
        if isinstance(stmt, ast.AnnAssign):
            if not isinstance(stmt.target, ast.Name) or _is_dunder(stmt.target.id):
                continue
            name = stmt.target.id
            members.append(Member(
                bindings=(Binding(name),),
                annotation=ast.unparse(stmt.annotation),
                value=classify_expression(stmt.value) if stmt.value is not None else None,
                modifiers=modifiers.get(name, ()),
                is_static=_is_class_var(stmt.annotation),
                line=stmt.lineno,
            ))
        elif isinstance(stmt, ast.Assign):
            bindings = tuple(_binding(t) for t in stmt.targets)
            if any(b.is_identifier and _is_dunder(b.text) for b in bindings):
                continue
            first = bindings[0].text if bindings[0].is_identifier else ""
            members.append(Member(
                bindings=bindings,
                value=classify_expression(stmt.value),
                modifiers=modifiers.get(first, ()),
                line=stmt.lineno,
            ))

    return members


def collect_initializers(body: list[ast.stmt]) -> list[Initializer]:
    inits: list[Initializer] = []
    for stmt in body:
        if not isinstance(stmt, ast.FunctionDef) or stmt.name != "__init__":
            continue
        args = stmt.args
        positional = [(arg, ParamKind.POSITIONAL_ONLY) for arg in args.posonlyargs]
        positional += [(arg, ParamKind.POSITIONAL_OR_KEYWORD) for arg in args.args]
        params: list[Parameter] = []
        for arg, kind in positional[1:]:  # drop self
            params.append(_parameter(arg.arg, arg.annotation, kind))
        if args.vararg is not None:
            params.append(_parameter(
                "*" + args.vararg.arg, args.vararg.annotation, ParamKind.VAR_POSITIONAL,
            ))
        for arg in args.kwonlyargs:
            params.append(_parameter(arg.arg, arg.annotation, ParamKind.KEYWORD_ONLY))
        if args.kwarg is not None:
            params.append(_parameter(
                "**" + args.kwarg.arg, args.kwarg.annotation, ParamKind.VAR_KEYWORD,
            ))
        inits.append(Initializer(parameters=tuple(params), line=stmt.lineno))
    return inits


def _parameter(name: str, annotation: Optional[ast.expr], kind: ParamKind) -> Parameter:
    return Parameter(name, ast.unparse(annotation) if annotation is not None else "", kind)


# ============================================================================
# Module walk
# ============================================================================

def _walk(body: list[ast.stmt], prefix: str) -> Iterator[tuple[DefNode, str]]:
    for stmt in body:
        if isinstance(stmt, (ast.ClassDef, ast.FunctionDef, ast.AsyncFunctionDef)):
            qualname = f"{prefix}.{stmt.name}" if prefix else stmt.name
            if any(is_autolens_decorator(dec) for dec in stmt.decorator_list):
                yield stmt, qualname
            if isinstance(stmt, ast.ClassDef):
                yield from _walk(stmt.body, qualname)


def _body_indent(node: DefNode, lines: list[str], filename: str) -> str:
    first = node.body[0]
    if first.lineno == node.lineno:
        raise FrontendError(
            f"body of '{node.name}' must start on its own line", filename, node.lineno,
        )
    text = lines[first.lineno - 1] if first.lineno <= len(lines) else ""
    return text[: len(text) - len(text.lstrip())]


def build_declaration(
    node: DefNode,
    qualname: str,
    filename: str = "<source>",
    lines: Optional[list[str]] = None,
) -> Declaration:
    kind = classify(node)
    if lines is not None:
        indent = _body_indent(node, lines, filename)
    else:
        indent = " " * (node.col_offset + 4)
    location = Location(
        filename=filename,
        line=node.lineno,
        end_line=node.end_lineno or node.lineno,
        col=node.col_offset,
        indent=indent,
    )
    if not isinstance(node, ast.ClassDef):
        return Declaration(kind=kind, name=node.name, qualname=qualname, location=location)
    return Declaration(
        kind=kind,
        name=node.name,
        members=tuple(collect_members(node.body)),
        initializers=tuple(collect_initializers(node.body)),
        qualname=qualname,
        location=location,
    )


def parse_tree(source: str, filename: str = "<source>") -> ast.Module:
    try:
        return ast.parse(source, filename=filename)
    except SyntaxError as e:
        raise FrontendError(e.msg, filename, e.lineno or 0) from e


def parse_module(source: str, filename: str = "<source>") -> list[Declaration]:
    """Every @autolens declaration in ``source``, in source order."""
    tree = parse_tree(source, filename)
    lines = source.splitlines()
    return [
        build_declaration(node, qualname, filename, lines)
        for node, qualname in _walk(tree.body, "")
    ]

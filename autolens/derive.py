"""
autolens Derivation Engine

Turns a Declaration into a GenerationPlan: the list of fields a lens can be
generated for, the constructor every lens setter calls, and the lenses
themselves. This is a pure function of the declaration; emitting source text
from the plan is the job of autolens.emit.

Derivation phases:
1. Field extraction      → stored single-binding members with a known type
2. Constructor           → canonical full-field signature, reconciled with
                           the initializers the author already wrote
3. Lens synthesis        → one lens per public field, setter built on the
                           usable constructor
4. Registry              → the public fields, in declaration order

A declaration that is not a product type is rejected with one error
diagnostic and no plan. A field whose type cannot be resolved is dropped
from the plan and reported as a warning; the rest of the plan is still
produced.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from autolens.declaration import (
    Access,
    Declaration,
    Expression,
    ExprKind,
    Initializer,
    Member,
    Parameter,
)
from autolens.diagnostics import (
    Diagnostic,
    DiagnosticCollector,
    DiagnosticSink,
    type_is_not_struct,
    unresolved_field_type,
)

logger = logging.getLogger(__name__)

# Name of the synthesized non-public constructor.
INIT_NAME = "_autolens_init"

LITERAL_TYPES = {
    ExprKind.BOOLEAN: "bool",
    ExprKind.FLOAT: "float",
    ExprKind.INTEGER: "int",
    ExprKind.STRING: "str",
}


# ============================================================================
# Plan
# ============================================================================

@dataclass(frozen=True)
class Field:
    """A stored field a lens or constructor parameter is generated for."""
    name: str
    type: str
    access: Access
    inferred: bool = False
    line: int = 0

    @property
    def is_public(self) -> bool:
        return self.access is Access.PUBLIC

    def __repr__(self) -> str:
        origin = " (inferred)" if self.inferred else ""
        return f"<Field {self.access.name.lower()} {self.name}: {self.type}{origin}>"


@dataclass(frozen=True)
class LensPlan:
    """One generated lens: the field it focuses and the constructor call its
    setter makes, as ordered (parameter, argument expression) pairs."""
    field: Field
    arguments: tuple[tuple[str, str], ...]


@dataclass(frozen=True)
class GenerationPlan:
    declaration: Declaration
    fields: tuple[Field, ...]
    # Canonical signature: every field, in declaration order
    initializer: Initializer
    # The author's initializer with an identical signature, if any
    reused_initializer: Optional[Initializer]
    lenses: tuple[LensPlan, ...]

    @property
    def emits_initializer(self) -> bool:
        return self.reused_initializer is None

    @property
    def constructor(self) -> str:
        """Expression that calls the usable constructor."""
        path = self.declaration.path
        return path if self.reused_initializer is not None else f"{path}.{INIT_NAME}"

    @property
    def public_fields(self) -> tuple[Field, ...]:
        return tuple(f for f in self.fields if f.is_public)

    def summary(self) -> dict:
        return {
            "declaration": self.declaration.path,
            "fields": [
                {
                    "name": f.name,
                    "type": f.type,
                    "access": f.access.name.lower(),
                    "inferred": f.inferred,
                }
                for f in self.fields
            ],
            "initializer": "reused" if self.reused_initializer is not None else "synthesized",
            "lenses": [lens.field.name for lens in self.lenses],
        }


@dataclass
class DerivationResult:
    plan: Optional[GenerationPlan]
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.plan is not None and not any(d.is_error for d in self.diagnostics)


# ============================================================================
# Phase 1: Field extraction
# ============================================================================

def literal_type(expr: Optional[Expression]) -> Optional[str]:
    """Canonical type of a literal initializer, or None."""
    if expr is None:
        return None
    return LITERAL_TYPES.get(expr.kind)


def resolve_type(member: Member) -> tuple[Optional[str], bool]:
    """Explicit annotation first, then literal inference.

    Returns (type, inferred).
    """
    if member.annotation:
        return member.annotation, False
    inferred = literal_type(member.value)
    return inferred, inferred is not None


def extract_fields(decl: Declaration, sink: Optional[DiagnosticSink] = None) -> list[Field]:
    """Stored fields of ``decl`` in declaration order.

    Members binding more than one name, static members and members whose
    type cannot be resolved are skipped. Visibility defaults to private.
    """
    fields: list[Field] = []
    for member in decl.members:
        if member.is_static:
            continue
        name = member.identifier
        if name is None:
            logger.debug(
                "%s: skipping member with bindings %s",
                decl.path, [b.text for b in member.bindings],
            )
            continue
        type_, inferred = resolve_type(member)
        if type_ is None:
            logger.debug("%s.%s: type unresolved, skipped", decl.path, name)
            if sink is not None:
                sink.emit(unresolved_field_type(decl, name, member.line))
            continue
        access = Access.from_modifiers(member.modifiers)
        if access is None:
            access = Access.PRIVATE
        fields.append(Field(
            name=name, type=type_, access=access, inferred=inferred, line=member.line,
        ))
        logger.debug("%s.%s: %s %s", decl.path, name, access.name.lower(), type_)
    return fields


# ============================================================================
# Phase 2: Constructor reconciliation
# ============================================================================

def canonical_initializer(fields: list[Field]) -> Initializer:
    return Initializer(parameters=tuple(Parameter(f.name, f.type) for f in fields))


def reconcile_initializer(decl: Declaration, canonical: Initializer) -> Optional[Initializer]:
    """The first author initializer whose signature matches ``canonical``.

    Generated setters call the constructor with keyword arguments, so an
    initializer with positional-only parameters is never reused.
    """
    for existing in decl.initializers:
        if not existing.is_same_as(canonical):
            continue
        if existing.accepts_keywords:
            return existing
        logger.debug(
            "%s: initializer at line %d matches but takes positional-only arguments",
            decl.path, existing.line,
        )
    return None


# ============================================================================
# Phase 3: Lens synthesis
# ============================================================================

def lens_arguments(target: Field, initializer: Initializer) -> tuple[tuple[str, str], ...]:
    """Constructor arguments for the setter of ``target``'s lens: the new value
    for the focused field, the current value for every other parameter."""
    return tuple(
        (name, "target" if name == target.name else f"whole.{name}")
        for name in initializer.names
    )


# ============================================================================
# Entry point
# ============================================================================

def derive(decl: Declaration, sink: Optional[DiagnosticSink] = None) -> DerivationResult:
    """Derive the generation plan for ``decl``."""
    collector = DiagnosticCollector()

    if not decl.kind.is_product_type:
        diagnostic = type_is_not_struct(decl)
        collector.emit(diagnostic)
        if sink is not None:
            sink.emit(diagnostic)
        logger.debug("%s: rejected, %s is not a product type", decl.path, decl.kind.value)
        return DerivationResult(plan=None, diagnostics=collector.diagnostics)

    fields = extract_fields(decl, collector)

    canonical = canonical_initializer(fields)
    reused = reconcile_initializer(decl, canonical)
    if reused is not None:
        logger.debug("%s: reusing initializer at line %d", decl.path, reused.line)
    else:
        logger.debug("%s: synthesizing %s%r", decl.path, INIT_NAME, canonical)

    lenses = tuple(
        LensPlan(field=f, arguments=lens_arguments(f, reused or canonical))
        for f in fields
        if f.is_public
    )

    if sink is not None:
        for diagnostic in collector.diagnostics:
            sink.emit(diagnostic)

    plan = GenerationPlan(
        declaration=decl,
        fields=tuple(fields),
        initializer=canonical,
        reused_initializer=reused,
        lenses=lenses,
    )
    return DerivationResult(plan=plan, diagnostics=collector.diagnostics)

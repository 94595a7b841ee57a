"""
autolens Diagnostics

Author-facing messages produced while deriving lenses. The derivation engine
never raises for a bad declaration: it reports through a DiagnosticSink and
yields no output for that declaration.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

from autolens.declaration import Declaration, Location

DOMAIN = "AutoLensDiagnostic"


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"
    NOTE = "note"


@dataclass(frozen=True)
class Diagnostic:
    severity: Severity
    domain: str
    id: str
    message: str
    location: Location = field(default_factory=Location)

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR

    def format(self) -> str:
        loc = self.location
        return f"{loc.filename}:{loc.line}: {self.severity.value}: {self.message} [{self.id}]"

    def __repr__(self) -> str:
        return f"<Diagnostic {self.severity.value} {self.domain}/{self.id}: {self.message}>"


class DiagnosticSink(Protocol):
    def emit(self, diagnostic: Diagnostic) -> None: ...


class DiagnosticCollector:
    """Sink that keeps every diagnostic in arrival order."""

    def __init__(self) -> None:
        self.diagnostics: list[Diagnostic] = []

    def emit(self, diagnostic: Diagnostic) -> None:
        self.diagnostics.append(diagnostic)

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.is_error]

    @property
    def has_errors(self) -> bool:
        return any(d.is_error for d in self.diagnostics)

    def __len__(self) -> int:
        return len(self.diagnostics)


# ============================================================================
# Messages
# ============================================================================

def type_is_not_struct(decl: Declaration) -> Diagnostic:
    return Diagnostic(
        severity=Severity.ERROR,
        domain=DOMAIN,
        id="typeIsNotStruct",
        message=(
            f"@autolens cannot be applied to {decl.kind.value} '{decl.name}'; "
            f"it only applies to frozen dataclasses"
        ),
        location=decl.location,
    )


def unresolved_field_type(decl: Declaration, name: str, line: int) -> Diagnostic:
    loc = decl.location
    return Diagnostic(
        severity=Severity.WARNING,
        domain=DOMAIN,
        id="unresolvedFieldType",
        message=(
            f"cannot infer the type of '{decl.name}.{name}'; it gets no lens and "
            f"is left out of the generated constructor (add an annotation)"
        ),
        location=Location(filename=loc.filename, line=line or loc.line, col=loc.col),
    )


def already_expanded(decl: Declaration) -> Diagnostic:
    return Diagnostic(
        severity=Severity.NOTE,
        domain=DOMAIN,
        id="alreadyExpanded",
        message=f"'{decl.path}' already carries generated members; left as is",
        location=decl.location,
    )

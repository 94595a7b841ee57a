"""
autolens Declaration Model

The language-neutral description of a type declaration that the derivation
engine consumes. The frontend builds it from Python source; tests can build
it directly.

A Declaration exposes:
- kind: what sort of declaration it is (only STRUCT is a product type)
- members: ordered stored members, each with bindings, an optional type
  annotation, an optional initializer expression and visibility modifiers
- initializers: the constructors the author already wrote, each with an
  ordered (name, type) parameter list
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum, auto
from typing import Iterable, Optional


class DeclKind(Enum):
    STRUCT = "struct"       # frozen dataclass
    CLASS = "class"         # mutable reference type
    ENUM = "enum"           # tagged union
    PROTOCOL = "protocol"
    FUNCTION = "function"

    @property
    def is_product_type(self) -> bool:
        return self is DeclKind.STRUCT


class Access(IntEnum):
    """Visibility tier, ordered private < internal < public."""
    PRIVATE = 0
    INTERNAL = 1
    PUBLIC = 2

    @classmethod
    def from_modifiers(cls, modifiers: Iterable[str]) -> Optional[Access]:
        """The first visibility modifier in ``modifiers``, or None."""
        for modifier in modifiers:
            try:
                return cls[modifier.upper()]
            except KeyError:
                continue
        return None


class ExprKind(Enum):
    BOOLEAN = auto()
    FLOAT = auto()
    INTEGER = auto()
    STRING = auto()
    OTHER = auto()


@dataclass(frozen=True)
class Expression:
    """An initializer expression: its literal kind and source text."""
    kind: ExprKind
    text: str


@dataclass(frozen=True)
class Binding:
    """One binding pattern of a member (``x`` or ``(a, b)``)."""
    text: str
    is_identifier: bool = True


@dataclass(frozen=True)
class Member:
    """A stored member of a declaration."""
    bindings: tuple[Binding, ...]
    annotation: Optional[str] = None
    value: Optional[Expression] = None
    modifiers: tuple[str, ...] = ()
    is_static: bool = False
    line: int = 0

    @property
    def identifier(self) -> Optional[str]:
        """The bound name when the member binds exactly one identifier."""
        if len(self.bindings) != 1 or not self.bindings[0].is_identifier:
            return None
        return self.bindings[0].text


class ParamKind(Enum):
    POSITIONAL_ONLY = "positional-only"
    POSITIONAL_OR_KEYWORD = "positional-or-keyword"
    VAR_POSITIONAL = "var-positional"
    KEYWORD_ONLY = "keyword-only"
    VAR_KEYWORD = "var-keyword"

    @property
    def by_keyword(self) -> bool:
        """Whether an argument for this parameter can be passed as name=value."""
        return self in (ParamKind.POSITIONAL_OR_KEYWORD, ParamKind.KEYWORD_ONLY)


@dataclass(frozen=True)
class Parameter:
    name: str
    type: str
    kind: ParamKind = ParamKind.POSITIONAL_OR_KEYWORD

    def __str__(self) -> str:
        return f"{self.name}: {self.type}" if self.type else self.name


@dataclass(frozen=True)
class Initializer:
    """A constructor signature: ordered (name, type) parameters."""
    parameters: tuple[Parameter, ...]
    line: int = 0

    @property
    def names(self) -> list[str]:
        return [p.name for p in self.parameters]

    @property
    def accepts_keywords(self) -> bool:
        """Whether every parameter can be passed by keyword."""
        return all(p.kind.by_keyword for p in self.parameters)

    def is_same_as(self, other: Initializer) -> bool:
        """Same length and the same (name, type) pairs in the same order."""
        if len(self.parameters) != len(other.parameters):
            return False
        return (
            [(p.name, p.type) for p in self.parameters]
            == [(p.name, p.type) for p in other.parameters]
        )

    def __repr__(self) -> str:
        return f"<Initializer ({', '.join(str(p) for p in self.parameters)})>"


@dataclass(frozen=True)
class Location:
    """Where a declaration sits in its source file."""
    filename: str = "<source>"
    line: int = 0
    end_line: int = 0
    col: int = 0
    # Leading whitespace of the first statement in the body
    indent: str = "    "


@dataclass(frozen=True)
class Declaration:
    kind: DeclKind
    name: str
    members: tuple[Member, ...] = ()
    initializers: tuple[Initializer, ...] = ()
    # Dotted path from module scope, e.g. "Outer.Person"
    qualname: str = ""
    location: Location = field(default_factory=Location)

    @property
    def path(self) -> str:
        return self.qualname or self.name

    def __repr__(self) -> str:
        return (
            f"<Declaration {self.kind.value} {self.path} "
            f"members={len(self.members)} inits={len(self.initializers)}>"
        )

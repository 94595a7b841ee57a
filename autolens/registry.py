"""
autolens Field Registry

Maps a field reference to the lens generated for that field.

A FieldRef is an identity token for one field of one structure type. Its two
type parameters are phantom: they never exist at runtime, but they let a type
checker carry the field's type from the token to the lens it looks up, so

    Person.lens(Person.Fields.name)        # Lens[Person, str]

needs no cast. Registries are built once by generated code and are read-only
afterwards; concurrent lookups need no locking.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Generic, Iterator, Mapping, TypeVar

from autolens.lens import Lens

S = TypeVar("S")
T = TypeVar("T")

# Type variable used in the signature of the generated ``lens`` accessor.
FocusT = TypeVar("FocusT")


class UnknownFieldError(KeyError):
    """No lens is registered for a field reference."""
    def __init__(self, owner: str, ref: FieldRef[Any, Any]):
        super().__init__(f"{owner} has no lens for field {ref.path}")
        self.owner = owner
        self.ref = ref


@dataclass(frozen=True)
class FieldRef(Generic[S, T]):
    """Identity token for the field ``name`` of the structure ``owner``.

    ``module`` is the name of the module defining ``owner``; generated code
    passes ``__name__``, so same-named types in different modules never
    share tokens.
    """
    owner: str
    name: str
    module: str = ""

    @property
    def path(self) -> str:
        prefix = f"{self.module}:" if self.module else ""
        return f"{prefix}{self.owner}.{self.name}"

    def __repr__(self) -> str:
        return f"<FieldRef {self.path}>"


class LensRegistry(Generic[S]):
    """Read-only table of the lenses generated for one structure type.

    Entries keep the order they were given in, which is the declaration
    order of the fields.
    """

    def __init__(self, owner: str, entries: Mapping[FieldRef[S, Any], Lens[S, Any]]) -> None:
        self._owner = owner
        self._entries: Mapping[FieldRef[S, Any], Lens[S, Any]] = MappingProxyType(dict(entries))

    @property
    def owner(self) -> str:
        return self._owner

    @property
    def entries(self) -> Mapping[FieldRef[S, Any], Lens[S, Any]]:
        return self._entries

    @property
    def refs(self) -> list[FieldRef[S, Any]]:
        return list(self._entries)

    def lookup(self, ref: FieldRef[S, T]) -> Lens[S, T]:
        """Return the lens registered for ``ref``."""
        try:
            return self._entries[ref]
        except KeyError:
            raise UnknownFieldError(self._owner, ref) from None

    def __contains__(self, ref: object) -> bool:
        return ref in self._entries

    def __iter__(self) -> Iterator[FieldRef[S, Any]]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        names = ", ".join(ref.name for ref in self._entries)
        return f"<LensRegistry {self._owner} [{names}]>"


def registry_of(structure_type: type) -> LensRegistry[Any]:
    """Return the registry generated for ``structure_type``."""
    namespace = getattr(structure_type, "AllLenses", None)
    registry = getattr(namespace, "registry", None)
    if not isinstance(registry, LensRegistry):
        raise TypeError(
            f"{structure_type.__qualname__} was not expanded by autolens "
            f"(no AllLenses.registry)"
        )
    return registry


def lookup(structure_type: type[S], ref: FieldRef[S, T]) -> Lens[S, T]:
    """Look up the lens for ``ref`` in the registry of ``structure_type``."""
    return registry_of(structure_type).lookup(ref)

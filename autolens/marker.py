"""
The @autolens decorator.

Marks a frozen dataclass for lens derivation. Nothing is generated at import
time: run `autolens expand` over the module to add the members.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, TypeVar, Union, overload

C = TypeVar("C", bound=type)


@overload
def autolens(cls: C) -> C: ...
@overload
def autolens(cls: None = None) -> Callable[[C], C]: ...


def autolens(cls: Optional[C] = None) -> Union[C, Callable[[C], C]]:
    """Usable bare (``@autolens``) or called (``@autolens()``)."""
    def mark(target: C) -> C:
        target.__autolens__ = True
        return target

    if cls is None:
        return mark
    return mark(cls)


def is_expanded(cls: Any) -> bool:
    """Whether ``cls`` carries the members generated by ``autolens expand``."""
    return hasattr(getattr(cls, "AllLenses", None), "registry")

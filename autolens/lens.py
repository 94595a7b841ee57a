"""
autolens Lens Engine

A Lens (or functional reference) is an optic that focuses into an immutable
structure for getting, setting or modifying one part of it (the focus).

A Lens is a pair of pure functions:
- get: S -> T            focus into an S and extract its T
- set: (S, T) -> S       replace the T inside an S, returning a new S

Laws every lens must obey (for values with structural equality):
- get(set(s, t)) == t    setting then getting returns what was set
- set(s, get(s)) == s    setting the current value changes nothing

Composition:
- compose(outer, inner)  sequential focusing, S -> T -> A
- concat(a, b)           product of two lenses over the same source

Usage:
    name = Lens(getter=lambda p: p.name,
                setter=lambda p, v: replace(p, name=v))
    city = compose(attribute("address"), attribute("city"))

    bob = set_(name, alice, "Bob")
    moved = modify(city, bob, str.upper)
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Callable, Generic, TypeVar

S = TypeVar("S")
T = TypeVar("T")
A = TypeVar("A")


@dataclass(frozen=True)
class Lens(Generic[S, T]):
    """An immutable getter/setter pair focusing a ``T`` inside an ``S``.

    Both functions must be pure. The lens holds no state of its own and can
    be shared freely between threads.
    """
    getter: Callable[[S], T]
    setter: Callable[[S, T], S]

    def get(self, whole: S) -> T:
        return self.getter(whole)

    def set(self, whole: S, target: T) -> S:
        return self.setter(whole, target)

    def modify(self, whole: S, f: Callable[[T], T]) -> S:
        return self.setter(whole, f(self.getter(whole)))

    def lift(self, f: Callable[[T], T]) -> Callable[[S], S]:
        def transform(whole: S) -> S:
            return self.modify(whole, f)
        return transform

    def compose(self, inner: Lens[T, A]) -> Lens[S, A]:
        outer = self

        def get(whole: S) -> A:
            return inner.get(outer.get(whole))

        def set(whole: S, target: A) -> S:
            return outer.set(whole, inner.set(outer.get(whole), target))

        return Lens(getter=get, setter=set)

    def concat(self, other: Lens[S, A]) -> Lens[S, tuple[T, A]]:
        first = self

        def get(whole: S) -> tuple[T, A]:
            return (first.get(whole), other.get(whole))

        def set(whole: S, pair: tuple[T, A]) -> S:
            return other.set(first.set(whole, pair[0]), pair[1])

        return Lens(getter=get, setter=set)

    def __repr__(self) -> str:
        name = getattr(self.getter, "__name__", "?")
        return f"<Lens get={name}>"


# ============================================================================
# Functional API
# ============================================================================

def get(lens: Lens[S, T], whole: S) -> T:
    """Read the focus of ``lens`` in ``whole``."""
    return lens.get(whole)


def set_(lens: Lens[S, T], whole: S, target: T) -> S:
    """Return a copy of ``whole`` with the focus replaced by ``target``."""
    return lens.set(whole, target)


def modify(lens: Lens[S, T], whole: S, f: Callable[[T], T]) -> S:
    """Equivalent to ``set_(lens, whole, f(get(lens, whole)))``."""
    return lens.modify(whole, f)


def lift(lens: Lens[S, T], f: Callable[[T], T]) -> Callable[[S], S]:
    """Curry ``modify`` into a whole-value transformer."""
    return lens.lift(f)


def compose(outer: Lens[S, T], inner: Lens[T, A]) -> Lens[S, A]:
    """Focus through ``outer`` and then through ``inner``.

    Getting chains both getters. Setting reads the outer focus, sets the
    inner focus inside it, then sets the result back into the whole.
    Composition is associative:
    compose(compose(a, b), c) behaves exactly like compose(a, compose(b, c)).
    """
    return outer.compose(inner)


def concat(a: Lens[S, T], b: Lens[S, A]) -> Lens[S, tuple[T, A]]:
    """Pair two lenses over the same source.

    Getting returns ``(a.get(s), b.get(s))``. Setting applies ``a``'s setter
    first and then ``b``'s setter to the result of the first.

    The order matters when the two setters interact, e.g. when ``b`` focuses
    a value derived from the field ``a`` writes: ``b`` always wins. Swapping
    the operands can produce a different whole; this is not corrected here.
    """
    return a.concat(b)


def identity() -> Lens[Any, Any]:
    """The lens whose focus is the whole value; the unit of ``compose``."""
    return Lens(getter=lambda whole: whole, setter=lambda whole, target: target)


def attribute(name: str) -> Lens[Any, Any]:
    """Lens over the dataclass field ``name``, set through ``dataclasses.replace``."""
    def get(whole: Any) -> Any:
        return getattr(whole, name)

    def set(whole: Any, target: Any) -> Any:
        return replace(whole, **{name: target})

    get.__name__ = name
    return Lens(getter=get, setter=set)

"""
autolens Field Registry Test Suite

Tests:
1. FieldRef identity and hashing
2. LensRegistry lookup, order and read-only entries
3. Unknown references
4. Module-level lookup against expanded and plain types
"""

from dataclasses import dataclass

import pytest

from autolens import FieldRef, LensRegistry, UnknownFieldError, attribute, lookup


@dataclass(frozen=True)
class Point:
    x: int
    y: int

    class AllLenses:
        registry = LensRegistry("Point", {
            FieldRef("Point", "x"): attribute("x"),
            FieldRef("Point", "y"): attribute("y"),
        })


@dataclass(frozen=True)
class Plain:
    value: int


# --- Test 1: FieldRef ---

def test_field_refs_compare_by_owner_and_name():
    assert FieldRef("Point", "x") == FieldRef("Point", "x")
    assert hash(FieldRef("Point", "x")) == hash(FieldRef("Point", "x"))
    assert FieldRef("Point", "x") != FieldRef("Other", "x")
    assert repr(FieldRef("Point", "x")) == "<FieldRef Point.x>"


def test_field_refs_from_different_modules_differ():
    here = FieldRef("Point", "x", "shapes")
    there = FieldRef("Point", "x", "plots")
    assert here != there
    assert here.path == "shapes:Point.x"
    assert repr(here) == "<FieldRef shapes:Point.x>"
    assert here not in Point.AllLenses.registry


# --- Test 2: LensRegistry ---

def test_lookup_returns_registered_lens():
    registry = Point.AllLenses.registry
    lens = registry.lookup(FieldRef("Point", "y"))
    assert lens.set(Point(1, 2), 5) == Point(1, 5)


def test_registry_keeps_declaration_order():
    registry = Point.AllLenses.registry
    assert [ref.name for ref in registry.refs] == ["x", "y"]
    assert len(registry) == 2
    assert FieldRef("Point", "x") in registry
    assert registry.owner == "Point"


def test_registry_entries_are_read_only():
    with pytest.raises(TypeError):
        Point.AllLenses.registry.entries[FieldRef("Point", "z")] = attribute("z")


# --- Test 3: Unknown references ---

def test_unknown_reference_raises():
    with pytest.raises(UnknownFieldError) as exc:
        Point.AllLenses.registry.lookup(FieldRef("Other", "x"))
    assert isinstance(exc.value, KeyError)
    assert exc.value.ref == FieldRef("Other", "x")
    assert "Point has no lens for field Other.x" in str(exc.value)

    with pytest.raises(UnknownFieldError, match="shapes:Point.x"):
        Point.AllLenses.registry.lookup(FieldRef("Point", "x", "shapes"))


# --- Test 4: Module-level lookup ---

def test_module_lookup_reads_generated_registry():
    lens = lookup(Point, FieldRef("Point", "x"))
    assert lens.get(Point(3, 4)) == 3


def test_module_lookup_rejects_unexpanded_type():
    with pytest.raises(TypeError, match="not expanded by autolens"):
        lookup(Plain, FieldRef("Plain", "value"))

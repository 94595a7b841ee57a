"""
autolens - Composable lenses for immutable Python data

Lens Engine: Lens, get/set_/modify/lift, compose/concat
Field Registry: FieldRef tokens and per-type LensRegistry lookup
Derivation: @autolens frozen dataclasses expanded ahead of time with a
private full-field constructor, one lens per public field and a registry
"""

__version__ = "0.1.0"

from autolens.lens import (
    Lens,
    attribute,
    compose,
    concat,
    get,
    identity,
    lift,
    modify,
    set_,
)
from autolens.registry import (
    FieldRef,
    FocusT,
    LensRegistry,
    UnknownFieldError,
    lookup,
)
from autolens.marker import autolens, is_expanded
from autolens.derive import derive, GenerationPlan, DerivationResult
from autolens.expand import expand_source, ExpansionResult

__all__ = [
    "Lens",
    "attribute",
    "compose",
    "concat",
    "get",
    "identity",
    "lift",
    "modify",
    "set_",
    "FieldRef",
    "FocusT",
    "LensRegistry",
    "UnknownFieldError",
    "lookup",
    "autolens",
    "is_expanded",
    "derive",
    "GenerationPlan",
    "DerivationResult",
    "expand_source",
    "ExpansionResult",
]

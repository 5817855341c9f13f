"""Masking primitives, schema model and render engine."""

from .engine import RedactionEngine, default_engine, redactable, render
from .masking import (
    Redacted,
    Redactor,
    RedactorBuilder,
    mask_all,
    mask_fixed,
    mask_partial,
    pass_through,
)
from .schema import (
    FieldSpec,
    MaskPolicy,
    PolicyKind,
    SchemaRegistry,
    ShapeSpec,
    UnionSpec,
    VariantSpec,
    default_registry,
    field,
    shape,
    union,
    variant,
)

__all__ = [
    "RedactionEngine",
    "default_engine",
    "redactable",
    "render",
    "Redacted",
    "Redactor",
    "RedactorBuilder",
    "mask_all",
    "mask_fixed",
    "mask_partial",
    "pass_through",
    "FieldSpec",
    "MaskPolicy",
    "PolicyKind",
    "SchemaRegistry",
    "ShapeSpec",
    "UnionSpec",
    "VariantSpec",
    "default_registry",
    "field",
    "shape",
    "union",
    "variant",
]

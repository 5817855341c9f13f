"""Redacted debug representations for records and tagged unions."""

from .core import (
    FieldSpec,
    MaskPolicy,
    PolicyKind,
    RedactionEngine,
    Redactor,
    RedactorBuilder,
    SchemaRegistry,
    ShapeSpec,
    UnionSpec,
    VariantSpec,
    field,
    redactable,
    render,
    shape,
    union,
    variant,
)
from .config import FallbackPolicy, ToggleConfig, ToggleRule, load_config
from .errors import (
    ConfigurationError,
    RedactionAbortedError,
    ToggleAlreadyResolvedError,
    VeilError,
)
from .toggle import RedactionBehavior, configure, disable, is_redaction_active

__version__ = "0.2.0"

__all__ = [
    "FieldSpec",
    "MaskPolicy",
    "PolicyKind",
    "RedactionEngine",
    "Redactor",
    "RedactorBuilder",
    "SchemaRegistry",
    "ShapeSpec",
    "UnionSpec",
    "VariantSpec",
    "field",
    "redactable",
    "render",
    "shape",
    "union",
    "variant",
    "FallbackPolicy",
    "ToggleConfig",
    "ToggleRule",
    "load_config",
    "ConfigurationError",
    "RedactionAbortedError",
    "ToggleAlreadyResolvedError",
    "VeilError",
    "RedactionBehavior",
    "configure",
    "disable",
    "is_redaction_active",
]

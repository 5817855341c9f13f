"""Schema model: which policy applies to which field of which shape.

Shapes are declared once, when the program starts, and are read-only
afterwards. Every check that can fail does so here, at declaration or
registration time, so a misconfigured schema stops the program before
anything gets rendered.
"""
from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field as dc_field
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Tuple, Union

from ..errors import ConfigurationError
from .masking import DEFAULT_MASK_CHAR, check_fixed_width, check_mask_char

logger = logging.getLogger(__name__)


class PolicyKind(Enum):
    NONE = "none"
    SKIP = "skip"
    ALL = "all"
    PARTIAL = "partial"
    FIXED = "fixed"


@dataclass(frozen=True)
class MaskPolicy:
    """How one field (or one variant name) is masked."""

    kind: PolicyKind
    width: Optional[int] = None
    mask_char: str = DEFAULT_MASK_CHAR

    def __post_init__(self):
        check_mask_char(self.mask_char)
        if self.kind is PolicyKind.FIXED:
            check_fixed_width(self.width)
        elif self.width is not None:
            raise ConfigurationError(f"width is only valid for fixed masking, not {self.kind.value}")

    @classmethod
    def none(cls) -> "MaskPolicy":
        return cls(PolicyKind.NONE)

    @classmethod
    def skip(cls) -> "MaskPolicy":
        """Explicitly exempt a field from its shape's default policy."""
        return cls(PolicyKind.SKIP)

    @classmethod
    def all(cls, mask_char: str = DEFAULT_MASK_CHAR) -> "MaskPolicy":
        return cls(PolicyKind.ALL, mask_char=mask_char)

    @classmethod
    def partial(cls, mask_char: str = DEFAULT_MASK_CHAR) -> "MaskPolicy":
        return cls(PolicyKind.PARTIAL, mask_char=mask_char)

    @classmethod
    def fixed(cls, width: int, mask_char: str = DEFAULT_MASK_CHAR) -> "MaskPolicy":
        return cls(PolicyKind.FIXED, width=width, mask_char=mask_char)

    @property
    def redacts(self) -> bool:
        return self.kind in (PolicyKind.ALL, PolicyKind.PARTIAL, PolicyKind.FIXED)


@dataclass(frozen=True)
class FieldSpec:
    """One field of a shape.

    ``policy`` of ``None`` means the field inherits the shape's default.
    ``composite`` fields hold a value of another registered shape.
    ``display`` renders the value with ``str()`` instead of ``repr()``,
    which is also what lets a composite value be partially masked.
    ``optional`` fields render ``None`` as-is unless masked with a fixed
    width.
    """

    name: str
    policy: Optional[MaskPolicy] = None
    composite: bool = False
    display: bool = False
    optional: bool = False


@dataclass(frozen=True)
class ShapeSpec:
    """Ordered fields of a record, plus the default policy for its fields."""

    name: str
    fields: Tuple[FieldSpec, ...] = ()
    default_policy: MaskPolicy = dc_field(default_factory=MaskPolicy.none)

    def __post_init__(self):
        object.__setattr__(self, "fields", tuple(self.fields))
        if self.default_policy.kind is PolicyKind.SKIP:
            raise ConfigurationError(f"{self.name}: skip cannot be a shape default")

        seen = set()
        for spec in self.fields:
            if spec.name in seen:
                raise ConfigurationError(f"{self.name}: field {spec.name!r} declared twice")
            seen.add(spec.name)

            if spec.policy is not None and spec.policy.kind is PolicyKind.SKIP:
                if not self.default_policy.redacts:
                    raise ConfigurationError(
                        f"{self.name}.{spec.name}: skip is only meaningful when the "
                        f"shape's default policy redacts"
                    )

            policy = self.resolve(spec)
            if policy.kind is PolicyKind.PARTIAL and spec.composite and not spec.display:
                raise ConfigurationError(
                    f"{self.name}.{spec.name}: partial masking needs a textual value; "
                    f"declare the composite field with display=True to mask its str()"
                )

    def resolve(self, spec: FieldSpec) -> MaskPolicy:
        """Return the policy in effect for ``spec``."""
        return spec.policy if spec.policy is not None else self.default_policy

    @property
    def redacts_anything(self) -> bool:
        if self.default_policy.redacts and self.fields:
            return True
        return any(self.resolve(f).redacts or f.composite for f in self.fields)


@dataclass(frozen=True)
class VariantSpec:
    """One variant of a tagged union: its payload and how its name is masked.

    ``payload`` is the class carrying the variant, when there is one; its
    fields are checked against ``shape`` at registration.
    """

    name: str
    shape: ShapeSpec
    policy: MaskPolicy = dc_field(default_factory=MaskPolicy.none)
    payload: Optional[type] = dc_field(default=None, compare=False)

    def __post_init__(self):
        if self.policy.kind is PolicyKind.SKIP:
            raise ConfigurationError(f"{self.name}: a variant name cannot be skipped")
        if self.payload is not None and self.payload.__name__ != self.name:
            raise ConfigurationError(
                f"{self.name}: payload class {self.payload.__name__} does not match "
                f"the variant name"
            )

    @property
    def redacts_anything(self) -> bool:
        return self.policy.redacts or self.shape.redacts_anything


@dataclass(frozen=True)
class UnionSpec:
    """A closed set of variants."""

    name: str
    variants: Tuple[VariantSpec, ...] = ()
    _index: Dict[str, VariantSpec] = dc_field(
        default_factory=dict, init=False, repr=False, compare=False
    )

    def __post_init__(self):
        object.__setattr__(self, "variants", tuple(self.variants))
        for spec in self.variants:
            if spec.name in self._index:
                raise ConfigurationError(f"{self.name}: variant {spec.name!r} declared twice")
            self._index[spec.name] = spec

    def variant(self, name: str) -> VariantSpec:
        try:
            return self._index[name]
        except KeyError:
            raise ConfigurationError(
                f"{self.name}: no variant declared for {name!r}"
            ) from None

    @property
    def redacts_anything(self) -> bool:
        return any(v.redacts_anything for v in self.variants)


Spec = Union[ShapeSpec, UnionSpec]


def _declared_fields(cls: type) -> Optional[Tuple[str, ...]]:
    if dataclasses.is_dataclass(cls):
        return tuple(f.name for f in dataclasses.fields(cls))
    fields = getattr(cls, "_fields", None)  # namedtuple
    if isinstance(fields, tuple):
        return fields
    return None


def _check_fields(cls: type, shape: ShapeSpec) -> None:
    actual = _declared_fields(cls)
    if actual is None:
        return
    declared = {f.name for f in shape.fields}
    missing = [name for name in actual if name not in declared]
    if missing:
        raise ConfigurationError(
            f"{shape.name}: field(s) {', '.join(missing)} of {cls.__name__} have no "
            f"declared policy"
        )
    unknown = sorted(declared - set(actual))
    if unknown:
        raise ConfigurationError(
            f"{shape.name}: {cls.__name__} has no field(s) {', '.join(unknown)}"
        )


class SchemaRegistry:
    """Maps Python classes to the shape or union used to render them."""

    def __init__(self):
        self._specs: Dict[type, Spec] = {}

    def register(self, cls: type, spec: Spec) -> type:
        """Attach ``spec`` to ``cls``.

        Dataclasses and namedtuples must declare every one of their fields,
        as must the payload classes of union variants. Enums must declare a
        variant for each member.
        """
        if cls in self._specs:
            raise ConfigurationError(f"{cls.__name__} is already registered")
        if not isinstance(spec, (ShapeSpec, UnionSpec)):
            raise TypeError(f"expected ShapeSpec or UnionSpec, got {type(spec).__name__}")
        if not spec.redacts_anything:
            raise ConfigurationError(f"{spec.name}: nothing in this shape is redacted")

        if isinstance(spec, ShapeSpec):
            _check_fields(cls, spec)
        else:
            for spec_variant in spec.variants:
                if spec_variant.payload is not None:
                    _check_fields(spec_variant.payload, spec_variant.shape)
            if isinstance(cls, type) and issubclass(cls, Enum):
                for member in cls:
                    spec.variant(member.name)

        self._specs[cls] = spec
        logger.debug("registered %s for %s", spec.name, cls.__qualname__)
        return cls

    def lookup(self, value: Any) -> Optional[Spec]:
        for klass in type(value).__mro__:
            spec = self._specs.get(klass)
            if spec is not None:
                return spec
        return None

    @staticmethod
    def variant_of(value: Any, union: UnionSpec) -> VariantSpec:
        """Pick the variant of ``union`` that ``value`` is an instance of.

        Enum members select by member name, anything else by class name.
        """
        name = value.name if isinstance(value, Enum) else type(value).__name__
        return union.variant(name)

    def __contains__(self, cls: type) -> bool:
        return cls in self._specs

    def __len__(self) -> int:
        return len(self._specs)


default_registry = SchemaRegistry()


# Declaration helpers


def field(
    name: str,
    policy: Optional[MaskPolicy] = None,
    *,
    composite: bool = False,
    display: bool = False,
    optional: bool = False,
) -> FieldSpec:
    return FieldSpec(name, policy, composite=composite, display=display, optional=optional)


def _as_fields(fields: Iterable[Union[FieldSpec, str]]) -> Tuple[FieldSpec, ...]:
    return tuple(FieldSpec(f) if isinstance(f, str) else f for f in fields)


def shape(
    name: str, *fields: Union[FieldSpec, str], default: Optional[MaskPolicy] = None
) -> ShapeSpec:
    """Declare a record shape. Bare strings are fields inheriting ``default``."""
    return ShapeSpec(name, _as_fields(fields), default or MaskPolicy.none())


def variant(
    name: str,
    *fields: Union[FieldSpec, str],
    policy: Optional[MaskPolicy] = None,
    default: Optional[MaskPolicy] = None,
    payload: Optional[type] = None,
) -> VariantSpec:
    return VariantSpec(
        name,
        ShapeSpec(name, _as_fields(fields), default or MaskPolicy.none()),
        policy or MaskPolicy.none(),
        payload,
    )


def union(name: str, *variants: VariantSpec) -> UnionSpec:
    return UnionSpec(name, variants)


__all__ = [
    "PolicyKind",
    "MaskPolicy",
    "FieldSpec",
    "ShapeSpec",
    "VariantSpec",
    "UnionSpec",
    "SchemaRegistry",
    "default_registry",
    "field",
    "shape",
    "variant",
    "union",
]

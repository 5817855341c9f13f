"""Render engine: turns a value of a registered shape into redacted text."""
from __future__ import annotations

from typing import Any, Callable, List, Optional, Set

from .. import toggle as _toggle
from ..toggle import ToggleState
from .masking import mask_all, mask_fixed, mask_partial, pass_through
from .schema import (
    FieldSpec,
    MaskPolicy,
    PolicyKind,
    SchemaRegistry,
    ShapeSpec,
    Spec,
    UnionSpec,
    default_registry,
)

INDENT = "    "


class RedactionEngine:
    """Facade rendering registered values according to their schema.

    Parameters
    ----------
    registry: SchemaRegistry, optional
        Where shapes are looked up; the module default registry if omitted.
    toggle: ToggleState, optional
        Redaction toggle to consult; the process-wide state if omitted.
    """

    def __init__(
        self,
        registry: Optional[SchemaRegistry] = None,
        toggle: Optional[ToggleState] = None,
    ):
        self._registry = registry
        self._toggle = toggle

    @property
    def registry(self) -> SchemaRegistry:
        return self._registry if self._registry is not None else default_registry

    @property
    def toggle(self) -> ToggleState:
        return self._toggle if self._toggle is not None else _toggle.get_state()

    def render(self, value: Any, pretty: bool = False) -> str:
        """Render ``value``, redacted if the toggle says so.

        Resolves the toggle on first use, which raises
        ``RedactionAbortedError`` when the fallback is ``panic`` and no
        rule matched. Values of unregistered types are rendered with
        ``repr()``.

        With ``pretty`` every field goes on its own line, indented by
        nesting depth. Masking is the same in both forms.
        """
        active = self.toggle.is_active()
        return self._render_value(value, active, None, set(), pretty)

    def render_shape(
        self,
        value: Any,
        shape: ShapeSpec,
        toggle_active: bool,
        force: Optional[MaskPolicy] = None,
        pretty: bool = False,
    ) -> str:
        """Render a record as ``Name(field=..., ...)``.

        ``force`` replaces the policy of every field, transitively; it is
        how a composite field masked with ``all`` masks everything inside.
        """
        return self._render_shape(value, shape, toggle_active, force, set(), pretty)

    def render_union(
        self,
        value: Any,
        union: UnionSpec,
        toggle_active: bool,
        force: Optional[MaskPolicy] = None,
        pretty: bool = False,
    ) -> str:
        """Render a union value as ``Union.Variant(field=..., ...)``."""
        return self._render_union(value, union, toggle_active, force, set(), pretty)

    # internals

    def _render_value(
        self,
        value: Any,
        active: bool,
        force: Optional[MaskPolicy],
        stack: Set[int],
        pretty: bool,
    ) -> str:
        spec = self.registry.lookup(value)
        if spec is None:
            if active and force is not None:
                return mask_all(value, force.mask_char)
            return pass_through(value)
        return self._render_spec(value, spec, active, force, stack, pretty)

    def _render_spec(
        self,
        value: Any,
        spec: Spec,
        active: bool,
        force: Optional[MaskPolicy],
        stack: Set[int],
        pretty: bool,
    ) -> str:
        if id(value) in stack:
            return f"{spec.name}(...)"
        stack.add(id(value))
        try:
            if isinstance(spec, UnionSpec):
                return self._render_union(value, spec, active, force, stack, pretty)
            return self._render_shape(value, spec, active, force, stack, pretty)
        finally:
            stack.discard(id(value))

    def _render_shape(self, value, shape, active, force, stack, pretty) -> str:
        parts = self._render_fields(value, shape, active, force, stack, pretty)
        return _join(shape.name, parts, pretty)

    def _render_union(self, value, union, active, force, stack, pretty) -> str:
        variant = self.registry.variant_of(value, union)
        name = variant.name
        if active:
            name = _mask_name(name, variant.policy)

        head = f"{union.name}.{name}"
        if not variant.shape.fields:
            return head
        parts = self._render_fields(value, variant.shape, active, force, stack, pretty)
        return _join(head, parts, pretty)

    def _render_fields(self, value, shape, active, force, stack, pretty) -> List[str]:
        return [
            f"{spec.name}={self._render_field(value, shape, spec, active, force, stack, pretty)}"
            for spec in shape.fields
        ]

    def _render_field(
        self,
        owner: Any,
        shape: ShapeSpec,
        spec: FieldSpec,
        active: bool,
        force: Optional[MaskPolicy],
        stack: Set[int],
        pretty: bool,
    ) -> str:
        value = getattr(owner, spec.name)

        if not active:
            if spec.composite and not spec.display:
                return self._render_value(value, False, None, stack, pretty)
            return pass_through(value, spec.display)

        policy = force if force is not None else shape.resolve(spec)

        if policy.kind is PolicyKind.FIXED:
            return mask_fixed(policy.width, value, policy.mask_char)
        if spec.optional and value is None:
            return "None"
        if policy.kind is PolicyKind.PARTIAL:
            return mask_partial(pass_through(value, spec.display), policy.mask_char)
        if policy.kind is PolicyKind.ALL:
            if spec.composite and not spec.display:
                return self._render_value(value, True, policy, stack, pretty)
            return mask_all(value, policy.mask_char)
        # NONE / SKIP
        if spec.composite and not spec.display:
            return self._render_value(value, True, None, stack, pretty)
        return pass_through(value, spec.display)


def _join(head: str, parts: List[str], pretty: bool) -> str:
    if not pretty or not parts:
        return f"{head}({', '.join(parts)})"
    # nested renders are indented one level further
    body = "".join(INDENT + part.replace("\n", "\n" + INDENT) + ",\n" for part in parts)
    return f"{head}(\n{body})"


def _mask_name(name: str, policy: MaskPolicy) -> str:
    if policy.kind is PolicyKind.FIXED:
        return mask_fixed(policy.width, name, policy.mask_char)
    if policy.kind is PolicyKind.PARTIAL:
        return mask_partial(name, policy.mask_char)
    if policy.kind is PolicyKind.ALL:
        return mask_all(name, policy.mask_char)
    return name


default_engine = RedactionEngine()


def render(value: Any, pretty: bool = False) -> str:
    """Render ``value`` with the default engine."""
    return default_engine.render(value, pretty)


def redactable(
    spec: Spec, engine: Optional[RedactionEngine] = None
) -> Callable[[type], type]:
    """Class decorator registering ``spec`` and making ``repr()`` redact.

    Example::

        @redactable(shape(
            "CreditCard",
            field("number", MaskPolicy.partial()),
            field("cvv", MaskPolicy.fixed(3)),
        ))
        @dataclass
        class CreditCard:
            number: str
            cvv: str
    """
    engine = engine or default_engine

    def decorator(cls: type) -> type:
        engine.registry.register(cls, spec)

        def __repr__(self) -> str:
            return engine.render(self)

        cls.__repr__ = __repr__
        return cls

    return decorator


__all__ = ["RedactionEngine", "default_engine", "render", "redactable"]

from collections import namedtuple
from dataclasses import dataclass
from enum import Enum

import pytest

from veil.core.schema import (
    MaskPolicy,
    PolicyKind,
    SchemaRegistry,
    ShapeSpec,
    UnionSpec,
    field,
    shape,
    union,
    variant,
)
from veil.errors import ConfigurationError


@pytest.mark.parametrize(
    "make",
    [
        lambda: MaskPolicy.fixed(0),
        lambda: MaskPolicy.fixed(256),
        lambda: MaskPolicy.fixed(True),
        lambda: MaskPolicy.fixed("3"),
        lambda: MaskPolicy.partial(mask_char="##"),
        lambda: MaskPolicy(PolicyKind.ALL, width=3),
    ],
)
def test_invalid_policies_rejected(make):
    with pytest.raises(ConfigurationError):
        make()


def test_policy_redacts_flag():
    assert not MaskPolicy.none().redacts
    assert not MaskPolicy.skip().redacts
    assert MaskPolicy.all().redacts
    assert MaskPolicy.partial().redacts
    assert MaskPolicy.fixed(3).redacts


def test_fields_inherit_shape_default():
    spec = shape(
        "Vehicle",
        "license_plate",
        field("color", MaskPolicy.skip()),
        default=MaskPolicy.partial("X"),
    )
    plate, color = spec.fields
    assert spec.resolve(plate) == MaskPolicy.partial("X")
    assert spec.resolve(color).kind is PolicyKind.SKIP


def test_unset_policy_without_default_is_none():
    spec = shape("Policy", "id", field("name", MaskPolicy.all()))
    assert spec.resolve(spec.fields[0]) == MaskPolicy.none()


def test_field_order_is_preserved():
    spec = shape("Card", "c", "a", "b", default=MaskPolicy.all())
    assert [f.name for f in spec.fields] == ["c", "a", "b"]


def test_skip_needs_a_redacting_default():
    with pytest.raises(ConfigurationError, match="Card.cvv"):
        shape("Card", field("cvv", MaskPolicy.skip()))


def test_skip_is_not_a_shape_default():
    with pytest.raises(ConfigurationError):
        ShapeSpec("Card", (), MaskPolicy.skip())


def test_partial_on_composite_needs_textual_projection():
    with pytest.raises(ConfigurationError, match="Owner.card"):
        shape("Owner", field("card", MaskPolicy.partial(), composite=True))
    spec = shape("Owner", field("card", MaskPolicy.partial(), composite=True, display=True))
    assert spec.fields[0].display


def test_partial_default_on_composite_rejected():
    with pytest.raises(ConfigurationError):
        shape("Owner", field("card", composite=True), default=MaskPolicy.partial())


def test_duplicate_names_rejected():
    with pytest.raises(ConfigurationError):
        shape("Card", "number", "number", default=MaskPolicy.all())
    with pytest.raises(ConfigurationError):
        union("Status", variant("Insured"), variant("Insured"))


def test_variant_name_cannot_be_skipped():
    with pytest.raises(ConfigurationError):
        variant("Visa", policy=MaskPolicy.skip())


def test_union_variant_lookup():
    spec = union("Issuer", variant("Visa", policy=MaskPolicy.all()), variant("MasterCard"))
    assert spec.variant("MasterCard").name == "MasterCard"
    with pytest.raises(ConfigurationError, match="Amex"):
        spec.variant("Amex")


@dataclass
class Card:
    number: str
    cvv: str


def test_registry_requires_every_dataclass_field():
    registry = SchemaRegistry()
    with pytest.raises(ConfigurationError, match="cvv"):
        registry.register(Card, shape("Card", field("number", MaskPolicy.partial())))


def test_registry_rejects_unknown_field():
    registry = SchemaRegistry()
    with pytest.raises(ConfigurationError, match="expiry"):
        registry.register(
            Card, shape("Card", "number", "cvv", "expiry", default=MaskPolicy.all())
        )


class Status:
    pass


@dataclass
class Insured(Status):
    policy: str
    started: str


def test_registry_checks_variant_payload_fields():
    registry = SchemaRegistry()
    spec = union(
        "Status",
        variant("Insured", field("policy", MaskPolicy.all()), payload=Insured),
    )
    with pytest.raises(ConfigurationError, match="started"):
        registry.register(Status, spec)


def test_registry_rejects_misspelled_variant_payload_field():
    registry = SchemaRegistry()
    spec = union(
        "Status",
        variant(
            "Insured", "policy", "started", "strated", default=MaskPolicy.all(), payload=Insured
        ),
    )
    with pytest.raises(ConfigurationError, match="strated"):
        registry.register(Status, spec)


def test_variant_payload_must_match_variant_name():
    with pytest.raises(ConfigurationError, match="Insured"):
        variant("Covered", "policy", default=MaskPolicy.all(), payload=Insured)


def test_registry_checks_namedtuple_fields():
    Point = namedtuple("Point", ["lat", "lon"])
    registry = SchemaRegistry()
    with pytest.raises(ConfigurationError, match="lon"):
        registry.register(Point, shape("Point", field("lat", MaskPolicy.all())))


def test_registry_rejects_shape_that_redacts_nothing():
    registry = SchemaRegistry()
    with pytest.raises(ConfigurationError, match="nothing"):
        registry.register(Card, shape("Card", "number", "cvv"))


def test_registry_rejects_double_registration():
    registry = SchemaRegistry()
    spec = shape("Card", "number", "cvv", default=MaskPolicy.all())
    registry.register(Card, spec)
    assert Card in registry
    with pytest.raises(ConfigurationError, match="already registered"):
        registry.register(Card, spec)


def test_registry_lookup_walks_mro():
    class PremiumCard(Card):
        pass

    registry = SchemaRegistry()
    spec = shape("Card", "number", "cvv", default=MaskPolicy.all())
    registry.register(Card, spec)
    assert registry.lookup(PremiumCard("1", "2")) is spec
    assert registry.lookup("not registered") is None


class Issuer(Enum):
    VISA = 1
    MASTERCARD = 2


def test_enum_union_must_cover_every_member():
    registry = SchemaRegistry()
    partial_union = union("Issuer", variant("VISA", policy=MaskPolicy.all()))
    with pytest.raises(ConfigurationError, match="MASTERCARD"):
        registry.register(Issuer, partial_union)


def test_variant_of_enum_and_class():
    registry = SchemaRegistry()
    spec = union(
        "Issuer",
        variant("VISA", policy=MaskPolicy.all()),
        variant("MASTERCARD", policy=MaskPolicy.all()),
    )
    registry.register(Issuer, spec)
    assert registry.variant_of(Issuer.VISA, spec).name == "VISA"

    class Insured:
        pass

    status = UnionSpec("Status", (variant("Insured", policy=MaskPolicy.partial()),))
    assert registry.variant_of(Insured(), status).name == "Insured"


def test_register_rejects_non_spec():
    with pytest.raises(TypeError):
        SchemaRegistry().register(Card, {"number": "partial"})

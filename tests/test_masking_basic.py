import pytest

from veil.core.masking import (
    FULL_MASK_WIDTH,
    RedactorBuilder,
    mask_all,
    mask_fixed,
    mask_partial,
    pass_through,
)
from veil.errors import ConfigurationError


def test_fixed_ignores_value_length(fake):
    for _ in range(20):
        value = fake.credit_card_number()
        assert mask_fixed(3, value) == "***"
    assert mask_fixed(6, "") == "******"
    assert mask_fixed(4, "x" * 1000, "#") == "####"


@pytest.mark.parametrize(
    "value,expected",
    [
        ("4111111111111111", "411**********111"),
        ("abcde", "a***e"),
        ("abcdef", "ab**ef"),
        ("'Jane Doe'", "'Ja** *oe'"),
        ("john.doe@prima.it", "joh*.***@****a.it"),
    ],
)
def test_partial_reveals_ends(value, expected):
    assert mask_partial(value) == expected


def test_partial_keeps_length(fake):
    for _ in range(20):
        for value in (fake.name(), fake.email(), fake.iban(), fake.address()):
            masked = mask_partial(value)
            assert len(masked) == len(value)
            assert masked != value


def test_partial_long_value_prefix_and_suffix():
    value = "0398457348951234"
    masked = mask_partial(value)
    assert masked[:3] == value[:3]
    assert masked[-3:] == value[-3:]
    assert set(masked[3:-3]) == {"*"}


@pytest.mark.parametrize("value", ["a", "ab", "abc", "abcd", "12-34"])
def test_partial_short_values_fully_masked(value):
    masked = mask_partial(value)
    assert len(masked) == len(value)
    assert not any(ch.isalnum() for ch in masked)


def test_partial_empty_string():
    assert mask_partial("") == ""


def test_partial_is_unicode_aware():
    assert mask_partial("Müller-Lüdenscheid") == "Mül***-********eid"


def test_mask_all_is_fixed_width():
    assert mask_all("4111111111111111") == "*" * FULL_MASK_WIDTH
    assert mask_all("") == "*" * FULL_MASK_WIDTH
    assert mask_all(12345, "X") == "X" * FULL_MASK_WIDTH


def test_pass_through_uses_repr_or_str():
    assert pass_through("abc") == "'abc'"
    assert pass_through("abc", display=True) == "abc"
    assert pass_through([1, None]) == "[1, None]"


def test_redactor_builder_partial_with_char():
    redactor = RedactorBuilder().char("X").partial().build()
    assert f"{redactor('John Doe')} <{redactor('john.doe@prima.it')}>" == (
        "JoXX Xoe <johX.XXX@XXXXa.it>"
    )


def test_redactor_full_and_fixed():
    assert RedactorBuilder().build().redact("John Doe") == "**** ***"
    assert RedactorBuilder().fixed(5).build().redact("John Doe") == "*****"


@pytest.mark.parametrize(
    "builder",
    [
        lambda: RedactorBuilder().partial().fixed(3),
        lambda: RedactorBuilder().char("ab"),
        lambda: RedactorBuilder().char(""),
        lambda: RedactorBuilder().fixed(0),
        lambda: RedactorBuilder().fixed(256),
    ],
)
def test_redactor_builder_rejects_invalid_options(builder):
    with pytest.raises(ConfigurationError):
        builder().build()


def test_redactor_wrap_redacts_when_formatted():
    redactor = RedactorBuilder().partial().build()
    wrapped = redactor.wrap("John Doe")
    assert str(wrapped) == "Jo** *oe"
    assert repr(wrapped) == "'Jo** *oe'"
    assert f"user {wrapped}" == "user Jo** *oe"
    assert "%s" % wrapped == "Jo** *oe"


def test_redactor_wrap_formats_lazily():
    redactor = RedactorBuilder().build()
    items = ["secret"]
    wrapped = redactor.wrap(items)
    items.append("more")
    assert str(wrapped) == "['******', '****']"

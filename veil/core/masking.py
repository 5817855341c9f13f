"""Masking primitives: one value and one policy in, one redacted string out.

Masking is unicode-aware: only alphanumeric characters are ever masked,
whitespace and punctuation stay where they are.
"""
from __future__ import annotations

from typing import Any, Optional

from ..errors import ConfigurationError

DEFAULT_MASK_CHAR = "*"

# Width of the placeholder written by ``mask_all`` for scalar values.
FULL_MASK_WIDTH = 8

# Values with fewer alphanumeric characters than this are masked entirely
# by ``mask_partial``.
MIN_PARTIAL_CHARS = 5

# Upper bound on the characters exposed at each end by ``mask_partial``.
MAX_PARTIAL_EXPOSE = 3

MAX_FIXED_WIDTH = 255


def check_mask_char(mask_char: Any) -> str:
    if not isinstance(mask_char, str) or len(mask_char) != 1:
        raise ConfigurationError(
            f"mask character must be a single character, got {type(mask_char).__name__} "
            f"of length {len(mask_char) if isinstance(mask_char, str) else 'n/a'}"
        )
    return mask_char


def check_fixed_width(width: Any) -> int:
    if isinstance(width, bool) or not isinstance(width, int):
        raise ConfigurationError("fixed mask width must be an integer")
    if not 1 <= width <= MAX_FIXED_WIDTH:
        raise ConfigurationError(
            f"fixed mask width must be between 1 and {MAX_FIXED_WIDTH}, got {width}"
        )
    return width


def pass_through(value: Any, display: bool = False) -> str:
    """Render ``value`` unredacted with the standard formatter."""
    return str(value) if display else repr(value)


def mask_all(value: Any = None, mask_char: str = DEFAULT_MASK_CHAR) -> str:
    """Return a fixed-size placeholder that says nothing about ``value``."""
    return mask_char * FULL_MASK_WIDTH


def mask_fixed(n: int, value: Any = None, mask_char: str = DEFAULT_MASK_CHAR) -> str:
    """Return exactly ``n`` mask characters, whatever ``value`` is."""
    return mask_char * n


def mask_partial(text: str, mask_char: str = DEFAULT_MASK_CHAR) -> str:
    """Keep a few characters at both ends of ``text`` and mask the middle.

    Only alphanumeric characters are counted and masked. Values with fewer
    than ``MIN_PARTIAL_CHARS`` of them are masked entirely; otherwise
    ``min(count // 3, MAX_PARTIAL_EXPOSE)`` characters stay visible at each
    end. The result always has the length of ``text``; an empty string
    stays empty.
    """
    count = sum(1 for ch in text if ch.isalnum())

    if count < MIN_PARTIAL_CHARS:
        return "".join(mask_char if ch.isalnum() else ch for ch in text)

    expose = min(count // 3, MAX_PARTIAL_EXPOSE)
    prefix_left = expose
    middle_left = count - 2 * expose

    out = []
    for ch in text:
        if not ch.isalnum():
            out.append(ch)
        elif prefix_left > 0:
            prefix_left -= 1
            out.append(ch)
        elif middle_left > 0:
            middle_left -= 1
            out.append(mask_char)
        else:
            out.append(ch)
    return "".join(out)


class Redactor:
    """Redacts arbitrary strings with a fixed set of options.

    Build one with :class:`RedactorBuilder`. Unlike rendering a registered
    shape, a ``Redactor`` always redacts; it does not consult the toggle.
    """

    def __init__(self, mask_char: str, partial: bool, fixed: Optional[int]):
        self.mask_char = mask_char
        self.partial = partial
        self.fixed = fixed

    def redact(self, data: str) -> str:
        if self.fixed is not None:
            return mask_fixed(self.fixed, data, self.mask_char)
        if self.partial:
            return mask_partial(data, self.mask_char)
        return "".join(self.mask_char if ch.isalnum() else ch for ch in data)

    def __call__(self, data: str) -> str:
        return self.redact(data)

    def wrap(self, value: Any) -> "Redacted":
        """Wrap ``value`` so it is redacted only when formatted.

        Handy with ``logging``, where formatting is skipped for filtered
        records: ``logger.debug("user %s", redactor.wrap(name))``.
        """
        return Redacted(self, value)

    def __repr__(self) -> str:
        return (
            f"Redactor(mask_char={self.mask_char!r}, partial={self.partial}, "
            f"fixed={self.fixed})"
        )


class Redacted:
    """A value that redacts itself with ``str()`` and ``repr()``."""

    __slots__ = ("_redactor", "_value")

    def __init__(self, redactor: Redactor, value: Any):
        self._redactor = redactor
        self._value = value

    def __str__(self) -> str:
        return self._redactor.redact(str(self._value))

    def __repr__(self) -> str:
        return self._redactor.redact(repr(self._value))


class RedactorBuilder:
    """Checked builder for :class:`Redactor`.

    Example::

        redactor = RedactorBuilder().char("X").partial().build()
        redactor.redact("John Doe")  # 'JoXX Xoe'
    """

    def __init__(self):
        self._mask_char: Optional[str] = None
        self._partial = False
        self._fixed: Optional[int] = None

    def char(self, mask_char: str) -> "RedactorBuilder":
        self._mask_char = mask_char
        return self

    def partial(self) -> "RedactorBuilder":
        self._partial = True
        return self

    def fixed(self, width: int) -> "RedactorBuilder":
        self._fixed = width
        return self

    def build(self) -> Redactor:
        """Validate the options and return the ``Redactor``."""
        if self._partial and self._fixed is not None:
            raise ConfigurationError("partial and fixed redaction are mutually exclusive")
        mask_char = check_mask_char(
            DEFAULT_MASK_CHAR if self._mask_char is None else self._mask_char
        )
        fixed = None if self._fixed is None else check_fixed_width(self._fixed)
        return Redactor(mask_char, self._partial, fixed)


__all__ = [
    "DEFAULT_MASK_CHAR",
    "FULL_MASK_WIDTH",
    "MIN_PARTIAL_CHARS",
    "MAX_PARTIAL_EXPOSE",
    "Redacted",
    "Redactor",
    "RedactorBuilder",
    "mask_all",
    "mask_fixed",
    "mask_partial",
    "pass_through",
]

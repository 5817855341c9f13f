"""Exception hierarchy for veil."""
from __future__ import annotations


class VeilError(Exception):
    """Base class for every error raised by veil."""


class ConfigurationError(VeilError, ValueError):
    """A schema or toggle configuration is invalid.

    Raised eagerly, when a shape is declared or a config document is
    loaded, so a misconfigured program fails at startup instead of at
    render time. Messages name the shape, field or rule at fault and never
    include the value being rendered.
    """


class RedactionAbortedError(ConfigurationError):
    """The toggle fallback is ``panic`` and no environment rule matched."""


class ToggleAlreadyResolvedError(VeilError, RuntimeError):
    """The redaction toggle was already resolved for this process."""


__all__ = [
    "VeilError",
    "ConfigurationError",
    "RedactionAbortedError",
    "ToggleAlreadyResolvedError",
]

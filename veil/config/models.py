"""Configuration models for the redaction toggle."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Mapping, Optional, Tuple


class FallbackPolicy(Enum):
    """What to do when no environment rule matches."""

    REDACT = "redact"
    ALLOW = "allow"
    ABORT = "panic"


@dataclass(frozen=True)
class ToggleRule:
    """Turn redaction on or off when ``variable`` holds one of ``values``."""

    variable: str
    values: FrozenSet[str]
    redact: bool

    def matches(self, environ: Mapping[str, str]) -> bool:
        value = environ.get(self.variable)
        return value is not None and value in self.values


@dataclass(frozen=True)
class ToggleConfig:
    """Ordered toggle rules plus the fallback applied when none matches.

    Rules are evaluated in order and the first match wins.
    """

    rules: Tuple[ToggleRule, ...] = ()
    fallback: FallbackPolicy = FallbackPolicy.REDACT
    source: str = field(default="<default>", compare=False)

    @classmethod
    def default(cls) -> "ToggleConfig":
        """No rules, redact everything."""
        return cls()

    def first_match(self, environ: Mapping[str, str]) -> Optional[ToggleRule]:
        for rule in self.rules:
            if rule.matches(environ):
                return rule
        return None


__all__ = ["FallbackPolicy", "ToggleRule", "ToggleConfig"]

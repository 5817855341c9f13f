"""Process-wide switch deciding whether redaction is active.

The decision is taken once, on the first render, and never revisited:

1. if ``VEIL_DISABLE_REDACTION`` is present in the environment (any value),
   redaction is off;
2. otherwise the first ``ToggleRule`` whose variable holds one of its values
   decides;
3. otherwise the ``FallbackPolicy`` applies. ``ABORT`` leaves the toggle in a
   terminal aborted state where every render raises
   ``RedactionAbortedError``.

Mutating the environment afterwards has no effect.
"""
from __future__ import annotations

import logging
import os
import threading
from enum import Enum
from typing import Mapping, Optional

from .config.loader import find_config, load_config
from .config.models import FallbackPolicy, ToggleConfig
from .errors import (
    ConfigurationError,
    RedactionAbortedError,
    ToggleAlreadyResolvedError,
)

logger = logging.getLogger(__name__)

DISABLE_ENV_VAR = "VEIL_DISABLE_REDACTION"

ABORT_MESSAGE = (
    "veil expected environment variables to be set that determine whether "
    "sensitive data should be redacted, but none of the configured rules "
    "matched and the fallback is \"panic\" (config: {source})"
)


class RedactionBehavior(Enum):
    """How redactable values are rendered."""

    REDACT = "redact"
    PLAINTEXT = "plaintext"

    def is_redact(self) -> bool:
        return self is RedactionBehavior.REDACT

    def is_plaintext(self) -> bool:
        return self is RedactionBehavior.PLAINTEXT


class ToggleState:
    """Lazily resolved, write-once redaction toggle.

    Parameters
    ----------
    config: ToggleConfig, optional
        Rules to evaluate. When omitted the config file found by
        :func:`veil.config.find_config` is loaded at resolution time, or
        the default config (no rules, redact) if there is none.
    environ: Mapping[str, str], optional
        Environment to read; defaults to ``os.environ``.
    """

    UNINITIALIZED = "uninitialized"
    RESOLVED = "resolved"
    ABORTED = "aborted"

    def __init__(
        self,
        config: Optional[ToggleConfig] = None,
        environ: Optional[Mapping[str, str]] = None,
    ):
        self._config = config
        self._environ = environ
        self._lock = threading.Lock()
        self._behavior: Optional[RedactionBehavior] = None
        self._abort_message: Optional[str] = None
        self.reason: Optional[str] = None

    @property
    def state(self) -> str:
        if self._behavior is not None:
            return self.RESOLVED
        if self._abort_message is not None:
            return self.ABORTED
        return self.UNINITIALIZED

    def configure(self, config: ToggleConfig) -> None:
        """Install ``config``; only allowed before the first resolution."""
        with self._lock:
            self._ensure_uninitialized()
            self._config = config

    def disable(self) -> None:
        """Turn redaction off for the lifetime of this state.

        Raises ``ToggleAlreadyResolvedError`` if the toggle was already
        resolved (or aborted); a decision that has been observed is final.
        """
        with self._lock:
            self._ensure_uninitialized()
            self._settle(RedactionBehavior.PLAINTEXT, "disable() called")

    def behavior(self) -> RedactionBehavior:
        behavior = self._behavior
        if behavior is not None:
            return behavior
        return self._resolve()

    def is_active(self) -> bool:
        """Whether redaction is on; resolves the toggle on first call."""
        return self.behavior().is_redact()

    def _ensure_uninitialized(self) -> None:
        if self._behavior is not None or self._abort_message is not None:
            raise ToggleAlreadyResolvedError(
                f"redaction toggle is already {self.state} ({self.reason})"
            )

    def _settle(self, behavior: RedactionBehavior, reason: str) -> RedactionBehavior:
        self.reason = reason
        self._behavior = behavior
        return behavior

    def _resolve(self) -> RedactionBehavior:
        with self._lock:
            if self._behavior is not None:
                return self._behavior
            if self._abort_message is not None:
                raise RedactionAbortedError(self._abort_message)

            environ = self._environ if self._environ is not None else os.environ

            if DISABLE_ENV_VAR in environ:
                logger.warning(
                    "%s is set: redaction is disabled for this process",
                    DISABLE_ENV_VAR,
                )
                return self._settle(RedactionBehavior.PLAINTEXT, DISABLE_ENV_VAR)

            config = self._config
            if config is None:
                path = find_config(environ=environ)
                try:
                    config = load_config(path) if path else ToggleConfig.default()
                except ConfigurationError as e:
                    self.reason = "invalid config"
                    self._abort_message = str(e)
                    raise RedactionAbortedError(self._abort_message) from e
                self._config = config

            rule = config.first_match(environ)
            if rule is not None:
                behavior = (
                    RedactionBehavior.REDACT if rule.redact else RedactionBehavior.PLAINTEXT
                )
                logger.info(
                    "redaction %s by rule on %s",
                    "enabled" if rule.redact else "disabled",
                    rule.variable,
                )
                return self._settle(behavior, f"rule on {rule.variable}")

            if config.fallback is FallbackPolicy.ABORT:
                self.reason = "fallback panic"
                self._abort_message = ABORT_MESSAGE.format(source=config.source)
                logger.error("redaction toggle aborted: no rule matched")
                raise RedactionAbortedError(self._abort_message)

            redact = config.fallback is FallbackPolicy.REDACT
            logger.info(
                "redaction %s by fallback", "enabled" if redact else "disabled"
            )
            return self._settle(
                RedactionBehavior.REDACT if redact else RedactionBehavior.PLAINTEXT,
                "fallback",
            )


_state = ToggleState()


def get_state() -> ToggleState:
    """Return the process-wide toggle state."""
    return _state


def configure(config: ToggleConfig) -> None:
    """Install the process-wide ``ToggleConfig``; call once at startup."""
    _state.configure(config)


def disable() -> None:
    """Disable redaction process-wide. Must run before the first render."""
    _state.disable()


def get_redaction_behavior() -> RedactionBehavior:
    return _state.behavior()


def is_redaction_active() -> bool:
    return _state.is_active()


__all__ = [
    "DISABLE_ENV_VAR",
    "RedactionBehavior",
    "ToggleState",
    "configure",
    "disable",
    "get_redaction_behavior",
    "get_state",
    "is_redaction_active",
]

"""Configuration loader for the redaction toggle.

A config document looks like this (TOML shown, YAML with the same
structure is accepted too)::

    [[env.APP_ENV]]
    values = ["dev", "qa"]
    redact = false

    [fallback]
    redact = true  # or false, or "panic"
"""
from __future__ import annotations

import os
import tomllib
import warnings
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Set, Tuple

import yaml

from ..errors import ConfigurationError
from ..utils.io import read_toml, read_yaml
from .models import FallbackPolicy, ToggleConfig, ToggleRule

CONFIG_FILENAMES = (".veil.toml", ".veil.yaml", ".veil.yml")
CONFIG_PATH_ENV_VAR = "VEIL_CONFIG_PATH"
PROJECT_ROOT_MARKER = "pyproject.toml"

_TOP_LEVEL_KEYS = {"env", "fallback"}
_RULE_KEYS = {"values", "redact"}


def _parse_fallback(raw: Any, source: str) -> FallbackPolicy:
    if not isinstance(raw, dict):
        raise ConfigurationError(f"{source}: missing [fallback] table")
    unknown = set(raw) - {"redact"}
    if unknown:
        raise ConfigurationError(
            f"{source}: unknown key(s) in [fallback]: {', '.join(sorted(unknown))}"
        )
    if "redact" not in raw:
        raise ConfigurationError(f"{source}: [fallback] requires a 'redact' key")

    value = raw["redact"]
    if value is True:
        return FallbackPolicy.REDACT
    if value is False:
        return FallbackPolicy.ALLOW
    if value == "panic":
        return FallbackPolicy.ABORT
    raise ConfigurationError(
        f'{source}: fallback redact must be true, false or "panic"'
    )


def _parse_rules(raw: Any, source: str) -> List[ToggleRule]:
    if raw is None:
        return []
    if not isinstance(raw, dict):
        raise ConfigurationError(f"{source}: 'env' must be a table of variables")

    rules: List[ToggleRule] = []
    seen: Set[Tuple[str, str]] = set()
    for variable, blocks in raw.items():
        if isinstance(blocks, dict):
            blocks = [blocks]
        if not isinstance(blocks, list):
            raise ConfigurationError(
                f"{source}: env.{variable} must be a list of rule tables"
            )
        for index, block in enumerate(blocks):
            where = f"{source}: env.{variable}[{index}]"
            if not isinstance(block, dict):
                raise ConfigurationError(f"{where} must be a table")
            unknown = set(block) - _RULE_KEYS
            if unknown:
                raise ConfigurationError(
                    f"{where}: unknown key(s): {', '.join(sorted(unknown))}"
                )
            values = block.get("values")
            if not isinstance(values, list) or not all(
                isinstance(v, str) for v in values
            ):
                raise ConfigurationError(f"{where}: 'values' must be a list of strings")
            if not values:
                raise ConfigurationError(f"{where}: 'values' is empty")
            redact = block.get("redact")
            if not isinstance(redact, bool):
                raise ConfigurationError(f"{where}: 'redact' must be a boolean")

            for value in values:
                if (variable, value) in seen:
                    raise ConfigurationError(
                        f"{where}: duplicate variable/value pair for {variable}"
                    )
                seen.add((variable, value))

            rules.append(
                ToggleRule(variable=variable, values=frozenset(values), redact=redact)
            )
    return rules


def parse_config(raw: Dict[str, Any], source: str = "<config>") -> ToggleConfig:
    """Validate an already-parsed config document and build a ``ToggleConfig``.

    Parameters
    ----------
    raw: dict
        The document, as returned by a TOML or YAML parser.
    source: str
        Where the document came from; used in error messages.
    """
    if not isinstance(raw, dict):
        raise ConfigurationError(f"{source}: config document must be a table")
    unknown = set(raw) - _TOP_LEVEL_KEYS
    if unknown:
        raise ConfigurationError(
            f"{source}: unknown top-level key(s): {', '.join(sorted(unknown))}"
        )

    rules = _parse_rules(raw.get("env"), source)
    fallback = _parse_fallback(raw.get("fallback"), source)

    if not rules:
        warnings.warn(
            f"{source} defines no [[env.*]] rules; the fallback always applies.",
            UserWarning,
        )

    return ToggleConfig(rules=tuple(rules), fallback=fallback, source=source)


def load_config(path: str) -> ToggleConfig:
    """Load a toggle configuration from a TOML or YAML file.

    Parameters
    ----------
    path: str
        Path to the file. ``.yaml``/``.yml`` files are read as YAML,
        everything else as TOML.
    """
    suffix = Path(path).suffix.lower()
    try:
        if suffix in (".yaml", ".yml"):
            raw = read_yaml(path)
        else:
            raw = read_toml(path)
    except OSError as e:
        raise ConfigurationError(f"cannot read {path}: {e.strerror}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"{path}: invalid TOML: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"{path}: invalid YAML") from e
    return parse_config(raw, source=str(path))


def find_config(
    start: Optional[str] = None, environ: Optional[Mapping[str, str]] = None
) -> Optional[str]:
    """Find the config file that applies to ``start`` (default: cwd).

    ``VEIL_CONFIG_PATH`` in ``environ`` (default: ``os.environ``) wins when
    set. Otherwise walks up the directory tree looking for one of
    ``CONFIG_FILENAMES`` and stops at the first directory containing
    ``pyproject.toml``.
    """
    if environ is None:
        environ = os.environ
    explicit = environ.get(CONFIG_PATH_ENV_VAR)
    if explicit:
        return explicit

    directory = Path(start or os.getcwd()).resolve()
    while True:
        for name in CONFIG_FILENAMES:
            candidate = directory / name
            if candidate.is_file():
                return str(candidate)
        if (directory / PROJECT_ROOT_MARKER).is_file():
            return None
        if directory.parent == directory:
            return None
        directory = directory.parent


__all__ = ["parse_config", "load_config", "find_config", "CONFIG_FILENAMES"]

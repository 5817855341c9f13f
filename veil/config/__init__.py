"""Configuration helpers for the redaction toggle."""

from .models import FallbackPolicy, ToggleConfig, ToggleRule
from .loader import find_config, load_config, parse_config

__all__ = [
    "FallbackPolicy",
    "ToggleConfig",
    "ToggleRule",
    "find_config",
    "load_config",
    "parse_config",
]

"""Utility helpers for I/O operations."""
from __future__ import annotations

import tomllib
from typing import Any, Dict

import yaml


def read_yaml(path: str) -> Dict[str, Any]:
    """Read a YAML file and return its content as a dictionary."""
    with open(path, "r", encoding="utf-8") as fh:
        return yaml.safe_load(fh) or {}


def read_toml(path: str) -> Dict[str, Any]:
    """Read a TOML file and return its content as a dictionary."""
    with open(path, "rb") as fh:
        return tomllib.load(fh)


__all__ = ["read_yaml", "read_toml"]

"""
Configuration Loader (``billing_config.loader``).

Responsibility
--------------
Reads a YAML settings file and parses it into a ``BillingConfig``.  Runtime
callers go through ``billing_config.get_active_config()`` instead.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Invalid values or unknown keys  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import fields
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from billing_config.schema import BillingConfig

_KNOWN_KEYS = {f.name for f in fields(BillingConfig)} - {"checksum"}


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the document is not a mapping.
    """
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping at the top level")
    return data


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON serialization of ``data``."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()


def _parse_ceiling(value: Any) -> Decimal:
    try:
        return Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"amount_ceiling is not a number: {value!r}") from None


def parse_config(data: dict[str, Any], base: dict[str, Any] | None = None) -> BillingConfig:
    """
    Build a ``BillingConfig`` from ``data`` layered over ``base``.

    Raises:
        ValueError: unknown keys or invalid values.
    """
    unknown = set(data) - _KNOWN_KEYS
    if unknown:
        raise ValueError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

    merged = {**(base or {}), **data}
    kwargs: dict[str, Any] = {}
    if "currency" in merged:
        kwargs["currency"] = str(merged["currency"])
    if "amount_ceiling" in merged:
        kwargs["amount_ceiling"] = _parse_ceiling(merged["amount_ceiling"])
    for key in ("unknown_client_label", "independent_client_label"):
        if key in merged:
            kwargs[key] = str(merged[key])
    if "data_dir" in merged:
        kwargs["data_dir"] = Path(str(merged["data_dir"]))
    if "log_level" in merged:
        kwargs["log_level"] = str(merged["log_level"]).upper()
    if "sort_groups" in merged:
        kwargs["sort_groups"] = bool(merged["sort_groups"])
    kwargs["checksum"] = compute_checksum(merged)
    return BillingConfig(**kwargs)

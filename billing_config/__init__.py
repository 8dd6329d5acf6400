"""
billing_config -- single public entrypoint for billing configuration.

Responsibility:
    Provides the ONLY way to obtain settings at runtime through
    ``get_active_config()``.  Services and scripts receive the returned
    ``BillingConfig``; nothing else reads configuration files or
    environment variables.

Architecture position:
    Configuration -- sits above ``billing_kernel`` and below
    ``billing_services`` / ``scripts``.  Engines never import it; they take
    the ceiling and labels as parameters.

Failure modes:
    - ``FileNotFoundError`` -- the requested settings file does not exist.
    - ``yaml.YAMLError`` -- malformed YAML.
    - ``ValueError`` -- unknown keys or invalid values.

Audit relevance:
    Every successful ``get_active_config()`` call emits a
    ``BILLING_CONFIG_TRACE`` log entry with the source path and a checksum
    of the effective settings.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from billing_config.loader import load_yaml_file, parse_config
from billing_config.schema import BillingConfig

_logger = logging.getLogger("billing_kernel.config")

DEFAULTS_PATH = Path(__file__).parent / "defaults.yaml"
ENV_VAR = "BILLING_CONFIG"


def get_active_config(path: str | Path | None = None) -> BillingConfig:
    """The ONLY public configuration entrypoint.

    Settings are the packaged defaults overlaid with ``path``, else the file
    named by ``$BILLING_CONFIG``, when either is given.

    Raises:
        FileNotFoundError: If the settings file does not exist.
        ValueError: If a value is invalid.
    """
    defaults = load_yaml_file(DEFAULTS_PATH)
    source = path or os.environ.get(ENV_VAR) or None

    overrides = load_yaml_file(Path(source)) if source else {}
    config = parse_config(overrides, base=defaults)

    _logger.info(
        "BILLING_CONFIG_TRACE",
        extra={
            "trace_type": "BILLING_CONFIG_TRACE",
            "source": str(source) if source else str(DEFAULTS_PATH),
            "checksum": config.checksum,
            "currency": config.currency,
            "amount_ceiling": str(config.amount_ceiling),
        },
    )
    return config


__all__ = ["BillingConfig", "get_active_config"]

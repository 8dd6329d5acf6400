"""
Configuration schema (``billing_config.schema``).

``BillingConfig`` is the frozen runtime settings object.  It carries no
behaviour beyond validation of its own fields.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path

from billing_kernel.domain.values import AMOUNT_CEILING

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class BillingConfig:
    """
    Effective billing settings.

    Guarantees:
        - ``amount_ceiling`` is positive.
        - ``log_level`` is a standard logging level name.
    """

    currency: str = "COP"
    amount_ceiling: Decimal = AMOUNT_CEILING
    unknown_client_label: str = "Cliente desconocido"
    independent_client_label: str = "Cliente independiente"
    data_dir: Path = Path("data")
    log_level: str = "INFO"
    sort_groups: bool = True
    checksum: str = ""

    def __post_init__(self) -> None:
        if not self.amount_ceiling.is_finite() or self.amount_ceiling <= 0:
            raise ValueError(
                f"amount_ceiling must be a positive number, got {self.amount_ceiling}"
            )
        if self.log_level not in LOG_LEVELS:
            raise ValueError(
                f"log_level must be one of {', '.join(LOG_LEVELS)}, got {self.log_level!r}"
            )
        if not self.currency:
            raise ValueError("currency must not be empty")

"""
Module: billing_engines.totals
Responsibility:
    Derive the total billable value of a contract or project through an
    explicit, ordered fallback chain.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Fallback order (first non-zero wins):
    1. Explicit value: project ``total_amount``; contract
       ``total_hours x hourly_rate``.
    2. Own ``hourly_rate x estimated_hours`` (projects).
    3. Linked contract ``hourly_rate x estimated_hours`` for a project that
       belongs to a contract and has no rate of its own.
    4. Zero.

Failure modes:
    - AmountTooLargeError when any product exceeds the ceiling.  The
      aggregator degrades such records to zero; the payment calculator
      turns it into a TOO_LARGE result.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable

from billing_kernel.domain.records import Contract, Project
from billing_kernel.domain.values import AMOUNT_CEILING, ZERO
from billing_engines.amounts import ensure_within_ceiling
from billing_kernel.logging_config import get_logger

logger = get_logger("engines.totals")


def contract_total(contract: Contract, *, ceiling: Decimal = AMOUNT_CEILING) -> Decimal:
    """``total_hours x hourly_rate``, or zero when either is not positive."""
    if contract.total_hours <= ZERO or contract.hourly_rate <= ZERO:
        return ZERO
    return ensure_within_ceiling(
        contract.total_hours * contract.hourly_rate,
        ceiling=ceiling,
        reason=(
            f"Contrato {contract.contract_number or contract.id}: "
            f"horas totales {contract.total_hours}, tarifa {contract.hourly_rate}"
        ),
    )


def project_total(
    project: Project,
    linked_contract: Contract | None = None,
    *,
    ceiling: Decimal = AMOUNT_CEILING,
) -> Decimal:
    """Resolve a project's total value; see the module docstring for order."""
    if project.total_amount > ZERO:
        return ensure_within_ceiling(
            project.total_amount,
            ceiling=ceiling,
            reason=f"Proyecto {project.name}: valor total {project.total_amount}",
        )

    if project.estimated_hours <= ZERO:
        return ZERO

    if project.hourly_rate > ZERO:
        return ensure_within_ceiling(
            project.hourly_rate * project.estimated_hours,
            ceiling=ceiling,
            reason=(
                f"Proyecto {project.name}: tarifa {project.hourly_rate}, "
                f"horas estimadas {project.estimated_hours}"
            ),
        )

    if (
        not project.is_independent
        and project.contract_id is not None
        and linked_contract is not None
        and linked_contract.hourly_rate > ZERO
    ):
        logger.debug("project_total_from_contract_rate", extra={
            "project_id": project.id,
            "contract_id": linked_contract.id,
            "hourly_rate": str(linked_contract.hourly_rate),
        })
        return ensure_within_ceiling(
            linked_contract.hourly_rate * project.estimated_hours,
            ceiling=ceiling,
            reason=(
                f"Proyecto {project.name}: tarifa del contrato "
                f"{linked_contract.hourly_rate}, horas estimadas "
                f"{project.estimated_hours}"
            ),
        )

    return ZERO


def resolve_total(
    entity: Project | Contract,
    linked_contract: Contract | None = None,
    *,
    ceiling: Decimal = AMOUNT_CEILING,
) -> Decimal:
    """
    Total billable value of a project or contract.

    Args:
        entity: The project or contract being billed.
        linked_contract: The contract a non-independent project belongs to,
            used only when the project has no rate of its own.
        ceiling: Upper bound on any derived product.

    Raises:
        AmountTooLargeError: if a product exceeds ``ceiling``.
    """
    if isinstance(entity, Contract):
        return contract_total(entity, ceiling=ceiling)
    return project_total(entity, linked_contract, ceiling=ceiling)


def find_linked_contract(
    project: Project, contracts: Iterable[Contract]
) -> Contract | None:
    """The contract a project belongs to, if it is present in ``contracts``."""
    if project.contract_id is None:
        return None
    for contract in contracts:
        if contract.id == project.contract_id:
            return contract
    return None


def effective_hourly_rate(project: Project, linked_contract: Contract | None) -> Decimal:
    """The project's own rate, else its contract's rate, else zero."""
    if project.hourly_rate > ZERO:
        return project.hourly_rate
    if not project.is_independent and linked_contract is not None:
        return linked_contract.hourly_rate
    return ZERO

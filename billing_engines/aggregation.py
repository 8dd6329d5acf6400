"""
Module: billing_engines.aggregation
Responsibility:
    Build the billing overview: one billing item per contract and per
    independent project, grouped by client, with paid / pending totals and
    a payment status at both item and group level.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Paid amounts are the sum of the entity's payment rows; the legacy
      ``billed_amount`` / ``paid_amount`` columns are ignored.
    - Group totals are the sums of their items; group percentage and
      status are recomputed from those sums, never averaged.
    - Groups keep first-seen order unless ``sort_groups`` is applied.

Failure modes:
    None.  Malformed records degrade: an overflowing total becomes zero,
    a missing client becomes the placeholder label, and a warning is
    logged.

Usage:
    from billing_engines.aggregation import build_billing_groups

    groups = build_billing_groups(contracts, projects, payments, clients)
    for group in groups:
        print(group.client_name, group.pending_amount, group.payment_status)
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable, Sequence

from billing_kernel.domain.records import (
    Client,
    Contract,
    ItemType,
    Payment,
    PaymentStatus,
    Project,
    RecordId,
)
from billing_kernel.domain.values import AMOUNT_CEILING, ZERO
from billing_kernel.exceptions import AmountTooLargeError
from billing_kernel.logging_config import get_logger
from billing_engines.status import classify, payment_percentage, pending_amount
from billing_engines.totals import find_linked_contract, resolve_total
from billing_engines.tracer import traced_engine

logger = get_logger("engines.aggregation")

UNKNOWN_CLIENT_LABEL = "Cliente desconocido"
INDEPENDENT_CLIENT_LABEL = "Cliente independiente"


@dataclass(frozen=True)
class BillingItem:
    """One billable contract or independent project."""

    item_type: ItemType
    item_id: RecordId | None
    name: str
    description: str | None
    client_name: str
    total_value: Decimal
    paid_amount: Decimal
    pending_amount: Decimal
    payment_percentage: Decimal
    payment_status: PaymentStatus
    status: str | None = None
    payment_count: int = 0
    last_payment_date: date | None = None


@dataclass(frozen=True)
class BillingGroup:
    """All billing items of one client, with summed totals."""

    client_name: str
    items: tuple[BillingItem, ...]
    total_value: Decimal
    paid_amount: Decimal
    pending_amount: Decimal
    payment_percentage: Decimal
    payment_status: PaymentStatus

    @property
    def item_count(self) -> int:
        return len(self.items)


@dataclass(frozen=True)
class BillingSummary:
    """Totals over a (possibly filtered) list of billing items."""

    total_value: Decimal
    paid_amount: Decimal
    pending_amount: Decimal
    item_count: int = 0


def _safe_total(
    entity: Contract | Project,
    linked: Contract | None,
    ceiling: Decimal,
) -> Decimal:
    try:
        return resolve_total(entity, linked, ceiling=ceiling)
    except AmountTooLargeError as exc:
        logger.warning("billing_total_degraded", extra={
            "entity_type": type(entity).__name__.lower(),
            "entity_id": entity.id,
            "value": str(exc.value),
            "ceiling": str(exc.ceiling),
        })
        return ZERO


def _make_item(
    item_type: ItemType,
    entity: Contract | Project,
    *,
    name: str,
    client_name: str,
    total_value: Decimal,
    payments: Sequence[Payment],
) -> BillingItem:
    paid = sum((p.amount for p in payments), ZERO)
    dates = [p.payment_date for p in payments if p.payment_date is not None]
    return BillingItem(
        item_type=item_type,
        item_id=entity.id,
        name=name,
        description=entity.description,
        client_name=client_name,
        total_value=total_value,
        paid_amount=paid,
        pending_amount=pending_amount(paid, total_value),
        payment_percentage=payment_percentage(paid, total_value),
        payment_status=classify(paid, total_value),
        status=entity.status,
        payment_count=len(payments),
        last_payment_date=max(dates) if dates else None,
    )


def build_billing_items(
    contracts: Iterable[Contract],
    projects: Iterable[Project],
    payments: Iterable[Payment],
    clients: Iterable[Client] = (),
    *,
    ceiling: Decimal = AMOUNT_CEILING,
    unknown_client_label: str = UNKNOWN_CLIENT_LABEL,
    independent_client_label: str = INDEPENDENT_CLIENT_LABEL,
) -> list[BillingItem]:
    """
    Flat list of billing items: every contract, then every independent
    project.

    Projects that belong to a contract are billed through the contract and
    do not get an item of their own.
    """
    contracts = list(contracts)
    clients_by_id = {c.id: c for c in clients if c.id is not None}

    by_contract: dict[RecordId, list[Payment]] = defaultdict(list)
    by_project: dict[RecordId, list[Payment]] = defaultdict(list)
    for payment in payments:
        if payment.contract_id is not None:
            by_contract[payment.contract_id].append(payment)
        elif payment.project_id is not None:
            by_project[payment.project_id].append(payment)

    items: list[BillingItem] = []

    for contract in contracts:
        client = clients_by_id.get(contract.client_id)
        client_name = client.display_name if client is not None else None
        if not client_name:
            logger.warning("billing_client_unresolved", extra={
                "contract_id": contract.id,
                "client_id": contract.client_id,
            })
            client_name = unknown_client_label
        items.append(_make_item(
            ItemType.CONTRACT,
            contract,
            name=contract.contract_number or f"Contrato {contract.id}",
            client_name=client_name,
            total_value=_safe_total(contract, None, ceiling),
            payments=by_contract.get(contract.id, ()),
        ))

    for project in projects:
        if not project.is_independent:
            continue
        if not project.is_well_formed:
            logger.warning("billing_project_malformed", extra={
                "project_id": project.id,
                "contract_id": project.contract_id,
            })
        items.append(_make_item(
            ItemType.PROJECT,
            project,
            name=project.name or f"Proyecto {project.id}",
            client_name=project.client_name or independent_client_label,
            total_value=_safe_total(
                project, find_linked_contract(project, contracts), ceiling
            ),
            payments=by_project.get(project.id, ()),
        ))

    return items


def group_billing_items(items: Iterable[BillingItem]) -> list[BillingGroup]:
    """Group items by client name, keeping first-seen order."""
    grouped: dict[str, list[BillingItem]] = {}
    for item in items:
        grouped.setdefault(item.client_name, []).append(item)

    groups = []
    for client_name, group_items in grouped.items():
        summary = summarize_items(group_items)
        groups.append(BillingGroup(
            client_name=client_name,
            items=tuple(group_items),
            total_value=summary.total_value,
            paid_amount=summary.paid_amount,
            pending_amount=summary.pending_amount,
            payment_percentage=payment_percentage(
                summary.paid_amount, summary.total_value
            ),
            payment_status=classify(summary.paid_amount, summary.total_value),
        ))
    return groups


@traced_engine(
    "aggregation", "1.0", fingerprint_fields=("contracts", "projects", "payments")
)
def build_billing_groups(
    contracts: Sequence[Contract],
    projects: Sequence[Project],
    payments: Sequence[Payment],
    clients: Sequence[Client] = (),
    *,
    ceiling: Decimal = AMOUNT_CEILING,
    unknown_client_label: str = UNKNOWN_CLIENT_LABEL,
    independent_client_label: str = INDEPENDENT_CLIENT_LABEL,
) -> list[BillingGroup]:
    """
    Billing overview grouped by client.

    Args:
        contracts: All contracts.
        projects: All projects; only independent ones become items.
        payments: All payment rows.
        clients: Clients, for contract client labels.
        ceiling: Upper bound on derived totals.
        unknown_client_label: Label for contracts without a known client.
        independent_client_label: Label for independent projects without a
            client name.

    Returns:
        Groups in first-seen order.
    """
    items = build_billing_items(
        contracts,
        projects,
        payments,
        clients,
        ceiling=ceiling,
        unknown_client_label=unknown_client_label,
        independent_client_label=independent_client_label,
    )
    groups = group_billing_items(items)
    logger.info("billing_groups_built", extra={
        "group_count": len(groups),
        "item_count": len(items),
    })
    return groups


def sort_groups(groups: Iterable[BillingGroup]) -> list[BillingGroup]:
    """Groups ordered by client name, case-insensitively."""
    return sorted(groups, key=lambda g: g.client_name.casefold())


def _normalize_filter(value: str | None) -> str | None:
    if value is None:
        return None
    text = str(getattr(value, "value", value)).strip().lower()
    if not text or text == "all":
        return None
    return text


def filter_billing_items(
    items: Iterable[BillingItem],
    search: str | None = None,
    payment_status: PaymentStatus | str | None = None,
    item_type: ItemType | str | None = None,
) -> list[BillingItem]:
    """
    Apply the billing list filters.

    ``search`` matches name, client name or description, case-insensitively.
    A status or type of ``None`` or ``"all"`` does not filter.
    """
    needle = (search or "").strip().casefold()
    status = _normalize_filter(payment_status)
    kind = _normalize_filter(item_type)

    result = []
    for item in items:
        if needle:
            haystack = " ".join(
                part for part in (item.name, item.client_name, item.description) if part
            ).casefold()
            if needle not in haystack:
                continue
        if status is not None and item.payment_status.value != status:
            continue
        if kind is not None and item.item_type.value != kind:
            continue
        result.append(item)
    return result


def summarize_items(items: Iterable[BillingItem]) -> BillingSummary:
    """Summed totals of ``items``."""
    total = paid = pending = ZERO
    count = 0
    for item in items:
        total += item.total_value
        paid += item.paid_amount
        pending += item.pending_amount
        count += 1
    return BillingSummary(
        total_value=total,
        paid_amount=paid,
        pending_amount=pending,
        item_count=count,
    )

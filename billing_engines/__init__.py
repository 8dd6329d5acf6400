"""
Module: billing_engines
Responsibility:
    Package entrypoint re-exporting the pure billing engines.  This is the
    import surface for billing_services and scripts.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import billing_kernel (and sibling engine modules).
    MUST NOT import billing_services or billing_config.

Invariants enforced:
    - Engines never call ``datetime.now()`` or ``date.today()``; dates are
      passed in by the caller.
    - Decimal-only arithmetic for amounts and hours.
    - Identical inputs always produce identical outputs.

Usage:
    from billing_engines import compute_payment, build_billing_groups
"""

from billing_kernel.logging_config import get_logger

logger = get_logger("engines")

from billing_engines.aggregation import (
    BillingGroup,
    BillingItem,
    BillingSummary,
    build_billing_groups,
    build_billing_items,
    filter_billing_items,
    group_billing_items,
    sort_groups,
    summarize_items,
)
from billing_engines.amounts import (
    ensure_within_ceiling,
    require_valid_amount,
    validate_amount,
)
from billing_engines.history import (
    PaymentTypeGroup,
    group_payments_by_type,
    last_payment_date,
    payment_type_label,
    payments_for,
)
from billing_engines.payments import (
    FixedPayment,
    PaymentComputation,
    PaymentContext,
    PaymentEdit,
    PaymentInput,
    PaymentResult,
    PercentagePayment,
    ProjectScopePayment,
    RecurringSupportPayment,
    SupportEvolutivePayment,
    compute_payment,
    compute_payment_edit,
    edit_form_defaults,
    payment_input_from_form,
)
from billing_engines.status import classify, payment_percentage, pending_amount
from billing_engines.totals import (
    contract_total,
    effective_hourly_rate,
    find_linked_contract,
    project_total,
    resolve_total,
)
from billing_engines.usage import (
    ContractUsage,
    ProjectUsage,
    check_hours_available,
    contract_usage,
    ensure_deletable,
    project_usage,
    require_positive_hours,
)

logger.debug("billing_engines_loaded")

__all__ = [
    "BillingGroup",
    "BillingItem",
    "BillingSummary",
    "build_billing_groups",
    "build_billing_items",
    "filter_billing_items",
    "group_billing_items",
    "sort_groups",
    "summarize_items",
    "ensure_within_ceiling",
    "require_valid_amount",
    "validate_amount",
    "PaymentTypeGroup",
    "group_payments_by_type",
    "last_payment_date",
    "payment_type_label",
    "payments_for",
    "FixedPayment",
    "PaymentComputation",
    "PaymentContext",
    "PaymentEdit",
    "PaymentInput",
    "PaymentResult",
    "PercentagePayment",
    "ProjectScopePayment",
    "RecurringSupportPayment",
    "SupportEvolutivePayment",
    "compute_payment",
    "compute_payment_edit",
    "edit_form_defaults",
    "payment_input_from_form",
    "classify",
    "payment_percentage",
    "pending_amount",
    "contract_total",
    "effective_hourly_rate",
    "find_linked_contract",
    "project_total",
    "resolve_total",
    "ContractUsage",
    "ProjectUsage",
    "check_hours_available",
    "contract_usage",
    "ensure_deletable",
    "project_usage",
    "require_positive_hours",
]

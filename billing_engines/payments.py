"""
Module: billing_engines.payments
Responsibility:
    Compute the concrete amount and description of a payment from the
    payment-type tag and the user's form inputs, for every payment-entry
    flow (billing list, payment wizard, payment edit).

Architecture position:
    Engines -- pure calculation layer, zero I/O.  Persistence of the
    returned record is the caller's job.

Payment types:
    fixed              amount as entered
    support_evolutive  amount as entered, "Soporte y evolutivos" label
    recurring_support  amount as entered, "Soporte fijo - YYYY-MM" label
    percentage         resolved total of the billed entity x pct / 100
    project_scope      fixed amount or resolved project total x pct / 100,
                       for a project in the same contract (or among the
                       independent projects for independent billing)

Failure modes:
    User-input failures never escape ``compute_payment``; they come back as
    ``PaymentResult.fail`` with the error code and the offending values:
    NOT_FINITE, NON_POSITIVE, TOO_LARGE, INVALID_PERCENTAGE,
    NO_PROJECT_TOTAL, MISSING_PROJECT_SELECTION, MISSING_BILLING_MONTH,
    UNSUPPORTED_PAYMENT_TYPE.

Usage:
    from billing_engines.payments import (
        PaymentContext, PercentagePayment, compute_payment,
    )

    context = PaymentContext.for_contract(contract, projects, contracts)
    result = compute_payment(PercentagePayment(percentage="30"), context)
    if result:
        payments.add(result.computation.to_record())
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, ClassVar, Mapping, Sequence, Union

from billing_kernel.domain.dtos import CalculationError
from billing_kernel.domain.records import (
    Contract,
    ItemType,
    Payment,
    PaymentType,
    Project,
    ProjectPaymentType,
    RecordId,
    TargetRef,
    parse_date,
    parse_id,
)
from billing_kernel.domain.values import (
    AMOUNT_CEILING,
    HUNDRED,
    ZERO,
    is_billing_month,
    parse_decimal,
)
from billing_kernel.exceptions import (
    AmountError,
    InvalidPercentageError,
    MissingBillingMonthError,
    MissingProjectSelectionError,
    NoProjectTotalError,
    PaymentInputError,
    UnsupportedPaymentTypeError,
)
from billing_kernel.logging_config import get_logger
from billing_engines.amounts import require_valid_amount
from billing_engines.totals import (
    effective_hourly_rate,
    find_linked_contract,
    resolve_total,
)
from billing_engines.tracer import traced_engine

logger = get_logger("engines.payments")

FIXED_LABEL = "Pago"
PERCENTAGE_LABEL = "Pago porcentual"
RECURRING_SUPPORT_LABEL = "Soporte fijo"
PROJECT_SCOPE_LABEL = "Proyecto de alcance fijo"
SUPPORT_EVOLUTIVE_LABEL = "Soporte y evolutivos"


# ============================================================================
# Inputs
# ============================================================================


@dataclass(frozen=True, kw_only=True)
class _PaymentInputBase:
    """Fields every payment form carries."""

    payment_type: ClassVar[PaymentType]

    payment_date: date | None = None
    description: str | None = None
    equivalent_hours: Decimal | None = None


@dataclass(frozen=True, kw_only=True)
class FixedPayment(_PaymentInputBase):
    payment_type: ClassVar[PaymentType] = PaymentType.FIXED
    amount: Any


@dataclass(frozen=True, kw_only=True)
class SupportEvolutivePayment(_PaymentInputBase):
    payment_type: ClassVar[PaymentType] = PaymentType.SUPPORT_EVOLUTIVE
    amount: Any


@dataclass(frozen=True, kw_only=True)
class RecurringSupportPayment(_PaymentInputBase):
    """Monthly support fee; ``billing_month`` is ``YYYY-MM``."""

    payment_type: ClassVar[PaymentType] = PaymentType.RECURRING_SUPPORT
    amount: Any
    billing_month: str | None = None


@dataclass(frozen=True, kw_only=True)
class PercentagePayment(_PaymentInputBase):
    """A share of the billed entity's resolved total."""

    payment_type: ClassVar[PaymentType] = PaymentType.PERCENTAGE
    percentage: Any


@dataclass(frozen=True, kw_only=True)
class ProjectScopePayment(_PaymentInputBase):
    """
    A payment tied to one project of the billed contract or client.

    ``amount`` is used for the fixed sub-type, ``percentage`` for the
    percentage sub-type.
    """

    payment_type: ClassVar[PaymentType] = PaymentType.PROJECT_SCOPE
    selected_project_id: RecordId | None = None
    project_payment_type: ProjectPaymentType = ProjectPaymentType.FIXED
    amount: Any = None
    percentage: Any = None


PaymentInput = Union[
    FixedPayment,
    SupportEvolutivePayment,
    RecurringSupportPayment,
    PercentagePayment,
    ProjectScopePayment,
]


@dataclass(frozen=True)
class PaymentContext:
    """
    Read-only snapshot a payment is computed against.

    Attributes:
        target: The contract or project being billed.
        entity: The billed record itself, used to resolve its total.
        total_value: Pre-resolved total; overrides ``entity`` when given.
        projects: All projects; filtered down to the target's scope.
        contracts: All contracts, for contract-rate fallbacks.
        ceiling: Largest accepted amount.
    """

    target: TargetRef
    entity: Contract | Project | None = None
    total_value: Decimal | None = None
    projects: tuple[Project, ...] = ()
    contracts: tuple[Contract, ...] = ()
    ceiling: Decimal = AMOUNT_CEILING

    @classmethod
    def for_contract(
        cls,
        contract: Contract,
        projects: Sequence[Project] = (),
        contracts: Sequence[Contract] = (),
        *,
        ceiling: Decimal = AMOUNT_CEILING,
    ) -> PaymentContext:
        return cls(
            target=TargetRef.contract(contract.id),
            entity=contract,
            projects=tuple(projects),
            contracts=tuple(contracts),
            ceiling=ceiling,
        )

    @classmethod
    def for_project(
        cls,
        project: Project,
        projects: Sequence[Project] = (),
        contracts: Sequence[Contract] = (),
        *,
        ceiling: Decimal = AMOUNT_CEILING,
    ) -> PaymentContext:
        return cls(
            target=TargetRef.project(project.id),
            entity=project,
            projects=tuple(projects),
            contracts=tuple(contracts),
            ceiling=ceiling,
        )

    def resolve_total_value(self) -> Decimal:
        """Total of the billed entity (raises AmountTooLargeError)."""
        if self.total_value is not None:
            return self.total_value
        if self.entity is None:
            return ZERO
        linked = None
        if isinstance(self.entity, Project):
            linked = find_linked_contract(self.entity, self.contracts)
        return resolve_total(self.entity, linked, ceiling=self.ceiling)

    def scoped_projects(self) -> tuple[Project, ...]:
        """Projects a project-scope payment may reference."""
        if self.target.item_type == ItemType.CONTRACT:
            return tuple(
                p
                for p in self.projects
                if not p.is_independent and p.contract_id == self.target.item_id
            )
        return tuple(p for p in self.projects if p.is_independent)


# ============================================================================
# Results
# ============================================================================


@dataclass(frozen=True)
class PaymentComputation:
    """The payment to persist, as computed."""

    target: TargetRef
    amount: Decimal
    description: str
    payment_type: PaymentType
    payment_date: date | None = None
    billing_month: str | None = None
    equivalent_hours: Decimal | None = None

    def to_record(self) -> dict[str, Any]:
        """The persisted payment mapping.

        ``billing_month`` is only kept for recurring support.
        """
        record: dict[str, Any] = {
            "amount": self.amount,
            "description": self.description,
            "payment_date": (
                self.payment_date.isoformat() if self.payment_date else None
            ),
            "payment_type": self.payment_type.value,
            "billing_month": (
                self.billing_month
                if self.payment_type == PaymentType.RECURRING_SUPPORT
                else None
            ),
            "equivalent_hours": self.equivalent_hours,
        }
        if self.target.item_type == ItemType.CONTRACT:
            record["contract_id"] = self.target.item_id
        else:
            record["project_id"] = self.target.item_id
        return record


@dataclass(frozen=True)
class PaymentResult:
    """Outcome of a payment computation; ``bool(result)`` is success."""

    success: bool
    computation: PaymentComputation | None = None
    error: CalculationError | None = None

    @classmethod
    def ok(cls, computation: PaymentComputation) -> PaymentResult:
        return cls(success=True, computation=computation)

    @classmethod
    def fail(cls, error: CalculationError) -> PaymentResult:
        return cls(success=False, error=error)

    def __bool__(self) -> bool:
        return self.success


# ============================================================================
# Core Payment Functions
# ============================================================================


@traced_engine("payments", "1.0", fingerprint_fields=("payment_input",))
def compute_payment(
    payment_input: PaymentInput, context: PaymentContext
) -> PaymentResult:
    """
    Compute the amount and description of a new payment.

    Pure function - no side effects, no I/O, deterministic output.

    Args:
        payment_input: One of the payment input variants.
        context: Snapshot of the billed entity and related records.

    Returns:
        PaymentResult carrying either the computation or the error.
    """
    try:
        computation = _compute(payment_input, context)
    except (AmountError, PaymentInputError) as exc:
        logger.warning("payment_rejected", extra={
            "target": str(context.target),
            "payment_type": _type_tag(payment_input),
            "code": exc.code,
            "error_details": exc.details(),
        })
        return PaymentResult.fail(CalculationError.from_exception(exc))

    logger.info("payment_computed", extra={
        "target": str(context.target),
        "payment_type": computation.payment_type.value,
        "amount": str(computation.amount),
    })
    return PaymentResult.ok(computation)


def _compute(payment_input: PaymentInput, context: PaymentContext) -> PaymentComputation:
    if isinstance(payment_input, ProjectScopePayment):
        amount, base = _project_scope_amount(payment_input, context)
    elif isinstance(payment_input, PercentagePayment):
        percentage = _require_percentage(payment_input.percentage)
        total = context.resolve_total_value()
        amount = require_valid_amount(
            total * percentage / HUNDRED,
            ceiling=context.ceiling,
            reason=(
                f"Valor total: {total}, porcentaje: {_format_percentage(percentage)}%. "
                "Verifica que el valor total del proyecto/contrato no sea 0"
            ),
        )
        base = f"{PERCENTAGE_LABEL} ({_format_percentage(percentage)}%)"
    elif isinstance(payment_input, RecurringSupportPayment):
        if not is_billing_month(payment_input.billing_month):
            raise MissingBillingMonthError(payment_input.billing_month)
        amount = require_valid_amount(payment_input.amount, ceiling=context.ceiling)
        base = f"{RECURRING_SUPPORT_LABEL} - {payment_input.billing_month}"
    elif isinstance(payment_input, SupportEvolutivePayment):
        amount = require_valid_amount(payment_input.amount, ceiling=context.ceiling)
        base = SUPPORT_EVOLUTIVE_LABEL
    elif isinstance(payment_input, FixedPayment):
        amount = require_valid_amount(payment_input.amount, ceiling=context.ceiling)
        base = FIXED_LABEL
    else:
        raise UnsupportedPaymentTypeError(type(payment_input).__name__)

    return PaymentComputation(
        target=context.target,
        amount=amount,
        description=_with_suffix(base, payment_input.description),
        payment_type=payment_input.payment_type,
        payment_date=payment_input.payment_date,
        billing_month=getattr(payment_input, "billing_month", None),
        equivalent_hours=payment_input.equivalent_hours,
    )


def _project_scope_amount(
    payment_input: ProjectScopePayment, context: PaymentContext
) -> tuple[Decimal, str]:
    """Amount and base description of a project-scope payment."""
    if payment_input.selected_project_id is None:
        raise MissingProjectSelectionError()

    project = next(
        (
            p
            for p in context.scoped_projects()
            if p.id == payment_input.selected_project_id
        ),
        None,
    )
    if project is None:
        raise MissingProjectSelectionError(payment_input.selected_project_id)

    name = project.name or "Proyecto sin nombre"

    if payment_input.project_payment_type != ProjectPaymentType.PERCENTAGE:
        amount = require_valid_amount(payment_input.amount, ceiling=context.ceiling)
        return amount, f"{PROJECT_SCOPE_LABEL} - {name}"

    percentage = _require_percentage(payment_input.percentage)
    linked = find_linked_contract(project, context.contracts)
    total = resolve_total(project, linked, ceiling=context.ceiling)
    if total == ZERO:
        raise NoProjectTotalError(
            project_id=project.id,
            project_name=project.name,
            hourly_rate=effective_hourly_rate(project, linked),
            estimated_hours=project.estimated_hours,
            percentage=percentage,
        )

    amount = require_valid_amount(
        total * percentage / HUNDRED,
        ceiling=context.ceiling,
        reason=(
            f"Total proyecto: {total}, porcentaje: {_format_percentage(percentage)}%. "
            'Usa un porcentaje menor o el tipo "Monto Fijo"'
        ),
    )
    return amount, f"{PROJECT_SCOPE_LABEL} - {name} ({_format_percentage(percentage)}%)"


def _require_percentage(value: Any) -> Decimal:
    percentage = parse_decimal(value)
    if not percentage.is_finite() or percentage <= ZERO or percentage > HUNDRED:
        raise InvalidPercentageError(value)
    return percentage


def _format_percentage(percentage: Decimal) -> str:
    return f"{percentage.normalize():f}"


def _with_suffix(base: str, text: str | None) -> str:
    text = (text or "").strip()
    return f"{base} - {text}" if text else base


def _type_tag(payment_input: Any) -> str:
    payment_type = getattr(payment_input, "payment_type", None)
    return payment_type.value if isinstance(payment_type, PaymentType) else str(payment_type)


# ============================================================================
# Form input
# ============================================================================


def _form_value(form: Mapping[str, Any], camel: str, snake: str) -> Any:
    value = form.get(camel)
    if value is None:
        value = form.get(snake)
    return value


def payment_input_from_form(form: Mapping[str, Any]) -> PaymentInput:
    """
    Build the payment input variant from a raw payment form.

    Accepts the form's camelCase keys (``paymentType``, ``amount``,
    ``percentage``, ``description``, ``paymentDate``, ``billingMonth``,
    ``selectedProjectId``, ``projectPaymentType``, ``equivalentHours``) or
    their snake_case equivalents.  Values are kept raw; validation happens
    in ``compute_payment``.

    Raises:
        UnsupportedPaymentTypeError: unknown ``paymentType``.
    """
    raw_type = _form_value(form, "paymentType", "payment_type") or PaymentType.FIXED.value
    try:
        payment_type = PaymentType(raw_type)
    except ValueError:
        raise UnsupportedPaymentTypeError(raw_type) from None

    equivalent = parse_decimal(_form_value(form, "equivalentHours", "equivalent_hours"))
    common = {
        "payment_date": parse_date(_form_value(form, "paymentDate", "payment_date")),
        "description": _form_value(form, "description", "description"),
        "equivalent_hours": equivalent if equivalent.is_finite() else None,
    }
    amount = _form_value(form, "amount", "amount")
    percentage = _form_value(form, "percentage", "percentage")

    if payment_type == PaymentType.PERCENTAGE:
        return PercentagePayment(percentage=percentage, **common)
    if payment_type == PaymentType.RECURRING_SUPPORT:
        return RecurringSupportPayment(
            amount=amount,
            billing_month=_form_value(form, "billingMonth", "billing_month"),
            **common,
        )
    if payment_type == PaymentType.PROJECT_SCOPE:
        raw_sub_type = (
            _form_value(form, "projectPaymentType", "project_payment_type")
            or ProjectPaymentType.FIXED.value
        )
        try:
            sub_type = ProjectPaymentType(raw_sub_type)
        except ValueError:
            raise UnsupportedPaymentTypeError(
                f"{payment_type.value}/{raw_sub_type}"
            ) from None
        return ProjectScopePayment(
            selected_project_id=parse_id(
                _form_value(form, "selectedProjectId", "selected_project_id")
            ),
            project_payment_type=sub_type,
            amount=amount,
            percentage=percentage,
            **common,
        )
    if payment_type == PaymentType.SUPPORT_EVOLUTIVE:
        return SupportEvolutivePayment(amount=amount, **common)
    return FixedPayment(amount=amount, **common)


# ============================================================================
# Editing
# ============================================================================

_EDIT_LABELS: dict[PaymentType, str] = {
    PaymentType.RECURRING_SUPPORT: RECURRING_SUPPORT_LABEL,
    PaymentType.PROJECT_SCOPE: PROJECT_SCOPE_LABEL,
    PaymentType.SUPPORT_EVOLUTIVE: SUPPORT_EVOLUTIVE_LABEL,
}


@dataclass(frozen=True)
class PaymentEdit:
    """
    Edited values of an existing payment.

    The amount is taken as entered; it is never re-derived from a
    percentage, since the stored payment is a historical fact.
    """

    payment_type: PaymentType
    amount: Any
    description: str | None = None
    payment_date: date | None = None
    billing_month: str | None = None
    equivalent_hours: Decimal | None = None


def edit_form_defaults(
    payment: Payment, *, today: date, current_billing_month: str
) -> PaymentEdit:
    """
    Pre-fill the edit form for a stored payment.

    Legacy ``fixed`` and ``percentage`` payments (and untyped ones) are
    edited as recurring support.
    """
    payment_type = payment.payment_type
    if payment_type in (None, PaymentType.FIXED, PaymentType.PERCENTAGE) or not isinstance(
        payment_type, PaymentType
    ):
        payment_type = PaymentType.RECURRING_SUPPORT
    return PaymentEdit(
        payment_type=payment_type,
        amount=payment.amount,
        description=payment.description,
        payment_date=payment.payment_date or today,
        billing_month=payment.billing_month or current_billing_month,
        equivalent_hours=payment.equivalent_hours,
    )


@traced_engine("payments.edit", "1.0", fingerprint_fields=("edit",))
def compute_payment_edit(
    edit: PaymentEdit,
    target: TargetRef,
    *,
    ceiling: Decimal = AMOUNT_CEILING,
) -> PaymentResult:
    """
    Recompute an edited payment.

    The type label is prefixed to the description only when the
    description does not already contain it.
    """
    try:
        if edit.payment_type == PaymentType.RECURRING_SUPPORT and not is_billing_month(
            edit.billing_month
        ):
            raise MissingBillingMonthError(edit.billing_month)
        amount = require_valid_amount(edit.amount, ceiling=ceiling)
    except (AmountError, PaymentInputError) as exc:
        logger.warning("payment_edit_rejected", extra={
            "target": str(target),
            "code": exc.code,
        })
        return PaymentResult.fail(CalculationError.from_exception(exc))

    description = (edit.description or "").strip()
    label = _EDIT_LABELS.get(edit.payment_type)
    if label is not None and label not in description:
        if edit.payment_type == PaymentType.RECURRING_SUPPORT:
            label = f"{label} - {edit.billing_month}"
        description = _with_suffix(label, description)

    return PaymentResult.ok(PaymentComputation(
        target=target,
        amount=amount,
        description=description,
        payment_type=edit.payment_type,
        payment_date=edit.payment_date,
        billing_month=edit.billing_month,
        equivalent_hours=edit.equivalent_hours,
    ))

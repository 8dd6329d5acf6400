"""
BillingService -- orchestration shell over a store and the pure engines.

Responsibility:
    Reads snapshots from a ``BillingStore``, calls the engines, persists
    their results, and applies the configured ceiling and client labels.
    It is the only place that reads the clock.

Architecture position:
    Services -- imperative shell.  Engines stay pure; all I/O and the
    current date live here.

Failure modes:
    - Payment input problems come back as a failed ``PaymentOutcome``,
      never as exceptions.
    - RecordNotFoundError for unknown contracts, projects and payments.
    - RecordInUseError when deleting a contract or project with time
      entries.
    - InvalidHoursError when time entry hours are not a positive number.
    - HoursExceededError when a time entry overruns a contract's hours.
    - StoreError from the underlying store.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from typing import Any, Mapping

from billing_config import BillingConfig
from billing_engines import (
    BillingGroup,
    BillingItem,
    ContractUsage,
    PaymentContext,
    PaymentEdit,
    PaymentInput,
    PaymentResult,
    PaymentTypeGroup,
    ProjectUsage,
    build_billing_groups,
    build_billing_items,
    check_hours_available,
    compute_payment,
    compute_payment_edit,
    contract_usage,
    edit_form_defaults,
    ensure_deletable,
    filter_billing_items,
    find_linked_contract,
    group_payments_by_type,
    payment_input_from_form,
    payments_for,
    project_usage,
    require_positive_hours,
    sort_groups,
)
from billing_kernel.domain.clock import Clock, SystemClock
from billing_kernel.domain.dtos import CalculationError
from billing_kernel.domain.records import (
    Contract,
    ItemType,
    Payment,
    PaymentStatus,
    Project,
    RecordId,
    TargetRef,
    TimeEntry,
)
from billing_kernel.exceptions import RecordNotFoundError, UnsupportedPaymentTypeError
from billing_kernel.logging_config import LogContext, get_logger
from billing_services.repositories import BillingStore

logger = get_logger("services.billing")


@dataclass(frozen=True)
class PaymentOutcome:
    """Computation result plus the stored payment on success."""

    result: PaymentResult
    payment: Payment | None = None

    @property
    def error(self) -> CalculationError | None:
        return self.result.error

    def __bool__(self) -> bool:
        return self.result.success


class BillingService:
    """
    Billing operations over one store.

    Args:
        store: Repositories for every collection.
        config: Ceiling, client labels and sort preference.
        clock: Source of today's date and the current billing month.
    """

    def __init__(
        self,
        store: BillingStore,
        config: BillingConfig | None = None,
        clock: Clock | None = None,
    ):
        self.store = store
        self.config = config or BillingConfig()
        self.clock = clock or SystemClock()

    # -- lookups -----------------------------------------------------------

    def _contract(self, contract_id: RecordId) -> Contract:
        contract = self.store.contracts.get(contract_id)
        if contract is None:
            raise RecordNotFoundError("Contrato", contract_id)
        return contract

    def _project(self, project_id: RecordId) -> Project:
        project = self.store.projects.get(project_id)
        if project is None:
            raise RecordNotFoundError("Proyecto", project_id)
        return project

    def _payment(self, payment_id: RecordId) -> Payment:
        payment = self.store.payments.get(payment_id)
        if payment is None:
            raise RecordNotFoundError("Pago", payment_id)
        return payment

    # -- overview ----------------------------------------------------------

    def billing_overview(self, sort: bool | None = None) -> list[BillingGroup]:
        """Billing groups per client; sorted by name unless disabled."""
        groups = build_billing_groups(
            self.store.contracts.get_all(),
            self.store.projects.get_all(),
            self.store.payments.get_all(),
            self.store.clients.get_all(),
            ceiling=self.config.amount_ceiling,
            unknown_client_label=self.config.unknown_client_label,
            independent_client_label=self.config.independent_client_label,
        )
        if sort is None:
            sort = self.config.sort_groups
        if sort:
            groups = sort_groups(groups)
        return groups

    def billing_items(
        self,
        search: str | None = None,
        payment_status: PaymentStatus | str | None = None,
        item_type: ItemType | str | None = None,
    ) -> list[BillingItem]:
        items = build_billing_items(
            self.store.contracts.get_all(),
            self.store.projects.get_all(),
            self.store.payments.get_all(),
            self.store.clients.get_all(),
            ceiling=self.config.amount_ceiling,
            unknown_client_label=self.config.unknown_client_label,
            independent_client_label=self.config.independent_client_label,
        )
        return filter_billing_items(items, search, payment_status, item_type)

    # -- payments ----------------------------------------------------------

    def _context(self, target: TargetRef) -> PaymentContext:
        projects = self.store.projects.get_all()
        contracts = self.store.contracts.get_all()
        if target.item_type == ItemType.CONTRACT:
            return PaymentContext.for_contract(
                self._contract(target.item_id),
                projects,
                contracts,
                ceiling=self.config.amount_ceiling,
            )
        return PaymentContext.for_project(
            self._project(target.item_id),
            projects,
            contracts,
            ceiling=self.config.amount_ceiling,
        )

    def _store_result(self, result: PaymentResult, payment_id: RecordId | None = None) -> PaymentOutcome:
        if not result:
            return PaymentOutcome(result)
        computation = result.computation
        if computation.payment_date is None:
            computation = replace(computation, payment_date=self.clock.today())
        if payment_id is None:
            payment = self.store.payments.add(computation.to_record())
        else:
            payment = self.store.payments.update(payment_id, computation.to_record())
        logger.info("payment_stored", extra={
            "payment_id": payment.id,
            "amount": str(payment.amount),
            "payment_type": computation.payment_type.value,
        })
        return PaymentOutcome(PaymentResult.ok(computation), payment)

    def register_payment(self, target: TargetRef, payment_input: PaymentInput) -> PaymentOutcome:
        """
        Compute and store a new payment against ``target``.

        Raises:
            RecordNotFoundError: ``target`` does not exist.
        """
        with LogContext.bind(target=str(target)):
            result = compute_payment(payment_input, self._context(target))
            return self._store_result(result)

    def register_payment_from_form(
        self, target: TargetRef, form: Mapping[str, Any]
    ) -> PaymentOutcome:
        """Same as ``register_payment`` for a raw payment form."""
        try:
            payment_input = payment_input_from_form(form)
        except UnsupportedPaymentTypeError as exc:
            logger.warning("payment_form_rejected", extra={
                "target": str(target),
                "code": exc.code,
            })
            return PaymentOutcome(PaymentResult.fail(CalculationError.from_exception(exc)))
        return self.register_payment(target, payment_input)

    def edit_payment_form(self, payment_id: RecordId) -> PaymentEdit:
        """Pre-filled edit values for a stored payment."""
        return edit_form_defaults(
            self._payment(payment_id),
            today=self.clock.today(),
            current_billing_month=self.clock.current_billing_month(),
        )

    def update_payment(self, payment_id: RecordId, edit: PaymentEdit) -> PaymentOutcome:
        """
        Re-validate and store an edited payment.

        Raises:
            RecordNotFoundError: unknown payment, or a payment with no target.
        """
        payment = self._payment(payment_id)
        target = payment.target
        if target is None:
            raise RecordNotFoundError("Contrato/Proyecto del pago", payment_id)
        with LogContext.bind(target=str(target)):
            result = compute_payment_edit(edit, target, ceiling=self.config.amount_ceiling)
            return self._store_result(result, payment_id=payment_id)

    def delete_payment(self, payment_id: RecordId) -> None:
        self.store.payments.delete(payment_id)

    def payment_history(self, target: TargetRef) -> list[PaymentTypeGroup]:
        """A contract's or project's payments grouped by type."""
        if target.item_type == ItemType.CONTRACT:
            rows = self.store.payments.get_by_contract(target.item_id)
        else:
            rows = self.store.payments.get_by_project(target.item_id)
        return group_payments_by_type(payments_for(target, rows))

    # -- time usage --------------------------------------------------------

    def contract_usage(self, contract_id: RecordId) -> ContractUsage:
        return contract_usage(self._contract(contract_id), self.store.time_entries.get_all())

    def project_usage(self, project_id: RecordId) -> ProjectUsage:
        project = self._project(project_id)
        linked = find_linked_contract(project, self.store.contracts.get_all())
        return project_usage(project, self.store.time_entries.get_all(), linked)

    def add_time_entry(
        self,
        target: TargetRef,
        hours: Decimal,
        description: str | None = None,
        entry_date: date | None = None,
    ) -> TimeEntry:
        """
        Log hours against a contract or project.

        Raises:
            RecordNotFoundError: ``target`` does not exist.
            InvalidHoursError: ``hours`` is unreadable, zero or negative.
            HoursExceededError: contract entries beyond the remaining hours.
        """
        hours = require_positive_hours(hours)
        record: dict[str, Any] = {
            "hours_used": hours,
            "description": description,
            "entry_date": entry_date or self.clock.today(),
        }
        if target.item_type == ItemType.CONTRACT:
            check_hours_available(
                self._contract(target.item_id), self.store.time_entries.get_all(), hours
            )
            record["contract_id"] = target.item_id
        else:
            self._project(target.item_id)
            record["project_id"] = target.item_id
        return self.store.time_entries.add(record)

    # -- deletion ----------------------------------------------------------

    def delete_contract(self, contract_id: RecordId) -> None:
        """
        Raises:
            RecordNotFoundError: unknown contract.
            RecordInUseError: time entries reference it.
        """
        self._contract(contract_id)
        ensure_deletable(ItemType.CONTRACT, contract_id, self.store.time_entries.get_all())
        self.store.contracts.delete(contract_id)
        logger.info("contract_deleted", extra={"contract_id": contract_id})

    def delete_project(self, project_id: RecordId) -> None:
        """
        Raises:
            RecordNotFoundError: unknown project.
            RecordInUseError: time entries reference it.
        """
        self._project(project_id)
        ensure_deletable(ItemType.PROJECT, project_id, self.store.time_entries.get_all())
        self.store.projects.delete(project_id)
        logger.info("project_deleted", extra={"project_id": project_id})

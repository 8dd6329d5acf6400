"""
Typed exception hierarchy for the billing ledger.

Every error carries a machine-readable ``code`` class attribute and keeps
its context as attributes, so callers catch by type and render by data
instead of parsing messages.

    BillingError (base)
    |
    +-- AmountError
    |   +-- NotFiniteAmountError          NOT_FINITE
    |   +-- NonPositiveAmountError        NON_POSITIVE
    |   +-- AmountTooLargeError           TOO_LARGE
    |
    +-- PaymentInputError
    |   +-- InvalidPercentageError        INVALID_PERCENTAGE
    |   +-- NoProjectTotalError           NO_PROJECT_TOTAL
    |   +-- MissingProjectSelectionError  MISSING_PROJECT_SELECTION
    |   +-- MissingBillingMonthError      MISSING_BILLING_MONTH
    |   +-- UnsupportedPaymentTypeError   UNSUPPORTED_PAYMENT_TYPE
    |
    +-- RecordError
    |   +-- RecordNotFoundError           RECORD_NOT_FOUND
    |   +-- RecordInUseError              RECORD_IN_USE
    |   +-- HoursExceededError            HOURS_EXCEEDED
    |   +-- InvalidHoursError             INVALID_HOURS
    |
    +-- StoreError                        STORE_ERROR

Amount and payment-input errors are expected user-input conditions.  The
payment calculator converts them into a failed ``PaymentResult`` rather than
letting them escape; record and store errors propagate from the service
layer.

Messages are in Spanish, the language of the people entering payments.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any


class BillingError(Exception):
    """
    Base exception for all billing errors.

    All subclasses must define a ``code`` class attribute.
    """

    code: str = "BILLING_ERROR"

    def details(self) -> dict[str, Any]:
        """Structured attributes of this error, for result payloads."""
        return {
            k: (str(v) if isinstance(v, Decimal) else v)
            for k, v in vars(self).items()
            if not k.startswith("_")
        }


# Amount validation


class AmountError(BillingError):
    """Base exception for amount validation failures."""

    code: str = "AMOUNT_ERROR"


class NotFiniteAmountError(AmountError):
    """Amount is NaN, infinite, or could not be read as a number."""

    code: str = "NOT_FINITE"

    def __init__(self, value: Any):
        self.value = str(value)
        super().__init__(f"El monto ({value}) no es un número válido")


class NonPositiveAmountError(AmountError):
    """Amount is zero or negative."""

    code: str = "NON_POSITIVE"

    def __init__(self, value: Decimal, reason: str | None = None):
        self.value = value
        self.reason = reason
        message = f"El monto del pago debe ser mayor a 0 (recibido: {value})"
        if reason:
            message = f"{message}. {reason}"
        super().__init__(message)


class AmountTooLargeError(AmountError):
    """Amount exceeds the numeric ceiling."""

    code: str = "TOO_LARGE"

    def __init__(self, value: Decimal, ceiling: Decimal, reason: str | None = None):
        self.value = value
        self.ceiling = ceiling
        self.reason = reason
        message = (
            f"El monto calculado ({value}) es demasiado grande; "
            f"el máximo permitido es {ceiling}"
        )
        if reason:
            message = f"{message}. {reason}"
        super().__init__(message)


# Payment input


class PaymentInputError(BillingError):
    """Base exception for malformed payment form input."""

    code: str = "PAYMENT_INPUT_ERROR"


class InvalidPercentageError(PaymentInputError):
    """Percentage is outside (0, 100]."""

    code: str = "INVALID_PERCENTAGE"

    def __init__(self, percentage: Any):
        self.percentage = str(percentage)
        super().__init__(
            f"El porcentaje debe ser mayor a 0 y menor o igual a 100 "
            f"(recibido: {percentage})"
        )


class NoProjectTotalError(PaymentInputError):
    """Selected project has no resolvable total value."""

    code: str = "NO_PROJECT_TOTAL"

    def __init__(
        self,
        project_id: Any,
        project_name: str | None,
        hourly_rate: Decimal,
        estimated_hours: Decimal,
        percentage: Decimal,
    ):
        self.project_id = project_id
        self.project_name = project_name
        self.hourly_rate = hourly_rate
        self.estimated_hours = estimated_hours
        self.percentage = percentage
        super().__init__(
            f"El proyecto seleccionado ({project_name}) no tiene un valor total "
            f"configurado ni tarifa/horas estimadas (tarifa: {hourly_rate}, "
            f"horas estimadas: {estimated_hours}, porcentaje: {percentage}%). "
            f'Usa el tipo "Monto Fijo" o configura la tarifa y horas del proyecto.'
        )


class MissingProjectSelectionError(PaymentInputError):
    """Project-scope payment without a resolvable project."""

    code: str = "MISSING_PROJECT_SELECTION"

    def __init__(self, project_id: Any = None):
        self.project_id = project_id
        if project_id is None:
            message = "Debes seleccionar un proyecto para el alcance fijo"
        else:
            message = (
                f"El proyecto {project_id} no está disponible para este pago; "
                "selecciona un proyecto del mismo contrato o cliente"
            )
        super().__init__(message)


class MissingBillingMonthError(PaymentInputError):
    """Recurring support payment without a YYYY-MM billing month."""

    code: str = "MISSING_BILLING_MONTH"

    def __init__(self, billing_month: Any = None):
        self.billing_month = billing_month
        super().__init__(
            f"El soporte fijo requiere un mes de facturación AAAA-MM "
            f"(recibido: {billing_month})"
        )


class UnsupportedPaymentTypeError(PaymentInputError):
    """Payment type tag is not one of the known types."""

    code: str = "UNSUPPORTED_PAYMENT_TYPE"

    def __init__(self, payment_type: Any):
        self.payment_type = payment_type
        super().__init__(f"Tipo de pago no soportado: {payment_type}")


# Records


class RecordError(BillingError):
    """Base exception for record lookups and mutations."""

    code: str = "RECORD_ERROR"


class RecordNotFoundError(RecordError):
    """Record with the given id does not exist."""

    code: str = "RECORD_NOT_FOUND"

    def __init__(self, kind: str, record_id: Any):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} no encontrado: {record_id}")


class RecordInUseError(RecordError):
    """Record cannot be deleted because time entries reference it."""

    code: str = "RECORD_IN_USE"

    def __init__(self, kind: str, record_id: Any, entries_count: int):
        self.kind = kind
        self.record_id = record_id
        self.entries_count = entries_count
        super().__init__(
            f"No se puede eliminar {kind} {record_id} porque tiene "
            f"{entries_count} entradas de tiempo asociadas"
        )


class HoursExceededError(RecordError):
    """Time entry asks for more hours than the contract has left."""

    code: str = "HOURS_EXCEEDED"

    def __init__(self, contract_id: Any, requested: Decimal, remaining: Decimal):
        self.contract_id = contract_id
        self.requested = requested
        self.remaining = remaining
        super().__init__(
            f"Las horas solicitadas ({requested}) exceden las horas "
            f"restantes del contrato {contract_id} ({remaining})"
        )


class InvalidHoursError(RecordError):
    """Time entry hours are unreadable, zero or negative."""

    code: str = "INVALID_HOURS"

    def __init__(self, hours: Any):
        self.hours = str(hours)
        super().__init__(
            f"Las horas deben ser un número mayor a 0 (recibido: {hours})"
        )


class StoreError(BillingError):
    """Persistence layer could not read or write a collection."""

    code: str = "STORE_ERROR"

    def __init__(self, collection: str, reason: str):
        self.collection = collection
        self.reason = reason
        super().__init__(f"Error en la colección {collection}: {reason}")

"""
Spreadsheet export of the billing overview.

One sheet, "Facturacion": a row per billing item, a bold subtotal row after
each client group, and a grand total row at the end.
"""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

from openpyxl import Workbook
from openpyxl.styles import Font

from billing_engines import BillingGroup, summarize_items
from billing_kernel.logging_config import get_logger

logger = get_logger("services.export")

SHEET_TITLE = "Facturacion"

HEADERS = (
    "Cliente",
    "Tipo",
    "Nombre",
    "Descripción",
    "Valor total",
    "Pagado",
    "Pendiente",
    "% Pagado",
    "Estado",
    "Pagos",
    "Último pago",
)

TYPE_LABELS = {"contract": "Contrato", "project": "Proyecto"}
STATUS_LABELS = {
    "no_value": "Sin valor",
    "paid": "Pagado",
    "partial": "Parcial",
    "pending": "Pendiente",
}

_MONEY_FORMAT = "#,##0.00"
_PERCENT_FORMAT = "0.0"
_MONEY_COLUMNS = (5, 6, 7)


def build_workbook(groups: Sequence[BillingGroup]) -> Workbook:
    wb = Workbook()
    ws = wb.active
    ws.title = SHEET_TITLE
    ws.append(HEADERS)
    for cell in ws[1]:
        cell.font = Font(bold=True)

    bold = Font(bold=True)
    for group in groups:
        for item in group.items:
            ws.append((
                item.client_name,
                TYPE_LABELS[item.item_type.value],
                item.name,
                item.description or "",
                item.total_value,
                item.paid_amount,
                item.pending_amount,
                round(item.payment_percentage, 1),
                STATUS_LABELS[item.payment_status.value],
                item.payment_count,
                item.last_payment_date,
            ))
        ws.append((
            f"Subtotal {group.client_name}",
            "",
            "",
            "",
            group.total_value,
            group.paid_amount,
            group.pending_amount,
            round(group.payment_percentage, 1),
            STATUS_LABELS[group.payment_status.value],
        ))
        for cell in ws[ws.max_row]:
            cell.font = bold

    summary = summarize_items(item for group in groups for item in group.items)
    ws.append((
        "Total",
        "",
        "",
        "",
        summary.total_value,
        summary.paid_amount,
        summary.pending_amount,
    ))
    for cell in ws[ws.max_row]:
        cell.font = bold

    for row in ws.iter_rows(min_row=2):
        for col in _MONEY_COLUMNS:
            row[col - 1].number_format = _MONEY_FORMAT
        row[7].number_format = _PERCENT_FORMAT
    ws.freeze_panes = "A2"
    return wb


def write_billing_xlsx(groups: Sequence[BillingGroup], path: str | Path) -> Path:
    """Write the overview workbook to ``path`` and return the path."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    build_workbook(groups).save(path)
    logger.info("billing_xlsx_written", extra={
        "path": str(path),
        "group_count": len(groups),
    })
    return path

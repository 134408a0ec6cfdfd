"""Excel export of a reconciled transaction."""

import logging
from pathlib import Path
from typing import Any, Dict, List, Union

import pandas as pd

from ..models.document import Document
from ..models.line_item import LineItem
from ..pipeline.numeric import to_decimal

logger = logging.getLogger(__name__)

LINES_SHEET = "Lines"
TOTALS_SHEET = "Totals"

_MONEY_COLUMNS = ("Price/Unit", "Amount", "Tax", "Line Total")


def _line_row(index: int, line: LineItem, tax_enabled: bool) -> Dict[str, Any]:
    amount = float(to_decimal(line.amount))
    return {
        "#": index + 1,
        "Type": line.item_type.capitalize(),
        "Reference": line.product if line.is_product else line.service,
        "Description": line.description or "",
        "Quantity": float(to_decimal(line.quantity)) if line.is_product else "",
        "Unit": (line.other_unit or line.unit_type or "") if line.is_product else "",
        "Price/Unit": float(to_decimal(line.price_per_unit)) if line.is_product else "",
        "Amount": amount,
        "GST %": float(to_decimal(line.gst_percentage)) if tax_enabled else 0.0,
        "Tax": float(to_decimal(line.line_tax)) if tax_enabled else 0.0,
        "Line Total": float(to_decimal(line.line_total)) if tax_enabled else amount,
    }


def export_document_to_excel(document: Document, output_path: Union[str, Path]) -> str:
    """Export a document's lines and totals to an Excel file.

    Excel structure:
    - Sheet "Lines": one row per line item in document order
      (#, Type, Reference, Description, Quantity, Unit, Price/Unit, Amount,
      GST %, Tax, Line Total)
    - Sheet "Totals": Sub Total, Tax Amount, Invoice Total

    Args:
        document: Reconciled and aggregated Document
        output_path: Path to output .xlsx file

    Returns:
        Path to created Excel file
    """
    rows: List[Dict[str, Any]] = [
        _line_row(i, line, document.tax_enabled) for i, line in enumerate(document.lines)
    ]
    lines_df = pd.DataFrame(rows, columns=[
        "#", "Type", "Reference", "Description", "Quantity", "Unit",
        "Price/Unit", "Amount", "GST %", "Tax", "Line Total",
    ])
    totals_df = pd.DataFrame([
        {"Field": "Sub Total", "Value": float(document.totals.sub_total)},
        {"Field": "Tax Amount", "Value": float(document.totals.tax_amount)},
        {"Field": "Invoice Total", "Value": float(document.totals.invoice_total)},
    ])

    output_path_obj = Path(output_path)
    output_path_obj.parent.mkdir(parents=True, exist_ok=True)

    with pd.ExcelWriter(output_path_obj, engine='openpyxl') as writer:
        lines_df.to_excel(writer, index=False, sheet_name=LINES_SHEET)
        totals_df.to_excel(writer, index=False, sheet_name=TOTALS_SHEET)

        from openpyxl.styles.numbers import FORMAT_NUMBER_00

        lines_ws = writer.sheets[LINES_SHEET]
        money_idx = [lines_df.columns.get_loc(name) for name in _MONEY_COLUMNS]
        for row in lines_ws.iter_rows(min_row=2, max_row=lines_ws.max_row):
            for idx in money_idx:
                if isinstance(row[idx].value, (int, float)):
                    row[idx].number_format = FORMAT_NUMBER_00

        totals_ws = writer.sheets[TOTALS_SHEET]
        for row in totals_ws.iter_rows(min_row=2, max_row=totals_ws.max_row):
            row[1].number_format = FORMAT_NUMBER_00

    logger.info(f"Exported {len(rows)} line(s) to {output_path_obj}")
    return str(output_path_obj)

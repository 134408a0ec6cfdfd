"""Document-level aggregation of reconciled line items."""

from typing import Iterable

from ..models.document import DocumentTotals
from ..models.line_item import LineItem
from .numeric import ZERO, round2, to_decimal


def aggregate(lines: Iterable[LineItem], tax_enabled: bool = True) -> DocumentTotals:
    """Sum line amounts and taxes into document totals.

    Full pass over the lines in document order; invalid numeric values count
    as 0. Sums use the already rounded per-line values, so per-line rounding
    noise of +-0.01 carries into the totals.

    Args:
        lines: Reconciled lines in document order
        tax_enabled: When False, tax_amount is 0 whatever the lines hold

    Returns:
        DocumentTotals with sub_total, tax_amount and invoice_total (2 dp)
    """
    amount_sum = ZERO
    tax_sum = ZERO
    for line in lines:
        amount_sum += to_decimal(line.amount)
        tax_sum += to_decimal(line.line_tax)

    sub_total = round2(amount_sum)
    tax_amount = round2(tax_sum) if tax_enabled else round2(ZERO)

    return DocumentTotals(
        sub_total=sub_total,
        tax_amount=tax_amount,
        invoice_total=round2(sub_total + tax_amount),
    )

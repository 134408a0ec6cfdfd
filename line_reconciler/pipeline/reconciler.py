"""Line item reconciliation: keep quantity, price, amount, tax and total consistent.

Exactly one of {quantity/price, amount, line total} is authoritative for a
recomputation, chosen by the field the user edited last. Everything else on
the line is derived from it.
"""

from dataclasses import replace
from decimal import Decimal
from typing import Iterable, List, Mapping, Optional

from ..models.line_item import EditedField, LineItem
from .numeric import HUNDRED, ZERO, effective_rate, round2, to_decimal


def reconcile(
    line: LineItem,
    edited_field: str = EditedField.NONE,
    tax_enabled: bool = True
) -> LineItem:
    """Recompute the derived numeric fields of one line.

    Product lines:
    - lineTotal edited: amount = total / (1 + r/100), tax = total - amount,
      price = amount / quantity when quantity != 0
    - amount edited: tax and total from amount, price = amount / quantity
      when quantity != 0
    - quantity, pricePerUnit or none: amount = quantity x price, then tax
      and total
    - gstPercentage edited: tax and total from the existing amount; quantity,
      price and amount are left alone

    Service lines have no quantity/price step: amount is the base unless the
    line total was edited.

    Every derived value is rounded to 2 dp on its own. The input line is not
    modified.

    Args:
        line: Line to reconcile
        edited_field: One of EditedField.ALL
        tax_enabled: Document-level tax switch; when False the rate is 0

    Returns:
        New LineItem with amount, line_tax and line_total consistent

    Raises:
        ValueError: If edited_field is not a known field name
    """
    if edited_field not in EditedField.ALL:
        raise ValueError(
            f"edited_field must be one of {', '.join(EditedField.ALL)}, "
            f"got '{edited_field}'"
        )

    rate = effective_rate(line.gst_percentage, tax_enabled)

    if line.is_service:
        if edited_field == EditedField.LINE_TOTAL:
            amount, line_tax, line_total = _split_total(line.line_total, rate)
        else:
            amount = to_decimal(line.amount)
            line_tax, line_total = _tax_and_total(amount, rate)
        return replace(line, amount=amount, line_tax=line_tax, line_total=line_total)

    quantity = to_decimal(line.quantity)
    price_per_unit = line.price_per_unit

    if edited_field == EditedField.LINE_TOTAL:
        amount, line_tax, line_total = _split_total(line.line_total, rate)
        price_per_unit = _price_from_amount(amount, quantity, price_per_unit)
    elif edited_field == EditedField.AMOUNT:
        amount = to_decimal(line.amount)
        line_tax, line_total = _tax_and_total(amount, rate)
        price_per_unit = _price_from_amount(amount, quantity, price_per_unit)
    elif edited_field == EditedField.GST_PERCENTAGE:
        amount = to_decimal(line.amount)
        line_tax, line_total = _tax_and_total(amount, rate)
    else:
        amount = round2(quantity * to_decimal(line.price_per_unit))
        line_tax, line_total = _tax_and_total(amount, rate)

    return replace(
        line,
        price_per_unit=price_per_unit,
        amount=amount,
        line_tax=line_tax,
        line_total=line_total,
    )


def reconcile_all(
    lines: Iterable[LineItem],
    edit_sources: Optional[Mapping[int, str]] = None,
    tax_enabled: bool = True
) -> List[LineItem]:
    """Reconcile every line with its own edit source.

    Args:
        lines: Lines in document order
        edit_sources: Line index -> last edited field (missing -> none)
        tax_enabled: Document-level tax switch

    Returns:
        New list of reconciled lines, same order
    """
    edit_sources = edit_sources or {}
    return [
        reconcile(line, edit_sources.get(index, EditedField.NONE), tax_enabled)
        for index, line in enumerate(lines)
    ]


def _tax_and_total(amount: Decimal, rate: Decimal):
    line_tax = round2(amount * rate / HUNDRED)
    line_total = round2(amount + line_tax)
    return line_tax, line_total


def _split_total(raw_total, rate: Decimal):
    """Split a tax-inclusive total into (amount, tax, total)."""
    line_total = round2(raw_total)
    divisor = 1 + rate / HUNDRED
    if divisor == 0:
        # -100% rate: nothing of the total can be a pre-tax amount
        amount = ZERO
    else:
        amount = round2(line_total / divisor)
    line_tax = round2(line_total - amount)
    return amount, line_tax, line_total


def _price_from_amount(amount: Decimal, quantity: Decimal, current_price):
    # quantity 0 keeps the previous price
    if quantity == 0:
        return current_price
    return round2(amount / quantity)

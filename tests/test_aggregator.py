"""Unit tests for document aggregation."""

from decimal import Decimal
from itertools import permutations

import pytest

from line_reconciler.models.line_item import EditedField, ItemType, LineItem
from line_reconciler.pipeline.aggregator import aggregate
from line_reconciler.pipeline.reconciler import reconcile


@pytest.fixture
def reconciled_lines():
    """A 3 x 100 @ 18% product line and a 1000 service line at 0%."""
    product = reconcile(
        LineItem(
            item_type=ItemType.PRODUCT,
            quantity=Decimal("3"),
            price_per_unit=Decimal("100"),
            gst_percentage=Decimal("18"),
        ),
        EditedField.QUANTITY,
    )
    service = reconcile(
        LineItem(item_type=ItemType.SERVICE, amount=Decimal("1000"), gst_percentage=Decimal("0")),
        EditedField.AMOUNT,
    )
    return [product, service]


def test_aggregate_product_and_service(reconciled_lines):
    totals = aggregate(reconciled_lines)

    assert totals.sub_total == Decimal("1300.00")
    assert totals.tax_amount == Decimal("54.00")
    assert totals.invoice_total == Decimal("1354.00")


def test_tax_disabled_zeroes_tax_whatever_the_lines_hold(reconciled_lines):
    totals = aggregate(reconciled_lines, tax_enabled=False)

    assert totals.tax_amount == Decimal("0.00")
    assert totals.invoice_total == totals.sub_total == Decimal("1300.00")


def test_empty_document():
    totals = aggregate([])

    assert totals.sub_total == Decimal("0.00")
    assert totals.tax_amount == Decimal("0.00")
    assert totals.invoice_total == Decimal("0.00")


def test_order_does_not_matter():
    lines = [
        LineItem(amount=Decimal("10.10"), line_tax=Decimal("1.82")),
        LineItem(amount=Decimal("20.20"), line_tax=Decimal("3.64")),
        LineItem(item_type=ItemType.SERVICE, amount=Decimal("0.07"), line_tax=Decimal("0.01")),
    ]
    expected = aggregate(lines)

    for ordering in permutations(lines):
        assert aggregate(list(ordering)) == expected


def test_invalid_values_count_as_zero():
    lines = [
        LineItem(amount="abc", line_tax=None),
        LineItem(amount="1,500.50", line_tax="270.09"),
        LineItem(amount=float("nan"), line_tax=""),
    ]

    totals = aggregate(lines)

    assert totals.sub_total == Decimal("1500.50")
    assert totals.tax_amount == Decimal("270.09")
    assert totals.invoice_total == Decimal("1770.59")


def test_totals_are_sums_of_rounded_line_values():
    """Per-line rounding carries into the totals."""
    lines = [
        reconcile(
            LineItem(quantity=Decimal("1"), price_per_unit=Decimal("0.05"), gst_percentage=Decimal("18")),
            EditedField.QUANTITY,
        )
        for _ in range(3)
    ]

    totals = aggregate(lines)

    # each line: tax 0.009 -> 0.01
    assert totals.tax_amount == Decimal("0.03")
    assert totals.invoice_total == Decimal("0.18")

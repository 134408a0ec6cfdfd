"""Document data model representing a transaction being edited."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional

from .line_item import LineItem


@dataclass(frozen=True)
class DocumentTotals:
    """Document-level totals produced by the aggregator.

    Attributes:
        sub_total: Sum of all line amounts (2 dp)
        tax_amount: Sum of all line taxes, 0 when tax is disabled (2 dp)
        invoice_total: sub_total + tax_amount (2 dp)
    """

    sub_total: Decimal = Decimal("0.00")
    tax_amount: Decimal = Decimal("0.00")
    invoice_total: Decimal = Decimal("0.00")

    def to_dict(self) -> Dict[str, Decimal]:
        """Convert to camelCase dictionary."""
        return {
            "subTotal": self.sub_total,
            "taxAmount": self.tax_amount,
            "invoiceTotal": self.invoice_total,
        }


@dataclass
class Document:
    """Represents a sales or purchase transaction with its line items.

    Line order is display order (entry order). Totals are only as fresh as
    the last aggregation; EditingSession keeps them current.

    Attributes:
        lines: Ordered line items
        tax_enabled: True when the issuing company has a tax registration
        totals: Last aggregated DocumentTotals
        transaction_type: "sales" or "purchases"
        company: Company reference id
        party: Customer/vendor reference id
        reference_number: Optional reference number
        description: Optional free-text description
        notes: Optional notes
        metadata: Any other header fields passed through to the payload
    """

    lines: List[LineItem] = field(default_factory=list)
    tax_enabled: bool = True
    totals: DocumentTotals = field(default_factory=DocumentTotals)
    transaction_type: str = "sales"
    company: Optional[str] = None
    party: Optional[str] = None
    reference_number: Optional[str] = None
    description: Optional[str] = None
    notes: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        """Validate transaction_type."""
        if self.transaction_type not in ["sales", "purchases"]:
            raise ValueError(
                f"transaction_type must be 'sales' or 'purchases', "
                f"got '{self.transaction_type}'"
            )

    @property
    def sub_total(self) -> Decimal:
        return self.totals.sub_total

    @property
    def tax_amount(self) -> Decimal:
        return self.totals.tax_amount

    @property
    def invoice_total(self) -> Decimal:
        return self.totals.invoice_total

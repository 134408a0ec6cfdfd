"""Editing session: decides when lines are reconciled and totals aggregated.

A session owns one Document and one EditSourceTracker. Every mutation of a
line goes through the session, which reconciles the touched line and then
re-aggregates the whole document.
"""

import logging
from dataclasses import replace
from typing import Any, Iterable, Mapping, Optional

from ..config.profile_loader import ProfileConfig
from ..models.document import Document, DocumentTotals
from ..models.line_item import (
    EditedField,
    LineItem,
    default_product_line,
    default_service_line,
)
from .aggregator import aggregate
from .edit_tracker import EditSourceTracker
from .reconciler import reconcile, reconcile_all
from .transaction_loader import document_from_transaction

logger = logging.getLogger(__name__)

# wire field name -> LineItem attribute, for fields that only store
_DESCRIPTIVE_FIELDS = {
    "description": "description",
    "unitType": "unit_type",
    "otherUnit": "other_unit",
    "product": "product",
    "service": "service",
}

_NUMERIC_FIELDS = {
    EditedField.QUANTITY: "quantity",
    EditedField.PRICE_PER_UNIT: "price_per_unit",
    EditedField.AMOUNT: "amount",
    EditedField.LINE_TOTAL: "line_total",
    EditedField.GST_PERCENTAGE: "gst_percentage",
}


class EditingSession:
    """One user's in-progress transaction.

    Sessions share nothing: each has its own document, lines and tracker.
    """

    def __init__(
        self,
        tax_enabled: bool = True,
        profile: Optional[ProfileConfig] = None,
        document: Optional[Document] = None
    ):
        self.profile = profile
        self.tracker = EditSourceTracker()
        if document is None:
            document = Document(lines=[default_product_line(profile)], tax_enabled=tax_enabled)
        self.document = document
        self._reconcile_everything()

    @property
    def lines(self):
        return self.document.lines

    @property
    def totals(self) -> DocumentTotals:
        return self.document.totals

    @property
    def tax_enabled(self) -> bool:
        return self.document.tax_enabled

    def set_field(self, index: int, field_name: str, value: Any) -> LineItem:
        """Store a user edit on a line and bring the document back in sync.

        quantity, pricePerUnit, amount and lineTotal become the line's edit
        source before it is reconciled. gstPercentage reconciles from the
        existing amount without changing the edit source. Descriptive fields
        are stored as-is. The edit always produces a new line, so lines
        returned earlier are never modified.

        Args:
            index: Line index
            field_name: Wire name of the edited field
            value: Raw value as entered (may be in-progress text)

        Returns:
            The line after reconciliation

        Raises:
            IndexError: If index is out of range
            ValueError: If field_name is not editable
        """
        line = self._line_at(index)

        if field_name in _DESCRIPTIVE_FIELDS:
            edited = replace(line, **{_DESCRIPTIVE_FIELDS[field_name]: value})
            self.document.lines[index] = edited
            return edited

        if field_name not in _NUMERIC_FIELDS:
            raise ValueError(f"Field '{field_name}' is not editable")

        edited = replace(line, **{_NUMERIC_FIELDS[field_name]: value})

        if field_name in EditedField.TRACKED:
            self.tracker.record(index, field_name)
            edited_field = self.tracker.get(index)
        else:
            edited_field = EditedField.GST_PERCENTAGE

        reconciled = reconcile(edited, edited_field, self.tax_enabled)
        self.document.lines[index] = reconciled
        self._aggregate()
        logger.debug(
            f"Line {index} {field_name}={value!r}: amount={reconciled.amount}, "
            f"tax={reconciled.line_tax}, total={reconciled.line_total}"
        )
        return reconciled

    def append_product(self) -> LineItem:
        """Append a default product line."""
        return self._append(default_product_line(self.profile))

    def append_service(self) -> LineItem:
        """Append a default service line."""
        return self._append(default_service_line(self.profile))

    def duplicate_line(self, index: int) -> LineItem:
        """Insert a copy of line index right after it.

        The copy takes over the edit source of the original, so both are
        reconciled the same way later.
        """
        duplicate = self._line_at(index).copy()
        self.tracker.on_insert(index + 1)
        source = self.tracker.get(index)
        if source != EditedField.NONE:
            self.tracker.record(index + 1, source)
        self.document.lines.insert(index + 1, duplicate)
        self._aggregate()
        return duplicate

    def remove_line(self, index: int) -> LineItem:
        """Remove line index. Removing the last line leaves an empty document."""
        removed = self._line_at(index)
        del self.document.lines[index]
        self.tracker.on_remove(index)
        self._aggregate()
        return removed

    def set_tax_enabled(self, tax_enabled: bool) -> DocumentTotals:
        """Switch document tax on/off and recompute every line."""
        self.document.tax_enabled = tax_enabled
        self._reconcile_everything()
        return self.totals

    def load(self, lines: Iterable[LineItem]) -> DocumentTotals:
        """Replace all lines, forget edit sources and recompute."""
        self.document.lines = list(lines)
        self.tracker.reset()
        self._reconcile_everything()
        return self.totals

    def load_transaction(
        self,
        data: Mapping[str, Any],
        tax_enabled: Optional[bool] = None,
        edit_sources: Optional[Mapping[int, str]] = None
    ) -> DocumentTotals:
        """Load a stored transaction (header and lines) into this session.

        Args:
            data: Transaction mapping (backend shape)
            tax_enabled: Tax switch; None resolves it from the transaction
            edit_sources: Optional line index -> last edited field to start from

        Returns:
            DocumentTotals after reconciliation

        Raises:
            IndexError: If edit_sources refers to a missing line
            ValueError: If edit_sources names an untracked field
        """
        self.document = document_from_transaction(data, tax_enabled, self.profile)
        self.tracker.reset()
        for index, field_name in (edit_sources or {}).items():
            self._line_at(int(index))
            self.tracker.record(int(index), field_name)
        self._reconcile_everything()
        logger.info(
            f"Loaded transaction with {len(self.lines)} line(s): "
            f"invoice total {self.totals.invoice_total}"
        )
        return self.totals

    def reset(self) -> DocumentTotals:
        """Back to a fresh document with one default product line."""
        return self.load([default_product_line(self.profile)])

    def _append(self, line: LineItem) -> LineItem:
        self.document.lines.append(line)
        self._aggregate()
        return line

    def _line_at(self, index: int) -> LineItem:
        if not 0 <= index < len(self.document.lines):
            raise IndexError(
                f"Line index {index} out of range (document has {len(self.document.lines)} lines)"
            )
        return self.document.lines[index]

    def _reconcile_everything(self):
        self.document.lines = reconcile_all(
            self.document.lines, self.tracker.snapshot(), self.tax_enabled
        )
        self._aggregate()

    def _aggregate(self):
        self.document.totals = aggregate(self.document.lines, self.tax_enabled)

"""Normalize stored transactions into line items for editing."""

import logging
from typing import Any, Dict, List, Mapping, Optional

from ..config.profile_loader import ProfileConfig
from ..models.document import Document
from ..models.line_item import ItemType, LineItem, default_product_line
from .company import is_tax_enabled

logger = logging.getLogger(__name__)

_HEADER_FIELDS = {
    "type": "transaction_type",
    "company": "company",
    "party": "party",
    "referenceNumber": "reference_number",
    "description": "description",
    "notes": "notes",
}

# Not header metadata: line lists, stored totals, record bookkeeping
_SKIPPED_KEYS = {
    "items", "products", "services", "editSources", "taxEnabled",
    "subTotal", "taxAmount", "totalAmount", "invoiceTotal",
    "_id", "__v", "createdAt", "updatedAt",
}


def lines_from_transaction(
    data: Mapping[str, Any],
    profile: Optional[ProfileConfig] = None
) -> List[LineItem]:
    """Build LineItems from a stored transaction.

    Uses the unified "items" list when it is non-empty, otherwise products
    followed by services. An empty transaction gives one default product line.

    Args:
        data: Transaction mapping (backend shape)
        profile: Optional profile supplying line defaults

    Returns:
        List of LineItem in display order
    """
    items = data.get("items")
    if isinstance(items, list) and items:
        lines = [LineItem.from_dict(item, profile) for item in items]
    else:
        products = data.get("products") or []
        services = data.get("services") or []
        lines = [
            LineItem.from_dict({**product, "itemType": ItemType.PRODUCT}, profile)
            for product in products
        ]
        lines.extend(
            LineItem.from_dict({**service, "itemType": ItemType.SERVICE}, profile)
            for service in services
        )

    if not lines:
        logger.debug("Transaction has no lines, starting with a default product line")
        return [default_product_line(profile)]
    return lines


def document_from_transaction(
    data: Mapping[str, Any],
    tax_enabled: Optional[bool] = None,
    profile: Optional[ProfileConfig] = None
) -> Document:
    """Build a Document (lines + header fields) from a stored transaction.

    tax_enabled resolution order: explicit argument, "taxEnabled" key, the
    GST number of an embedded company object.

    Header keys the engine does not use (dates, payment details) are kept in
    Document.metadata for the payload.

    Totals are not computed here; load the document into an EditingSession
    or call aggregate().
    """
    if tax_enabled is None:
        if "taxEnabled" in data:
            tax_enabled = bool(data["taxEnabled"])
        else:
            company = data.get("company")
            tax_enabled = is_tax_enabled(company) if isinstance(company, Mapping) else True

    header: Dict[str, Any] = {}
    for key, attr in _HEADER_FIELDS.items():
        value = data.get(key)
        if isinstance(value, Mapping):
            value = value.get("_id")
        if value is not None:
            header[attr] = value if attr == "transaction_type" else str(value)

    metadata = {
        key: value for key, value in data.items()
        if key not in _HEADER_FIELDS and key not in _SKIPPED_KEYS
    }

    return Document(
        lines=lines_from_transaction(data, profile),
        tax_enabled=tax_enabled,
        metadata=metadata,
        **header,
    )

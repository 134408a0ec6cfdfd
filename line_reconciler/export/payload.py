"""Build the JSON payload the persistence API expects for a finished transaction."""

import logging
import math
from decimal import Decimal
from typing import Any, Dict, List

from ..models.document import Document
from ..models.line_item import LineItem
from ..pipeline.numeric import to_decimal

logger = logging.getLogger(__name__)


def sanitize_for_json(obj: Any) -> Any:
    """Recursively turn Decimals into floats and drop NaN/Inf so json.dump works."""
    if isinstance(obj, dict):
        return {k: sanitize_for_json(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [sanitize_for_json(v) for v in obj]
    if isinstance(obj, Decimal):
        return float(obj) if obj.is_finite() else 0.0
    if isinstance(obj, float):
        return 0.0 if (math.isnan(obj) or math.isinf(obj)) else obj
    return obj


def _tax_fields(line: LineItem, tax_enabled: bool) -> Dict[str, Decimal]:
    if not tax_enabled:
        return {
            "gstPercentage": Decimal("0"),
            "lineTax": Decimal("0"),
            "lineTotal": to_decimal(line.amount),
        }
    return {
        "gstPercentage": to_decimal(line.gst_percentage),
        "lineTax": to_decimal(line.line_tax),
        "lineTotal": to_decimal(line.line_total),
    }


def product_line_payload(line: LineItem, tax_enabled: bool) -> Dict[str, Any]:
    """Payload entry for a product line."""
    return {
        "product": line.product,
        "quantity": to_decimal(line.quantity),
        "unitType": line.unit_type,
        "otherUnit": line.other_unit,
        "pricePerUnit": to_decimal(line.price_per_unit),
        "amount": to_decimal(line.amount),
        "description": line.description or "",
        **_tax_fields(line, tax_enabled),
    }


def service_line_payload(line: LineItem, tax_enabled: bool) -> Dict[str, Any]:
    """Payload entry for a service line."""
    return {
        "service": line.service,
        "amount": to_decimal(line.amount),
        "description": line.description or "",
        **_tax_fields(line, tax_enabled),
    }


def build_transaction_payload(document: Document) -> Dict[str, Any]:
    """Build the sales/purchases payload for the persistence API.

    Lines are split by item type into "products" and "services"; totals come
    from the document's last aggregation. With tax disabled every line is
    sent with 0% and the invoice total equals the sub total. Purchases carry
    the party as "vendor".

    Args:
        document: Reconciled and aggregated Document

    Returns:
        JSON-serializable dict
    """
    tax_enabled = document.tax_enabled
    products: List[Dict[str, Any]] = []
    services: List[Dict[str, Any]] = []
    for line in document.lines:
        if line.is_product:
            products.append(product_line_payload(line, tax_enabled))
        else:
            services.append(service_line_payload(line, tax_enabled))

    sub_total = document.totals.sub_total
    tax_amount = document.totals.tax_amount if tax_enabled else Decimal("0")
    invoice_total = document.totals.invoice_total if tax_enabled else sub_total

    payload: Dict[str, Any] = {
        "type": document.transaction_type,
        "company": document.company,
        "description": document.description,
        "referenceNumber": document.reference_number,
        "notes": document.notes or "",
        **document.metadata,
        "products": products,
        "services": services,
        "subTotal": sub_total,
        "taxAmount": tax_amount,
        "totalAmount": invoice_total,
        "invoiceTotal": invoice_total,
    }
    party_key = "vendor" if document.transaction_type == "purchases" else "party"
    payload[party_key] = document.party

    logger.debug(
        f"Payload built: {len(products)} product(s), {len(services)} service(s), "
        f"invoiceTotal={invoice_total}"
    )
    return sanitize_for_json(payload)

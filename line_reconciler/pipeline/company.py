"""Derive the document tax switch from the issuing company record."""

from typing import Any, Mapping, Optional

# Keys seen on company records from the backend, in lookup order
_GSTIN_KEYS = ("gstin", "gstIn", "gstNumber", "gst_no", "gst", "gstinNumber")


def company_gstin(company: Optional[Mapping[str, Any]]) -> Optional[str]:
    """Return the company's GST registration number, or None.

    The first key that is present (not None) wins, then tax.gstin.
    """
    if not company:
        return None

    for key in _GSTIN_KEYS:
        value = company.get(key)
        if value is not None:
            return str(value)

    tax = company.get("tax")
    if isinstance(tax, Mapping) and tax.get("gstin") is not None:
        return str(tax["gstin"])
    return None


def is_tax_enabled(company: Optional[Mapping[str, Any]]) -> bool:
    """True when the company has a non-blank GST registration number."""
    gstin = company_gstin(company)
    return bool(gstin and gstin.strip())

"""LineItem data model representing a product or service row on a transaction."""

from __future__ import annotations

import copy
from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional

if TYPE_CHECKING:
    from ..config.profile_loader import ProfileConfig


class LineItemError(ValueError):
    """Raised when a line item is structurally invalid."""
    pass


class ItemType:
    """Allowed values for LineItem.item_type."""

    PRODUCT = "product"
    SERVICE = "service"

    ALL = (PRODUCT, SERVICE)


class EditedField:
    """Names of the fields a user can edit that drive reconciliation."""

    QUANTITY = "quantity"
    PRICE_PER_UNIT = "pricePerUnit"
    AMOUNT = "amount"
    LINE_TOTAL = "lineTotal"
    GST_PERCENTAGE = "gstPercentage"
    NONE = "none"

    ALL = (QUANTITY, PRICE_PER_UNIT, AMOUNT, LINE_TOTAL, GST_PERCENTAGE, NONE)

    # Fields remembered per line as the authoritative edit source
    TRACKED = (QUANTITY, PRICE_PER_UNIT, AMOUNT, LINE_TOTAL)


DEFAULT_GST_PERCENTAGE = Decimal("18")
DEFAULT_UNIT_TYPE = "Piece"
DEFAULT_QUANTITY = Decimal("1")

# wire key -> attribute name
_WIRE_FIELDS = {
    "itemType": "item_type",
    "product": "product",
    "service": "service",
    "quantity": "quantity",
    "pricePerUnit": "price_per_unit",
    "unitType": "unit_type",
    "otherUnit": "other_unit",
    "amount": "amount",
    "gstPercentage": "gst_percentage",
    "lineTax": "line_tax",
    "lineTotal": "line_total",
    "description": "description",
}


@dataclass
class LineItem:
    """Represents one product or service row of a transaction.

    Numeric attributes hold whatever the host put there (Decimal, number or
    in-progress text). The engine coerces them when computing, so a line with
    an empty quantity is still a valid LineItem.

    Attributes:
        item_type: "product" or "service"
        quantity: Quantity (product lines only, None for services)
        price_per_unit: Unit price (product lines only, None for services)
        unit_type: Descriptive unit label, e.g. "Piece"
        other_unit: Free-text unit used when unit_type is "Other"
        amount: Pre-tax line value
        gst_percentage: Tax rate applied to the line, in percent
        line_tax: Tax on the line
        line_total: amount + line_tax
        description: Free text
        product: Product reference id (product lines)
        service: Service reference id (service lines)
    """

    item_type: str = ItemType.PRODUCT
    quantity: Any = None
    price_per_unit: Any = None
    unit_type: Optional[str] = None
    other_unit: str = ""
    amount: Any = Decimal("0")
    gst_percentage: Any = DEFAULT_GST_PERCENTAGE
    line_tax: Any = Decimal("0")
    line_total: Any = Decimal("0")
    description: str = ""
    product: str = ""
    service: str = ""

    def __post_init__(self):
        """Validate item_type."""
        if self.item_type not in ItemType.ALL:
            raise LineItemError(
                f"item_type must be 'product' or 'service', got '{self.item_type}'"
            )

    @property
    def is_product(self) -> bool:
        return self.item_type == ItemType.PRODUCT

    @property
    def is_service(self) -> bool:
        return self.item_type == ItemType.SERVICE

    def copy(self) -> LineItem:
        """Return an independent duplicate of this line."""
        return copy.deepcopy(self)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a camelCase dictionary (values left as stored)."""
        return {key: getattr(self, attr) for key, attr in _WIRE_FIELDS.items()}

    @classmethod
    def from_dict(
        cls,
        data: Mapping[str, Any],
        profile: Optional[ProfileConfig] = None
    ) -> LineItem:
        """Create a LineItem from a camelCase mapping.

        Defaults are only applied to keys that are missing or None, so an
        explicit 0% rate is kept as 0.

        Args:
            data: Line mapping as stored by the backend or sent by a client
            profile: Optional profile supplying default rate/unit/quantity

        Returns:
            LineItem

        Raises:
            LineItemError: If itemType is present but not product/service
        """
        gst_default, unit_default, quantity_default = _profile_defaults(profile)

        product_ref = _reference_id(data.get("product") or data.get("productId"))
        service_ref = _reference_id(
            data.get("service") or data.get("serviceName") or data.get("serviceId")
        )

        item_type = data.get("itemType")
        if item_type is None:
            if product_ref:
                item_type = ItemType.PRODUCT
            elif service_ref:
                item_type = ItemType.SERVICE
            else:
                item_type = ItemType.PRODUCT

        amount = data.get("amount")
        gst_percentage = _first_present(data.get("gstPercentage"), gst_default)
        line_tax = _first_present(data.get("lineTax"), Decimal("0"))

        if item_type == ItemType.SERVICE:
            amount = _first_present(amount, Decimal("0"))
            return cls(
                item_type=item_type,
                amount=amount,
                gst_percentage=gst_percentage,
                line_tax=line_tax,
                line_total=_first_present(data.get("lineTotal"), amount),
                description=data.get("description") or "",
                service=service_ref,
            )

        quantity = _first_present(data.get("quantity"), quantity_default)
        price_per_unit = _first_present(data.get("pricePerUnit"), Decimal("0"))
        if amount is None:
            from ..pipeline.numeric import to_decimal  # circular at module level
            amount = to_decimal(quantity) * to_decimal(price_per_unit)

        return cls(
            item_type=item_type,
            quantity=quantity,
            price_per_unit=price_per_unit,
            unit_type=_first_present(data.get("unitType"), unit_default),
            other_unit=data.get("otherUnit") or "",
            amount=amount,
            gst_percentage=gst_percentage,
            line_tax=line_tax,
            line_total=_first_present(data.get("lineTotal"), amount),
            description=data.get("description") or "",
            product=product_ref,
        )


def default_product_line(profile: Optional[ProfileConfig] = None) -> LineItem:
    """Build the blank product row a new transaction starts with."""
    gst_default, unit_default, quantity_default = _profile_defaults(profile)
    return LineItem(
        item_type=ItemType.PRODUCT,
        quantity=quantity_default,
        price_per_unit=Decimal("0"),
        unit_type=unit_default,
        amount=Decimal("0"),
        gst_percentage=gst_default,
    )


def default_service_line(profile: Optional[ProfileConfig] = None) -> LineItem:
    """Build a blank service row."""
    gst_default, _, _ = _profile_defaults(profile)
    return LineItem(
        item_type=ItemType.SERVICE,
        amount=Decimal("0"),
        gst_percentage=gst_default,
    )


def _profile_defaults(profile: Optional[ProfileConfig]):
    if profile is None:
        return DEFAULT_GST_PERCENTAGE, DEFAULT_UNIT_TYPE, DEFAULT_QUANTITY
    return (
        Decimal(str(profile.default_gst_percentage)),
        profile.default_unit_type,
        Decimal(str(profile.default_quantity)),
    )


def _first_present(value: Any, default: Any) -> Any:
    return default if value is None else value


def _reference_id(value: Any) -> str:
    """Flatten a reference that may be an id string or a populated object."""
    if value is None:
        return ""
    if isinstance(value, Mapping):
        value = value.get("_id")
        if value is None:
            return ""
    return str(value)

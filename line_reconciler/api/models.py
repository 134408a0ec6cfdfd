"""API request and response models."""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field

# Numeric inputs stay forgiving: in-progress text is coerced by the engine
RawNumber = Optional[Union[float, str]]


class LineItemModel(BaseModel):
    """A transaction line in wire (camelCase) form."""

    item_type: Optional[str] = Field(None, alias="itemType", description="product or service")
    # id string, or a populated reference object carrying "_id"
    product: Optional[Union[str, Dict[str, Any]]] = None
    service: Optional[Union[str, Dict[str, Any]]] = None
    quantity: RawNumber = None
    price_per_unit: RawNumber = Field(None, alias="pricePerUnit")
    unit_type: Optional[str] = Field(None, alias="unitType")
    other_unit: Optional[str] = Field(None, alias="otherUnit")
    amount: RawNumber = None
    gst_percentage: RawNumber = Field(None, alias="gstPercentage")
    line_tax: RawNumber = Field(None, alias="lineTax")
    line_total: RawNumber = Field(None, alias="lineTotal")
    description: Optional[str] = None


class TotalsResponse(BaseModel):
    """Document totals."""

    sub_total: float = Field(..., alias="subTotal")
    tax_amount: float = Field(..., alias="taxAmount")
    invoice_total: float = Field(..., alias="invoiceTotal")


class ReconcileLineRequest(BaseModel):
    """Request body for reconciling a single line."""

    line: LineItemModel
    edited_field: str = Field("none", alias="editedField", description="Field the user edited last")
    tax_enabled: bool = Field(True, alias="taxEnabled")


class ReconcileLineResponse(BaseModel):
    """Response body for a reconciled line."""

    line: LineItemModel
    edited_field: str = Field(..., alias="editedField")


class AggregateRequest(BaseModel):
    """Request body for aggregating lines into totals."""

    lines: List[LineItemModel] = Field(default_factory=list)
    tax_enabled: bool = Field(True, alias="taxEnabled")


class RecomputeRequest(BaseModel):
    """Request body for recomputing a whole transaction."""

    transaction_type: str = Field("sales", alias="type", description="sales or purchases")
    lines: List[LineItemModel] = Field(default_factory=list)
    edit_sources: Dict[int, str] = Field(
        default_factory=dict,
        alias="editSources",
        description="Line index -> field edited last",
    )
    tax_enabled: Optional[bool] = Field(
        None,
        alias="taxEnabled",
        description="Explicit tax switch; derived from company when omitted",
    )
    company: Optional[Dict[str, Any]] = Field(None, description="Company record with GST number")


class RecomputeResponse(BaseModel):
    """Response body for a recomputed transaction."""

    tax_enabled: bool = Field(..., alias="taxEnabled")
    lines: List[LineItemModel]
    totals: TotalsResponse
    payload: Dict[str, Any] = Field(..., description="Body ready for the persistence API")


class ProfileResponse(BaseModel):
    """Active profile: defaults for new lines and the offered choices."""

    name: str
    description: str = ""
    default_gst_percentage: float = Field(..., alias="defaultGstPercentage")
    default_unit_type: str = Field(..., alias="defaultUnitType")
    default_quantity: float = Field(..., alias="defaultQuantity")
    gst_options: List[float] = Field(..., alias="gstOptions")
    unit_types: List[str] = Field(..., alias="unitTypes")


class ErrorResponse(BaseModel):
    """Body of a 400 response."""

    detail: str = Field(..., description="Why the request was rejected")

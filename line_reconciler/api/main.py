"""FastAPI application exposing the reconciliation engine as a recompute service.

Requests are independent: every call builds its own lines and edit-source
tracker, nothing is kept between calls.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException

from ..config import get_app_name, get_app_version, get_profile
from ..models.document import Document, DocumentTotals
from ..models.line_item import LineItem
from ..export.payload import build_transaction_payload, sanitize_for_json
from ..pipeline.aggregator import aggregate
from ..pipeline.company import is_tax_enabled
from ..pipeline.edit_tracker import EditSourceTracker
from ..pipeline.reconciler import reconcile, reconcile_all
from .models import (
    AggregateRequest,
    ErrorResponse,
    LineItemModel,
    ProfileResponse,
    ReconcileLineRequest,
    ReconcileLineResponse,
    RecomputeRequest,
    RecomputeResponse,
    TotalsResponse,
)

logger = logging.getLogger(__name__)

app = FastAPI(
    title="GST Line Reconciler API",
    description="Recompute transaction line amounts, GST and document totals",
    version=get_app_version(),
)

_ERRORS = {400: {"model": ErrorResponse}}


def _to_line(model: LineItemModel) -> LineItem:
    """Convert a request line into a LineItem using the active profile defaults."""
    return LineItem.from_dict(model.model_dump(by_alias=True), get_profile())


def _to_model(line: LineItem) -> LineItemModel:
    return LineItemModel.model_validate(sanitize_for_json(line.to_dict()))


def _totals_response(totals: DocumentTotals) -> TotalsResponse:
    return TotalsResponse.model_validate(sanitize_for_json(totals.to_dict()))


def _bad_request(exc: Exception) -> HTTPException:
    logger.warning(f"Rejected request: {exc}")
    return HTTPException(status_code=400, detail=str(exc))


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": get_app_name(),
        "version": get_app_version(),
        "docs": "/docs",
    }


@app.get("/api/profile", response_model=ProfileResponse)
async def profile_endpoint():
    """Defaults for new lines and the GST rates and units a form should offer."""
    profile = get_profile()
    return ProfileResponse(
        name=profile.name,
        description=profile.description,
        defaultGstPercentage=profile.default_gst_percentage,
        defaultUnitType=profile.default_unit_type,
        defaultQuantity=profile.default_quantity,
        gstOptions=profile.gst_options,
        unitTypes=profile.unit_types,
    )


@app.post("/api/lines/reconcile", response_model=ReconcileLineResponse, responses=_ERRORS)
async def reconcile_line_endpoint(request: ReconcileLineRequest):
    """Reconcile one line after an edit.

    Args:
        request: Line, the field edited last and the tax switch

    Returns:
        ReconcileLineResponse with the consistent line
    """
    try:
        line = reconcile(_to_line(request.line), request.edited_field, request.tax_enabled)
    except ValueError as e:
        raise _bad_request(e)

    return ReconcileLineResponse(line=_to_model(line), editedField=request.edited_field)


@app.post("/api/documents/aggregate", response_model=TotalsResponse, responses=_ERRORS)
async def aggregate_endpoint(request: AggregateRequest):
    """Sum already reconciled lines into document totals."""
    try:
        lines = [_to_line(model) for model in request.lines]
    except ValueError as e:
        raise _bad_request(e)
    return _totals_response(aggregate(lines, request.tax_enabled))


@app.post("/api/documents/recompute", response_model=RecomputeResponse, responses=_ERRORS)
async def recompute_endpoint(request: RecomputeRequest):
    """Reconcile every line with its edit source, aggregate, and build the payload.

    tax_enabled falls back to the company's GST number when not given.
    """
    tax_enabled = request.tax_enabled
    if tax_enabled is None:
        tax_enabled = is_tax_enabled(request.company) if request.company else True

    tracker = EditSourceTracker()
    try:
        for index, field_name in request.edit_sources.items():
            if index < 0 or index >= len(request.lines):
                raise IndexError(f"editSources refers to missing line {index}")
            tracker.record(index, field_name)

        lines: List[LineItem] = reconcile_all(
            [_to_line(model) for model in request.lines],
            tracker.snapshot(),
            tax_enabled,
        )
        document = Document(
            lines=lines,
            tax_enabled=tax_enabled,
            totals=aggregate(lines, tax_enabled),
            transaction_type=request.transaction_type,
            company=_company_id(request.company),
        )
    except (ValueError, IndexError) as e:
        raise _bad_request(e)

    logger.info(
        f"Recomputed {len(lines)} line(s), taxEnabled={tax_enabled}, "
        f"invoiceTotal={document.invoice_total}"
    )
    return RecomputeResponse(
        taxEnabled=tax_enabled,
        lines=[_to_model(line) for line in lines],
        totals=_totals_response(document.totals),
        payload=build_transaction_payload(document),
    )


def _company_id(company: Optional[Dict[str, Any]]) -> Optional[str]:
    if not company:
        return None
    company_id = company.get("_id")
    return str(company_id) if company_id is not None else None

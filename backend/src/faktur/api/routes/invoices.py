"""
Invoice document endpoints.

The API is stateless: every request carries the whole invoice in its
saved-document shape and every response is derived from it alone.
"""

import logging
import re
from typing import Annotated, Callable

from fastapi import APIRouter, File, HTTPException, Query, UploadFile, status
from fastapi.responses import HTMLResponse, JSONResponse, Response
from sqlalchemy.exc import SQLAlchemyError

from faktur.api.dependencies import DocumentServiceDep
from faktur.api.schemas import (
    ErrorResponse,
    ExportRefusedResponse,
    InvoiceDocument,
    TotalsResponse,
    ValidationResponse,
)
from faktur.domain.calculation import compute_totals
from faktur.domain.models import Invoice
from faktur.domain.validation import validate_invoice
from faktur.services.snapshot import (
    InvalidSnapshotError,
    export_snapshot,
    load_snapshot,
    snapshot_file_name,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/invoices", tags=["invoices"])

UNSAFE_FILE_NAME_CHARS = re.compile(r"[^A-Za-z0-9._-]")

NUMBERED_RESPONSES = {503: {"model": ErrorResponse, "description": "Counter store unavailable"}}


def _attachment(file_name: str) -> dict[str, str]:
    """Content-Disposition header with a header-safe file name."""
    safe_name = UNSAFE_FILE_NAME_CHARS.sub("_", file_name)
    return {"Content-Disposition": f'attachment; filename="{safe_name}"'}


def _numbered(build: Callable[[], Invoice]) -> InvoiceDocument:
    """Build an invoice that needs a new number, mapping store outages to 503."""
    try:
        invoice = build()
    except SQLAlchemyError as e:
        logger.exception("Failed to issue invoice number")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Counter store unavailable: {e.__class__.__name__}",
        )
    return InvoiceDocument.from_domain(invoice)


@router.post(
    "/new",
    response_model=InvoiceDocument,
    response_model_by_alias=True,
    responses=NUMBERED_RESPONSES,
)
def new_invoice(service: DocumentServiceDep) -> InvoiceDocument:
    """Blank invoice dated today, with a newly issued number."""
    return _numbered(service.new_invoice)


@router.get(
    "/sample",
    response_model=InvoiceDocument,
    response_model_by_alias=True,
    responses=NUMBERED_RESPONSES,
)
def sample_invoice(service: DocumentServiceDep) -> InvoiceDocument:
    """Demonstration invoice with a newly issued number."""
    return _numbered(service.sample_invoice)


@router.post("/totals", response_model=TotalsResponse)
def calculate_totals(document: InvoiceDocument) -> TotalsResponse:
    """Line totals, subtotal, discount, PPN, shipping and grand total."""
    invoice = document.to_domain()
    return TotalsResponse.from_totals(invoice, compute_totals(invoice))


@router.post("/validate", response_model=ValidationResponse)
def validate(document: InvoiceDocument) -> ValidationResponse:
    """Report missing required fields and negative quantities or unit prices."""
    return ValidationResponse.from_result(validate_invoice(document.to_domain()))


@router.post("/preview", response_class=HTMLResponse)
def preview(
    document: InvoiceDocument,
    service: DocumentServiceDep,
    standalone: Annotated[bool, Query(description="Return a full HTML page")] = False,
) -> HTMLResponse:
    """HTML preview of the printable invoice."""
    return HTMLResponse(service.preview(document.to_domain(), standalone=standalone))


@router.post(
    "/pdf",
    response_class=Response,
    responses={
        200: {"content": {"application/pdf": {}}, "description": "The invoice as PDF"},
        422: {"model": ExportRefusedResponse, "description": "Required fields or items missing"},
        502: {"model": ExportRefusedResponse, "description": "PDF renderer failed"},
    },
)
def export_pdf(document: InvoiceDocument, service: DocumentServiceDep) -> Response:
    """
    Render the invoice as a PDF download.

    Refused with 422 when required fields are missing or there are no
    items; the response lists the offending fields.
    """
    invoice = document.to_domain()
    result = service.export_pdf(invoice)

    if not result.success:
        refused = not result.validation.is_valid or not invoice.items
        body = ExportRefusedResponse(
            error="Export refused" if refused else "Export failed",
            detail=result.message,
            invalid_fields=result.validation.invalid_fields,
        )
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY if refused else status.HTTP_502_BAD_GATEWAY,
            content=body.model_dump(),
        )

    return Response(
        content=result.content,
        media_type=result.media_type,
        headers=_attachment(result.file_name),
    )


@router.post("/export")
def export_document(document: InvoiceDocument) -> JSONResponse:
    """Saved-document JSON of the invoice, stamped with exportDate and version."""
    invoice = document.to_domain()
    return JSONResponse(
        content=export_snapshot(invoice),
        headers=_attachment(snapshot_file_name(invoice)),
    )


@router.post(
    "/import",
    response_model=InvoiceDocument,
    response_model_by_alias=True,
    responses={400: {"model": ErrorResponse, "description": "Not a saved invoice document"}},
)
async def import_document(
    file: Annotated[UploadFile, File(description="Saved invoice document (.json)")],
) -> InvoiceDocument:
    """
    Load a saved invoice document.

    The file must be a JSON object with seller, customer and items.
    Missing top-level sections fall back to a blank invoice.
    """
    try:
        content = await file.read()
    except Exception as e:
        logger.exception("Failed to read uploaded file")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Failed to read file: {str(e)}",
        )

    try:
        invoice = load_snapshot(content, current=Invoice())
    except InvalidSnapshotError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    logger.info(f"Imported {file.filename or 'document'} as {invoice.meta.invoice_number or '(unnumbered)'}")
    return InvoiceDocument.from_domain(invoice)

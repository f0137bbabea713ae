"""
Invoice number endpoint.
"""

import logging

from fastapi import APIRouter, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError

from faktur.api.dependencies import NumberGeneratorDep
from faktur.api.schemas import ErrorResponse, InvoiceNumberResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/invoice-numbers", tags=["numbering"])


@router.post(
    "",
    response_model=InvoiceNumberResponse,
    status_code=status.HTTP_201_CREATED,
    responses={503: {"model": ErrorResponse, "description": "Counter store unavailable"}},
)
def issue_invoice_number(generator: NumberGeneratorDep) -> InvoiceNumberResponse:
    """
    Issue the next invoice number for today (PREFIX-YYYYMMDD-NNN).

    Each call consumes a sequence number, even if the caller never uses it.
    """
    try:
        invoice_number = generator.generate()
    except SQLAlchemyError as e:
        logger.exception("Failed to issue invoice number")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Counter store unavailable: {e.__class__.__name__}",
        )

    return InvoiceNumberResponse(invoice_number=invoice_number)

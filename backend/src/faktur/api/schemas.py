"""
Pydantic schemas for API request/response validation.

Invoices travel in their saved-document shape (InvoiceDocument), so a file
exported by the editor can be posted back unchanged. Derived figures are
returned as decimal strings alongside their rupiah display form.
"""

from decimal import Decimal

from pydantic import BaseModel, Field

from faktur.domain.calculation import item_total
from faktur.domain.formatting import format_currency
from faktur.domain.models import Invoice, InvoiceTotals, ValidationResult
from faktur.services.snapshot import InvoiceDocument

__all__ = [
    "ErrorResponse",
    "ExportRefusedResponse",
    "HealthResponse",
    "InvoiceDocument",
    "InvoiceNumberResponse",
    "ItemTotalResponse",
    "TotalsResponse",
    "ValidationResponse",
]


# =============================================================================
# Response Schemas
# =============================================================================

class ItemTotalResponse(BaseModel):
    """Computed total of one line item."""
    id: int
    total: str
    formatted: str


class TotalsResponse(BaseModel):
    """Invoice-level figures as decimal strings plus display strings."""
    subtotal: str
    discount_amount: str
    taxable_base: str
    ppn: str
    shipping: str
    grand_total: str

    items: list[ItemTotalResponse]
    formatted: dict[str, str] = Field(
        description="Same figures formatted as rupiah, keyed like the decimal fields"
    )

    @classmethod
    def from_totals(cls, invoice: Invoice, totals: InvoiceTotals) -> "TotalsResponse":
        figures: dict[str, Decimal] = {
            "subtotal": totals.subtotal,
            "discount_amount": totals.discount_amount,
            "taxable_base": totals.taxable_base,
            "ppn": totals.ppn,
            "shipping": totals.shipping,
            "grand_total": totals.grand_total,
        }
        items = []
        for item in invoice.items:
            total = item_total(item)
            items.append(ItemTotalResponse(id=item.id, total=str(total), formatted=format_currency(total)))

        return cls(
            **{name: str(value) for name, value in figures.items()},
            items=items,
            formatted={name: format_currency(value) for name, value in figures.items()},
        )


class ValidationResponse(BaseModel):
    """Required-field check result."""
    valid: bool
    invalid_fields: list[str] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result: ValidationResult) -> "ValidationResponse":
        return cls(valid=result.is_valid, invalid_fields=list(result.invalid_fields))


class ExportRefusedResponse(BaseModel):
    """Why an export was not produced."""
    error: str
    detail: str
    invalid_fields: list[str] = Field(default_factory=list)


class InvoiceNumberResponse(BaseModel):
    """A newly issued invoice number."""
    invoice_number: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "healthy"
    version: str
    database: str = "connected"
    invoice_prefix: str


class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str
    detail: str | None = None
    code: str | None = None

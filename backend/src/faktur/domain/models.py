"""
Domain models for the invoice document.

These models represent the invoice being edited and the figures derived
from it. The Invoice is the aggregate root: it owns its line items
exclusively and is passed explicitly to every calculation and render call.

Design Decisions:
- Frozen dataclasses; edits produce a new Invoice via dataclasses.replace
- Decimal for all monetary values to avoid floating-point errors
- Party fields are free text; absent values are empty strings, not None
- No cached totals on the aggregate: InvoiceTotals is always recomputed
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any


class DiscountType(Enum):
    """How the global discount value is interpreted."""
    NOMINAL = "nominal"
    PERCENT = "percent"


@dataclass(frozen=True)
class Party:
    """
    Seller or customer on the invoice.

    Not every field applies to both roles: the seller carries a tax ID
    (NPWP) and an optional logo, the customer a contact person.
    """
    company_name: str = ""
    address: str = ""
    phone: str = ""
    email: str = ""
    tax_id: str = ""
    contact_person: str = ""
    logo: str | None = None  # data URL of the seller logo


@dataclass(frozen=True)
class LineItem:
    """
    A single billed line.

    Numeric fields hold whatever the editor entered after coercion; they
    are not clamped, so validation can still report negative values.
    """
    id: int
    description: str = ""
    quantity: Decimal = Decimal("1")
    unit_price: Decimal = Decimal("0")
    tax_rate: Decimal = Decimal("0")  # percent
    discount: Decimal = Decimal("0")  # nominal amount


@dataclass(frozen=True)
class InvoiceMeta:
    """Document identification; dates are ISO strings as entered."""
    invoice_number: str = ""
    invoice_date: str = ""
    due_date: str = ""
    payment_terms: str = ""


@dataclass(frozen=True)
class InvoiceSettings:
    """Tax, discount and shipping switches applied to the whole invoice."""
    enable_ppn: bool = False
    ppn_rate: Decimal = Decimal("11")
    global_discount: Decimal = Decimal("0")
    global_discount_type: DiscountType = DiscountType.NOMINAL
    shipping_cost: Decimal = Decimal("0")


@dataclass(frozen=True)
class Invoice:
    """
    Invoice aggregate root.

    Every derived figure is a function of these values; see
    faktur.domain.calculation.compute_totals.
    """
    seller: Party = field(default_factory=Party)
    customer: Party = field(default_factory=Party)
    meta: InvoiceMeta = field(default_factory=InvoiceMeta)
    items: tuple[LineItem, ...] = ()
    settings: InvoiceSettings = field(default_factory=InvoiceSettings)
    notes: str = ""

    # Unrecognized top-level fields carried over from an imported snapshot
    extra: dict[str, Any] = field(default_factory=dict)

    def find_item(self, item_id: int) -> LineItem | None:
        """Return the line item with the given id, if any."""
        for item in self.items:
            if item.id == item_id:
                return item
        return None


@dataclass(frozen=True)
class InvoiceTotals:
    """
    Money figures derived from an invoice.

    taxable_base is subtotal minus the clamped discount; PPN is computed
    on it, never on the raw subtotal.
    """
    subtotal: Decimal
    discount_amount: Decimal
    taxable_base: Decimal
    ppn: Decimal
    shipping: Decimal
    grand_total: Decimal


@dataclass
class ValidationResult:
    """
    Outcome of checking an invoice before it is finalized.

    A failed validation never blocks editing; it only prevents export.
    """
    invalid_fields: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        """True if no field was reported."""
        return len(self.invalid_fields) == 0

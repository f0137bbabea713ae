"""
Completeness rules checked before an invoice is finalized.

This module contains pure functions; no side effects, no I/O. A failed check
is reported through ValidationResult and never raises, so editing can
continue while the invoice is incomplete.

Rules:
1. Seller company name and address are filled in
2. Customer company name, contact person and address are filled in
3. The invoice date is filled in
4. No line item has a negative quantity or unit price

Field paths use the keys of the saved document ("seller.companyName",
"items[0].unitPrice") so an editor can highlight the matching inputs.
"""

from .editing import ItemField
from .formatting import to_decimal
from .models import Invoice, ValidationResult


def _is_blank(value: str | None) -> bool:
    return not value or value.strip() == ""


def required_fields(invoice: Invoice) -> list[tuple[str, str]]:
    """Field path and current value of every mandatory text field."""
    return [
        ("seller.companyName", invoice.seller.company_name),
        ("seller.address", invoice.seller.address),
        ("customer.companyName", invoice.customer.company_name),
        ("customer.contactPerson", invoice.customer.contact_person),
        ("customer.address", invoice.customer.address),
        ("invoiceMeta.invoiceDate", invoice.meta.invoice_date),
    ]


def validate_required_fields(invoice: Invoice) -> list[str]:
    """Paths of mandatory fields that are blank or whitespace-only."""
    return [path for path, value in required_fields(invoice) if _is_blank(value)]


def validate_item_amounts(invoice: Invoice) -> list[str]:
    """Paths of line item quantities and prices that are negative."""
    invalid: list[str] = []

    for index, item in enumerate(invoice.items):
        if to_decimal(item.quantity) < 0:
            invalid.append(f"items[{index}].{ItemField.QUANTITY.value}")
        if to_decimal(item.unit_price) < 0:
            invalid.append(f"items[{index}].{ItemField.UNIT_PRICE.value}")

    return invalid


def validate_invoice(invoice: Invoice) -> ValidationResult:
    """
    Run every completeness rule on an invoice.

    Returns:
        ValidationResult listing the offending field paths
    """
    invalid_fields = validate_required_fields(invoice)
    invalid_fields.extend(validate_item_amounts(invoice))
    return ValidationResult(invalid_fields=invalid_fields)

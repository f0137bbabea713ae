"""
Money rules for line items and invoice totals.

This module contains pure functions that derive every figure shown on the
invoice from its current state. No side effects, no I/O, no caching: every
call recomputes from the values passed in.

Composition order (binding):
1. Line total = qty * price + item tax - item discount, floored at zero
2. Subtotal = sum of line totals
3. Discount = nominal amount or percent of subtotal, capped at subtotal
4. PPN = rate applied to (subtotal - discount)
5. Grand total = (subtotal - discount) + PPN + shipping

Design Decisions:
- Raw field values pass through to_decimal, so malformed input counts as 0
- Only line totals, PPN and the grand total are rounded to cents
- The grand total is not clamped; only the discount is capped
"""

from decimal import Decimal

from .formatting import ZERO, round2, to_decimal
from .models import DiscountType, Invoice, InvoiceSettings, InvoiceTotals, LineItem


HUNDRED = Decimal("100")


def item_total(item: LineItem) -> Decimal:
    """
    Compute the total of a single line.

    Rule: max(0, round2(qty * price * (1 + tax/100) - discount))

    A discount larger than the taxed line amount yields zero rather than a
    negative line.
    """
    quantity = to_decimal(item.quantity)
    price = to_decimal(item.unit_price)
    tax_rate = to_decimal(item.tax_rate)
    discount = to_decimal(item.discount)

    line_subtotal = quantity * price
    tax = line_subtotal * tax_rate / HUNDRED
    total = round2(line_subtotal + tax - discount)

    return max(ZERO, total)


def subtotal(invoice: Invoice) -> Decimal:
    """Sum of all line totals."""
    return sum((item_total(item) for item in invoice.items), ZERO)


def discount_amount(settings: InvoiceSettings, invoice_subtotal: Decimal) -> Decimal:
    """
    Resolve the global discount into an amount.

    Percent discounts are taken from the subtotal; nominal discounts are
    used as-is. Either way the result never exceeds the subtotal.
    """
    value = to_decimal(settings.global_discount)

    if settings.global_discount_type == DiscountType.PERCENT:
        amount = value / HUNDRED * invoice_subtotal
    else:
        amount = value

    return min(amount, invoice_subtotal)


def ppn_amount(settings: InvoiceSettings, taxable_base: Decimal) -> Decimal:
    """PPN on the post-discount base, or zero when PPN is disabled."""
    if not settings.enable_ppn:
        return ZERO
    return round2(taxable_base * to_decimal(settings.ppn_rate) / HUNDRED)


def compute_totals(invoice: Invoice) -> InvoiceTotals:
    """
    Derive every summary figure of an invoice.

    Args:
        invoice: Current invoice state

    Returns:
        InvoiceTotals computed fresh from the invoice
    """
    settings = invoice.settings

    invoice_subtotal = subtotal(invoice)
    discount = discount_amount(settings, invoice_subtotal)
    taxable_base = invoice_subtotal - discount
    ppn = ppn_amount(settings, taxable_base)
    shipping = to_decimal(settings.shipping_cost)

    return InvoiceTotals(
        subtotal=invoice_subtotal,
        discount_amount=discount,
        taxable_base=taxable_base,
        ppn=ppn,
        shipping=shipping,
        grand_total=round2(taxable_base + ppn + shipping),
    )


def grand_total(invoice: Invoice) -> Decimal:
    """Shortcut for compute_totals(invoice).grand_total."""
    return compute_totals(invoice).grand_total

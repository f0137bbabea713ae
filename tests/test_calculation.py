"""
Tests for line item and invoice total calculation.

Tests cover:
- Line totals with tax, discount and malformed input
- Global discount (nominal and percent) and its cap
- PPN on the post-discount base
- The full two-line scenario invoice
"""

from dataclasses import replace
from decimal import Decimal

import pytest

from faktur.domain.calculation import (
    compute_totals,
    discount_amount,
    grand_total,
    item_total,
    ppn_amount,
    subtotal,
)
from faktur.domain.models import DiscountType, Invoice, InvoiceSettings, LineItem


def invoice_with(*items: LineItem, **settings) -> Invoice:
    return Invoice(items=items, settings=InvoiceSettings(**settings))


class TestItemTotal:
    """Per-line totals."""

    def test_quantity_times_price(self):
        item = LineItem(id=1, quantity=Decimal("3"), unit_price=Decimal("1500000"))
        assert item_total(item) == Decimal("4500000")

    def test_tax_is_percent_of_line_amount(self):
        item = LineItem(id=1, quantity=Decimal("2"), unit_price=Decimal("100"), tax_rate=Decimal("10"))
        assert item_total(item) == Decimal("220")

    def test_discount_is_subtracted_after_tax(self):
        item = LineItem(
            id=1,
            quantity=Decimal("1"),
            unit_price=Decimal("100"),
            tax_rate=Decimal("10"),
            discount=Decimal("30"),
        )
        assert item_total(item) == Decimal("80")

    def test_never_negative(self):
        item = LineItem(id=1, quantity=Decimal("1"), unit_price=Decimal("100"), discount=Decimal("500"))
        assert item_total(item) == Decimal("0")

    def test_rounded_to_cents(self):
        item = LineItem(id=1, quantity=Decimal("3"), unit_price=Decimal("0.335"))
        assert item_total(item) == Decimal("1.01")

    def test_malformed_fields_count_as_zero(self):
        item = LineItem(id=1, quantity="abc", unit_price="50")
        assert item_total(item) == Decimal("0")

    def test_very_large_quantity(self):
        item = LineItem(id=1, quantity="1e30", unit_price="1")
        assert item_total(item) == Decimal("1e30")

    def test_largest_accepted_inputs(self):
        item = LineItem(id=1, quantity="9e99", unit_price="9e99", tax_rate="9e99", discount="1")
        assert item_total(item) > 0


class TestDiscount:
    """Global discount resolution."""

    def test_nominal(self):
        settings = InvoiceSettings(global_discount=Decimal("20"))
        assert discount_amount(settings, Decimal("100")) == Decimal("20")

    def test_percent_of_subtotal(self):
        settings = InvoiceSettings(global_discount=Decimal("10"), global_discount_type=DiscountType.PERCENT)
        assert discount_amount(settings, Decimal("200")) == Decimal("20")

    def test_nominal_capped_at_subtotal(self):
        settings = InvoiceSettings(global_discount=Decimal("500"))
        assert discount_amount(settings, Decimal("100")) == Decimal("100")

    def test_percent_capped_at_subtotal(self):
        settings = InvoiceSettings(global_discount=Decimal("150"), global_discount_type=DiscountType.PERCENT)
        assert discount_amount(settings, Decimal("100")) == Decimal("100")


class TestPpn:
    """Value-added tax."""

    def test_disabled_is_zero(self):
        assert ppn_amount(InvoiceSettings(enable_ppn=False), Decimal("1000")) == Decimal("0")

    def test_computed_on_discounted_base(self):
        invoice = invoice_with(
            LineItem(id=1, quantity=Decimal("1"), unit_price=Decimal("100")),
            enable_ppn=True,
            ppn_rate=Decimal("10"),
            global_discount=Decimal("20"),
        )
        totals = compute_totals(invoice)

        assert totals.subtotal == Decimal("100")
        assert totals.discount_amount == Decimal("20")
        assert totals.taxable_base == Decimal("80")
        assert totals.ppn == Decimal("8")

    def test_full_discount_leaves_no_tax(self):
        invoice = invoice_with(
            LineItem(id=1, quantity=Decimal("1"), unit_price=Decimal("100")),
            enable_ppn=True,
            global_discount=Decimal("100"),
            global_discount_type=DiscountType.PERCENT,
        )
        assert compute_totals(invoice).ppn == Decimal("0")


class TestInvoiceTotals:
    """Whole-invoice figures."""

    def test_scenario_invoice(self, scenario_invoice):
        totals = compute_totals(scenario_invoice)

        assert totals.subtotal == Decimal("9250000")
        assert totals.discount_amount == Decimal("0")
        assert totals.ppn == Decimal("1017500")
        assert totals.shipping == Decimal("50000")
        assert totals.grand_total == Decimal("10317500")

    def test_sample_invoice(self, sample):
        totals = compute_totals(sample)

        assert totals.subtotal == Decimal("10750000")
        assert totals.ppn == Decimal("1182500")
        assert totals.grand_total == Decimal("11982500")

    def test_empty_invoice(self):
        totals = compute_totals(Invoice())
        assert totals.subtotal == Decimal("0")
        assert totals.grand_total == Decimal("0")

    def test_shipping_added_without_items(self):
        assert grand_total(invoice_with(shipping_cost=Decimal("15000"))) == Decimal("15000")

    def test_item_order_does_not_change_subtotal(self, scenario_invoice):
        reversed_items = replace(scenario_invoice, items=tuple(reversed(scenario_invoice.items)))
        assert subtotal(reversed_items) == subtotal(scenario_invoice)

    @pytest.mark.parametrize("discount_type", list(DiscountType))
    def test_grand_total_never_below_shipping(self, discount_type):
        invoice = invoice_with(
            LineItem(id=1, quantity=Decimal("2"), unit_price=Decimal("100")),
            enable_ppn=True,
            global_discount=Decimal("1000"),
            global_discount_type=discount_type,
            shipping_cost=Decimal("10"),
        )
        assert grand_total(invoice) == Decimal("10")

"""
Tests for editing operations on the invoice aggregate.
"""

from decimal import Decimal

from faktur.domain.calculation import compute_totals
from faktur.domain.editing import (
    ItemField,
    MetaField,
    PartyField,
    PartyRole,
    SettingsField,
    add_item,
    next_item_id,
    remove_item,
    reset_invoice,
    set_notes,
    update_item,
    update_meta,
    update_party,
    update_settings,
)
from faktur.domain.models import DiscountType, Invoice


class TestLineItems:
    """Adding, removing and changing lines."""

    def test_add_item_appends_blank_line(self):
        invoice = add_item(Invoice())

        assert len(invoice.items) == 1
        item = invoice.items[0]
        assert item.id == 1
        assert item.quantity == Decimal("1")
        assert item.unit_price == Decimal("0")

    def test_ids_are_unique_after_removal(self, sample):
        trimmed = remove_item(sample, 2)
        extended = add_item(trimmed)

        ids = [item.id for item in extended.items]
        assert ids == [1, 3, 4]
        assert next_item_id(extended) == 5

    def test_remove_keeps_order_of_remainder(self, sample):
        invoice = remove_item(sample, 2)
        assert [item.id for item in invoice.items] == [1, 3]

    def test_remove_unknown_id_changes_nothing(self, sample):
        assert remove_item(sample, 99).items == sample.items

    def test_original_is_not_modified(self, sample):
        before = sample.items
        update_item(sample, 1, ItemField.QUANTITY, "4")
        assert sample.items == before

    def test_update_numeric_field_coerces(self, sample):
        invoice = update_item(sample, 1, ItemField.QUANTITY, "4")
        assert invoice.find_item(1).quantity == Decimal("4")

    def test_update_with_malformed_number_is_zero(self, sample):
        invoice = update_item(sample, 1, ItemField.UNIT_PRICE, "lots")
        assert invoice.find_item(1).unit_price == Decimal("0")

    def test_update_by_logical_key(self, sample):
        invoice = update_item(sample, 3, ItemField("itemDiscount"), 100000)
        assert invoice.find_item(3).discount == Decimal("100000")

    def test_update_unknown_id_is_ignored(self, sample):
        assert update_item(sample, 42, ItemField.DESCRIPTION, "Ghost") is sample

    def test_totals_follow_edits(self, scenario_invoice):
        invoice = update_item(scenario_invoice, 2, ItemField.DISCOUNT, 0)
        assert compute_totals(invoice).subtotal == Decimal("9500000")


class TestDocumentFields:
    """Parties, meta, settings and notes."""

    def test_update_seller(self, sample):
        invoice = update_party(sample, PartyRole.SELLER, PartyField.COMPANY_NAME, "PT. Baru")
        assert invoice.seller.company_name == "PT. Baru"
        assert invoice.customer == sample.customer

    def test_update_customer_contact(self, sample):
        invoice = update_party(sample, PartyRole("customer"), PartyField("contactPerson"), "Siti")
        assert invoice.customer.contact_person == "Siti"

    def test_clearing_logo(self, sample):
        with_logo = update_party(sample, PartyRole.SELLER, PartyField.LOGO, "data:image/png;base64,AAAA")
        cleared = update_party(with_logo, PartyRole.SELLER, PartyField.LOGO, "")
        assert with_logo.seller.logo == "data:image/png;base64,AAAA"
        assert cleared.seller.logo is None

    def test_update_meta(self, sample):
        invoice = update_meta(sample, MetaField.PAYMENT_TERMS, "COD")
        assert invoice.meta.payment_terms == "COD"

    def test_enable_ppn_from_string(self):
        invoice = update_settings(Invoice(), SettingsField.ENABLE_PPN, "true")
        assert invoice.settings.enable_ppn is True

    def test_unknown_discount_type_falls_back_to_nominal(self):
        invoice = update_settings(Invoice(), SettingsField.GLOBAL_DISCOUNT_TYPE, "bogus")
        assert invoice.settings.global_discount_type == DiscountType.NOMINAL

    def test_percent_discount_type(self):
        invoice = update_settings(Invoice(), SettingsField.GLOBAL_DISCOUNT_TYPE, "percent")
        assert invoice.settings.global_discount_type == DiscountType.PERCENT

    def test_set_notes(self):
        assert set_notes(Invoice(), None).notes == ""
        assert set_notes(Invoice(), "Lunas").notes == "Lunas"


class TestResetInvoice:
    """Starting over."""

    def test_reset_clears_everything_but_number_and_date(self):
        invoice = reset_invoice("INVC-20240305-002", "2024-03-05", ppn_rate=Decimal("12"))

        assert invoice.meta.invoice_number == "INVC-20240305-002"
        assert invoice.meta.invoice_date == "2024-03-05"
        assert invoice.meta.due_date == ""
        assert invoice.items == ()
        assert invoice.seller.company_name == ""
        assert invoice.settings.enable_ppn is False
        assert invoice.settings.ppn_rate == Decimal("12")
        assert invoice.notes == ""

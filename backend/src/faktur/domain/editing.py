"""
Editing operations on the invoice aggregate.

Each operation takes the current Invoice and returns a new one; nothing is
mutated in place and no module-level state is kept. Fields are addressed by
enum members whose values are the logical keys used in saved documents
("unitPrice", "companyName", ...), so an editor can forward its own field
keys through ItemField("unitPrice") and friends.

Design Decisions:
- Numeric item and settings fields are coerced with to_decimal on entry
- Unknown item ids are ignored rather than raising
- Item ids are monotonic within an invoice (max existing id + 1)
"""

import logging
from collections.abc import Callable
from dataclasses import replace
from decimal import Decimal
from enum import Enum
from typing import Any

from .formatting import to_decimal
from .models import (
    DiscountType,
    Invoice,
    InvoiceMeta,
    InvoiceSettings,
    LineItem,
    Party,
)

logger = logging.getLogger(__name__)


class ItemField(Enum):
    """Editable line item fields."""
    DESCRIPTION = "description"
    QUANTITY = "quantity"
    UNIT_PRICE = "unitPrice"
    TAX_RATE = "itemTax"
    DISCOUNT = "itemDiscount"


class PartyRole(Enum):
    """Which party of the invoice is being edited."""
    SELLER = "seller"
    CUSTOMER = "customer"


class PartyField(Enum):
    """Editable party fields."""
    COMPANY_NAME = "companyName"
    ADDRESS = "address"
    PHONE = "phone"
    EMAIL = "email"
    TAX_ID = "npwp"
    CONTACT_PERSON = "contactPerson"
    LOGO = "logoBase64"


class MetaField(Enum):
    """Editable document identification fields."""
    INVOICE_NUMBER = "invoiceNumber"
    INVOICE_DATE = "invoiceDate"
    DUE_DATE = "dueDate"
    PAYMENT_TERMS = "paymentTerms"


class SettingsField(Enum):
    """Editable tax, discount and shipping settings."""
    ENABLE_PPN = "enablePPN"
    PPN_RATE = "ppnRate"
    GLOBAL_DISCOUNT = "globalDiscount"
    GLOBAL_DISCOUNT_TYPE = "globalDiscountType"
    SHIPPING_COST = "shippingCost"


TRUTHY_STRINGS = {"true", "1", "yes", "on"}


def to_text(value: Any) -> str:
    """Free-text field value; None becomes an empty string."""
    if value is None:
        return ""
    return str(value)


def to_flag(value: Any) -> bool:
    """Checkbox value from a bool or its common string spellings."""
    if isinstance(value, str):
        return value.strip().lower() in TRUTHY_STRINGS
    return bool(value)


def to_discount_type(value: Any) -> DiscountType:
    """Discount type from its key; anything unknown falls back to nominal."""
    if isinstance(value, DiscountType):
        return value
    try:
        return DiscountType(value)
    except ValueError:
        logger.debug(f"Unknown discount type {value!r}, using nominal")
        return DiscountType.NOMINAL


def _to_logo(value: Any) -> str | None:
    return value or None


# Logical key -> (dataclass attribute, coercion)
ITEM_ATTRIBUTES: dict[ItemField, tuple[str, Callable[[Any], Any]]] = {
    ItemField.DESCRIPTION: ("description", to_text),
    ItemField.QUANTITY: ("quantity", to_decimal),
    ItemField.UNIT_PRICE: ("unit_price", to_decimal),
    ItemField.TAX_RATE: ("tax_rate", to_decimal),
    ItemField.DISCOUNT: ("discount", to_decimal),
}

PARTY_ATTRIBUTES: dict[PartyField, tuple[str, Callable[[Any], Any]]] = {
    PartyField.COMPANY_NAME: ("company_name", to_text),
    PartyField.ADDRESS: ("address", to_text),
    PartyField.PHONE: ("phone", to_text),
    PartyField.EMAIL: ("email", to_text),
    PartyField.TAX_ID: ("tax_id", to_text),
    PartyField.CONTACT_PERSON: ("contact_person", to_text),
    PartyField.LOGO: ("logo", _to_logo),
}

META_ATTRIBUTES: dict[MetaField, str] = {
    MetaField.INVOICE_NUMBER: "invoice_number",
    MetaField.INVOICE_DATE: "invoice_date",
    MetaField.DUE_DATE: "due_date",
    MetaField.PAYMENT_TERMS: "payment_terms",
}

SETTINGS_ATTRIBUTES: dict[SettingsField, tuple[str, Callable[[Any], Any]]] = {
    SettingsField.ENABLE_PPN: ("enable_ppn", to_flag),
    SettingsField.PPN_RATE: ("ppn_rate", to_decimal),
    SettingsField.GLOBAL_DISCOUNT: ("global_discount", to_decimal),
    SettingsField.GLOBAL_DISCOUNT_TYPE: ("global_discount_type", to_discount_type),
    SettingsField.SHIPPING_COST: ("shipping_cost", to_decimal),
}


def next_item_id(invoice: Invoice) -> int:
    """Next line item id: one past the largest id in use."""
    return max((item.id for item in invoice.items), default=0) + 1


def add_item(invoice: Invoice) -> Invoice:
    """Append a blank line (quantity 1, price 0)."""
    item = LineItem(id=next_item_id(invoice))
    return replace(invoice, items=invoice.items + (item,))


def remove_item(invoice: Invoice, item_id: int) -> Invoice:
    """Drop the line with the given id; the remaining order is kept."""
    return replace(
        invoice,
        items=tuple(item for item in invoice.items if item.id != item_id),
    )


def update_item(invoice: Invoice, item_id: int, item_field: ItemField, value: Any) -> Invoice:
    """
    Set one field of a line item.

    Args:
        invoice: Current invoice
        item_id: Id of the line to change
        item_field: Field to set
        value: Raw editor value; numeric fields are coerced with to_decimal

    Returns:
        The updated invoice, or the same invoice if no line has item_id
    """
    if invoice.find_item(item_id) is None:
        logger.debug(f"update_item: no line item with id {item_id}")
        return invoice

    attribute, coerce = ITEM_ATTRIBUTES[item_field]
    items = tuple(
        replace(item, **{attribute: coerce(value)}) if item.id == item_id else item
        for item in invoice.items
    )
    return replace(invoice, items=items)


def update_party(invoice: Invoice, role: PartyRole, party_field: PartyField, value: Any) -> Invoice:
    """Set one field of the seller or the customer."""
    attribute, coerce = PARTY_ATTRIBUTES[party_field]

    if role == PartyRole.SELLER:
        return replace(invoice, seller=replace(invoice.seller, **{attribute: coerce(value)}))
    return replace(invoice, customer=replace(invoice.customer, **{attribute: coerce(value)}))


def update_meta(invoice: Invoice, meta_field: MetaField, value: Any) -> Invoice:
    """Set one document identification field."""
    attribute = META_ATTRIBUTES[meta_field]
    return replace(invoice, meta=replace(invoice.meta, **{attribute: to_text(value)}))


def update_settings(invoice: Invoice, settings_field: SettingsField, value: Any) -> Invoice:
    """Set one tax, discount or shipping setting."""
    attribute, coerce = SETTINGS_ATTRIBUTES[settings_field]
    return replace(
        invoice,
        settings=replace(invoice.settings, **{attribute: coerce(value)}),
    )


def set_notes(invoice: Invoice, text: Any) -> Invoice:
    """Replace the free-text notes."""
    return replace(invoice, notes=to_text(text))


def reset_invoice(
    invoice_number: str,
    invoice_date: str,
    ppn_rate: Decimal = Decimal("11"),
) -> Invoice:
    """
    Create an empty invoice ready for editing.

    Every party, line and setting is cleared; only the freshly generated
    number and the issue date are filled in.
    """
    return Invoice(
        seller=Party(),
        customer=Party(),
        meta=InvoiceMeta(invoice_number=invoice_number, invoice_date=invoice_date),
        items=(),
        settings=InvoiceSettings(ppn_rate=ppn_rate),
        notes="",
    )

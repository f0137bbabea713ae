"""
Saved invoice documents (JSON snapshots).

A snapshot is the whole invoice in the editor's camelCase JSON shape plus
an export timestamp and a format version. The same pydantic models validate
invoices posted to the API.

Design Decisions:
- Lenient field parsing: numbers and flags are coerced, never rejected
- Only the top-level shape is enforced (seller, customer, items present)
- Loading is a shallow merge: loaded top-level keys replace current ones
- Unknown top-level keys are kept on Invoice.extra and written back on export
- Numbers are written as JSON numbers, as the editor expects
"""

import json
import logging
from collections.abc import Mapping
from datetime import datetime, timezone
from decimal import Decimal
from typing import Annotated, Any

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    PlainSerializer,
    ValidationError,
)

from faktur.domain.editing import to_discount_type, to_flag, to_text
from faktur.domain.formatting import to_decimal
from faktur.domain.models import (
    DiscountType,
    Invoice,
    InvoiceMeta,
    InvoiceSettings,
    LineItem,
    Party,
)

logger = logging.getLogger(__name__)


SNAPSHOT_VERSION = "1.0"
REQUIRED_KEYS = ("seller", "customer", "items")
SNAPSHOT_KEYS = ("exportDate", "version")


class InvalidSnapshotError(ValueError):
    """The loaded data is not a saved invoice document."""


def _to_json_number(value: Decimal) -> int | float:
    if value == value.to_integral_value():
        return int(value)
    return float(value)


def _to_item_id(value: Any) -> int:
    return int(to_decimal(value))


Text = Annotated[str, BeforeValidator(to_text)]
Flag = Annotated[bool, BeforeValidator(to_flag)]
Number = Annotated[
    Decimal,
    BeforeValidator(to_decimal),
    PlainSerializer(_to_json_number, return_type=int | float),
]
ItemId = Annotated[int, BeforeValidator(_to_item_id)]
DiscountKind = Annotated[
    DiscountType,
    BeforeValidator(to_discount_type),
    PlainSerializer(lambda kind: kind.value, return_type=str),
]


class _WireModel(BaseModel):
    """Accepts both camelCase keys and field names; ignores unknown keys."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class PartyDocument(_WireModel):
    """Seller or customer block."""
    company_name: Text = Field(default="", alias="companyName")
    address: Text = ""
    phone: Text = ""
    email: Text = ""
    npwp: Text = ""
    contact_person: Text = Field(default="", alias="contactPerson")
    logo_base64: str | None = Field(default=None, alias="logoBase64")

    @classmethod
    def from_domain(cls, party: Party) -> "PartyDocument":
        return cls(
            company_name=party.company_name,
            address=party.address,
            phone=party.phone,
            email=party.email,
            npwp=party.tax_id,
            contact_person=party.contact_person,
            logo_base64=party.logo,
        )

    def to_domain(self) -> Party:
        return Party(
            company_name=self.company_name,
            address=self.address,
            phone=self.phone,
            email=self.email,
            tax_id=self.npwp,
            contact_person=self.contact_person,
            logo=self.logo_base64 or None,
        )


class InvoiceMetaDocument(_WireModel):
    """Invoice number, dates and payment terms."""
    invoice_number: Text = Field(default="", alias="invoiceNumber")
    invoice_date: Text = Field(default="", alias="invoiceDate")
    due_date: Text = Field(default="", alias="dueDate")
    payment_terms: Text = Field(default="", alias="paymentTerms")

    @classmethod
    def from_domain(cls, meta: InvoiceMeta) -> "InvoiceMetaDocument":
        return cls(
            invoice_number=meta.invoice_number,
            invoice_date=meta.invoice_date,
            due_date=meta.due_date,
            payment_terms=meta.payment_terms,
        )

    def to_domain(self) -> InvoiceMeta:
        return InvoiceMeta(
            invoice_number=self.invoice_number,
            invoice_date=self.invoice_date,
            due_date=self.due_date,
            payment_terms=self.payment_terms,
        )


class LineItemDocument(_WireModel):
    """One line item."""
    id: ItemId = 0
    description: Text = ""
    quantity: Number = Decimal("1")
    unit_price: Number = Field(default=Decimal("0"), alias="unitPrice")
    item_tax: Number = Field(default=Decimal("0"), alias="itemTax")
    item_discount: Number = Field(default=Decimal("0"), alias="itemDiscount")

    @classmethod
    def from_domain(cls, item: LineItem) -> "LineItemDocument":
        return cls(
            id=item.id,
            description=item.description,
            quantity=item.quantity,
            unit_price=item.unit_price,
            item_tax=item.tax_rate,
            item_discount=item.discount,
        )

    def to_domain(self) -> LineItem:
        return LineItem(
            id=self.id,
            description=self.description,
            quantity=self.quantity,
            unit_price=self.unit_price,
            tax_rate=self.item_tax,
            discount=self.item_discount,
        )


class SettingsDocument(_WireModel):
    """PPN, global discount and shipping."""
    enable_ppn: Flag = Field(default=False, alias="enablePPN")
    ppn_rate: Number = Field(default=Decimal("11"), alias="ppnRate")
    global_discount: Number = Field(default=Decimal("0"), alias="globalDiscount")
    global_discount_type: DiscountKind = Field(default=DiscountType.NOMINAL, alias="globalDiscountType")
    shipping_cost: Number = Field(default=Decimal("0"), alias="shippingCost")

    @classmethod
    def from_domain(cls, settings: InvoiceSettings) -> "SettingsDocument":
        return cls(
            enable_ppn=settings.enable_ppn,
            ppn_rate=settings.ppn_rate,
            global_discount=settings.global_discount,
            global_discount_type=settings.global_discount_type,
            shipping_cost=settings.shipping_cost,
        )

    def to_domain(self) -> InvoiceSettings:
        return InvoiceSettings(
            enable_ppn=self.enable_ppn,
            ppn_rate=self.ppn_rate,
            global_discount=self.global_discount,
            global_discount_type=self.global_discount_type,
            shipping_cost=self.shipping_cost,
        )


class InvoiceDocument(BaseModel):
    """
    The full invoice in its saved JSON shape.

    Unknown top-level keys are allowed and kept in model_extra.
    """
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    seller: PartyDocument = Field(default_factory=PartyDocument)
    customer: PartyDocument = Field(default_factory=PartyDocument)
    invoice_meta: InvoiceMetaDocument = Field(default_factory=InvoiceMetaDocument, alias="invoiceMeta")
    items: list[LineItemDocument] = Field(default_factory=list)
    settings: SettingsDocument = Field(default_factory=SettingsDocument)
    notes: Text = ""

    @classmethod
    def from_domain(cls, invoice: Invoice) -> "InvoiceDocument":
        return cls(
            seller=PartyDocument.from_domain(invoice.seller),
            customer=PartyDocument.from_domain(invoice.customer),
            invoice_meta=InvoiceMetaDocument.from_domain(invoice.meta),
            items=[LineItemDocument.from_domain(item) for item in invoice.items],
            settings=SettingsDocument.from_domain(invoice.settings),
            notes=invoice.notes,
            **invoice.extra,
        )

    def to_domain(self) -> Invoice:
        extra = {
            key: value
            for key, value in (self.model_extra or {}).items()
            if key not in SNAPSHOT_KEYS
        }
        return Invoice(
            seller=self.seller.to_domain(),
            customer=self.customer.to_domain(),
            meta=self.invoice_meta.to_domain(),
            items=tuple(item.to_domain() for item in self.items),
            settings=self.settings.to_domain(),
            notes=self.notes,
            extra=extra,
        )


def _decode(data: str | bytes | Mapping[str, Any]) -> Mapping[str, Any]:
    """Parse raw snapshot input into a JSON object."""
    if isinstance(data, (str, bytes)):
        try:
            data = json.loads(data)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise InvalidSnapshotError(f"Invalid file format: not valid JSON ({e})") from e

    if not isinstance(data, Mapping):
        raise InvalidSnapshotError("Invalid file format: expected a JSON object")

    return data


def load_snapshot(data: str | bytes | Mapping[str, Any], current: Invoice) -> Invoice:
    """
    Load a saved invoice document on top of the current invoice.

    Args:
        data: JSON text/bytes or an already decoded object
        current: Invoice being edited; returned values never alias it

    Returns:
        The merged invoice

    Raises:
        InvalidSnapshotError: If the data is not JSON, not an object, or
            lacks seller, customer or items. The current invoice is unaffected.
    """
    loaded = _decode(data)

    missing = [key for key in REQUIRED_KEYS if loaded.get(key) is None]
    if missing:
        logger.warning(f"Rejected invoice document missing {', '.join(missing)}")
        raise InvalidSnapshotError(f"Invalid file format: missing {', '.join(missing)}")

    merged = InvoiceDocument.from_domain(current).model_dump(by_alias=True)
    merged.update(loaded)

    try:
        invoice = InvoiceDocument.model_validate(merged).to_domain()
    except ValidationError as e:
        logger.warning(f"Rejected malformed invoice document: {e.error_count()} error(s)")
        raise InvalidSnapshotError(f"Invalid file format: {e.errors()[0]['msg']}") from e

    logger.info(f"Loaded invoice document with {len(invoice.items)} item(s)")
    return invoice


def export_snapshot(invoice: Invoice, now: datetime | None = None) -> dict[str, Any]:
    """
    Serialize an invoice for saving.

    Returns:
        JSON-ready dict with exportDate (ISO-8601, UTC) and version added
    """
    exported_at = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)

    snapshot = InvoiceDocument.from_domain(invoice).model_dump(by_alias=True, mode="json")
    snapshot["exportDate"] = exported_at.isoformat(timespec="milliseconds").replace("+00:00", "Z")
    snapshot["version"] = SNAPSHOT_VERSION
    return snapshot


def snapshot_file_name(invoice: Invoice, now: datetime | None = None) -> str:
    """Suggested download name: invoice_<number or backup>_<YYYY-MM-DD>.json."""
    exported_at = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return f"invoice_{invoice.meta.invoice_number or 'backup'}_{exported_at:%Y-%m-%d}.json"


def dumps_snapshot(invoice: Invoice, now: datetime | None = None) -> str:
    """Snapshot as indented JSON text."""
    return json.dumps(export_snapshot(invoice, now), indent=2, ensure_ascii=False)

"""
Structured invoice document.

render_invoice() turns an Invoice into an immutable tree of sections, text
lines and tables. Serializers (faktur.rendering.html, faktur.rendering.pdf)
turn the tree into markup or a PDF; none of them recompute money figures.

Layout:
- header:  logo, seller identity, "INVOICE" title and document meta
- parties: seller ("Dari:") and customer ("Kepada:")
- items:   one row per line item, in invoice order
- summary: subtotal, optional discount/PPN/shipping rows, emphasized total
- notes:   only when notes are present
- footer:  closing remarks

Design Decisions:
- Pure function of the invoice; the invoice is never modified
- Optional fields are omitted from the tree, not rendered blank
- Missing names and addresses fall back to placeholder text
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

from faktur.domain.calculation import compute_totals, item_total
from faktur.domain.formatting import (
    format_currency,
    format_date,
    format_number,
    format_percent,
)
from faktur.domain.models import Invoice, InvoiceTotals, LineItem, Party


DOCUMENT_TITLE = "INVOICE"
LOGO_PLACEHOLDER = "LOGO"

SELLER_NAME_PLACEHOLDER = "Nama Perusahaan"
SELLER_ADDRESS_PLACEHOLDER = "Alamat Perusahaan"
CUSTOMER_NAME_PLACEHOLDER = "Nama Pelanggan"
CUSTOMER_ADDRESS_PLACEHOLDER = "Alamat Pelanggan"
ITEM_PLACEHOLDER = "Item"

FOOTER_LINES = (
    "Terima kasih atas kepercayaan Anda kepada kami.",
    "Pembayaran mohon dilakukan sesuai dengan termin yang telah disepakati.",
)


class TextStyle(Enum):
    """Visual weight of a text line."""
    NORMAL = "normal"
    STRONG = "strong"
    HEADING = "heading"
    TITLE = "title"


class Align(Enum):
    """Horizontal alignment of a table column."""
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


@dataclass(frozen=True)
class Text:
    """A line of text."""
    text: str
    style: TextStyle = TextStyle.NORMAL


@dataclass(frozen=True)
class LabeledText:
    """A line with an emphasized label, e.g. "No. Invoice: INVC-...-001"."""
    label: str
    value: str


@dataclass(frozen=True)
class Image:
    """An embedded image; source is a data URL."""
    source: str
    alt: str = ""


@dataclass(frozen=True)
class Column:
    """Table column definition."""
    title: str
    align: Align = Align.LEFT
    strong: bool = False


@dataclass(frozen=True)
class Row:
    """Table row; emphasized rows carry the grand total."""
    cells: tuple[str, ...]
    emphasis: bool = False


@dataclass(frozen=True)
class Table:
    """A table of formatted cells."""
    name: str
    columns: tuple[Column, ...]
    rows: tuple[Row, ...]
    show_header: bool = True


@dataclass(frozen=True)
class Group:
    """A named container with an optional heading."""
    name: str
    children: tuple["Node", ...]
    heading: str | None = None


Node = Text | LabeledText | Image | Table | Group


@dataclass(frozen=True)
class Document:
    """A rendered invoice, ready for a serializer."""
    title: str
    file_name: str
    sections: tuple[Group, ...]

    def section(self, name: str) -> Group | None:
        """Return the top-level section with the given name, if present."""
        for section in self.sections:
            if section.name == name:
                return section
        return None


class RenderError(Exception):
    """A serializer could not produce output for a document."""


class DocumentRenderer(ABC):
    """Turns a Document into a downloadable file."""

    media_type: str = "application/octet-stream"
    file_extension: str = ""

    @abstractmethod
    def render(self, document: Document) -> bytes:
        """Serialize the document. Raises RenderError on failure."""
        pass


def _optional(prefix: str, value: str) -> tuple[Text, ...]:
    """A single "prefix value" line, or nothing when value is empty."""
    return (Text(f"{prefix}{value}"),) if value else ()


def _seller_lines(seller: Party, name_style: TextStyle) -> tuple[Text, ...]:
    return (
        Text(seller.company_name or SELLER_NAME_PLACEHOLDER, name_style),
        Text(seller.address or SELLER_ADDRESS_PLACEHOLDER),
        *_optional("Tel: ", seller.phone),
        *_optional("Email: ", seller.email),
        *_optional("NPWP: ", seller.tax_id),
    )


def _customer_lines(customer: Party) -> tuple[Text, ...]:
    return (
        Text(customer.company_name or CUSTOMER_NAME_PLACEHOLDER, TextStyle.STRONG),
        *_optional("Attn: ", customer.contact_person),
        Text(customer.address or CUSTOMER_ADDRESS_PLACEHOLDER),
        *_optional("Tel: ", customer.phone),
        *_optional("Email: ", customer.email),
    )


def _header(invoice: Invoice) -> Group:
    seller = invoice.seller
    meta = invoice.meta

    logo: Node = Image(seller.logo, alt="Company Logo") if seller.logo else Text(LOGO_PLACEHOLDER)

    meta_lines: list[Node] = [
        LabeledText("No. Invoice:", meta.invoice_number),
        LabeledText("Tanggal:", format_date(meta.invoice_date)),
    ]
    if meta.due_date:
        meta_lines.append(LabeledText("Jatuh Tempo:", format_date(meta.due_date)))
    if meta.payment_terms:
        meta_lines.append(LabeledText("Termin:", meta.payment_terms))

    return Group(
        name="header",
        children=(
            Group(
                name="brand",
                children=(
                    Group(name="logo", children=(logo,)),
                    Group(name="company-info", children=_seller_lines(seller, TextStyle.HEADING)),
                ),
            ),
            Group(
                name="title",
                children=(Text(DOCUMENT_TITLE, TextStyle.TITLE), *meta_lines),
            ),
        ),
    )


def _parties(invoice: Invoice) -> Group:
    return Group(
        name="parties",
        children=(
            Group(
                name="seller",
                heading="Dari:",
                children=_seller_lines(invoice.seller, TextStyle.STRONG),
            ),
            Group(
                name="customer",
                heading="Kepada:",
                children=_customer_lines(invoice.customer),
            ),
        ),
    )


ITEM_COLUMNS = (
    Column("Deskripsi"),
    Column("Qty", Align.CENTER),
    Column("Harga Satuan", Align.RIGHT),
    Column("Pajak (%)", Align.CENTER),
    Column("Diskon", Align.RIGHT),
    Column("Total", Align.RIGHT, strong=True),
)


def _item_row(item: LineItem) -> Row:
    return Row(
        cells=(
            item.description or ITEM_PLACEHOLDER,
            format_number(item.quantity),
            format_currency(item.unit_price),
            format_percent(item.tax_rate),
            format_currency(item.discount),
            format_currency(item_total(item)),
        )
    )


def _items(invoice: Invoice) -> Group:
    table = Table(
        name="items",
        columns=ITEM_COLUMNS,
        rows=tuple(_item_row(item) for item in invoice.items),
    )
    return Group(name="items", children=(table,))


def _summary(invoice: Invoice, totals: InvoiceTotals) -> Group:
    settings = invoice.settings

    rows = [Row(("Subtotal:", format_currency(totals.subtotal)))]
    if totals.discount_amount > 0:
        rows.append(Row(("Diskon Global:", f"({format_currency(totals.discount_amount)})")))
    if settings.enable_ppn:
        rows.append(Row((f"PPN {format_percent(settings.ppn_rate)}:", format_currency(totals.ppn))))
    if totals.shipping > 0:
        rows.append(Row(("Ongkos Kirim:", format_currency(totals.shipping))))
    rows.append(Row(("TOTAL:", format_currency(totals.grand_total)), emphasis=True))

    table = Table(
        name="summary",
        columns=(Column(""), Column("", Align.RIGHT)),
        rows=tuple(rows),
        show_header=False,
    )
    return Group(name="summary", children=(table,))


def render_invoice(invoice: Invoice) -> Document:
    """
    Build the printable document for an invoice.

    Args:
        invoice: Current invoice state (not modified)

    Returns:
        Document tree; identical input yields an equal tree
    """
    totals = compute_totals(invoice)

    sections = [
        _header(invoice),
        _parties(invoice),
        _items(invoice),
        _summary(invoice, totals),
    ]
    if invoice.notes:
        sections.append(Group(name="notes", heading="Catatan:", children=(Text(invoice.notes),)))
    sections.append(Group(name="footer", children=tuple(Text(line) for line in FOOTER_LINES)))

    return Document(
        title=DOCUMENT_TITLE,
        file_name=f"{invoice.meta.invoice_number or 'invoice'}.pdf",
        sections=tuple(sections),
    )

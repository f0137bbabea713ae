"""
Tests for the reportlab PDF serializer.
"""

import io
from dataclasses import replace
from decimal import Decimal

import pytest
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from faktur.domain.models import LineItem
from faktur.rendering import Document, PdfRenderer, RenderError, render_invoice
from faktur.rendering.document import Group, Text, TextStyle
from faktur.rendering.pdf import MARGIN, _PdfLayout


class RecordingCanvas(canvas.Canvas):
    """Canvas that remembers every string it draws."""

    def __init__(self) -> None:
        super().__init__(io.BytesIO(), pagesize=A4)
        self.strings = []

    def drawString(self, x, y, text, *args, **kwargs):
        self.strings.append((self.getPageNumber(), x, y, text, self._fontname, self._fontsize))
        return super().drawString(x, y, text, *args, **kwargs)


@pytest.fixture
def recording() -> RecordingCanvas:
    return RecordingCanvas()


@pytest.fixture
def renderer() -> PdfRenderer:
    return PdfRenderer()


def test_renders_pdf_bytes(renderer, sample):
    content = renderer.render(render_invoice(sample))
    assert content.startswith(b"%PDF")
    assert renderer.media_type == "application/pdf"


def test_long_invoice_spans_pages(renderer, scenario_invoice):
    items = tuple(
        LineItem(id=index, description=f"Jasa konsultasi bulan ke-{index}", unit_price=Decimal("100000"))
        for index in range(1, 121)
    )
    long_content = renderer.render(render_invoice(replace(scenario_invoice, items=items)))
    short_content = renderer.render(render_invoice(scenario_invoice))

    assert long_content.startswith(b"%PDF")
    assert len(long_content) > len(short_content)


def test_undecodable_logo_falls_back_to_placeholder(renderer, scenario_invoice):
    seller = replace(scenario_invoice.seller, logo="not-a-data-url")
    content = renderer.render(render_invoice(replace(scenario_invoice, seller=seller)))
    assert content.startswith(b"%PDF")


def test_empty_document_is_rejected(renderer):
    with pytest.raises(RenderError, match="Document surface not found"):
        renderer.render(Document(title="INVOICE", file_name="x.pdf", sections=()))


def test_wrapped_text_keeps_font_across_pages(recording):
    layout = _PdfLayout(recording)
    note = " ".join(["catatan"] * 100)

    layout.draw_text(Text(note, TextStyle.STRONG), MARGIN, 120, MARGIN + 30)

    pages = {page for page, *_ in recording.strings}
    assert pages == {1, 2}
    assert {(font, size) for *_, font, size in recording.strings} == {("Helvetica-Bold", 10)}


def test_side_by_side_columns_move_to_next_page_together(recording):
    layout = _PdfLayout(recording)
    seller = Group("seller", tuple(Text(f"Baris {index}") for index in range(10)))
    parties = Group("parties", (seller, Text("Pelanggan")))

    layout.draw(parties, MARGIN, layout.width - 2 * MARGIN, MARGIN + 30)

    drawn = {text: (page, x, y) for page, x, y, text, *_ in recording.strings}
    assert {page for page, _, _ in drawn.values()} == {2}
    assert drawn["Baris 0"][2] == drawn["Pelanggan"][2]
    assert drawn["Baris 0"][1] < drawn["Pelanggan"][1]


def test_columns_taller_than_a_page_are_stacked(recording):
    layout = _PdfLayout(recording)
    seller = Group("seller", tuple(Text(f"Baris {index}") for index in range(80)))
    parties = Group("parties", (seller, Text("Pelanggan")))

    layout.draw(parties, MARGIN, layout.width - 2 * MARGIN, layout.height - MARGIN)

    drawn = {text: (page, x) for page, x, _, text, *_ in recording.strings}
    assert drawn["Pelanggan"] == (2, MARGIN)

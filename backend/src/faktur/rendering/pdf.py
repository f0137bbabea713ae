"""
PDF serializer for rendered invoice documents.

Draws the document tree onto A4 pages with the reportlab canvas. Layout is
a single top-down flow; the header and parties sections place their
children side by side.

Design Decisions:
- Text is wrapped to its column with simpleSplit instead of being clipped
- A new page starts whenever the next block would cross the bottom margin
- Side-by-side columns are measured first and start on the same page;
  columns taller than a page are stacked instead
- A logo that cannot be decoded falls back to the "LOGO" placeholder
"""

import base64
import io
import logging

from reportlab.lib.colors import HexColor
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader, simpleSplit
from reportlab.pdfgen import canvas

from .document import (
    LOGO_PLACEHOLDER,
    Align,
    Document,
    DocumentRenderer,
    Group,
    Image,
    LabeledText,
    Node,
    RenderError,
    Row,
    Table,
    Text,
    TextStyle,
)

logger = logging.getLogger(__name__)


MARGIN = 20 * mm
SECTION_SPACING = 6 * mm
CELL_PADDING = 2 * mm
LOGO_WIDTH = 30 * mm
LOGO_HEIGHT = 15 * mm

# Groups whose children are laid out as columns
SIDE_BY_SIDE = {"header", "parties"}

TITLE_BLUE = HexColor("#000080")
BLACK = HexColor("#000000")
RULE_GREY = HexColor("#999999")

FONTS = {
    TextStyle.NORMAL: ("Helvetica", 9),
    TextStyle.STRONG: ("Helvetica-Bold", 10),
    TextStyle.HEADING: ("Helvetica-Bold", 13),
    TextStyle.TITLE: ("Helvetica-Bold", 22),
}

CELL_BOLD = (FONTS[TextStyle.STRONG][0], FONTS[TextStyle.NORMAL][1])
GRAND_TOTAL_FONT = (FONTS[TextStyle.STRONG][0], 11)


def _leading(size: float) -> float:
    return size * 1.4


def _column_widths(table: Table, width: float) -> list[float]:
    """Description-style first column gets the most room."""
    if len(table.columns) <= 2:
        return [width / len(table.columns)] * len(table.columns)
    weights = [2.5] + [1.0] * (len(table.columns) - 1)
    unit = width / sum(weights)
    return [weight * unit for weight in weights]


def _decode_data_url(source: str) -> bytes:
    """Raw bytes of a base64 data URL."""
    header, _, data = source.partition(",")
    if not header.startswith("data:") or ";base64" not in header:
        raise ValueError("Logo is not a base64 data URL")
    return base64.b64decode(data, validate=True)


class _PdfLayout:
    """Draws nodes onto a canvas, tracking the vertical cursor."""

    def __init__(self, pdf: canvas.Canvas) -> None:
        self.pdf = pdf
        self.width, self.height = A4

    def ensure_space(self, y: float, needed: float) -> float:
        """Start a new page if needed points do not fit below y."""
        if y - needed < MARGIN:
            self.pdf.showPage()
            return self.height - MARGIN
        return y

    def draw_text(self, node: Text, x: float, width: float, y: float) -> float:
        font, size = FONTS[node.style]
        lines = simpleSplit(node.text, font, size, width) or [""]

        color = TITLE_BLUE if node.style == TextStyle.TITLE else BLACK
        for line in lines:
            y = self.ensure_space(y, _leading(size))
            y -= _leading(size)
            # showPage resets the canvas state
            self.pdf.setFont(font, size)
            self.pdf.setFillColor(color)
            self.pdf.drawString(x, y + size * 0.3, line)
        self.pdf.setFillColor(BLACK)
        return y

    def draw_labeled(self, node: LabeledText, x: float, width: float, y: float) -> float:
        bold, size = FONTS[TextStyle.STRONG][0], FONTS[TextStyle.NORMAL][1]
        y = self.ensure_space(y, _leading(size))
        y -= _leading(size)

        self.pdf.setFont(bold, size)
        self.pdf.drawString(x, y + size * 0.3, node.label)
        offset = self.pdf.stringWidth(node.label, bold, size) + 1.5 * mm

        self.pdf.setFont(FONTS[TextStyle.NORMAL][0], size)
        self.pdf.drawString(x + offset, y + size * 0.3, node.value)
        return y

    def draw_image(self, node: Image, x: float, width: float, y: float) -> float:
        try:
            reader = ImageReader(io.BytesIO(_decode_data_url(node.source)))
        except (ValueError, OSError) as e:
            logger.warning(f"Logo could not be decoded, using placeholder: {e}")
            return self.draw_text(Text(LOGO_PLACEHOLDER), x, width, y)

        y = self.ensure_space(y, LOGO_HEIGHT)
        y -= LOGO_HEIGHT
        self.pdf.drawImage(
            reader,
            x,
            y,
            width=min(LOGO_WIDTH, width),
            height=LOGO_HEIGHT,
            preserveAspectRatio=True,
            anchor="sw",
            mask="auto",
        )
        return y

    def _draw_cell(self, text: str, x: float, width: float, y: float, align: Align) -> None:
        if align == Align.RIGHT:
            self.pdf.drawRightString(x + width - CELL_PADDING, y, text)
        elif align == Align.CENTER:
            self.pdf.drawCentredString(x + width / 2, y, text)
        else:
            self.pdf.drawString(x + CELL_PADDING, y, text)

    def _wrap_row(
        self,
        cells: list[str],
        widths: list[float],
        fonts: list[tuple[str, float]],
    ) -> tuple[list[list[str]], float]:
        """Wrapped cell lines and the height of the row."""
        wrapped = [
            simpleSplit(text, font, size, width - 2 * CELL_PADDING) or [""]
            for text, width, (font, size) in zip(cells, widths, fonts)
        ]
        size = max(size for _, size in fonts)
        return wrapped, max(len(lines) for lines in wrapped) * _leading(size)

    def _draw_row(
        self,
        cells: list[str],
        widths: list[float],
        aligns: list[Align],
        fonts: list[tuple[str, float]],
        x: float,
        y: float,
    ) -> float:
        wrapped, row_height = self._wrap_row(cells, widths, fonts)
        size = max(size for _, size in fonts)

        y = self.ensure_space(y, row_height)
        cell_x = x
        for lines, width, align, (font, font_size) in zip(wrapped, widths, aligns, fonts):
            self.pdf.setFont(font, font_size)
            line_y = y
            for line in lines:
                line_y -= _leading(size)
                self._draw_cell(line, cell_x, width, line_y + font_size * 0.3, align)
            cell_x += width
        return y - row_height

    def _table_layout(self, node: Table, x: float, width: float) -> tuple[float, float, list[float]]:
        """Left edge, width and column widths of a table."""
        if not node.show_header:
            # Summary tables sit on the right half
            x, width = x + width / 2, width / 2
        return x, width, _column_widths(node, width)

    def _row_fonts(self, node: Table, row: Row) -> list[tuple[str, float]]:
        if row.emphasis:
            return [GRAND_TOTAL_FONT] * len(row.cells)
        return [CELL_BOLD if column.strong else FONTS[TextStyle.NORMAL] for column in node.columns]

    def draw_table(self, node: Table, x: float, width: float, y: float) -> float:
        x, width, widths = self._table_layout(node, x, width)
        aligns = [column.align for column in node.columns]

        if node.show_header:
            titles = [column.title for column in node.columns]
            y = self._draw_row(titles, widths, aligns, [CELL_BOLD] * len(titles), x, y)
            self.pdf.setStrokeColor(RULE_GREY)
            self.pdf.setLineWidth(0.5)
            self.pdf.line(x, y, x + width, y)

        for row in node.rows:
            if row.emphasis:
                y -= 1 * mm
                self.pdf.setLineWidth(1.2)
                self.pdf.setStrokeColor(BLACK)
                self.pdf.line(x, y, x + width, y)
            y = self._draw_row(list(row.cells), widths, aligns, self._row_fonts(node, row), x, y)

        return y

    def measure(self, node: Node, width: float) -> float:
        """Height a node takes in a column of the given width, ignoring page breaks."""
        if isinstance(node, Group):
            height = self.measure(Text(node.heading, TextStyle.STRONG), width) if node.heading else 0.0
            if node.name in SIDE_BY_SIDE and node.children:
                column_width = width / len(node.children)
                return height + max(self.measure(child, column_width - 2 * mm) for child in node.children)
            return height + sum(self.measure(child, width) for child in node.children)
        if isinstance(node, Text):
            font, size = FONTS[node.style]
            return len(simpleSplit(node.text, font, size, width) or [""]) * _leading(size)
        if isinstance(node, LabeledText):
            return _leading(FONTS[TextStyle.NORMAL][1])
        if isinstance(node, Image):
            return max(LOGO_HEIGHT, _leading(FONTS[TextStyle.NORMAL][1]))
        if isinstance(node, Table):
            _, _, widths = self._table_layout(node, 0, width)
            height = 0.0
            if node.show_header:
                titles = [column.title for column in node.columns]
                height += self._wrap_row(titles, widths, [CELL_BOLD] * len(titles))[1]
            for row in node.rows:
                height += self._wrap_row(list(row.cells), widths, self._row_fonts(node, row))[1]
                if row.emphasis:
                    height += 1 * mm
            return height
        raise RenderError(f"Unsupported document node: {type(node).__name__}")

    def draw_group(self, node: Group, x: float, width: float, y: float) -> float:
        if node.heading:
            y = self.draw_text(Text(node.heading, TextStyle.STRONG), x, width, y)

        if node.name in SIDE_BY_SIDE and node.children:
            column_width = width / len(node.children)
            tallest = max(self.measure(child, column_width - 2 * mm) for child in node.children)
            # Columns share one starting line, so they must all fit on one page
            if tallest <= self.height - 2 * MARGIN:
                y = self.ensure_space(y, tallest + 1)
                bottoms = [
                    self.draw(child, x + index * column_width, column_width - 2 * mm, y)
                    for index, child in enumerate(node.children)
                ]
                return min(bottoms)

        for child in node.children:
            y = self.draw(child, x, width, y)
        return y

    def draw(self, node: Node, x: float, width: float, y: float) -> float:
        """Draw a node in the column [x, x + width] starting at y; return the new y."""
        if isinstance(node, Group):
            return self.draw_group(node, x, width, y)
        if isinstance(node, Text):
            return self.draw_text(node, x, width, y)
        if isinstance(node, LabeledText):
            return self.draw_labeled(node, x, width, y)
        if isinstance(node, Image):
            return self.draw_image(node, x, width, y)
        if isinstance(node, Table):
            return self.draw_table(node, x, width, y)
        raise RenderError(f"Unsupported document node: {type(node).__name__}")


class PdfRenderer(DocumentRenderer):
    """
    A4 PDF output via reportlab.

    Example:
        pdf_bytes = PdfRenderer().render(render_invoice(invoice))
    """

    media_type = "application/pdf"
    file_extension = "pdf"

    def render(self, document: Document) -> bytes:
        """
        Draw the document and return the PDF bytes.

        Raises:
            RenderError: If the document has nothing to draw
        """
        if not document.sections:
            raise RenderError("Document surface not found")

        buffer = io.BytesIO()
        pdf = canvas.Canvas(buffer, pagesize=A4)
        pdf.setTitle(f"{document.title} {document.file_name}")

        layout = _PdfLayout(pdf)
        y = layout.height - MARGIN
        content_width = layout.width - 2 * MARGIN

        for section in document.sections:
            y = layout.draw(section, MARGIN, content_width, y) - SECTION_SPACING

        pdf.save()
        logger.debug(f"Rendered {document.file_name}: {buffer.tell()} bytes")
        return buffer.getvalue()

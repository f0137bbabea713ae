"""
HTML serializer for rendered invoice documents.

Produces the markup shown in the editor preview. All text is escaped; the
tree already holds formatted strings, so this module only decides tags
and CSS classes.
"""

from html import escape

from .document import (
    Align,
    Document,
    DocumentRenderer,
    Group,
    Image,
    LabeledText,
    Node,
    Table,
    Text,
    TextStyle,
)


STYLESHEET = """
body { font-family: Helvetica, Arial, sans-serif; color: #222; }
.invoice-template { max-width: 800px; margin: 0 auto; padding: 24px; }
.invoice-header, .invoice-brand, .invoice-parties { display: flex; justify-content: space-between; gap: 24px; }
.invoice-title { font-size: 28px; font-weight: bold; color: #000080; }
table { width: 100%; border-collapse: collapse; margin-top: 16px; }
th, td { padding: 6px 8px; border-bottom: 1px solid #ddd; }
.text-left { text-align: left; }
.text-center { text-align: center; }
.text-right { text-align: right; }
.invoice-summary table { width: auto; margin-left: auto; }
.total-row td { font-weight: bold; font-size: 1.2em; border-top: 2px solid #222; }
.invoice-footer { margin-top: 32px; font-size: 0.9em; color: #555; }
""".strip()

ALIGN_CLASSES = {
    Align.LEFT: "text-left",
    Align.CENTER: "text-center",
    Align.RIGHT: "text-right",
}


def _text(node: Text) -> str:
    content = escape(node.text)
    if node.style == TextStyle.TITLE:
        return f'<div class="invoice-title">{content}</div>'
    if node.style == TextStyle.HEADING:
        return f"<h1>{content}</h1>"
    if node.style == TextStyle.STRONG:
        return f"<p><strong>{content}</strong></p>"
    return f"<p>{content}</p>"


def _table(node: Table) -> str:
    parts = [f'<table class="invoice-{escape(node.name)}">']

    if node.show_header:
        headers = "".join(
            f'<th class="{ALIGN_CLASSES[column.align]}">{escape(column.title)}</th>'
            for column in node.columns
        )
        parts.append(f"<thead><tr>{headers}</tr></thead>")

    parts.append("<tbody>")
    for row in node.rows:
        row_class = ' class="total-row"' if row.emphasis else ""
        cells = []
        for column, value in zip(node.columns, row.cells):
            content = escape(value)
            if column.strong:
                content = f"<strong>{content}</strong>"
            cells.append(f'<td class="{ALIGN_CLASSES[column.align]}">{content}</td>')
        parts.append(f"<tr{row_class}>{''.join(cells)}</tr>")
    parts.append("</tbody></table>")

    return "".join(parts)


def _node(node: Node) -> str:
    if isinstance(node, Group):
        heading = f"<h3>{escape(node.heading)}</h3>" if node.heading else ""
        children = "".join(_node(child) for child in node.children)
        return f'<div class="invoice-{escape(node.name)}">{heading}{children}</div>'
    if isinstance(node, Text):
        return _text(node)
    if isinstance(node, LabeledText):
        return f"<p><strong>{escape(node.label)}</strong> {escape(node.value)}</p>"
    if isinstance(node, Image):
        return f'<img src="{escape(node.source)}" alt="{escape(node.alt)}">'
    if isinstance(node, Table):
        return _table(node)
    raise TypeError(f"Unsupported document node: {type(node).__name__}")


def to_html(document: Document, standalone: bool = False) -> str:
    """
    Serialize a document to HTML.

    Args:
        document: Rendered invoice
        standalone: Wrap the markup in a full page with an embedded stylesheet

    Returns:
        HTML markup
    """
    body = "".join(_node(section) for section in document.sections)
    fragment = f'<div class="invoice-template">{body}</div>'

    if not standalone:
        return fragment

    return (
        "<!DOCTYPE html>"
        '<html lang="id"><head><meta charset="utf-8">'
        f"<title>{escape(document.title)}</title>"
        f"<style>{STYLESHEET}</style>"
        f"</head><body>{fragment}</body></html>"
    )


class HtmlRenderer(DocumentRenderer):
    """Standalone HTML page as a downloadable file."""

    media_type = "text/html"
    file_extension = "html"

    def render(self, document: Document) -> bytes:
        return to_html(document, standalone=True).encode("utf-8")

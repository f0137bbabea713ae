"""
Rendering package - Invoice document tree and its serializers.
"""

from .document import Document, DocumentRenderer, RenderError, render_invoice
from .html import HtmlRenderer, to_html
from .pdf import PdfRenderer

__all__ = [
    "Document",
    "DocumentRenderer",
    "HtmlRenderer",
    "PdfRenderer",
    "RenderError",
    "render_invoice",
    "to_html",
]

"""
Invoice document orchestrator service.

Coordinates everything the editor does with a whole invoice:
1. Starting a new invoice with a freshly generated number
2. Loading the sample invoice
3. Live HTML preview
4. Validated export to PDF (or any other DocumentRenderer)

This is the primary interface for the API layer.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from faktur.domain.editing import reset_invoice
from faktur.domain.models import Invoice, ValidationResult
from faktur.domain.samples import sample_invoice
from faktur.domain.validation import validate_invoice
from faktur.rendering import DocumentRenderer, PdfRenderer, render_invoice, to_html

from .numbering import InvoiceNumberGenerator

logger = logging.getLogger(__name__)


MISSING_FIELDS_MESSAGE = "Please fill in all required fields"
NO_ITEMS_MESSAGE = "Please add at least one item"
EXPORT_SUCCESS_MESSAGE = "Document generated successfully"


@dataclass
class ExportResult:
    """
    Outcome of an export attempt.

    content, file_name and media_type are set only on success. On
    validation failure, validation lists the offending fields.
    """
    success: bool
    message: str
    content: bytes | None = None
    file_name: str | None = None
    media_type: str | None = None
    validation: ValidationResult = field(default_factory=ValidationResult)


class DocumentService:
    """
    Main orchestrator for invoice documents.

    Example:
        service = DocumentService(number_generator=generator)
        invoice = service.new_invoice()
        result = service.export_pdf(invoice)
        if result.success:
            save(result.file_name, result.content)
    """

    def __init__(
        self,
        number_generator: InvoiceNumberGenerator,
        renderer: DocumentRenderer | None = None,
        default_ppn_rate: Decimal = Decimal("11"),
        today: Callable[[], date] = date.today,
    ) -> None:
        """
        Initialize service.

        Args:
            number_generator: Source of new invoice numbers
            renderer: Export format; defaults to PDF
            default_ppn_rate: PPN percentage for new invoices
            today: Source of the current date
        """
        self.number_generator = number_generator
        self.renderer = renderer or PdfRenderer()
        self.default_ppn_rate = default_ppn_rate
        self.today = today

    def new_invoice(self) -> Invoice:
        """Blank invoice with a new number, dated today."""
        invoice_number = self.number_generator.generate()
        return reset_invoice(
            invoice_number=invoice_number,
            invoice_date=self.today().isoformat(),
            ppn_rate=self.default_ppn_rate,
        )

    def sample_invoice(self) -> Invoice:
        """Populated demonstration invoice with a new number."""
        return sample_invoice(self.number_generator.generate(), self.today())

    def preview(self, invoice: Invoice, standalone: bool = False) -> str:
        """HTML markup of the invoice as it would print."""
        return to_html(render_invoice(invoice), standalone=standalone)

    def export(self, invoice: Invoice, renderer: DocumentRenderer | None = None) -> ExportResult:
        """
        Validate and render the invoice to a downloadable file.

        Invalid invoices and invoices without items are refused. Renderer
        failures are reported in the result, never raised.

        Args:
            invoice: Invoice to export
            renderer: Output format; defaults to the service renderer

        Returns:
            ExportResult describing the file or the reason for refusal
        """
        renderer = renderer or self.renderer
        number = invoice.meta.invoice_number or "(unnumbered)"

        validation = validate_invoice(invoice)
        if not validation.is_valid:
            logger.info(f"Export of {number} refused: {', '.join(validation.invalid_fields)}")
            return ExportResult(
                success=False,
                message=MISSING_FIELDS_MESSAGE,
                validation=validation,
            )

        if not invoice.items:
            logger.info(f"Export of {number} refused: no items")
            return ExportResult(success=False, message=NO_ITEMS_MESSAGE, validation=validation)

        document = render_invoice(invoice)
        try:
            content = renderer.render(document)
        except Exception as e:
            logger.exception(f"Rendering {number} as {renderer.file_extension} failed")
            return ExportResult(
                success=False,
                message=f"Error generating document: {e}",
                validation=validation,
            )

        stem = document.file_name.rsplit(".", 1)[0]
        file_name = f"{stem}.{renderer.file_extension}"
        logger.info(f"Exported {file_name} ({len(content)} bytes)")

        return ExportResult(
            success=True,
            message=EXPORT_SUCCESS_MESSAGE,
            content=content,
            file_name=file_name,
            media_type=renderer.media_type,
            validation=validation,
        )

    def export_pdf(self, invoice: Invoice) -> ExportResult:
        """Export as PDF regardless of the configured renderer."""
        return self.export(invoice, PdfRenderer())

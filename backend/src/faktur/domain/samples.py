"""
Demonstration invoice used by the editor's "load sample" action.
"""

from datetime import date, timedelta
from decimal import Decimal

from .models import Invoice, InvoiceMeta, InvoiceSettings, LineItem, Party


SAMPLE_PAYMENT_DAYS = 30


def sample_invoice(invoice_number: str, today: date) -> Invoice:
    """
    Build the sample invoice: three service lines, 11% PPN, Rp 50.000 shipping.

    Args:
        invoice_number: Number to print on the document
        today: Issue date; the due date is SAMPLE_PAYMENT_DAYS later
    """
    due = today + timedelta(days=SAMPLE_PAYMENT_DAYS)

    return Invoice(
        seller=Party(
            company_name="PT. Example Indonesia",
            address="Jl. Contoh No. 123, Jakarta Selatan 12345",
            tax_id="01.234.567.8-901.000",
            phone="+62 21 1234 5678",
            email="info@example.co.id",
        ),
        customer=Party(
            company_name="CV. Client Baik",
            contact_person="John Doe",
            address="Jl. Customer 456, Bandung 40123",
            email="john@clientbaik.com",
            phone="+62 22 8765 4321",
        ),
        meta=InvoiceMeta(
            invoice_number=invoice_number,
            invoice_date=today.isoformat(),
            due_date=due.isoformat(),
            payment_terms="Net 30",
        ),
        items=(
            LineItem(
                id=1,
                description="Website Development - Landing Page",
                quantity=Decimal("1"),
                unit_price=Decimal("5000000"),
            ),
            LineItem(
                id=2,
                description="SEO Optimization Package",
                quantity=Decimal("3"),
                unit_price=Decimal("1500000"),
                discount=Decimal("250000"),
            ),
            LineItem(
                id=3,
                description="Content Management Training",
                quantity=Decimal("2"),
                unit_price=Decimal("750000"),
            ),
        ),
        settings=InvoiceSettings(
            enable_ppn=True,
            ppn_rate=Decimal("11"),
            shipping_cost=Decimal("50000"),
        ),
        notes=(
            "Terima kasih atas kepercayaan Anda. Pembayaran mohon dilakukan "
            "sesuai dengan termin yang telah disepakati."
        ),
    )

"""
Pytest fixtures for the invoice test suite.

Provides:
- A fixed calendar day and an in-memory counter store
- Invoice number generator and document service wired to them
- Ready-made invoices (the two-line scenario invoice and the sample invoice)
- A FastAPI TestClient backed by a temporary SQLite database
"""

from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from faktur.config import get_settings
from faktur.domain.models import (
    Invoice,
    InvoiceMeta,
    InvoiceSettings,
    LineItem,
    Party,
)
from faktur.domain.samples import sample_invoice
from faktur.infrastructure.counters import InMemoryCounterStore
from faktur.infrastructure.database import close_db
from faktur.services.documents import DocumentService
from faktur.services.numbering import InvoiceNumberGenerator


FIXED_DAY = date(2024, 3, 5)


@pytest.fixture
def today() -> date:
    return FIXED_DAY


@pytest.fixture
def store() -> InMemoryCounterStore:
    return InMemoryCounterStore()


@pytest.fixture
def generator(store, today) -> InvoiceNumberGenerator:
    return InvoiceNumberGenerator(store=store, today=lambda: today)


@pytest.fixture
def service(generator, today) -> DocumentService:
    return DocumentService(number_generator=generator, today=lambda: today)


@pytest.fixture
def seller() -> Party:
    return Party(
        company_name="PT. Maju Jaya",
        address="Jl. Sudirman No. 1, Jakarta",
        phone="+62 21 555 0101",
        email="billing@majujaya.co.id",
        tax_id="01.234.567.8-901.000",
    )


@pytest.fixture
def customer() -> Party:
    return Party(
        company_name="CV. Sentosa",
        contact_person="Budi Santoso",
        address="Jl. Asia Afrika 8, Bandung",
    )


@pytest.fixture
def scenario_invoice(seller, customer) -> Invoice:
    """Two lines, 11% PPN, Rp 50.000 shipping: total Rp 10.317.500."""
    return Invoice(
        seller=seller,
        customer=customer,
        meta=InvoiceMeta(
            invoice_number="INVC-20240305-001",
            invoice_date="2024-03-05",
            due_date="2024-04-04",
            payment_terms="Net 30",
        ),
        items=(
            LineItem(id=1, description="Website Development", quantity=Decimal("1"), unit_price=Decimal("5000000")),
            LineItem(
                id=2,
                description="SEO Package",
                quantity=Decimal("3"),
                unit_price=Decimal("1500000"),
                discount=Decimal("250000"),
            ),
        ),
        settings=InvoiceSettings(
            enable_ppn=True,
            ppn_rate=Decimal("11"),
            shipping_cost=Decimal("50000"),
        ),
    )


@pytest.fixture
def sample(today) -> Invoice:
    return sample_invoice("INVC-20240305-001", today)


@pytest.fixture
def scenario_payload() -> dict:
    """The scenario invoice in its saved-document JSON shape."""
    return {
        "seller": {"companyName": "PT. Maju Jaya", "address": "Jl. Sudirman No. 1, Jakarta"},
        "customer": {
            "companyName": "CV. Sentosa",
            "contactPerson": "Budi Santoso",
            "address": "Jl. Asia Afrika 8, Bandung",
        },
        "invoiceMeta": {"invoiceNumber": "INVC-20240305-001", "invoiceDate": "2024-03-05"},
        "items": [
            {"id": 1, "description": "Website Development", "quantity": 1, "unitPrice": 5000000},
            {
                "id": 2,
                "description": "SEO Package",
                "quantity": 3,
                "unitPrice": 1500000,
                "itemTax": 0,
                "itemDiscount": 250000,
            },
        ],
        "settings": {
            "enablePPN": True,
            "ppnRate": 11,
            "globalDiscount": 0,
            "globalDiscountType": "nominal",
            "shippingCost": 50000,
        },
        "notes": "",
    }


@pytest.fixture
def app(tmp_path, monkeypatch, store, today):
    """Application using a temporary database and a fixed day for numbering."""
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'faktur-test.db'}")
    get_settings.cache_clear()
    close_db()

    from faktur.api.dependencies import get_counter_store, get_number_generator
    from faktur.main import create_app

    application = create_app()
    application.dependency_overrides[get_counter_store] = lambda: store
    application.dependency_overrides[get_number_generator] = lambda: InvoiceNumberGenerator(
        store=store,
        today=lambda: today,
    )

    yield application

    close_db()
    get_settings.cache_clear()


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client

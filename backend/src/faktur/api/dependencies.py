"""
FastAPI dependency providers.

Routes receive their services through Depends so tests can swap the
database-backed counter store for an in-memory one via
app.dependency_overrides.
"""

from typing import Annotated

from fastapi import Depends

from faktur.config import Settings, get_settings
from faktur.infrastructure.counters import CounterStore, SqlCounterStore
from faktur.services.documents import DocumentService
from faktur.services.numbering import InvoiceNumberGenerator


def get_counter_store() -> CounterStore:
    """Counter store backed by the configured database."""
    return SqlCounterStore()


def get_number_generator(
    settings: Annotated[Settings, Depends(get_settings)],
    store: Annotated[CounterStore, Depends(get_counter_store)],
) -> InvoiceNumberGenerator:
    """Invoice number generator using the configured prefix and retention."""
    return InvoiceNumberGenerator(
        store=store,
        prefix=settings.invoice_prefix,
        retention_days=settings.sequence_retention_days,
    )


def get_document_service(
    settings: Annotated[Settings, Depends(get_settings)],
    generator: Annotated[InvoiceNumberGenerator, Depends(get_number_generator)],
) -> DocumentService:
    """Document service with the configured default PPN rate."""
    return DocumentService(
        number_generator=generator,
        default_ppn_rate=settings.default_ppn_rate,
    )


SettingsDep = Annotated[Settings, Depends(get_settings)]
NumberGeneratorDep = Annotated[InvoiceNumberGenerator, Depends(get_number_generator)]
DocumentServiceDep = Annotated[DocumentService, Depends(get_document_service)]

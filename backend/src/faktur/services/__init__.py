"""
Application services: numbering, saved documents and export.
"""

from .documents import DocumentService, ExportResult
from .numbering import InvoiceNumberGenerator, sequence_key
from .snapshot import (
    InvalidSnapshotError,
    InvoiceDocument,
    dumps_snapshot,
    export_snapshot,
    load_snapshot,
    snapshot_file_name,
)

__all__ = [
    "DocumentService",
    "ExportResult",
    "InvalidSnapshotError",
    "InvoiceDocument",
    "InvoiceNumberGenerator",
    "dumps_snapshot",
    "export_snapshot",
    "load_snapshot",
    "sequence_key",
    "snapshot_file_name",
]

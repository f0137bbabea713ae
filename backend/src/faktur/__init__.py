"""
Faktur - invoice document generator.

Derives rupiah totals from an invoice and renders it into a printable document.
"""

__version__ = "0.1.0"

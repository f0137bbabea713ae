"""
Domain package - Core business logic with no external dependencies.

This package contains the invoice aggregate, the money rules that derive its
totals, and the validation applied before a document is finalized.
"""

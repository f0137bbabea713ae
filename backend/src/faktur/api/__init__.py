"""
API package - HTTP surface for the invoice editor.
"""

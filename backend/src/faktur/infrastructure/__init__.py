"""
Infrastructure package - Persistence for the invoice sequence counters.
"""

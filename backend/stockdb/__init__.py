# backend/stockdb/__init__.py
"""
Pouch inventory ledger.

Products live in the catalog, receipts and dispatches in an append-only
ledger, and balances are always derived from the two.

The model classes are kept in stockdb/apps/*/models.py.
"""

"""
Inventory module.

Handles the product catalog, the inward/outward movement ledger, and the
balances derived from them.
"""

from .router import router  # noqa: F401
from . import models  # noqa: F401

# backend/stockdb/exceptions.py
"""
Inventory service errors.

Every failure the core can report maps to one of these classes. Each carries
a stable ``code`` so a calling layer can pick a status without reading the
message text.
"""


class InventoryError(Exception):
    """Base exception for all inventory failures."""

    code = "inventory_error"

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message


class InvalidInput(InventoryError):
    """Raised when a required field is empty or malformed."""

    code = "invalid_input"


class DuplicateProduct(InventoryError):
    """Raised when a product name is already registered."""

    code = "duplicate_product"

    def __init__(self, name: str) -> None:
        super().__init__(f'Product name "{name}" already exists.')
        self.name = name


class UnknownProduct(InventoryError):
    """Raised when a name does not reference a registered product."""

    code = "unknown_product"

    def __init__(self, name: str) -> None:
        super().__init__(f'Product "{name}" is not registered.')
        self.name = name


class StorageUnavailable(InventoryError):
    """Raised when the persistence layer is unreachable or fails fatally."""

    code = "storage_unavailable"

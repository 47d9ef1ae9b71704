"""Feature apps mounted by ``stockdb.main``."""

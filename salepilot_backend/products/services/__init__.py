from .inventory import catalog_snapshot, deduct_stock, is_low_stock, restock, to_snapshot

__all__ = [
    "catalog_snapshot",
    "deduct_stock",
    "is_low_stock",
    "restock",
    "to_snapshot",
]

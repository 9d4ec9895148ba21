"""
catalog.py — Read-only Product Catalog

The catalog is an immutable mapping injected into the checkout pipeline, so a
real catalog service can replace the static table without touching the
validation logic.
"""

from decimal import Decimal
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from .models import CatalogEntry


class Catalog:
    """
    Read-only lookup of catalog entries by product id.

    Args:
        entries (Iterable[CatalogEntry]): Products to expose. Later duplicates win.
    """

    def __init__(self, entries: Iterable[CatalogEntry]):
        self._entries: Mapping[str, CatalogEntry] = MappingProxyType(
            {entry.product_id: entry for entry in entries}
        )

    def get(self, product_id: str) -> Optional[CatalogEntry]:
        return self._entries.get(product_id)

    def __contains__(self, product_id: object) -> bool:
        return product_id in self._entries

    def __getitem__(self, product_id: str) -> CatalogEntry:
        return self._entries[product_id]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries.values())


def _entry(product_id: str, name: str, price: str, max_quantity: int) -> CatalogEntry:
    return CatalogEntry(product_id=product_id, name=name, price=Decimal(price), max_quantity=max_quantity)


# Static shop catalog (in production this would come from the catalog service)
DEFAULT_CATALOG = Catalog([
    _entry("1", "Wireless Headphones", "89.99", 10),
    _entry("2", "Smart Watch", "199.99", 5),
    _entry("3", "Bluetooth Speaker", "49.99", 15),
    _entry("4", "Laptop Stand", "29.99", 20),
    _entry("5", "USB-C Cable", "14.99", 50),
    _entry("6", "Phone Case", "24.99", 30),
    _entry("7", "Wireless Mouse", "34.99", 25),
    _entry("8", "Keyboard", "79.99", 12),
    _entry("9", "Monitor", "249.99", 8),
    _entry("10", "Webcam", "69.99", 18),
])

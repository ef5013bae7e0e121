from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Iterable, Optional


class ItemType(str, Enum):
    ASSET = "ASSET"            # durable: chainsaws, GPS units
    CONSUMABLE = "CONSUMABLE"  # gloves, fuel


@dataclass(frozen=True)
class Item:
    id: str
    name: str
    sku: str
    category: str
    unit: str = "Unit"
    item_type: ItemType = ItemType.CONSUMABLE


class ItemCatalog:
    """Process-wide, read-only item catalog keyed by item id"""

    def __init__(self, items: Iterable[Item]):
        catalog = {}
        for item in items:
            if item.id in catalog:
                raise ValueError(f"Duplicate item id: {item.id}")
            catalog[item.id] = item
        self._items = MappingProxyType(catalog)

    def __contains__(self, item_id) -> bool:
        return item_id in self._items

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self):
        return iter(self._items.values())

    def get(self, item_id: str) -> Optional[Item]:
        return self._items.get(item_id)

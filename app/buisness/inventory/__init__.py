"""
Inventory business layer.

Item catalog and the per-(item, location) quantity ledger that requisition
transitions move stock through.
"""

from app.buisness.inventory.catalog import Item, ItemCatalog, ItemType
from app.buisness.inventory.inventory_ledger import InventoryLedger, InventoryRecord, LedgerDelta

__all__ = [
    'Item',
    'ItemCatalog',
    'ItemType',
    'InventoryLedger',
    'InventoryRecord',
    'LedgerDelta',
]

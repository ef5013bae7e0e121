"""
Inventory Services
Presentation services for inventory-related data retrieval and formatting.
"""

from .location_inventory_view import LocationInventoryView

__all__ = [
    'LocationInventoryView',
]

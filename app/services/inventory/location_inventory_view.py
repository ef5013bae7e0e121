"""
Location Inventory View Service

Inventory balances for a location, optionally including every location below it,
joined with catalog and location names for display.
"""

from typing import Any, Dict, List

from app.buisness.core.operations_context import OperationsContext


class LocationInventoryView:
    """
    Service for location-level inventory listings.
    """

    @staticmethod
    def get_location_summary(operations: OperationsContext, location_id: str,
                             include_descendants: bool = False) -> List[Dict[str, Any]]:
        """
        Get inventory rows for a location

        Args:
            operations: Loaded operations context
            location_id: Location to list
            include_descendants: Also list branches/field teams under the location

        Returns:
            List of dictionaries, one per (item, location) balance

        Raises:
            UnknownLocation: If the location is not in the hierarchy
        """
        rows = []
        for record in operations.list_inventory_for(location_id, include_descendants=include_descendants):
            item = operations.catalog.get(record.item_id)
            location = operations.graph.get(record.location_id)
            rows.append({
                'item_id': record.item_id,
                'item_name': item.name if item else None,
                'sku': item.sku if item else None,
                'unit': item.unit if item else None,
                'location_id': record.location_id,
                'location_name': location.name if location else None,
                'quantity': record.quantity,
            })
        return rows

    @staticmethod
    def get_item_totals(operations: OperationsContext, location_id: str) -> Dict[str, int]:
        """Total quantity per item across the location and everything below it"""
        totals: Dict[str, int] = {}
        for record in operations.list_inventory_for(location_id, include_descendants=True):
            totals[record.item_id] = totals.get(record.item_id, 0) + record.quantity
        return totals

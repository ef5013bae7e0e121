from .inventory_record import InventoryRecord

__all__ = ['InventoryRecord']

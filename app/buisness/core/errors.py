"""
Operation errors

Raised for referential or input problems that abort a single operation. Transition
outcomes (illegal, unauthorized, insufficient stock, stale) are not exceptions; see
``app.buisness.requisitions.state_machine.Rejection``.
"""

from __future__ import annotations


class OperationsError(Exception):
    """Base class for errors surfaced by the operations core"""


class UnknownLocation(OperationsError, ValueError):
    def __init__(self, location_id):
        self.location_id = location_id
        super().__init__(f"Unknown location: {location_id}")


class UnknownItem(OperationsError, ValueError):
    def __init__(self, item_id):
        self.item_id = item_id
        super().__init__(f"Unknown item: {item_id}")


class UnknownRequisition(OperationsError, ValueError):
    def __init__(self, requisition_id):
        self.requisition_id = requisition_id
        super().__init__(f"Unknown requisition: {requisition_id}")


class InvalidQuantity(OperationsError, ValueError):
    def __init__(self, quantity):
        self.quantity = quantity
        super().__init__(f"Quantity must be a positive integer, got {quantity!r}")


class NotPermitted(OperationsError, PermissionError):
    """Raised by non-transition operations (stock receipt) when the role gate refuses"""


class SyncFailure(OperationsError):
    """The external requisition source could not be read"""


class StaleWrite(OperationsError):
    """The stored row moved on since this process loaded it; nothing was written"""

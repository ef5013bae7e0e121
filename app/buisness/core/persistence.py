"""
Persistence collaborator

The operations core never talks to a database directly. It loads its starting state
through this interface and writes every committed mutation back through it, inside a
``unit_of_work`` so that a requisition and the inventory records it moved land together
or not at all.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Iterator, List, Optional

from app.buisness.inventory.catalog import Item
from app.buisness.inventory.inventory_ledger import InventoryRecord
from app.buisness.locations.location_graph import Location
from app.buisness.requisitions.requisition import Requisition, RequisitionStatus


class RequisitionPersistence(ABC):

    @abstractmethod
    def load_locations(self) -> List[Location]:
        ...

    @abstractmethod
    def load_items(self) -> List[Item]:
        ...

    @abstractmethod
    def load_inventory(self) -> List[InventoryRecord]:
        ...

    @abstractmethod
    def load_requisitions(self) -> List[Requisition]:
        """All requisitions, newest first"""

    @abstractmethod
    def save_requisition(self, requisition: Requisition,
                         previous_status: Optional[RequisitionStatus] = None) -> None:
        """
        Write ``requisition``

        Args:
            previous_status: Status the stored row must still have, with the stored log one
                entry shorter. None means the requisition must not be stored yet.

        Raises:
            StaleWrite: If the stored row does not match
        """

    @abstractmethod
    def save_inventory_record(self, record: InventoryRecord,
                              expected_quantity: Optional[int] = None) -> None:
        """
        Write the balance in ``record``

        Args:
            expected_quantity: Balance the stored row must still hold (0 for a missing row).
                None skips the check.

        Raises:
            StaleWrite: If the stored balance does not match
        """

    @abstractmethod
    @contextmanager
    def unit_of_work(self) -> Iterator[None]:
        """Commit everything saved inside the block once, or nothing if it raises"""


class NullPersistence(RequisitionPersistence):
    """Keeps the core purely in memory; used by tests and dry runs"""

    def __init__(self, locations=(), items=(), inventory=(), requisitions=()):
        self._locations = list(locations)
        self._items = list(items)
        self._inventory = list(inventory)
        self._requisitions = list(requisitions)

    def load_locations(self) -> List[Location]:
        return list(self._locations)

    def load_items(self) -> List[Item]:
        return list(self._items)

    def load_inventory(self) -> List[InventoryRecord]:
        return list(self._inventory)

    def load_requisitions(self) -> List[Requisition]:
        return list(self._requisitions)

    def save_requisition(self, requisition: Requisition,
                         previous_status: Optional[RequisitionStatus] = None) -> None:
        pass

    def save_inventory_record(self, record: InventoryRecord,
                              expected_quantity: Optional[int] = None) -> None:
        pass

    @contextmanager
    def unit_of_work(self) -> Iterator[None]:
        yield

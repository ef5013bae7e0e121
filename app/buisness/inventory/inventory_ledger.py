from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, Iterable, List, Tuple


@dataclass(frozen=True)
class InventoryRecord:
    item_id: str
    location_id: str
    quantity: int = 0


@dataclass(frozen=True)
class LedgerDelta:
    """A signed quantity movement against one (item, location) balance"""
    location_id: str
    item_id: str
    delta: int


class InventoryLedger:
    """
    Per-(item, location) quantity balances.

    A plain accumulator: ``adjust`` never clamps and never refuses. Whether a movement
    may happen is decided by the requisition state machine, which checks
    ``quantity_at`` / ``would_go_negative`` before handing deltas over.
    """

    def __init__(self, records: Iterable[InventoryRecord] = ()):
        self._records: Dict[Tuple[str, str], InventoryRecord] = {}
        for record in records:
            key = (record.item_id, record.location_id)
            if key in self._records:
                raise ValueError(f"Duplicate inventory record for item {record.item_id} at {record.location_id}")
            self._records[key] = record

    def quantity_at(self, location_id: str, item_id: str) -> int:
        record = self._records.get((item_id, location_id))
        return record.quantity if record is not None else 0

    def get(self, location_id: str, item_id: str):
        return self._records.get((item_id, location_id))

    def adjust(self, location_id: str, item_id: str, delta: int) -> InventoryRecord:
        """
        Add ``delta`` to the balance of ``item_id`` at ``location_id``

        A missing pair is created only for a positive delta; a non-positive delta on a
        missing pair leaves the ledger untouched and returns an unsaved zero record.

        Returns:
            The record after the adjustment
        """
        key = (item_id, location_id)
        record = self._records.get(key)
        if record is None:
            if delta <= 0:
                return InventoryRecord(item_id=item_id, location_id=location_id, quantity=0)
            record = InventoryRecord(item_id=item_id, location_id=location_id, quantity=delta)
        else:
            record = replace(record, quantity=record.quantity + delta)
        self._records[key] = record
        return record

    def preview(self, deltas: Iterable[LedgerDelta]) -> Dict[Tuple[str, str], int]:
        """Resulting balance per (item, location) if ``deltas`` were applied, in order"""
        balances: Dict[Tuple[str, str], int] = {}
        for change in deltas:
            key = (change.item_id, change.location_id)
            if key not in balances:
                balances[key] = self.quantity_at(change.location_id, change.item_id)
            balances[key] += change.delta
        return balances

    def would_go_negative(self, deltas: Iterable[LedgerDelta]) -> List[LedgerDelta]:
        """The deltas that would leave their balance below zero"""
        deltas = list(deltas)
        balances = self.preview(deltas)
        return [
            change for change in deltas
            if change.delta < 0 and balances[(change.item_id, change.location_id)] < 0
        ]

    def apply(self, deltas: Iterable[LedgerDelta]) -> List[InventoryRecord]:
        return [self.adjust(change.location_id, change.item_id, change.delta) for change in deltas]

    def records(self) -> List[InventoryRecord]:
        return list(self._records.values())

    def records_at(self, location_id: str) -> List[InventoryRecord]:
        return [record for record in self._records.values() if record.location_id == location_id]

    def records_for_item(self, item_id: str) -> List[InventoryRecord]:
        return [record for record in self._records.values() if record.item_id == item_id]

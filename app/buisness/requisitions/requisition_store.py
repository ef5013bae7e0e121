"""
Requisition Store

Source of truth for requisition status. Every mutation runs as one unit of work under the
store lock: decide through the state machine, write the requisition and the touched
inventory records through the persistence collaborator, then apply the same change to the
in-memory ledger and store. A persistence failure leaves memory untouched.
"""

from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional, Tuple, Union

from app.buisness.core.actor import Actor
from app.buisness.core.errors import (
    InvalidQuantity,
    StaleWrite,
    UnknownItem,
    UnknownLocation,
    UnknownRequisition,
)
from app.buisness.core.persistence import NullPersistence, RequisitionPersistence
from app.buisness.inventory.catalog import ItemCatalog
from app.buisness.inventory.inventory_ledger import InventoryLedger, InventoryRecord, LedgerDelta
from app.buisness.locations.location_graph import LocationGraph
from app.buisness.requisitions.requisition import (
    ItemCondition,
    LogAction,
    LogEntry,
    Requisition,
    RequisitionStatus,
)
from app.buisness.requisitions.role_gate import RoleGate
from app.buisness.requisitions.state_machine import (
    Rejection,
    RejectionReason,
    RequisitionStateMachine,
)
from app.utils.clock import utcnow
from app.utils.logger import get_logger

logger = get_logger("field_ops.requisitions.store")


def _new_requisition_id() -> str:
    return f"req-{uuid.uuid4().hex[:12]}"


@dataclass
class BulkResult:
    succeeded: List[Requisition] = field(default_factory=list)
    failed: List[Rejection] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            'succeeded': [requisition.to_dict() for requisition in self.succeeded],
            'failed': [rejection.to_dict() for rejection in self.failed],
        }


class RequisitionStore:

    def __init__(
        self,
        graph: LocationGraph,
        catalog: ItemCatalog,
        ledger: InventoryLedger,
        gate: Optional[RoleGate] = None,
        persistence: Optional[RequisitionPersistence] = None,
        requisitions: Iterable[Requisition] = (),
        clock: Callable[[], datetime] = utcnow,
        id_factory: Callable[[], str] = _new_requisition_id,
    ):
        self.graph = graph
        self.catalog = catalog
        self.ledger = ledger
        self.gate = gate or RoleGate(graph)
        self.persistence = persistence or NullPersistence()
        self.clock = clock
        self.id_factory = id_factory
        self.machine = RequisitionStateMachine(self.gate, ledger, clock=clock)
        self.lock = threading.RLock()

        self._by_id: Dict[str, Requisition] = {}
        self._order: List[str] = []
        for requisition in requisitions:
            if requisition.id in self._by_id:
                continue
            self._by_id[requisition.id] = requisition
            self._order.append(requisition.id)

    def __len__(self) -> int:
        return len(self._order)

    def __contains__(self, requisition_id) -> bool:
        return requisition_id in self._by_id

    def get(self, requisition_id: str) -> Optional[Requisition]:
        return self._by_id.get(requisition_id)

    def all(self) -> List[Requisition]:
        """All requisitions, newest first"""
        with self.lock:
            return [self._by_id[requisition_id] for requisition_id in self._order]

    def find_by(self, predicate: Callable[[Requisition], bool]) -> List[Requisition]:
        return [requisition for requisition in self.all() if predicate(requisition)]

    def visible_to(self, actor: Actor) -> List[Requisition]:
        return self.find_by(lambda requisition: self.gate.can_view(actor, requisition))

    def create(
        self,
        item_id: str,
        quantity: int,
        requester: Actor,
        condition: ItemCondition = ItemCondition.NEW,
        target_location_id: Optional[str] = None,
    ) -> Requisition:
        """
        Open a PENDING requisition for ``requester``

        The target defaults to the requester's own location; the source is resolved from
        the target once, here, and never recomputed.

        Raises:
            UnknownItem, UnknownLocation, InvalidQuantity
        """
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise InvalidQuantity(quantity)
        if item_id not in self.catalog:
            raise UnknownItem(item_id)

        target_id = target_location_id or requester.location_id
        if target_id is None or target_id not in self.graph:
            raise UnknownLocation(target_id)
        source_id = self.graph.resolve_source(target_id)

        now = self.clock()
        entry = LogEntry(
            timestamp=now,
            actor_id=requester.id,
            action=LogAction.CREATE.value,
            message=f"Requested {quantity} x {item_id} for {target_id} from {source_id}",
        )
        requisition = Requisition(
            id=self.id_factory(),
            requester_id=requester.id,
            source_location_id=source_id,
            target_location_id=target_id,
            item_id=item_id,
            quantity=quantity,
            status=RequisitionStatus.PENDING,
            created_at=now,
            updated_at=now,
            condition=ItemCondition(condition),
            logs=(entry,),
        )

        with self.lock:
            with self.persistence.unit_of_work():
                self.persistence.save_requisition(requisition)
            self._by_id[requisition.id] = requisition
            self._order.insert(0, requisition.id)

        logger.info(f"Requisition {requisition.id} created by {requester.id}: "
                    f"{quantity} x {item_id} {source_id} -> {target_id}")
        return requisition

    def update_status(
        self,
        requisition_id: str,
        new_status: RequisitionStatus,
        actor: Actor,
        expected_status: Optional[RequisitionStatus] = None,
    ) -> Union[Requisition, Rejection]:
        """
        Move a requisition through the state machine and commit the result

        Args:
            expected_status: Status the caller last saw. When given and different from the
                current status the write is refused as stale.

        Returns:
            The committed requisition, or a Rejection with nothing written

        Raises:
            UnknownRequisition: If the id is not in the store
        """
        new_status = RequisitionStatus(new_status)
        with self.lock:
            current = self._by_id.get(requisition_id)
            if current is None:
                raise UnknownRequisition(requisition_id)

            if expected_status is not None and current.status != RequisitionStatus(expected_status):
                rejection = Rejection(
                    RejectionReason.STALE_STATUS,
                    f"Requisition {requisition_id} is {current.status.value}, "
                    f"caller expected {RequisitionStatus(expected_status).value}",
                    requisition_id,
                )
                logger.warning(rejection.message)
                return rejection

            outcome = self.machine.attempt_transition(current, new_status, actor)
            if isinstance(outcome, Rejection):
                logger.warning(f"Transition refused ({outcome.reason.value}): {outcome.message}")
                return outcome

            records = self._records_after(outcome.ledger_deltas)
            try:
                with self.persistence.unit_of_work():
                    for record, on_hand in records:
                        self.persistence.save_inventory_record(record, expected_quantity=on_hand)
                    self.persistence.save_requisition(outcome.requisition, previous_status=current.status)
            except StaleWrite as e:
                logger.warning(f"Transition refused, stored state moved on: {e}")
                return Rejection(RejectionReason.STALE_STATUS, str(e), requisition_id)

            self.ledger.apply(outcome.ledger_deltas)
            self._by_id[requisition_id] = outcome.requisition

        logger.info(f"Requisition {requisition_id} {outcome.previous_status.value} -> "
                    f"{new_status.value} by {actor.id}")
        return outcome.requisition

    def approve_all_pending(self, actor: Actor) -> BulkResult:
        """
        Approve every pending requisition the actor can see

        Each approval is its own unit of work; the ones that go through stay committed
        even when others are refused.
        """
        pending_ids = [
            requisition.id for requisition in self.visible_to(actor)
            if requisition.status == RequisitionStatus.PENDING
        ]
        result = BulkResult()
        for requisition_id in pending_ids:
            outcome = self.update_status(
                requisition_id,
                RequisitionStatus.APPROVED,
                actor,
                expected_status=RequisitionStatus.PENDING,
            )
            if isinstance(outcome, Rejection):
                result.failed.append(outcome)
            else:
                result.succeeded.append(outcome)

        logger.info(f"Bulk approval by {actor.id}: {len(result.succeeded)} approved, {len(result.failed)} refused")
        return result

    def merge_external(self, requisitions: Iterable[Requisition]) -> List[Requisition]:
        """
        Insert requisitions whose ids are not known yet, newest batch first

        Existing entries are never replaced, so merging the same batch twice is a no-op.
        """
        with self.lock:
            inserted: List[Requisition] = []
            for requisition in requisitions:
                if requisition.id in self._by_id:
                    continue
                self._by_id[requisition.id] = requisition
                inserted.append(requisition)
            if inserted:
                self._order[:0] = [requisition.id for requisition in inserted]
        return inserted

    def _records_after(self, deltas: List[LedgerDelta]) -> List[Tuple[InventoryRecord, int]]:
        """Inventory records as they will look once ``deltas`` are applied, each with its current balance"""
        records = []
        for (item_id, location_id), quantity in self.ledger.preview(deltas).items():
            if self.ledger.get(location_id, item_id) is None and quantity <= 0:
                continue
            record = InventoryRecord(item_id=item_id, location_id=location_id, quantity=quantity)
            records.append((record, self.ledger.quantity_at(location_id, item_id)))
        return records

"""
Operations Context

The one object the web and command line layers talk to. Built once per process from the
persistence collaborator and passed around explicitly; tests build a fresh one each.
"""

from __future__ import annotations

from typing import Callable, Iterable, List, Optional

from app.buisness.core.actor import Actor, Role
from app.buisness.core.errors import (
    InvalidQuantity,
    NotPermitted,
    UnknownItem,
    UnknownLocation,
)
from app.buisness.core.persistence import RequisitionPersistence
from app.buisness.inventory.catalog import ItemCatalog
from app.buisness.inventory.inventory_ledger import InventoryLedger, InventoryRecord
from app.buisness.locations.location_graph import LocationGraph
from app.buisness.requisitions.requisition import ItemCondition, Requisition, RequisitionStatus
from app.buisness.requisitions.requisition_store import BulkResult, RequisitionStore
from app.buisness.requisitions.role_gate import RoleGate
from app.buisness.requisitions.status_validator import RequisitionStatusValidator
from app.buisness.requisitions.sync_coordinator import SyncCoordinator, SyncResult
from app.utils.logger import get_logger

logger = get_logger("field_ops.operations")


class OperationsContext:

    def __init__(
        self,
        graph: LocationGraph,
        catalog: ItemCatalog,
        ledger: InventoryLedger,
        persistence: RequisitionPersistence,
        requisitions: Iterable[Requisition] = (),
        actors: Iterable[Actor] = (),
        **store_options,
    ):
        self.graph = graph
        self.catalog = catalog
        self.ledger = ledger
        self.persistence = persistence
        self.gate = RoleGate(graph)
        self.store = RequisitionStore(
            graph,
            catalog,
            ledger,
            gate=self.gate,
            persistence=persistence,
            requisitions=requisitions,
            **store_options,
        )
        self.actors = list(actors)
        self.sync_coordinator: Optional[SyncCoordinator] = None

    @classmethod
    def from_persistence(cls, persistence: RequisitionPersistence, default_root_id: Optional[str] = None,
                         actors: Iterable[Actor] = (), **store_options) -> "OperationsContext":
        """Load the static configuration and the transactional state once at startup"""
        graph = LocationGraph(persistence.load_locations(), default_root_id=default_root_id)
        catalog = ItemCatalog(persistence.load_items())
        ledger = InventoryLedger(persistence.load_inventory())
        requisitions = persistence.load_requisitions()
        logger.info(
            f"Operations context loaded: {len(graph)} locations, {len(catalog)} items, "
            f"{len(ledger.records())} inventory records, {len(requisitions)} requisitions"
        )
        return cls(graph, catalog, ledger, persistence, requisitions=requisitions, actors=actors, **store_options)

    def attach_sync(self, fetch: Callable[[], Iterable[Requisition]], interval_seconds: float) -> SyncCoordinator:
        self.sync_coordinator = SyncCoordinator(self.store, fetch, interval_seconds=interval_seconds)
        return self.sync_coordinator

    def create_requisition(self, item_id: str, quantity: int, requester: Actor,
                           condition: ItemCondition = ItemCondition.NEW,
                           target_location_id: Optional[str] = None) -> Requisition:
        return self.store.create(item_id, quantity, requester, condition=condition,
                                 target_location_id=target_location_id)

    def update_requisition_status(self, requisition_id: str, new_status: RequisitionStatus, actor: Actor,
                                  expected_status: Optional[RequisitionStatus] = None):
        return self.store.update_status(requisition_id, new_status, actor, expected_status=expected_status)

    def approve_all_pending(self, actor: Actor) -> BulkResult:
        return self.store.approve_all_pending(actor)

    def list_requisitions_for(self, actor: Actor) -> List[Requisition]:
        return self.store.visible_to(actor)

    def allowed_statuses_for(self, requisition: Requisition, actor: Actor) -> List[RequisitionStatus]:
        """Statuses ``actor`` may move ``requisition`` to next, in lifecycle order"""
        return [
            status for status in RequisitionStatus
            if status in RequisitionStatusValidator.next_statuses(requisition.status)
            and self.gate.can_transition(actor, requisition, status)
        ]

    def list_inventory_for(self, location_id: str, include_descendants: bool = False) -> List[InventoryRecord]:
        if location_id not in self.graph:
            raise UnknownLocation(location_id)
        with self.store.lock:
            if include_descendants:
                location_ids = self.graph.descendants_of(location_id)
                records = [record for record in self.ledger.records() if record.location_id in location_ids]
            else:
                records = self.ledger.records_at(location_id)
        return sorted(records, key=lambda record: (record.location_id, record.item_id))

    def receive_stock(self, item_id: str, location_id: str, quantity: int, actor: Actor) -> InventoryRecord:
        """
        Book stock arriving at a location from outside the requisition flow

        Raises:
            InvalidQuantity, UnknownItem, UnknownLocation, NotPermitted
            StaleWrite: If the stored balance no longer matches this process's ledger
        """
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise InvalidQuantity(quantity)
        if item_id not in self.catalog:
            raise UnknownItem(item_id)
        if location_id not in self.graph:
            raise UnknownLocation(location_id)
        if not self.gate.can_receive_stock(actor, location_id):
            raise NotPermitted(f"{actor} may not receive stock into {location_id}")

        with self.store.lock:
            on_hand = self.ledger.quantity_at(location_id, item_id)
            record = InventoryRecord(item_id=item_id, location_id=location_id, quantity=on_hand + quantity)
            with self.persistence.unit_of_work():
                self.persistence.save_inventory_record(record, expected_quantity=on_hand)
            record = self.ledger.adjust(location_id, item_id, quantity)

        logger.info(f"Stock received by {actor.id}: {quantity} x {item_id} at {location_id}, now {record.quantity}")
        return record

    def list_workers_for(self, location_id: str) -> List[Actor]:
        scope = self.graph.descendants_of(location_id)
        return [actor for actor in self.actors if actor.role == Role.WORKER and actor.location_id in scope]

    def trigger_sync(self) -> SyncResult:
        if self.sync_coordinator is None:
            raise RuntimeError("No sync source attached")
        return self.sync_coordinator.sync(manual=True)

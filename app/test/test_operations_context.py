"""
Tests for the operations context facade
"""
import pytest

from app.buisness.core.errors import InvalidQuantity, NotPermitted, SyncFailure, UnknownItem, UnknownLocation
from app.buisness.core.operations_context import OperationsContext
from app.buisness.core.persistence import NullPersistence
from app.buisness.inventory.inventory_ledger import InventoryRecord
from app.buisness.requisitions.requisition import RequisitionStatus
from app.test.conftest import (
    ACTORS,
    ADMIN,
    ALPHA_WORKER,
    BEIRA_MANAGER,
    BRAVO_WORKER,
    ITEMS,
    LOCATIONS,
    NAMPULA_MANAGER,
)


def test_from_persistence_loads_everything():
    persistence = NullPersistence(
        locations=LOCATIONS,
        items=ITEMS,
        inventory=[InventoryRecord('it-chainsaw', 'loc-central', 50)],
    )

    operations = OperationsContext.from_persistence(persistence, actors=ACTORS)

    assert len(operations.graph) == len(LOCATIONS)
    assert len(operations.catalog) == len(ITEMS)
    assert operations.ledger.quantity_at('loc-central', 'it-chainsaw') == 50
    assert len(operations.store) == 0


def test_list_requisitions_for_actor(operations):
    mine = operations.create_requisition('it-helmet', 2, ALPHA_WORKER)
    operations.create_requisition('it-helmet', 2, BEIRA_MANAGER)

    assert [r.id for r in operations.list_requisitions_for(ALPHA_WORKER)] == [mine.id]
    assert len(operations.list_requisitions_for(ADMIN)) == 2


def test_allowed_statuses_follow_role_and_lifecycle(operations):
    requisition = operations.create_requisition('it-helmet', 2, ALPHA_WORKER)

    assert operations.allowed_statuses_for(requisition, ADMIN) == [RequisitionStatus.APPROVED, RequisitionStatus.REJECTED]
    assert operations.allowed_statuses_for(requisition, ALPHA_WORKER) == []

    for status in (RequisitionStatus.APPROVED, RequisitionStatus.IN_TRANSIT, RequisitionStatus.DELIVERED):
        requisition = operations.update_requisition_status(requisition.id, status, ADMIN)

    assert operations.allowed_statuses_for(requisition, ALPHA_WORKER) == [RequisitionStatus.CONFIRMED]
    assert operations.allowed_statuses_for(requisition, BRAVO_WORKER) == []


def test_update_and_bulk_approve(operations):
    requisition = operations.create_requisition('it-chainsaw', 5, NAMPULA_MANAGER)

    result = operations.approve_all_pending(ADMIN)
    dispatched = operations.update_requisition_status(requisition.id, RequisitionStatus.IN_TRANSIT, ADMIN,
                                                      expected_status=RequisitionStatus.APPROVED)

    assert [r.id for r in result.succeeded] == [requisition.id]
    assert dispatched.status == RequisitionStatus.IN_TRANSIT


def test_list_inventory_for_location(operations):
    records = operations.list_inventory_for('loc-nampula')
    assert [(r.item_id, r.quantity) for r in records] == [('it-helmet', 20)]


def test_list_inventory_with_descendants(operations):
    operations.receive_stock('it-chainsaw', 'loc-field-alpha', 3, ADMIN)

    records = operations.list_inventory_for('loc-nampula', include_descendants=True)

    assert [(r.location_id, r.item_id) for r in records] == [
        ('loc-field-alpha', 'it-chainsaw'),
        ('loc-nampula', 'it-helmet'),
    ]


def test_list_inventory_unknown_location(operations):
    with pytest.raises(UnknownLocation):
        operations.list_inventory_for('loc-mars')


def test_receive_stock(operations):
    record = operations.receive_stock('it-chainsaw', 'loc-nampula', 7, NAMPULA_MANAGER)

    assert record.quantity == 7
    assert operations.ledger.quantity_at('loc-nampula', 'it-chainsaw') == 7


def test_receive_stock_outside_authority(operations):
    with pytest.raises(NotPermitted):
        operations.receive_stock('it-chainsaw', 'loc-beira', 7, NAMPULA_MANAGER)
    with pytest.raises(NotPermitted):
        operations.receive_stock('it-chainsaw', 'loc-field-alpha', 1, ALPHA_WORKER)
    assert operations.ledger.quantity_at('loc-beira', 'it-chainsaw') == 0


def test_receive_stock_validates_input(operations):
    with pytest.raises(InvalidQuantity):
        operations.receive_stock('it-chainsaw', 'loc-central', 0, ADMIN)
    with pytest.raises(UnknownItem):
        operations.receive_stock('it-unicorn', 'loc-central', 1, ADMIN)
    with pytest.raises(UnknownLocation):
        operations.receive_stock('it-chainsaw', 'loc-mars', 1, ADMIN)


def test_list_workers_for(operations):
    assert operations.list_workers_for('loc-nampula') == [ALPHA_WORKER]
    assert operations.list_workers_for('loc-central') == [ALPHA_WORKER, BRAVO_WORKER]
    assert operations.list_workers_for('loc-mars') == []


def test_trigger_sync(operations):
    with pytest.raises(RuntimeError):
        operations.trigger_sync()

    operations.attach_sync(lambda: [], interval_seconds=60)
    assert operations.trigger_sync().inserted == []


def test_trigger_sync_failure(operations):
    def fetch():
        raise ConnectionError("offline")

    operations.attach_sync(fetch, interval_seconds=60)
    with pytest.raises(SyncFailure):
        operations.trigger_sync()

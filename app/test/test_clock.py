"""
Tests for the shared UTC clock
"""
from datetime import datetime, timedelta, timezone

from app.buisness.requisitions.requisition_store import RequisitionStore
from app.buisness.requisitions.state_machine import RequisitionStateMachine
from app.buisness.requisitions.sync_coordinator import SyncCoordinator
from app.utils.clock import utcnow


def test_utcnow_is_naive_utc():
    now = utcnow()
    aware = datetime.now(timezone.utc).replace(tzinfo=None)

    assert now.tzinfo is None
    assert abs(aware - now) < timedelta(seconds=5)


def test_components_default_to_the_shared_clock(graph, catalog, ledger):
    store = RequisitionStore(graph, catalog, ledger)

    assert store.clock is utcnow
    assert store.machine.clock is utcnow
    assert SyncCoordinator(store, list).clock is utcnow
    assert RequisitionStateMachine(store.gate, ledger).clock is utcnow

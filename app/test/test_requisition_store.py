"""
Tests for the requisition store: lifecycle, stock conservation and commit semantics
"""
from contextlib import contextmanager
from itertools import count

import pytest

from app.buisness.core.errors import InvalidQuantity, StaleWrite, UnknownItem, UnknownLocation, UnknownRequisition
from app.buisness.core.persistence import NullPersistence
from app.buisness.requisitions.requisition import ItemCondition, LogAction, RequisitionStatus
from app.buisness.requisitions.requisition_store import RequisitionStore
from app.buisness.requisitions.state_machine import Rejection, RejectionReason
from app.test.conftest import ADMIN, ALPHA_WORKER, BEIRA_MANAGER, NAMPULA_MANAGER

FULL_PATH = [
    (RequisitionStatus.APPROVED, ADMIN),
    (RequisitionStatus.IN_TRANSIT, ADMIN),
    (RequisitionStatus.DELIVERED, NAMPULA_MANAGER),
    (RequisitionStatus.CONFIRMED, ALPHA_WORKER),
]


class RecordingPersistence(NullPersistence):

    def __init__(self):
        super().__init__()
        self.requisitions_saved = []
        self.records_saved = []
        self.previous_statuses = []
        self.expected_quantities = []
        self.commits = 0

    def save_requisition(self, requisition, previous_status=None):
        self.requisitions_saved.append(requisition)
        self.previous_statuses.append(previous_status)

    def save_inventory_record(self, record, expected_quantity=None):
        self.records_saved.append(record)
        self.expected_quantities.append(expected_quantity)

    @contextmanager
    def unit_of_work(self):
        yield
        self.commits += 1


class BrokenPersistence(NullPersistence):

    @contextmanager
    def unit_of_work(self):
        yield
        raise IOError("database went away")


class MovedOnPersistence(NullPersistence):

    def save_requisition(self, requisition, previous_status=None):
        if previous_status is not None:
            raise StaleWrite(f"Requisition {requisition.id} changed in storage")


def _total(ledger, item_id='it-chainsaw'):
    return sum(record.quantity for record in ledger.records_for_item(item_id))


def test_create_resolves_source_from_requester_location(store):
    requisition = store.create('it-chainsaw', 5, NAMPULA_MANAGER)

    assert requisition.status == RequisitionStatus.PENDING
    assert requisition.target_location_id == 'loc-nampula'
    assert requisition.source_location_id == 'loc-central'
    assert requisition.condition == ItemCondition.NEW
    assert [entry.action for entry in requisition.logs] == [LogAction.CREATE.value]
    assert store.get(requisition.id) == requisition


def test_create_with_custom_target(store):
    requisition = store.create('it-helmet', 3, NAMPULA_MANAGER, condition=ItemCondition.GOOD,
                               target_location_id='loc-field-alpha')

    assert requisition.source_location_id == 'loc-nampula'
    assert requisition.condition == ItemCondition.GOOD


def test_newest_first(store):
    first = store.create('it-chainsaw', 1, NAMPULA_MANAGER)
    second = store.create('it-helmet', 1, NAMPULA_MANAGER)

    assert [r.id for r in store.all()] == [second.id, first.id]


@pytest.mark.parametrize('quantity', [0, -1, 2.5, True, '3'])
def test_create_rejects_bad_quantity(store, quantity):
    with pytest.raises(InvalidQuantity):
        store.create('it-chainsaw', quantity, NAMPULA_MANAGER)
    assert len(store) == 0


def test_create_rejects_unknown_references(store):
    with pytest.raises(UnknownItem):
        store.create('it-unicorn', 1, NAMPULA_MANAGER)
    with pytest.raises(UnknownLocation):
        store.create('it-chainsaw', 1, NAMPULA_MANAGER, target_location_id='loc-mars')


def test_update_unknown_requisition(store):
    with pytest.raises(UnknownRequisition):
        store.update_status('req-missing', RequisitionStatus.APPROVED, ADMIN)


def test_full_lifecycle_conserves_stock_and_logs_every_step(store, ledger):
    requisition = store.create('it-chainsaw', 5, ALPHA_WORKER)
    assert requisition.source_location_id == 'loc-nampula'
    # seed the branch so the dispatch can go through
    ledger.adjust('loc-nampula', 'it-chainsaw', 5)
    total_before = _total(ledger)

    for status, actor in FULL_PATH:
        outcome = store.update_status(requisition.id, status, actor)
        assert not isinstance(outcome, Rejection), outcome

    final = store.get(requisition.id)
    assert final.status == RequisitionStatus.CONFIRMED
    assert final.is_terminal
    assert len(final.logs) == 5
    assert [entry.action for entry in final.logs] == [LogAction.CREATE.value] + [LogAction.STATUS_CHANGE.value] * 4
    timestamps = [entry.timestamp for entry in final.logs]
    assert timestamps == sorted(timestamps)
    assert _total(ledger) == total_before
    assert ledger.quantity_at('loc-nampula', 'it-chainsaw') == 0
    assert ledger.quantity_at('loc-field-alpha', 'it-chainsaw') == 5


def test_in_transit_stock_is_off_the_ledger(store, ledger):
    requisition = store.create('it-chainsaw', 5, NAMPULA_MANAGER)
    store.update_status(requisition.id, RequisitionStatus.APPROVED, ADMIN)
    store.update_status(requisition.id, RequisitionStatus.IN_TRANSIT, ADMIN)

    assert _total(ledger) == 45


def test_chainsaw_delivery_to_nampula(store, ledger):
    requisition = store.create('it-chainsaw', 5, NAMPULA_MANAGER)
    assert requisition.source_location_id == 'loc-central'

    store.update_status(requisition.id, RequisitionStatus.APPROVED, ADMIN)
    store.update_status(requisition.id, RequisitionStatus.IN_TRANSIT, ADMIN)
    assert ledger.quantity_at('loc-central', 'it-chainsaw') == 45

    store.update_status(requisition.id, RequisitionStatus.DELIVERED, NAMPULA_MANAGER)
    assert ledger.quantity_at('loc-nampula', 'it-chainsaw') == 5

    again = store.update_status(requisition.id, RequisitionStatus.DELIVERED, NAMPULA_MANAGER)
    assert isinstance(again, Rejection)
    assert again.reason == RejectionReason.ILLEGAL_TRANSITION
    assert ledger.quantity_at('loc-nampula', 'it-chainsaw') == 5


def test_dispatch_beyond_stock_is_refused(store, ledger):
    requisition = store.create('it-chainsaw', 100, NAMPULA_MANAGER)
    store.update_status(requisition.id, RequisitionStatus.APPROVED, ADMIN)

    outcome = store.update_status(requisition.id, RequisitionStatus.IN_TRANSIT, ADMIN)

    assert outcome.reason == RejectionReason.INSUFFICIENT_STOCK
    assert ledger.quantity_at('loc-central', 'it-chainsaw') == 50
    assert store.get(requisition.id).status == RequisitionStatus.APPROVED


def test_repeated_transition_is_illegal_and_changes_nothing(store, ledger):
    requisition = store.create('it-chainsaw', 5, NAMPULA_MANAGER)
    store.update_status(requisition.id, RequisitionStatus.APPROVED, ADMIN)
    store.update_status(requisition.id, RequisitionStatus.IN_TRANSIT, ADMIN)
    snapshot = store.get(requisition.id)

    outcome = store.update_status(requisition.id, RequisitionStatus.IN_TRANSIT, ADMIN)

    assert outcome.reason == RejectionReason.ILLEGAL_TRANSITION
    assert store.get(requisition.id) == snapshot
    assert ledger.quantity_at('loc-central', 'it-chainsaw') == 45


def test_rejected_requisition_cannot_move(store):
    requisition = store.create('it-chainsaw', 5, NAMPULA_MANAGER)
    store.update_status(requisition.id, RequisitionStatus.REJECTED, ADMIN)

    for status in RequisitionStatus:
        outcome = store.update_status(requisition.id, status, ADMIN)
        assert isinstance(outcome, Rejection)
        assert outcome.reason == RejectionReason.ILLEGAL_TRANSITION


def test_unauthorized_transition_leaves_state_untouched(store):
    requisition = store.create('it-chainsaw', 5, NAMPULA_MANAGER)

    outcome = store.update_status(requisition.id, RequisitionStatus.APPROVED, NAMPULA_MANAGER)

    assert outcome.reason == RejectionReason.UNAUTHORIZED
    assert store.get(requisition.id) == requisition


def test_stale_expected_status_is_refused(store):
    requisition = store.create('it-chainsaw', 5, NAMPULA_MANAGER)
    store.update_status(requisition.id, RequisitionStatus.APPROVED, ADMIN,
                        expected_status=RequisitionStatus.PENDING)

    # a second admin still looking at the PENDING row
    outcome = store.update_status(requisition.id, RequisitionStatus.REJECTED, ADMIN,
                                  expected_status=RequisitionStatus.PENDING)

    assert outcome.reason == RejectionReason.STALE_STATUS
    assert store.get(requisition.id).status == RequisitionStatus.APPROVED


def test_bulk_approve_reports_each_outcome(store):
    mine = store.create('it-chainsaw', 5, NAMPULA_MANAGER)
    other = store.create('it-helmet', 2, BEIRA_MANAGER)
    done = store.create('it-helmet', 1, NAMPULA_MANAGER)
    store.update_status(done.id, RequisitionStatus.REJECTED, ADMIN)

    result = store.approve_all_pending(ADMIN)

    assert {r.id for r in result.succeeded} == {mine.id, other.id}
    assert result.failed == []
    assert store.get(done.id).status == RequisitionStatus.REJECTED


def test_bulk_approve_by_manager_fails_per_item(store):
    first = store.create('it-chainsaw', 5, NAMPULA_MANAGER)
    second = store.create('it-helmet', 2, NAMPULA_MANAGER)

    result = store.approve_all_pending(NAMPULA_MANAGER)

    assert result.succeeded == []
    assert {rejection.requisition_id for rejection in result.failed} == {first.id, second.id}
    assert all(rejection.reason == RejectionReason.UNAUTHORIZED for rejection in result.failed)
    assert store.get(first.id).status == RequisitionStatus.PENDING


def test_visible_to_scopes_by_location(store):
    nampula = store.create('it-helmet', 1, ALPHA_WORKER)
    beira = store.create('it-helmet', 1, BEIRA_MANAGER)

    assert {r.id for r in store.visible_to(NAMPULA_MANAGER)} == {nampula.id}
    assert {r.id for r in store.visible_to(ADMIN)} == {nampula.id, beira.id}


def test_commit_writes_requisition_and_records_together(graph, catalog, ledger):
    persistence = RecordingPersistence()
    ids = count(1)
    store = RequisitionStore(graph, catalog, ledger, persistence=persistence,
                             id_factory=lambda: f"req-{next(ids)}")
    requisition = store.create('it-chainsaw', 5, NAMPULA_MANAGER)
    store.update_status(requisition.id, RequisitionStatus.APPROVED, ADMIN)
    store.update_status(requisition.id, RequisitionStatus.IN_TRANSIT, ADMIN)

    assert requisition.id == 'req-1'
    assert persistence.commits == 3
    assert [r.status for r in persistence.requisitions_saved] == [
        RequisitionStatus.PENDING, RequisitionStatus.APPROVED, RequisitionStatus.IN_TRANSIT,
    ]
    assert [(r.location_id, r.quantity) for r in persistence.records_saved] == [('loc-central', 45)]
    assert persistence.previous_statuses == [None, RequisitionStatus.PENDING, RequisitionStatus.APPROVED]
    assert persistence.expected_quantities == [50]


def test_failed_commit_leaves_memory_untouched(graph, catalog, ledger):
    store = RequisitionStore(graph, catalog, ledger)
    requisition = store.create('it-chainsaw', 5, NAMPULA_MANAGER)
    store.update_status(requisition.id, RequisitionStatus.APPROVED, ADMIN)
    approved = store.get(requisition.id)
    store.persistence = BrokenPersistence()

    with pytest.raises(IOError):
        store.update_status(requisition.id, RequisitionStatus.IN_TRANSIT, ADMIN)

    assert store.get(requisition.id) == approved
    assert ledger.quantity_at('loc-central', 'it-chainsaw') == 50


def test_failed_create_is_not_stored(graph, catalog, ledger):
    store = RequisitionStore(graph, catalog, ledger, persistence=BrokenPersistence())

    with pytest.raises(IOError):
        store.create('it-chainsaw', 5, NAMPULA_MANAGER)

    assert len(store) == 0


def test_write_over_moved_row_is_stale_rejection(graph, catalog, ledger):
    store = RequisitionStore(graph, catalog, ledger)
    requisition = store.create('it-chainsaw', 5, NAMPULA_MANAGER)
    store.update_status(requisition.id, RequisitionStatus.APPROVED, ADMIN)
    approved = store.get(requisition.id)
    store.persistence = MovedOnPersistence()

    outcome = store.update_status(requisition.id, RequisitionStatus.IN_TRANSIT, ADMIN)

    assert isinstance(outcome, Rejection)
    assert outcome.reason == RejectionReason.STALE_STATUS
    assert store.get(requisition.id) == approved
    assert ledger.quantity_at('loc-central', 'it-chainsaw') == 50

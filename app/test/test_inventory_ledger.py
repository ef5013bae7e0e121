"""
Tests for the inventory ledger
"""
import pytest

from app.buisness.inventory.inventory_ledger import InventoryLedger, InventoryRecord, LedgerDelta


def test_quantity_of_missing_pair_is_zero(ledger):
    assert ledger.quantity_at('loc-nampula', 'it-chainsaw') == 0
    assert ledger.get('loc-nampula', 'it-chainsaw') is None


def test_positive_adjust_creates_record(ledger):
    record = ledger.adjust('loc-nampula', 'it-chainsaw', 5)

    assert record == InventoryRecord('it-chainsaw', 'loc-nampula', 5)
    assert ledger.quantity_at('loc-nampula', 'it-chainsaw') == 5


def test_non_positive_adjust_on_missing_pair_is_noop(ledger):
    before = len(ledger.records())

    record = ledger.adjust('loc-beira', 'it-chainsaw', -3)

    assert record.quantity == 0
    assert ledger.get('loc-beira', 'it-chainsaw') is None
    assert len(ledger.records()) == before


def test_adjust_does_not_clamp(ledger):
    ledger.adjust('loc-central', 'it-chainsaw', -60)
    assert ledger.quantity_at('loc-central', 'it-chainsaw') == -10


def test_would_go_negative(ledger):
    assert ledger.would_go_negative([LedgerDelta('loc-central', 'it-chainsaw', -50)]) == []
    short = [LedgerDelta('loc-central', 'it-chainsaw', -51)]
    assert ledger.would_go_negative(short) == short


def test_preview_accumulates_without_writing(ledger):
    balances = ledger.preview([
        LedgerDelta('loc-central', 'it-chainsaw', -5),
        LedgerDelta('loc-central', 'it-chainsaw', -5),
        LedgerDelta('loc-nampula', 'it-chainsaw', 10),
    ])

    assert balances == {('it-chainsaw', 'loc-central'): 40, ('it-chainsaw', 'loc-nampula'): 10}
    assert ledger.quantity_at('loc-central', 'it-chainsaw') == 50


def test_apply_and_queries(ledger):
    ledger.apply([
        LedgerDelta('loc-central', 'it-chainsaw', -5),
        LedgerDelta('loc-nampula', 'it-chainsaw', 5),
    ])

    assert {r.item_id for r in ledger.records_at('loc-nampula')} == {'it-chainsaw', 'it-helmet'}
    assert sum(r.quantity for r in ledger.records_for_item('it-chainsaw')) == 50


def test_duplicate_records_are_refused():
    with pytest.raises(ValueError):
        InventoryLedger([
            InventoryRecord('it-chainsaw', 'loc-central', 1),
            InventoryRecord('it-chainsaw', 'loc-central', 2),
        ])

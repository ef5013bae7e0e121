from __future__ import annotations

from enum import Enum
from typing import Dict, FrozenSet, Optional

from app.buisness.requisitions.requisition import RequisitionStatus


class LedgerEffect(str, Enum):
    NONE = "NONE"
    DEBIT_SOURCE = "DEBIT_SOURCE"
    CREDIT_TARGET = "CREDIT_TARGET"


class RequisitionStatusValidator:
    """
    Centralized transition table for requisitions.

    Unlike a permissive validator, a pair missing from the table is illegal: terminal
    states have no outgoing edges and nothing loops back.
    """

    _NEXT: Dict[RequisitionStatus, FrozenSet[RequisitionStatus]] = {
        RequisitionStatus.PENDING: frozenset({RequisitionStatus.APPROVED, RequisitionStatus.REJECTED}),
        RequisitionStatus.APPROVED: frozenset({RequisitionStatus.IN_TRANSIT}),
        RequisitionStatus.IN_TRANSIT: frozenset({RequisitionStatus.DELIVERED}),
        RequisitionStatus.DELIVERED: frozenset({RequisitionStatus.CONFIRMED}),
        RequisitionStatus.REJECTED: frozenset(),
        RequisitionStatus.CONFIRMED: frozenset(),
    }

    _EFFECTS = {
        (RequisitionStatus.APPROVED, RequisitionStatus.IN_TRANSIT): LedgerEffect.DEBIT_SOURCE,
        (RequisitionStatus.IN_TRANSIT, RequisitionStatus.DELIVERED): LedgerEffect.CREDIT_TARGET,
    }

    @classmethod
    def can_transition(cls, current_status: RequisitionStatus, new_status: RequisitionStatus) -> bool:
        return new_status in cls._NEXT.get(current_status, frozenset())

    @classmethod
    def next_statuses(cls, current_status: RequisitionStatus) -> FrozenSet[RequisitionStatus]:
        return cls._NEXT.get(current_status, frozenset())

    @classmethod
    def ledger_effect(cls, current_status: RequisitionStatus, new_status: RequisitionStatus) -> Optional[LedgerEffect]:
        """Ledger effect of a legal edge; None for an illegal one"""
        if not cls.can_transition(current_status, new_status):
            return None
        return cls._EFFECTS.get((current_status, new_status), LedgerEffect.NONE)

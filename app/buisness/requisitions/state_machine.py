"""
Requisition State Machine

Pure decision step for one requisition transition. Nothing here writes: a successful
attempt returns the next requisition value together with the ledger deltas the caller has
to apply in the same unit of work, a refused attempt returns a ``Rejection``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, List, Optional, Union

from app.buisness.core.actor import Actor
from app.buisness.inventory.inventory_ledger import InventoryLedger, LedgerDelta
from app.buisness.requisitions.requisition import LogAction, LogEntry, Requisition, RequisitionStatus
from app.buisness.requisitions.role_gate import RoleGate
from app.buisness.requisitions.status_validator import LedgerEffect, RequisitionStatusValidator
from app.utils.clock import utcnow


class RejectionReason(str, Enum):
    ILLEGAL_TRANSITION = "ILLEGAL_TRANSITION"
    UNAUTHORIZED = "UNAUTHORIZED"
    INSUFFICIENT_STOCK = "INSUFFICIENT_STOCK"
    STALE_STATUS = "STALE_STATUS"


@dataclass(frozen=True)
class Rejection:
    reason: RejectionReason
    message: str
    requisition_id: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            'requisition_id': self.requisition_id,
            'reason': self.reason.value,
            'message': self.message,
        }


@dataclass(frozen=True)
class TransitionResult:
    requisition: Requisition
    ledger_deltas: List[LedgerDelta]
    log_entry: LogEntry
    previous_status: RequisitionStatus


TransitionOutcome = Union[TransitionResult, Rejection]


class RequisitionStateMachine:

    def __init__(self, gate: RoleGate, ledger: InventoryLedger,
                 clock: Callable[[], datetime] = utcnow):
        self.gate = gate
        self.ledger = ledger
        self.clock = clock

    def attempt_transition(self, requisition: Requisition, desired_status: RequisitionStatus,
                           actor: Actor) -> TransitionOutcome:
        """
        Decide whether ``actor`` may move ``requisition`` to ``desired_status``

        Checks run in order: role gate, transition table, stock on hand for the
        depleting edge. Stock is refused, never clamped.

        Returns:
            TransitionResult on success, Rejection otherwise
        """
        current = requisition.status

        denial = self.gate.transition_denial(actor, requisition, desired_status)
        if denial is not None:
            return Rejection(RejectionReason.UNAUTHORIZED, denial, requisition.id)

        effect = RequisitionStatusValidator.ledger_effect(current, desired_status)
        if effect is None:
            return Rejection(
                RejectionReason.ILLEGAL_TRANSITION,
                f"Requisition {requisition.id} cannot move from {current.value} to {desired_status.value}",
                requisition.id,
            )

        deltas = self._deltas_for(requisition, effect)
        short = self.ledger.would_go_negative(deltas)
        if short:
            on_hand = self.ledger.quantity_at(requisition.source_location_id, requisition.item_id)
            return Rejection(
                RejectionReason.INSUFFICIENT_STOCK,
                f"Location {requisition.source_location_id} holds {on_hand} of item "
                f"{requisition.item_id}, requisition {requisition.id} needs {requisition.quantity}",
                requisition.id,
            )

        entry = LogEntry(
            timestamp=self.clock(),
            actor_id=actor.id,
            action=LogAction.STATUS_CHANGE.value,
            message=f"Status {current.value} -> {desired_status.value} by {actor}",
        )
        return TransitionResult(
            requisition=requisition.with_status(desired_status, entry),
            ledger_deltas=deltas,
            log_entry=entry,
            previous_status=current,
        )

    @staticmethod
    def _deltas_for(requisition: Requisition, effect: LedgerEffect) -> List[LedgerDelta]:
        if effect == LedgerEffect.DEBIT_SOURCE:
            return [LedgerDelta(requisition.source_location_id, requisition.item_id, -requisition.quantity)]
        if effect == LedgerEffect.CREDIT_TARGET:
            return [LedgerDelta(requisition.target_location_id, requisition.item_id, requisition.quantity)]
        return []

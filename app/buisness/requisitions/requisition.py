from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Tuple


class RequisitionStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    IN_TRANSIT = "IN_TRANSIT"
    DELIVERED = "DELIVERED"
    CONFIRMED = "CONFIRMED"

    @property
    def is_terminal(self) -> bool:
        return self in (RequisitionStatus.REJECTED, RequisitionStatus.CONFIRMED)


class ItemCondition(str, Enum):
    NEW = "NEW"
    GOOD = "GOOD"
    FAIR = "FAIR"
    POOR = "POOR"
    DAMAGED = "DAMAGED"


class LogAction(str, Enum):
    CREATE = "CREATE"
    STATUS_CHANGE = "STATUS_CHANGE"


@dataclass(frozen=True)
class LogEntry:
    timestamp: datetime
    actor_id: str
    action: str
    message: str


@dataclass(frozen=True)
class Requisition:
    """
    A request to move ``quantity`` units of one item from ``source_location_id`` to
    ``target_location_id``. Values are never mutated in place; transitions produce a
    new instance via ``with_status``.
    """
    id: str
    requester_id: str
    source_location_id: str
    target_location_id: str
    item_id: str
    quantity: int
    status: RequisitionStatus
    created_at: datetime
    updated_at: datetime
    condition: ItemCondition = ItemCondition.NEW
    logs: Tuple[LogEntry, ...] = field(default_factory=tuple)

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def with_status(self, status: RequisitionStatus, entry: LogEntry) -> "Requisition":
        return replace(self, status=status, updated_at=entry.timestamp, logs=self.logs + (entry,))

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'requester_id': self.requester_id,
            'source_location_id': self.source_location_id,
            'target_location_id': self.target_location_id,
            'item_id': self.item_id,
            'quantity': self.quantity,
            'status': self.status.value,
            'condition': self.condition.value,
            'created_at': self.created_at.isoformat(),
            'updated_at': self.updated_at.isoformat(),
            'logs': [
                {
                    'timestamp': entry.timestamp.isoformat(),
                    'actor_id': entry.actor_id,
                    'action': entry.action,
                    'message': entry.message,
                }
                for entry in self.logs
            ],
        }

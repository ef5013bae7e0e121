from app import db
from app.data.core.user_created_base import UserCreatedBase
from app.buisness.requisitions.requisition import (
    ItemCondition,
    Requisition as RequisitionValue,
    RequisitionStatus,
)


class Requisition(UserCreatedBase):
    """Persisted requisition header; the audit trail lives in RequisitionLog rows"""
    __tablename__ = 'requisitions'

    requester_id = db.Column(db.String(64), db.ForeignKey('users.id'), nullable=False)
    source_location_id = db.Column(db.String(64), db.ForeignKey('locations.id'), nullable=False)
    target_location_id = db.Column(db.String(64), db.ForeignKey('locations.id'), nullable=False)
    item_id = db.Column(db.String(64), db.ForeignKey('items.id'), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    status = db.Column(db.String(20), nullable=False, default=RequisitionStatus.PENDING.value, index=True)
    condition = db.Column(db.String(20), nullable=False, default=ItemCondition.NEW.value)

    logs = db.relationship(
        'RequisitionLog',
        back_populates='requisition',
        order_by='RequisitionLog.sequence',
        cascade='all, delete-orphan',
        lazy='selectin',
    )

    def to_domain(self) -> RequisitionValue:
        return RequisitionValue(
            id=self.id,
            requester_id=self.requester_id,
            source_location_id=self.source_location_id,
            target_location_id=self.target_location_id,
            item_id=self.item_id,
            quantity=self.quantity,
            status=RequisitionStatus(self.status),
            created_at=self.created_at,
            updated_at=self.updated_at,
            condition=ItemCondition(self.condition),
            logs=tuple(log.to_domain() for log in self.logs),
        )

    def __repr__(self):
        return f'<Requisition {self.id} {self.status}>'

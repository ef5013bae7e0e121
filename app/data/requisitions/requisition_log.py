from app import db
from app.buisness.requisitions.requisition import LogEntry


class RequisitionLog(db.Model):
    """Append-only audit row; ``sequence`` is the position in the requisition's log"""
    __tablename__ = 'requisition_logs'

    id = db.Column(db.Integer, primary_key=True)
    requisition_id = db.Column(db.String(64), db.ForeignKey('requisitions.id'), nullable=False, index=True)
    sequence = db.Column(db.Integer, nullable=False)
    timestamp = db.Column(db.DateTime, nullable=False)
    actor_id = db.Column(db.String(64), nullable=False)
    action = db.Column(db.String(30), nullable=False)
    message = db.Column(db.Text, nullable=False, default='')

    requisition = db.relationship('Requisition', back_populates='logs')

    __table_args__ = (
        db.UniqueConstraint('requisition_id', 'sequence', name='uq_requisition_log_sequence'),
    )

    def to_domain(self) -> LogEntry:
        return LogEntry(
            timestamp=self.timestamp,
            actor_id=self.actor_id,
            action=self.action,
            message=self.message,
        )

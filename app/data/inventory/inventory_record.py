from app.utils.clock import utcnow
from app import db
from app.buisness.inventory.inventory_ledger import InventoryRecord as InventoryRecordValue


class InventoryRecord(db.Model):
    """Quantity of one item at one location; at most one row per pair"""
    __tablename__ = 'inventory_records'

    item_id = db.Column(db.String(64), db.ForeignKey('items.id'), primary_key=True)
    location_id = db.Column(db.String(64), db.ForeignKey('locations.id'), primary_key=True)
    quantity = db.Column(db.Integer, nullable=False, default=0)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    item = db.relationship('Item')
    location = db.relationship('Location')

    def to_domain(self) -> InventoryRecordValue:
        return InventoryRecordValue(item_id=self.item_id, location_id=self.location_id, quantity=self.quantity)

    def __repr__(self):
        return f'<InventoryRecord {self.item_id}@{self.location_id}={self.quantity}>'

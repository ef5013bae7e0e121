"""
SQL persistence

Flask-SQLAlchemy implementation of the persistence collaborator. Must be used inside an
application context.
"""

from contextlib import contextmanager
from typing import List

from app import db
from app.buisness.core.actor import Actor
from app.buisness.core.errors import StaleWrite
from app.buisness.core.persistence import RequisitionPersistence
from app.buisness.requisitions.requisition import RequisitionStatus
from app.data.core.location import Location
from app.data.core.supply.item import Item
from app.data.core.user_info.user import User
from app.data.inventory.inventory_record import InventoryRecord
from app.data.requisitions.requisition import Requisition
from app.data.requisitions.requisition_log import RequisitionLog
from app.utils.logger import get_logger

logger = get_logger("field_ops.data.persistence")


class SqlPersistence(RequisitionPersistence):

    def load_locations(self):
        return [row.to_domain() for row in Location.query.order_by(Location.id).all()]

    def load_items(self):
        return [row.to_domain() for row in Item.query.order_by(Item.id).all()]

    def load_inventory(self):
        return [row.to_domain() for row in InventoryRecord.query.all()]

    def load_requisitions(self):
        rows = Requisition.query.order_by(Requisition.created_at.desc(), Requisition.id).all()
        return [row.to_domain() for row in rows]

    def load_actors(self) -> List[Actor]:
        return [user.to_actor() for user in User.query.filter_by(is_active=True).all()]

    def save_requisition(self, requisition, previous_status=None) -> None:
        """
        Insert a new requisition, or move a stored one on from ``previous_status``

        Stored log rows are never rewritten; the new entries are appended after them.

        Raises:
            StaleWrite: If the row already exists on insert, or the stored status or log
                length is not what this process last saw
        """
        row = db.session.get(Requisition, requisition.id, populate_existing=True)
        if previous_status is None:
            if row is not None:
                raise StaleWrite(f"Requisition {requisition.id} is already stored")
            row = Requisition(
                id=requisition.id,
                created_at=requisition.created_at,
                created_by_id=requisition.requester_id,
            )
            db.session.add(row)
            stored = 0
        else:
            if row is None:
                raise StaleWrite(f"Requisition {requisition.id} is not stored")
            stored = RequisitionLog.query.filter_by(requisition_id=requisition.id).count()
            if row.status != RequisitionStatus(previous_status).value or stored != len(requisition.logs) - 1:
                raise StaleWrite(
                    f"Requisition {requisition.id} is stored as {row.status} with {stored} log entries, "
                    f"expected {RequisitionStatus(previous_status).value} with {len(requisition.logs) - 1}"
                )

        row.requester_id = requisition.requester_id
        row.source_location_id = requisition.source_location_id
        row.target_location_id = requisition.target_location_id
        row.item_id = requisition.item_id
        row.quantity = requisition.quantity
        row.status = requisition.status.value
        row.condition = requisition.condition.value
        row.updated_at = requisition.updated_at

        for sequence, entry in enumerate(requisition.logs[stored:], start=stored):
            row.logs.append(RequisitionLog(
                sequence=sequence,
                timestamp=entry.timestamp,
                actor_id=entry.actor_id,
                action=entry.action,
                message=entry.message,
            ))

    def save_inventory_record(self, record, expected_quantity=None) -> None:
        row = db.session.get(InventoryRecord, (record.item_id, record.location_id), populate_existing=True)
        if expected_quantity is not None:
            stored = row.quantity if row is not None else 0
            if stored != expected_quantity:
                raise StaleWrite(
                    f"Item {record.item_id} at {record.location_id} is stored as {stored}, "
                    f"expected {expected_quantity}"
                )
        if row is None:
            row = InventoryRecord(item_id=record.item_id, location_id=record.location_id)
            db.session.add(row)
        row.quantity = record.quantity

    @contextmanager
    def unit_of_work(self):
        try:
            yield
            db.session.commit()
        except Exception as e:
            db.session.rollback()
            logger.error(f"Unit of work rolled back: {e}")
            raise

#!/usr/bin/env python3
"""
Build orchestrator for the field operations service
Creates the schema and seeds the location hierarchy, catalog, users, stock and requisitions
"""

import json
import os
from datetime import datetime, timedelta
from pathlib import Path

from app import db, reset_operations
from app.buisness.locations.location_graph import Location as LocationValue, LocationGraph, LocationType
from app.utils.clock import utcnow
from app.utils.logger import get_logger

logger = get_logger("field_ops.build")

SEED_FILE = Path(__file__).parent / 'data' / 'seed' / 'seed_data.json'


def load_seed_data(seed_file=SEED_FILE):
    with open(seed_file, encoding='utf-8') as f:
        return json.load(f)


def build_database(app, seed=True, seed_file=SEED_FILE):
    """
    Create all tables and optionally insert the seed data

    Seeding is skipped when locations already exist. Fail-fast: any error rolls the
    session back and is re-raised.
    """
    with app.app_context():
        db.create_all()
        logger.info("Database tables created")

        if seed:
            from app.data.core.location import Location
            if Location.query.first() is not None:
                logger.info("Seed data already present, skipping")
            else:
                insert_seed_data(load_seed_data(seed_file))

        reset_operations(app)


def insert_seed_data(seed_data):
    logger.info("Inserting seed data...")
    try:
        _insert_locations(seed_data.get('locations', []))
        _insert_items(seed_data.get('items', []))
        _insert_users(seed_data.get('users', []))
        _insert_inventory(seed_data.get('inventory', []))
        _insert_requisitions(seed_data.get('requisitions', []), seed_data.get('locations', []))
        db.session.commit()
        logger.info("Successfully inserted seed data")
    except Exception as e:
        db.session.rollback()
        logger.error(f"Failed to insert seed data: {e}")
        raise


def _insert_locations(locations_data):
    from app.data.core.location import Location

    # Validate the hierarchy before writing anything
    LocationGraph(
        LocationValue(id=d['id'], name=d['name'], type=LocationType(d['type']), parent_id=d.get('parent_id'))
        for d in locations_data
    )
    for data in locations_data:
        db.session.add(Location(
            id=data['id'],
            name=data['name'],
            location_type=data['type'],
            parent_id=data.get('parent_id'),
        ))
    db.session.flush()
    logger.debug(f"Inserted {len(locations_data)} locations")


def _insert_items(items_data):
    from app.data.core.supply.item import Item

    for data in items_data:
        db.session.add(Item(**data))
    logger.debug(f"Inserted {len(items_data)} items")


def _insert_users(users_data):
    from app.data.core.user_info.user import User

    password = os.environ.get('SEED_USER_PASSWORD')
    if not password:
        password = 'field-ops-dev-password'
        logger.warning("SEED_USER_PASSWORD not set, seeded users get the development password")

    for data in users_data:
        user = User(**data)
        user.set_password(password)
        db.session.add(user)
    logger.debug(f"Inserted {len(users_data)} users")


def _insert_inventory(inventory_data):
    from app.data.inventory.inventory_record import InventoryRecord

    for data in inventory_data:
        db.session.add(InventoryRecord(**data))
    logger.debug(f"Inserted {len(inventory_data)} inventory records")


def _insert_requisitions(requisitions_data, locations_data):
    from app.data.requisitions.requisition import Requisition
    from app.data.requisitions.requisition_log import RequisitionLog

    graph = LocationGraph(
        LocationValue(id=d['id'], name=d['name'], type=LocationType(d['type']), parent_id=d.get('parent_id'))
        for d in locations_data
    )
    now = utcnow()
    for age_days, data in enumerate(reversed(requisitions_data), start=1):
        created_at = now - timedelta(days=age_days)
        logs = data.get('logs', [])
        requisition = Requisition(
            id=data['id'],
            requester_id=data['requester_id'],
            source_location_id=graph.resolve_source(data['target_location_id']),
            target_location_id=data['target_location_id'],
            item_id=data['item_id'],
            quantity=data['quantity'],
            status=data.get('status', 'PENDING'),
            condition=data.get('condition', 'NEW'),
            created_at=created_at,
            updated_at=created_at + timedelta(hours=len(logs) - 1) if logs else created_at,
            created_by_id=data['requester_id'],
        )
        for sequence, log in enumerate(logs):
            requisition.logs.append(RequisitionLog(
                sequence=sequence,
                timestamp=created_at + timedelta(hours=sequence),
                actor_id=log['actor_id'],
                action=log['action'],
                message=log.get('message', ''),
            ))
        db.session.add(requisition)
    logger.debug(f"Inserted {len(requisitions_data)} requisitions")

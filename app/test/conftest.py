"""
Pytest configuration and fixtures

Core fixtures build a fresh in-memory operations context per test; the Flask fixtures
build an app on an in-memory SQLite database seeded from the bundled seed file.
"""
import os

# Set before the app package is imported
os.environ.setdefault('SECRET_KEY', 'test_secret_key_for_field_ops_testing')
os.environ.setdefault('LOG_TO_FILE', 'false')
os.environ['SEED_USER_PASSWORD'] = 'test-password'

import pytest

from app import create_app, db as _db, reset_operations
from app.build import build_database
from app.buisness.core.actor import Actor, Role
from app.buisness.core.operations_context import OperationsContext
from app.buisness.core.persistence import NullPersistence
from app.buisness.inventory.catalog import Item, ItemCatalog, ItemType
from app.buisness.inventory.inventory_ledger import InventoryLedger, InventoryRecord
from app.buisness.locations.location_graph import Location, LocationGraph, LocationType
from app.buisness.requisitions.requisition_store import RequisitionStore

TEST_PASSWORD = 'test-password'

LOCATIONS = [
    Location('loc-central', 'Central Warehouse', LocationType.CENTRAL),
    Location('loc-nampula', 'Nampula Branch', LocationType.BRANCH, 'loc-central'),
    Location('loc-beira', 'Beira Branch', LocationType.BRANCH, 'loc-central'),
    Location('loc-field-alpha', 'Team Alpha', LocationType.FIELD, 'loc-nampula'),
    Location('loc-field-bravo', 'Team Bravo', LocationType.FIELD, 'loc-beira'),
]

ITEMS = [
    Item('it-chainsaw', 'Chainsaw', 'EQ-001', 'Equipment', item_type=ItemType.ASSET),
    Item('it-helmet', 'Safety Helmet', 'PPE-005', 'PPE'),
]

ADMIN = Actor('u-admin', Role.ADMIN, 'loc-central', 'Admin')
GENERAL_MANAGER = Actor('u-gm', Role.GENERAL_MANAGER, 'loc-central', 'GM')
NAMPULA_MANAGER = Actor('u-manager-nam', Role.MANAGER, 'loc-nampula', 'Joana')
BEIRA_MANAGER = Actor('u-manager-bei', Role.MANAGER, 'loc-beira', 'Pedro')
ALPHA_WORKER = Actor('u-worker-1', Role.WORKER, 'loc-field-alpha', 'Adelino')
BRAVO_WORKER = Actor('u-worker-3', Role.WORKER, 'loc-field-bravo', 'Ana')

ACTORS = [ADMIN, GENERAL_MANAGER, NAMPULA_MANAGER, BEIRA_MANAGER, ALPHA_WORKER, BRAVO_WORKER]


@pytest.fixture
def graph():
    return LocationGraph(LOCATIONS)


@pytest.fixture
def catalog():
    return ItemCatalog(ITEMS)


@pytest.fixture
def ledger():
    return InventoryLedger([
        InventoryRecord('it-chainsaw', 'loc-central', 50),
        InventoryRecord('it-helmet', 'loc-central', 200),
        InventoryRecord('it-helmet', 'loc-nampula', 20),
    ])


@pytest.fixture
def store(graph, catalog, ledger):
    return RequisitionStore(graph, catalog, ledger)


@pytest.fixture
def operations(graph, catalog, ledger):
    return OperationsContext(graph, catalog, ledger, NullPersistence(), actors=ACTORS)


@pytest.fixture
def app():
    """Flask application on a fresh in-memory database"""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'RATELIMIT_ENABLED': False,
        'SESSION_COOKIE_SECURE': False,
        'SYNC_ENABLED': False,
    })
    build_database(app)

    with app.app_context():
        yield app
        reset_operations(app)
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def client(app):
    """Create Flask test client"""
    return app.test_client()


def login_user(client, username='admin', password=TEST_PASSWORD):
    """Helper function to login a user"""
    return client.post('/login', json={'username': username, 'password': password})

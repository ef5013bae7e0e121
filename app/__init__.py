from flask import Flask, current_app
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_login import LoginManager
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from dotenv import load_dotenv
import os
import threading
from app.utils.logger import get_logger

# Initialize extensions
db = SQLAlchemy()
migrate = Migrate()
login_manager = LoginManager()
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["2000 per day", "300 per hour"],
    storage_uri="memory://"  # Use Redis in production for distributed systems
)

OPERATIONS_EXTENSION = 'field_ops'
_operations_lock = threading.Lock()


def _env_flag(name, default):
    return os.environ.get(name, default).lower() in ('true', '1', 'yes', 'on')


def create_app(config_overrides=None):
    from pathlib import Path

    load_dotenv()

    app = Flask(__name__)

    logger = get_logger("field_ops")
    logger.info("Initializing Flask application")

    # SECURITY: Require SECRET_KEY - no fallback
    app.config['SECRET_KEY'] = os.environ.get('SECRET_KEY')

    base_dir = Path(__file__).parent.parent
    db_env = os.environ.get('DATABASE_URL')
    if db_env:
        app.config['SQLALCHEMY_DATABASE_URI'] = db_env
    else:
        instance_dir = base_dir / 'instance'
        instance_dir.mkdir(parents=True, exist_ok=True)
        default_db_path = instance_dir / 'field_ops.db'
        app.config['SQLALCHEMY_DATABASE_URI'] = f"sqlite:///{str(default_db_path.resolve())}"
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False

    # Requisition sync, every 20 minutes unless configured
    app.config['SYNC_ENABLED'] = _env_flag('SYNC_ENABLED', 'True')
    app.config['SYNC_INTERVAL_MINUTES'] = float(os.environ.get('SYNC_INTERVAL_MINUTES', '20'))
    app.config['DEFAULT_ROOT_LOCATION_ID'] = os.environ.get('DEFAULT_ROOT_LOCATION_ID') or None

    app.config['SESSION_COOKIE_SECURE'] = _env_flag('SESSION_COOKIE_SECURE', 'True')
    app.config['SESSION_COOKIE_HTTPONLY'] = True
    app.config['SESSION_COOKIE_SAMESITE'] = 'Lax'
    app.config['PERMANENT_SESSION_LIFETIME'] = int(os.environ.get('PERMANENT_SESSION_LIFETIME', '3600'))
    app.config['RATELIMIT_ENABLED'] = _env_flag('RATELIMIT_ENABLED', 'True')

    if config_overrides:
        app.config.update(config_overrides)

    if not app.config['SECRET_KEY']:
        logger.critical("SECRET_KEY not set in environment! Application cannot start.")
        raise RuntimeError("SECRET_KEY environment variable is required")
    if app.config['SYNC_INTERVAL_MINUTES'] <= 0:
        raise RuntimeError("SYNC_INTERVAL_MINUTES must be positive")

    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    limiter.init_app(app)

    logger.debug("Extensions initialized")

    # Import models to ensure they're registered with SQLAlchemy
    from app.data.core.location import Location
    from app.data.core.supply.item import Item
    from app.data.core.user_info.user import User
    from app.data.inventory.inventory_record import InventoryRecord
    from app.data.requisitions.requisition import Requisition
    from app.data.requisitions.requisition_log import RequisitionLog

    logger.debug("Models imported and registered")

    from app.auth import auth
    from app.presentation.routes import init_app as init_routes

    app.register_blueprint(auth)
    init_routes(app)

    logger.info(f"Application ready (database: {app.config['SQLALCHEMY_DATABASE_URI'].split(':', 1)[0]})")
    return app


def get_operations(app=None):
    """
    The OperationsContext of ``app``, loaded from the database on first use

    Must be called inside an application context. The context is built once per app and
    reused, and concurrent first calls wait for a single build; ``reset_operations`` drops
    it so the next call reloads.
    """
    from app.buisness.core.operations_context import OperationsContext
    from app.data.core.sql_persistence import SqlPersistence

    app = app or current_app._get_current_object()
    operations = app.extensions.get(OPERATIONS_EXTENSION)
    if operations is not None:
        return operations

    with _operations_lock:
        operations = app.extensions.get(OPERATIONS_EXTENSION)
        if operations is None:
            persistence = SqlPersistence()
            operations = OperationsContext.from_persistence(
                persistence,
                default_root_id=app.config.get('DEFAULT_ROOT_LOCATION_ID'),
                actors=persistence.load_actors(),
            )

            def fetch_external():
                with app.app_context():
                    return persistence.load_requisitions()

            operations.attach_sync(fetch_external, interval_seconds=app.config['SYNC_INTERVAL_MINUTES'] * 60)
            app.extensions[OPERATIONS_EXTENSION] = operations
    return operations


def reset_operations(app=None):
    app = app or current_app._get_current_object()
    operations = app.extensions.pop(OPERATIONS_EXTENSION, None)
    if operations is not None and operations.sync_coordinator is not None:
        operations.sync_coordinator.stop(timeout=1)

"""
Routes package for the field operations service
JSON blueprints over the OperationsContext
"""

from app.utils.logger import get_logger

logger = get_logger("field_ops.routes")


def init_app(app):
    """Initialize all route blueprints with the Flask app"""
    logger.debug("Initializing route blueprints")

    from . import requisitions, inventory, locations
    from .responses import register_error_handlers

    app.register_blueprint(requisitions.bp, url_prefix='/requisitions')
    app.register_blueprint(inventory.bp, url_prefix='/inventory')
    app.register_blueprint(locations.bp, url_prefix='/locations')
    register_error_handlers(app)

    logger.debug("Route blueprints registered")

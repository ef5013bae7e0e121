"""
Shared JSON responses and error mapping for the route blueprints
"""

from flask import jsonify
from flask_login import current_user

from app.buisness.core.errors import (
    InvalidQuantity,
    NotPermitted,
    StaleWrite,
    SyncFailure,
    UnknownItem,
    UnknownLocation,
    UnknownRequisition,
)
from app.buisness.requisitions.state_machine import Rejection, RejectionReason
from app.utils.logger import get_logger

logger = get_logger("field_ops.routes.errors")


def current_actor():
    return current_user.to_actor()


def rejection_response(rejection: Rejection):
    status_code = 403 if rejection.reason == RejectionReason.UNAUTHORIZED else 409
    return jsonify({'error': rejection.message, **rejection.to_dict()}), status_code


def error_response(message, status_code):
    return jsonify({'error': message}), status_code


def register_error_handlers(app):

    @app.errorhandler(UnknownRequisition)
    @app.errorhandler(UnknownLocation)
    @app.errorhandler(UnknownItem)
    def handle_unknown_reference(e):
        logger.warning(f"Unknown reference: {e}")
        return error_response(str(e), 404)

    @app.errorhandler(InvalidQuantity)
    def handle_invalid_quantity(e):
        return error_response(str(e), 400)

    @app.errorhandler(NotPermitted)
    def handle_not_permitted(e):
        logger.warning(f"Refused: {e}")
        return error_response(str(e), 403)

    @app.errorhandler(StaleWrite)
    def handle_stale_write(e):
        logger.warning(f"Stale write refused: {e}")
        return error_response(str(e), 409)

    @app.errorhandler(SyncFailure)
    def handle_sync_failure(e):
        return error_response(str(e), 502)

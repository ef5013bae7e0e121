"""
Requisition routes - create, list, move through the lifecycle, bulk approve, sync
"""
from flask import Blueprint, jsonify, request
from flask_login import login_required

from app import get_operations
from app.buisness.requisitions.requisition import ItemCondition, RequisitionStatus
from app.buisness.requisitions.state_machine import Rejection
from app.presentation.routes.responses import current_actor, error_response, rejection_response
from app.utils.logger import get_logger

logger = get_logger("field_ops.routes.requisitions")

bp = Blueprint('requisitions', __name__)


@bp.route('/', methods=['GET'])
@login_required
def list_requisitions():
    actor = current_actor()
    requisitions = get_operations().list_requisitions_for(actor)

    status_filter = request.args.get('status', '').strip().upper() or None
    if status_filter:
        requisitions = [r for r in requisitions if r.status.value == status_filter]

    return jsonify([r.to_dict() for r in requisitions])


@bp.route('/', methods=['POST'])
@login_required
def create_requisition():
    actor = current_actor()
    data = request.get_json(silent=True) or {}

    item_id = data.get('item_id')
    if not item_id:
        return error_response('item_id is required', 400)
    try:
        condition = ItemCondition(data.get('condition') or ItemCondition.NEW.value)
    except ValueError:
        return error_response(f"Unknown condition: {data.get('condition')}", 400)

    requisition = get_operations().create_requisition(
        item_id,
        data.get('quantity'),
        actor,
        condition=condition,
        target_location_id=data.get('target_location_id') or None,
    )
    logger.info(f"Requisition {requisition.id} created via API by {actor.id}")
    return jsonify(requisition.to_dict()), 201


@bp.route('/<requisition_id>', methods=['GET'])
@login_required
def get_requisition(requisition_id):
    operations = get_operations()
    actor = current_actor()
    requisition = operations.store.get(requisition_id)
    if requisition is None or not operations.gate.can_view(actor, requisition):
        return error_response(f"Unknown requisition: {requisition_id}", 404)
    body = requisition.to_dict()
    body['allowed_statuses'] = [status.value for status in operations.allowed_statuses_for(requisition, actor)]
    return jsonify(body)


@bp.route('/<requisition_id>/status', methods=['POST'])
@login_required
def update_status(requisition_id):
    data = request.get_json(silent=True) or {}
    try:
        new_status = RequisitionStatus(str(data.get('status', '')).upper())
        expected = data.get('expected_status')
        expected_status = RequisitionStatus(str(expected).upper()) if expected else None
    except ValueError:
        return error_response(f"Unknown status in request: {data}", 400)

    outcome = get_operations().update_requisition_status(
        requisition_id, new_status, current_actor(), expected_status=expected_status
    )
    if isinstance(outcome, Rejection):
        return rejection_response(outcome)
    return jsonify(outcome.to_dict())


@bp.route('/approve-pending', methods=['POST'])
@login_required
def approve_pending():
    result = get_operations().approve_all_pending(current_actor())
    return jsonify(result.to_dict())


@bp.route('/sync', methods=['POST'])
@login_required
def trigger_sync():
    result = get_operations().trigger_sync()
    return jsonify(result.to_dict())

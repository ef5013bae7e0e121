"""
Inventory routes - balances per location and stock receipts
"""
from flask import Blueprint, jsonify, request
from flask_login import login_required

from app import get_operations
from app.presentation.routes.responses import current_actor, error_response
from app.services.inventory.location_inventory_view import LocationInventoryView

bp = Blueprint('inventory', __name__)


@bp.route('/<location_id>', methods=['GET'])
@login_required
def location_inventory(location_id):
    include_descendants = request.args.get('include_descendants', 'false').lower() in ('true', '1', 'yes', 'on')
    rows = LocationInventoryView.get_location_summary(get_operations(), location_id, include_descendants)
    return jsonify(rows)


@bp.route('/<location_id>/receive', methods=['POST'])
@login_required
def receive_stock(location_id):
    data = request.get_json(silent=True) or {}
    item_id = data.get('item_id')
    if not item_id:
        return error_response('item_id is required', 400)

    record = get_operations().receive_stock(item_id, location_id, data.get('quantity'), current_actor())
    return jsonify({
        'item_id': record.item_id,
        'location_id': record.location_id,
        'quantity': record.quantity,
    }), 201


@bp.route('/<location_id>/totals', methods=['GET'])
@login_required
def location_totals(location_id):
    return jsonify(LocationInventoryView.get_item_totals(get_operations(), location_id))

"""
Location routes - the hierarchy and the workers under a location
"""
from flask import Blueprint, jsonify, request
from flask_login import login_required

from app import get_operations
from app.buisness.core.errors import UnknownLocation
from app.buisness.locations.location_graph import LocationType
from app.presentation.routes.responses import error_response

bp = Blueprint('locations', __name__)


@bp.route('/', methods=['GET'])
@login_required
def list_locations():
    graph = get_operations().graph
    location_type = request.args.get('type')
    if location_type:
        try:
            locations = graph.locations_of_type(LocationType(location_type.upper()))
        except ValueError:
            return error_response(f"Unknown location type: {location_type}", 400)
    else:
        locations = list(graph)

    return jsonify([
        {
            'id': location.id,
            'name': location.name,
            'type': location.type.value,
            'parent_id': location.parent_id,
            'source_location_id': graph.resolve_source(location.id),
            'children': list(graph.children_of(location.id)),
        }
        for location in locations
    ])


@bp.route('/<location_id>/workers', methods=['GET'])
@login_required
def location_workers(location_id):
    operations = get_operations()
    if location_id not in operations.graph:
        raise UnknownLocation(location_id)
    return jsonify([
        {'id': actor.id, 'name': actor.name, 'location_id': actor.location_id}
        for actor in operations.list_workers_for(location_id)
    ])

from datetime import date
from flask import Blueprint, request, jsonify, current_app
from community_booking.api.errors import register_error_handlers
from community_booking.exceptions import InvalidArgument
from community_booking.services.availability_service import AvailabilityService
from community_booking.services.resource_catalog import get_catalog
from community_booking.utils.clock import local_now

resources_bp = Blueprint('resources', __name__)
register_error_handlers(resources_bp)


@resources_bp.route('/', methods=['GET'])
def list_resources():
    return jsonify([r.to_dict() for r in get_catalog().list_resources()])


@resources_bp.route('/<resource_id>', methods=['GET'])
def get_resource(resource_id):
    return jsonify(get_catalog().get_resource(resource_id).to_dict())


@resources_bp.route('/<resource_id>/availability', methods=['GET'])
def get_availability(resource_id):
    date_str = request.args.get('date')
    if not date_str:
        raise InvalidArgument("Query parameter 'date' (YYYY-MM-DD) is required.")
    try:
        target_date = date.fromisoformat(date_str)
    except ValueError:
        raise InvalidArgument(f"Invalid date {date_str!r}, expected YYYY-MM-DD.") from None

    raw_duration = request.args.get('duration', current_app.config['DEFAULT_BOOKING_DURATION_HOURS'])
    try:
        duration = int(raw_duration)
    except (TypeError, ValueError):
        raise InvalidArgument(f"Invalid duration {raw_duration!r}.") from None

    service = AvailabilityService.from_app()
    slots = service.compute_available_slots(resource_id, target_date, duration, local_now())
    return jsonify({
        'resource_id': resource_id,
        'date': target_date.isoformat(),
        'duration_hours': duration,
        'slots': [s.to_dict(target_date) for s in slots],
    })

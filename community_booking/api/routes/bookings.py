from datetime import timedelta
from flask import Blueprint, request, jsonify, current_app
from community_booking.api.errors import register_error_handlers
from community_booking.exceptions import InvalidArgument
from community_booking.services.booking_service import BookingRequest, BookingService
from community_booking.services.resource_catalog import get_catalog
from community_booking.utils.clock import local_now, parse_timestamp
from community_booking.utils.decorators import token_required

bookings_bp = Blueprint('bookings', __name__)
register_error_handlers(bookings_bp)


def _booking_request_from_json(data, current_user):
    if not isinstance(data, dict):
        raise InvalidArgument("No input data provided.")

    for field in ('resource_id', 'start_time'):
        if not data.get(field):
            raise InvalidArgument(f"Missing required field: {field}.")
    if not isinstance(data['resource_id'], str):
        raise InvalidArgument(f"resource_id must be a string, got {data['resource_id']!r}.")

    try:
        start = parse_timestamp(data['start_time'])
        if data.get('end_time'):
            end = parse_timestamp(data['end_time'])
        else:
            duration = data.get('duration_hours', current_app.config['DEFAULT_BOOKING_DURATION_HOURS'])
            if isinstance(duration, bool) or not isinstance(duration, int) or duration <= 0:
                raise InvalidArgument(f"Invalid duration_hours {duration!r}.")
            try:
                end = start + timedelta(hours=duration)
            except OverflowError:
                raise InvalidArgument(f"duration_hours {duration} is out of range.") from None
    except InvalidArgument:
        raise
    except ValueError as e:
        raise InvalidArgument(f"Invalid timestamp: {e}") from None

    return BookingRequest(
        resource_id=data['resource_id'],
        user_id=current_user.id,
        start_time=start,
        end_time=end,
        purpose=data.get('purpose', ''),
        attendees=data.get('attendees', 1),
    )


@bookings_bp.route('/', methods=['POST'])
@token_required
def create_booking(current_user):
    booking_request = _booking_request_from_json(request.get_json(silent=True), current_user)
    booking = BookingService.from_app().create_booking(booking_request, local_now())
    return jsonify(booking.to_dict(get_catalog())), 201


@bookings_bp.route('/my_bookings', methods=['GET'])
@token_required
def get_my_bookings(current_user):
    bookings = BookingService.list_bookings_for_user(current_user.id)
    catalog = get_catalog()
    return jsonify([b.to_dict(catalog) for b in bookings])


@bookings_bp.route('/<booking_id>', methods=['DELETE'])
@token_required
def delete_booking(current_user, booking_id):
    BookingService.cancel_booking(booking_id, current_user.id)
    current_app.logger.info("User %s cancelled booking %s", current_user.id, booking_id)
    return jsonify({'message': 'Booking cancelled successfully.'}), 200

from flask import jsonify, current_app
from werkzeug.exceptions import HTTPException
from community_booking.exceptions import BookingError
from community_booking.extensions import db


def register_error_handlers(blueprint):
    @blueprint.errorhandler(BookingError)
    def handle_booking_error(e):
        return jsonify(e.to_dict()), e.status_code

    @blueprint.errorhandler(Exception)
    def handle_unexpected(e):
        if isinstance(e, HTTPException):
            return e
        db.session.rollback()
        current_app.logger.exception("Unhandled error in %s", blueprint.name)
        return jsonify({'error': 'server_error', 'message': 'Server Error'}), 500

from datetime import datetime
import pytz
from flask import current_app


def booking_timezone(app=None):
    app = app or current_app
    return pytz.timezone(app.config['BOOKING_TIMEZONE'])


def local_now(app=None):
    """Current wall-clock time in the booking timezone, as a naive datetime."""
    tz = booking_timezone(app)
    return datetime.now(pytz.utc).astimezone(tz).replace(tzinfo=None, microsecond=0)


def to_local_naive(value, app=None):
    """Bookings are stored as naive local times; convert aware values into that frame."""
    if value.tzinfo is None:
        return value
    return value.astimezone(booking_timezone(app)).replace(tzinfo=None)


def parse_timestamp(raw, app=None):
    if not isinstance(raw, str) or not raw.strip():
        raise ValueError("Timestamp must be a non-empty ISO-8601 string.")
    value = raw.strip()
    if value.endswith('Z'):
        value = value[:-1] + '+00:00'
    return to_local_naive(datetime.fromisoformat(value), app)

"""Errors raised by the booking engine.

Every error is a ``ValueError`` so callers that only care about "the request
was rejected" can keep catching that, while the HTTP layer maps each ``code``
to a status.
"""


class BookingError(ValueError):
    code = 'booking_error'
    status_code = 400

    def __init__(self, message=None):
        super().__init__(message or self.__class__.__name__)
        self.message = message or self.__class__.__name__

    def to_dict(self):
        return {'error': self.code, 'message': self.message}


class NotFound(BookingError):
    """Unknown resource or booking id."""
    code = 'not_found'
    status_code = 404


class InvalidArgument(BookingError):
    """Malformed duration, attendees or purpose (caller bug)."""
    code = 'invalid_argument'
    status_code = 400


class CapacityExceeded(BookingError):
    code = 'capacity_exceeded'
    status_code = 400


class InvalidWindow(BookingError):
    """Empty, inverted or past-starting time window."""
    code = 'invalid_window'
    status_code = 400


class SlotConflict(BookingError):
    """The requested window overlaps an existing booking. Pick another time."""
    code = 'slot_conflict'
    status_code = 409


class TransactionAborted(BookingError):
    """Contention outlasted the retry budget. Safe to retry."""
    code = 'transaction_aborted'
    status_code = 503


class Forbidden(BookingError):
    code = 'forbidden'
    status_code = 403

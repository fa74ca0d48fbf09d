import logging
import time
from dataclasses import dataclass, replace
from datetime import datetime
from flask import current_app
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm.exc import StaleDataError
from community_booking.exceptions import (
    CapacityExceeded,
    Forbidden,
    InvalidArgument,
    InvalidWindow,
    NotFound,
    SlotConflict,
    TransactionAborted,
)
from community_booking.extensions import db
from community_booking.models import Booking, ResourceLedger
from community_booking.utils.clock import to_local_naive

logger = logging.getLogger(__name__)

# Lock and serialization failures: SQLite busy, PG serialization_failure,
# deadlock_detected, lock_not_available
RETRYABLE_SQLSTATES = {"40001", "40P01", "55P03"}
RETRYABLE_MESSAGES = ("database is locked", "deadlock detected", "could not serialize access")


def is_contention_error(exc):
    """True when ``exc`` means another writer got there first: roll back and re-read."""
    if isinstance(exc, (StaleDataError, IntegrityError)):
        return True
    if isinstance(exc, OperationalError):
        orig = getattr(exc, "orig", None)
        pgcode = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
        if pgcode in RETRYABLE_SQLSTATES:
            return True
        message = str(orig if orig is not None else exc).lower()
        return any(m in message for m in RETRYABLE_MESSAGES)
    return False


@dataclass
class BookingRequest:
    resource_id: str
    user_id: str
    start_time: datetime
    end_time: datetime
    purpose: str
    attendees: int


class BookingService:
    """Conflict guard and lifecycle operations for bookings.

    ``create_booking`` is the only path that writes new bookings. Each commit
    bumps the resource's ``ResourceLedger`` version, and the ORM refuses an
    update against a version that moved since it was read, which turns the
    read-check-write sequence into one optimistic transaction.
    """

    def __init__(self, catalog, max_attempts=5, retry_backoff=0.05):
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")
        self.catalog = catalog
        self.max_attempts = max_attempts
        self.retry_backoff = retry_backoff

    @classmethod
    def from_app(cls, app=None):
        app = app or current_app
        return cls(
            app.extensions['resource_catalog'],
            max_attempts=app.config['BOOKING_TX_MAX_ATTEMPTS'],
            retry_backoff=app.config['BOOKING_TX_RETRY_BACKOFF'],
        )

    # --- Conflict guard ---

    @staticmethod
    def normalize_request(request):
        """Offset-aware times are converted to the naive local times bookings are stored in."""
        times = {}
        for field in ("start_time", "end_time"):
            value = getattr(request, field)
            if isinstance(value, datetime) and value.tzinfo is not None:
                times[field] = to_local_naive(value)
        return replace(request, **times) if times else request

    def validate_request(self, request, now):
        """Shape checks that need no store access. Returns the resolved resource."""
        resource = self.catalog.get_resource(request.resource_id)

        attendees = request.attendees
        if isinstance(attendees, bool) or not isinstance(attendees, int):
            raise InvalidArgument(f"Attendees must be an integer, got {attendees!r}.")
        if attendees < 1 or attendees > resource.capacity:
            raise CapacityExceeded(
                f"Resource capacity error: {resource.name} holds {resource.capacity}, requested {attendees}."
            )

        if not isinstance(request.purpose, str) or not request.purpose.strip():
            raise InvalidArgument("A booking purpose is required.")

        if not isinstance(request.start_time, datetime) or not isinstance(request.end_time, datetime):
            raise InvalidArgument("Start and end times must be datetimes.")
        if request.start_time >= request.end_time:
            raise InvalidWindow("Booking must end after it starts.")
        if request.start_time < now:
            raise InvalidWindow("Cannot book for a past date/time.")

        return resource

    @staticmethod
    def find_conflict(resource_id, start_time, end_time):
        """First booking of the resource overlapping [start_time, end_time), if any."""
        # (StartA < EndB) and (EndA > StartB)
        return Booking.query.filter(
            Booking.resource_id == resource_id,
            Booking.start_time < end_time,
            Booking.end_time > start_time
        ).order_by(Booking.start_time).first()

    def _commit_booking(self, request, now):
        try:
            ledger = db.session.get(ResourceLedger, request.resource_id)
            if ledger is None:
                ledger = ResourceLedger(resource_id=request.resource_id, bookings_committed=0)
                db.session.add(ledger)

            conflict = self.find_conflict(request.resource_id, request.start_time, request.end_time)
            if conflict is not None:
                db.session.rollback()
                raise SlotConflict(
                    f"This time slot is already booked ({conflict.start_time:%H:%M}-{conflict.end_time:%H:%M})."
                )

            booking = Booking(
                resource_id=request.resource_id,
                user_id=str(request.user_id),
                start_time=request.start_time,
                end_time=request.end_time,
                purpose=request.purpose.strip(),
                attendees=request.attendees,
                created_at=now,
            )
            db.session.add(booking)
            ledger.bookings_committed += 1
            db.session.commit()
            return booking
        except SlotConflict:
            raise
        except Exception:
            db.session.rollback()
            raise

    def create_booking(self, request, now):
        now = to_local_naive(now) if isinstance(now, datetime) else now
        request = self.normalize_request(request)
        self.validate_request(request, now)

        for attempt in range(1, self.max_attempts + 1):
            try:
                booking = self._commit_booking(request, now)
            except SlotConflict:
                logger.info(
                    "Booking rejected, slot taken: %s %s-%s",
                    request.resource_id, request.start_time, request.end_time
                )
                raise
            except (StaleDataError, IntegrityError, OperationalError) as e:
                if not is_contention_error(e):
                    raise
                logger.warning(
                    "Contention on %s (attempt %d/%d): %s",
                    request.resource_id, attempt, self.max_attempts, e.__class__.__name__
                )
                if attempt < self.max_attempts and self.retry_backoff:
                    time.sleep(self.retry_backoff * attempt)
                continue

            logger.info(
                "Booking created: %s on %s %s-%s for user %s",
                booking.id, booking.resource_id, booking.start_time, booking.end_time, booking.user_id
            )
            return booking

        logger.error(
            "Booking transaction aborted after %d attempts on %s", self.max_attempts, request.resource_id
        )
        raise TransactionAborted("The booking could not be completed, please try again.")

    # --- Lifecycle ---

    @staticmethod
    def get_booking(booking_id):
        booking = Booking.query.filter_by(id=booking_id).first()
        if booking is None:
            raise NotFound(f"Booking {booking_id!r} not found.")
        return booking

    @staticmethod
    def list_bookings_for_user(user_id):
        return Booking.query.filter(
            Booking.user_id == str(user_id)
        ).order_by(Booking.start_time).all()

    @staticmethod
    def cancel_booking(booking_id, requesting_user_id):
        """Delete a booking on behalf of its owner.

        The delete is conditional on the row still existing, so of two racing
        cancels only one sees a deleted row and the other gets NotFound.
        """
        booking = BookingService.get_booking(booking_id)
        if booking.user_id != str(requesting_user_id):
            raise Forbidden("Only the booking owner can cancel it.")

        try:
            deleted = Booking.query.filter(
                Booking.id == booking_id,
                Booking.user_id == booking.user_id
            ).delete(synchronize_session=False)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

        if deleted == 0:
            raise NotFound(f"Booking {booking_id!r} not found.")
        logger.info("Booking cancelled: %s by user %s", booking_id, requesting_user_id)

    @staticmethod
    def expire_bookings(now):
        """Delete every booking that ended before ``now``. Returns how many went."""
        try:
            removed = Booking.query.filter(
                Booking.end_time < now
            ).delete(synchronize_session=False)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

        if removed:
            logger.info("Expired %d booking(s) ending before %s", removed, now)
        return removed

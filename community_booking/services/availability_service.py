from dataclasses import dataclass
from datetime import datetime, timedelta
from flask import current_app
from community_booking.exceptions import InvalidArgument
from community_booking.models import Booking
from community_booking.utils.clock import to_local_naive


@dataclass(frozen=True)
class TimeSlot:
    start_hour: int
    duration_hours: int

    @property
    def end_hour(self):
        return self.start_hour + self.duration_hours

    def window(self, on_date):
        start = datetime.combine(on_date, datetime.min.time()).replace(hour=self.start_hour)
        return start, start + timedelta(hours=self.duration_hours)

    def to_dict(self, on_date=None):
        data = {
            'start_hour': self.start_hour,
            'duration_hours': self.duration_hours,
            'start': f"{self.start_hour:02d}:00",
            'end': f"{self.end_hour:02d}:00",
        }
        if on_date is not None:
            start, end = self.window(on_date)
            data['start_time'] = start.isoformat()
            data['end_time'] = end.isoformat()
        return data


def validate_duration(duration_hours):
    if isinstance(duration_hours, bool) or not isinstance(duration_hours, int):
        raise InvalidArgument(f"Duration must be a whole number of hours, got {duration_hours!r}.")
    if duration_hours <= 0:
        raise InvalidArgument(f"Duration must be positive, got {duration_hours}.")


class AvailabilityService:
    """Open hourly slots for a resource on a given day.

    Reads are snapshot reads. The conflict guard repeats the overlap check
    authoritatively at commit time, so a slightly stale answer here is fine.
    """

    def __init__(self, catalog, business_hours_start=8, business_hours_end=20):
        if not 0 <= business_hours_start < business_hours_end <= 24:
            raise ValueError(
                f"Invalid business hours {business_hours_start}-{business_hours_end}"
            )
        self.catalog = catalog
        self.business_hours_start = business_hours_start
        self.business_hours_end = business_hours_end

    @classmethod
    def from_app(cls, app=None):
        app = app or current_app
        return cls(
            app.extensions['resource_catalog'],
            business_hours_start=app.config['BUSINESS_HOURS_START'],
            business_hours_end=app.config['BUSINESS_HOURS_END'],
        )

    def bookings_for_day(self, resource_id, on_date):
        """Bookings of the resource that intersect the calendar day, by start time."""
        day_start = datetime.combine(on_date, datetime.min.time())
        day_end = day_start + timedelta(days=1)
        return Booking.query.filter(
            Booking.resource_id == resource_id,
            Booking.start_time < day_end,
            Booking.end_time > day_start
        ).order_by(Booking.start_time).all()

    def candidate_slots(self, duration_hours):
        last_start = self.business_hours_end - duration_hours
        return [
            TimeSlot(start_hour=hour, duration_hours=duration_hours)
            for hour in range(self.business_hours_start, self.business_hours_end)
            if hour <= last_start
        ]

    def compute_available_slots(self, resource_id, on_date, duration_hours, now):
        validate_duration(duration_hours)
        self.catalog.get_resource(resource_id)
        if isinstance(now, datetime):
            now = to_local_naive(now)

        candidates = self.candidate_slots(duration_hours)
        if not candidates:
            return []

        bookings = self.bookings_for_day(resource_id, on_date)

        available = []
        for slot in candidates:
            start, end = slot.window(on_date)
            # Nothing that has already finished
            if end <= now:
                continue
            if any(b.overlaps(start, end) for b in bookings):
                continue
            available.append(slot)
        return available

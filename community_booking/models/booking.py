import uuid
from community_booking.extensions import db


def _new_booking_id():
    return uuid.uuid4().hex


class Booking(db.Model):
    __tablename__ = 'bookings'
    __table_args__ = (
        db.Index('ix_bookings_resource_start', 'resource_id', 'start_time'),
    )

    id = db.Column(db.String(32), primary_key=True, default=_new_booking_id)
    resource_id = db.Column(db.String(64), nullable=False)
    user_id = db.Column(db.String(128), nullable=False, index=True)

    start_time = db.Column(db.DateTime, nullable=False)
    end_time = db.Column(db.DateTime, nullable=False, index=True)

    purpose = db.Column(db.String(255), nullable=False)
    attendees = db.Column(db.Integer, nullable=False, default=1)

    created_at = db.Column(db.DateTime, nullable=False)

    def overlaps(self, start_time, end_time):
        """Half-open interval test: [start, end) windows that share an instant."""
        return self.start_time < end_time and start_time < self.end_time

    def to_dict(self, catalog=None):
        data = {
            'id': self.id,
            'resource_id': self.resource_id,
            'user_id': self.user_id,
            'start_time': self.start_time.isoformat(),
            'end_time': self.end_time.isoformat(),
            'purpose': self.purpose,
            'attendees': self.attendees,
            'created_at': self.created_at.isoformat(),
        }
        if catalog is not None:
            resource = catalog.find(self.resource_id)
            data['resource_name'] = resource.name if resource else None
        return data

    def __repr__(self):
        return f'<Booking {self.id} {self.resource_id} {self.start_time:%Y-%m-%d %H:%M}>'

import pytest
import jwt
from datetime import datetime
from community_booking import create_app
from community_booking.config import TestingConfig
from community_booking.extensions import db
from community_booking.services.availability_service import AvailabilityService
from community_booking.services.booking_service import BookingRequest, BookingService
from community_booking.services.resource_catalog import get_catalog

TEST_CATALOG = [
    {"id": "community-hall", "name": "Community Hall", "type": "hall", "capacity": 120},
    {"id": "meeting-room-1", "name": "Meeting Room 1", "type": "meeting_room", "capacity": 8},
    {"id": "meeting-room-2", "name": "Meeting Room 2", "type": "meeting_room", "capacity": 12},
    {"id": "garden-pavilion", "name": "Garden Pavilion", "type": "outdoor", "capacity": 40},
]

BOOKING_DAY = datetime(2025, 6, 1)
# Early morning before the booking day: nothing is in the past yet
NOW = datetime(2025, 5, 31, 7, 0)


@pytest.fixture
def app(tmp_path):
    # File-backed so concurrent app contexts get their own connections
    app = create_app(TestingConfig, config_overrides={
        'SQLALCHEMY_DATABASE_URI': f"sqlite:///{tmp_path / 'bookings.db'}",
        'SQLALCHEMY_ENGINE_OPTIONS': {'connect_args': {'check_same_thread': False, 'timeout': 30}},
        'RESOURCE_CATALOG': TEST_CATALOG,
        'BOOKING_TX_MAX_ATTEMPTS': 10,
    })
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()
        db.engine.dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def catalog(app):
    return get_catalog()


@pytest.fixture
def service(app):
    return BookingService.from_app(app)


@pytest.fixture
def availability(app):
    return AvailabilityService.from_app(app)


def at(hour, minute=0, day=BOOKING_DAY):
    return day.replace(hour=hour, minute=minute)


def make_request(resource_id="meeting-room-2", start=10, end=12, user_id="alice",
                 attendees=4, purpose="Residents meeting", day=BOOKING_DAY):
    return BookingRequest(
        resource_id=resource_id,
        user_id=user_id,
        start_time=at(start, day=day),
        end_time=at(end, day=day),
        purpose=purpose,
        attendees=attendees,
    )


def make_token(app, user_id, name=None):
    claims = {'user_id': user_id}
    if name:
        claims['name'] = name
    return jwt.encode(claims, app.config['SECRET_KEY'], algorithm="HS256")


@pytest.fixture
def auth_headers(app):
    def _headers(user_id="alice"):
        return {'Authorization': f'Bearer {make_token(app, user_id)}'}
    return _headers

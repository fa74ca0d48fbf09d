import os
from dotenv import load_dotenv

load_dotenv(os.path.join(os.path.dirname(__file__), '.env'))


DEFAULT_RESOURCE_CATALOG = [
    {"id": "community-hall", "name": "Community Hall", "type": "hall", "capacity": 120},
    {"id": "meeting-room-1", "name": "Meeting Room 1", "type": "meeting_room", "capacity": 8},
    {"id": "meeting-room-2", "name": "Meeting Room 2", "type": "meeting_room", "capacity": 12},
    {"id": "garden-pavilion", "name": "Garden Pavilion", "type": "outdoor", "capacity": 40},
    {"id": "bbq-area", "name": "BBQ Area", "type": "outdoor", "capacity": 25},
]


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-prod'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///community_booking.db'
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # Local time in which bookings and business hours are expressed
    BOOKING_TIMEZONE = os.environ.get('BOOKING_TIMEZONE', 'UTC')

    # Business Rules Defaults
    BUSINESS_HOURS_START = 8   # 8 AM
    BUSINESS_HOURS_END = 20    # 8 PM, exclusive
    DEFAULT_BOOKING_DURATION_HOURS = 2

    # Conflict guard transaction
    BOOKING_TX_MAX_ATTEMPTS = int(os.environ.get('BOOKING_TX_MAX_ATTEMPTS', 5))
    BOOKING_TX_RETRY_BACKOFF = float(os.environ.get('BOOKING_TX_RETRY_BACKOFF', 0.05))

    # Expired booking cleanup
    EXPIRY_SWEEP_INTERVAL_SECONDS = float(os.environ.get('EXPIRY_SWEEP_INTERVAL_SECONDS', 60))

    CELERY = dict(
        broker_url=os.environ.get('CELERY_BROKER_URL', 'redis://localhost:6379/0'),
        result_backend=os.environ.get('CELERY_RESULT_BACKEND', 'redis://localhost:6379/0'),
        task_serializer='json',
        accept_content=['json'],
        task_ignore_result=True,
        timezone=os.environ.get('BOOKING_TIMEZONE', 'UTC'),
        broker_connection_retry_on_startup=True,
    )

    RESOURCE_CATALOG = DEFAULT_RESOURCE_CATALOG


class DevelopmentConfig(Config):
    DEBUG = True


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = 'testing-secret-key-for-community-booking'
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    BOOKING_TIMEZONE = 'UTC'
    BOOKING_TX_RETRY_BACKOFF = 0
    CELERY = dict(
        broker_url='memory://',
        task_always_eager=True,
        task_ignore_result=True,
    )


class ProductionConfig(Config):
    DEBUG = False
    # In prod, rely on env vars strictly

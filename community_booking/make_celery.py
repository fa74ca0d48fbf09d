"""Worker entry point.

Usage:
    celery -A community_booking.make_celery worker --loglevel=info
    celery -A community_booking.make_celery beat --loglevel=info
"""

from community_booking import create_app
from community_booking.config import ProductionConfig

flask_app = create_app(ProductionConfig)
celery_app = flask_app.extensions['celery']

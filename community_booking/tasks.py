"""Celery tasks for the booking domain."""

import logging
from celery import shared_task
from community_booking.extensions import db
from community_booking.services.booking_service import BookingService
from community_booking.utils.clock import local_now

logger = logging.getLogger(__name__)


@shared_task(name="bookings.expire_bookings", ignore_result=True)
def expire_bookings():
    """
    Delete every booking whose end time has passed.

    Run on a fixed interval by Celery beat. A failing run is logged and left
    for the next tick; deleting an already-gone booking is a no-op.

    Returns:
        int | None: number of removed bookings, None when the run failed
    """
    now = local_now()
    try:
        removed = BookingService.expire_bookings(now)
    except Exception:
        db.session.rollback()
        logger.exception("Expiry sweep failed, retrying next tick")
        return None
    return removed

from community_booking.models.booking import Booking
from community_booking.models.resource_ledger import ResourceLedger

__all__ = ['Booking', 'ResourceLedger']

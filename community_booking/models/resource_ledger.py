from community_booking.extensions import db


class ResourceLedger(db.Model):
    """Per-resource version row that serializes booking commits.

    Every booking commit for a resource bumps ``version``. SQLAlchemy issues the
    UPDATE with ``WHERE version = <value read>``, so a writer whose read went
    stale matches zero rows and gets ``StaleDataError`` instead of committing.
    """
    __tablename__ = 'resource_ledgers'

    resource_id = db.Column(db.String(64), primary_key=True)
    version = db.Column(db.Integer, nullable=False)
    bookings_committed = db.Column(db.Integer, nullable=False, default=0)

    __mapper_args__ = {'version_id_col': version}

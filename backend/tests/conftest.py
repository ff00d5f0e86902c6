"""
Shared fixtures: an in-memory SQLite database with the trust schema, and a
stand-in for the server-side recalculation procedure.
"""
from datetime import datetime

import pytest
from sqlalchemy import create_engine, update
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from vendor_trust.database import Base
from vendor_trust.models.db_models import VendorProfileDB, TrustTier
from vendor_trust.services.trust import ExternalServiceError, ProfileStore


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    yield session
    session.close()


@pytest.fixture
def make_profile(db_session):
    """Create and commit a vendor profile, overriding any default column."""

    def _make(vendor_id="vendor-1", **fields):
        ProfileStore(db_session).create_profile(vendor_id=vendor_id, shop_name=f"Shop {vendor_id}")
        if fields:
            db_session.execute(
                update(VendorProfileDB).where(VendorProfileDB.id == vendor_id).values(**fields)
            )
        db_session.commit()
        return vendor_id

    return _make


class FakeRecalculator:
    """
    Mimics update_vendor_trust_score(): rewrites score/tier/timestamp inside
    the caller's transaction without touching `version`.
    """

    def __init__(self, db_session, new_score=82, new_tier=TrustTier.VERIFIED_AND_RELIABLE, fail=False):
        self.db = db_session
        self.new_score = new_score
        self.new_tier = new_tier
        self.fail = fail
        self.calls = []

    def recalculate(self, vendor_id):
        self.calls.append(vendor_id)
        if self.fail:
            raise ExternalServiceError("recalculate", vendor_id, RuntimeError("procedure unavailable"))
        self.db.execute(
            update(VendorProfileDB)
            .where(VendorProfileDB.id == vendor_id)
            .values(
                trust_score=self.new_score,
                trust_tier=self.new_tier.value,
                last_trust_score_update=datetime.utcnow(),
            )
        )


@pytest.fixture
def recalculator(db_session):
    return FakeRecalculator(db_session)

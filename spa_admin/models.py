"""
Local mirror tables.

Each Firestore collection has a mirror table holding the last fetched
documents (as JSON) plus a `<entity>Counts` table holding aggregate counts.
Rows carry a `scope` (the canonical filter key of the list they came from)
and a `timestamp` in epoch millis recording when they were written.
"""

import logging

from sqlalchemy import JSON, BigInteger, Column, Integer, String, inspect

from .config import MIRROR_SCHEMA_VERSION
from .database import Base

logger = logging.getLogger(__name__)


class MirrorRecordMixin:
    id = Column(String(255), primary_key=True)
    scope = Column(String(255), primary_key=True, default="all")
    payload = Column(JSON, nullable=False)
    timestamp = Column(BigInteger, nullable=False, index=True)  # epoch millis


class MirrorCountMixin:
    id = Column(Integer, primary_key=True, autoincrement=True)
    scope = Column(String(255), nullable=False, default="all", index=True)
    count = Column(Integer, nullable=False)
    timestamp = Column(BigInteger, nullable=False, index=True)


class BookingMirror(MirrorRecordMixin, Base):
    __tablename__ = "bookings"


class BookingCount(MirrorCountMixin, Base):
    __tablename__ = "bookingCounts"


class InventoryMirror(MirrorRecordMixin, Base):
    __tablename__ = "inventory"


class InventoryCount(MirrorCountMixin, Base):
    __tablename__ = "inventoryCounts"


class StaffMirror(MirrorRecordMixin, Base):
    __tablename__ = "staffs"


class StaffCount(MirrorCountMixin, Base):
    __tablename__ = "staffCounts"


class SupplierMirror(MirrorRecordMixin, Base):
    __tablename__ = "suppliers"


class SupplierCount(MirrorCountMixin, Base):
    __tablename__ = "supplierCounts"


class ServiceMirror(MirrorRecordMixin, Base):
    __tablename__ = "services"


class ServiceCount(MirrorCountMixin, Base):
    __tablename__ = "serviceCounts"


class TransactionMirror(MirrorRecordMixin, Base):
    __tablename__ = "transactions"


class TransactionCount(MirrorCountMixin, Base):
    __tablename__ = "transactionCounts"


class MirrorMeta(Base):
    """Single-row table holding the mirror schema version"""

    __tablename__ = "mirror_meta"

    id = Column(Integer, primary_key=True)
    schema_version = Column(Integer, nullable=False)


# entity type -> (record table, count table)
MIRROR_TABLES = {
    "bookings": (BookingMirror, BookingCount),
    "inventory": (InventoryMirror, InventoryCount),
    "staffs": (StaffMirror, StaffCount),
    "suppliers": (SupplierMirror, SupplierCount),
    "services": (ServiceMirror, ServiceCount),
    "transactions": (TransactionMirror, TransactionCount),
}


def _stored_schema_version(engine):
    if not inspect(engine).has_table(MirrorMeta.__tablename__):
        return None
    with engine.connect() as conn:
        row = conn.execute(MirrorMeta.__table__.select()).first()
    return row.schema_version if row else None


def reset_mirror(engine) -> None:
    """Drop and recreate every mirror table"""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    with engine.begin() as conn:
        conn.execute(MirrorMeta.__table__.insert().values(id=1, schema_version=MIRROR_SCHEMA_VERSION))
    logger.info(f"🧹 Mirror reset (schema v{MIRROR_SCHEMA_VERSION})")


def init_mirror(engine) -> None:
    """Create mirror tables, rebuilding them when the stored schema version differs"""
    stored = _stored_schema_version(engine)
    if stored == MIRROR_SCHEMA_VERSION:
        Base.metadata.create_all(bind=engine, checkfirst=True)
        return

    if stored is not None:
        logger.warning(
            f"⚠️ Mirror schema v{stored} does not match v{MIRROR_SCHEMA_VERSION}, rebuilding"
        )
    reset_mirror(engine)

"""
Local mirror of recent Firestore reads, stored in SQLite.
Lets list views skip a remote round trip within the freshness window.
"""

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .models import MIRROR_TABLES, reset_mirror
from .shared.serialization import to_jsonable

logger = logging.getLogger(__name__)


class LocalMirror:
    """Mirror tables wrapper; failures are logged and treated as cache misses"""

    def __init__(self, db: Session, tables: Optional[dict] = None):
        self.db = db
        self.tables = tables or MIRROR_TABLES

    def _tables(self, entity: str):
        try:
            return self.tables[entity]
        except KeyError:
            raise ValueError(f"Unknown mirror entity: {entity}") from None

    def write(self, entity: str, records: list[dict], timestamp: int, scope: str = "all") -> int:
        """Upsert records keyed by identifier, stamping each with `timestamp`"""
        record_table, _ = self._tables(entity)
        try:
            for record in records:
                self.db.merge(
                    record_table(
                        id=str(record["id"]),
                        scope=scope,
                        payload=to_jsonable(record),
                        timestamp=timestamp,
                    )
                )
            self.db.commit()
            logger.debug(f"✅ Mirror SET: {entity}[{scope}] ({len(records)} rows)")
            return len(records)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Mirror write error for {entity}[{scope}]: {e}")
            return 0

    def read(self, entity: str, scope: str = "all") -> list[dict]:
        """All stored records of the scope, each with its mirror `timestamp`"""
        record_table, _ = self._tables(entity)
        try:
            rows = self.db.query(record_table).filter(record_table.scope == scope).all()
        except SQLAlchemyError as e:
            logger.error(f"❌ Mirror read error for {entity}[{scope}]: {e}")
            return []
        return [{**row.payload, "timestamp": row.timestamp} for row in rows]

    def read_count(self, entity: str, scope: str = "all"):
        """Most recent aggregate count row for the scope, or None"""
        _, count_table = self._tables(entity)
        try:
            return (
                self.db.query(count_table)
                .filter(count_table.scope == scope)
                .order_by(count_table.timestamp.desc(), count_table.id.desc())
                .first()
            )
        except SQLAlchemyError as e:
            logger.error(f"❌ Mirror count read error for {entity}[{scope}]: {e}")
            return None

    def write_count(self, entity: str, count: int, timestamp: int, scope: str = "all") -> None:
        _, count_table = self._tables(entity)
        try:
            self.db.query(count_table).filter(count_table.scope == scope).delete(
                synchronize_session=False
            )
            self.db.add(count_table(scope=scope, count=count, timestamp=timestamp))
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Mirror count write error for {entity}[{scope}]: {e}")

    def expire(self, entity: str, older_than: int) -> int:
        """Delete record and count rows written before `older_than` (epoch millis)"""
        record_table, count_table = self._tables(entity)
        try:
            deleted = (
                self.db.query(record_table)
                .filter(record_table.timestamp < older_than)
                .delete(synchronize_session=False)
            )
            self.db.query(count_table).filter(count_table.timestamp < older_than).delete(
                synchronize_session=False
            )
            self.db.commit()
            if deleted:
                logger.debug(f"🧹 Expired {deleted} mirrored {entity} rows")
            return deleted
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Mirror expire error for {entity}: {e}")
            return 0

    def clear_scope(self, entity: str, scope: str) -> None:
        record_table, _ = self._tables(entity)
        try:
            self.db.query(record_table).filter(record_table.scope == scope).delete(
                synchronize_session=False
            )
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Mirror clear error for {entity}[{scope}]: {e}")

    def discard(self, entity: str, record_id: str) -> None:
        """Remove a record from every scope"""
        record_table, _ = self._tables(entity)
        try:
            self.db.query(record_table).filter(record_table.id == str(record_id)).delete(
                synchronize_session=False
            )
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Mirror discard error for {entity}/{record_id}: {e}")

    def invalidate_counts(self, entity: str) -> None:
        """Drop every count row so the next page-1 fetch goes remote"""
        _, count_table = self._tables(entity)
        try:
            self.db.query(count_table).delete(synchronize_session=False)
            self.db.commit()
            logger.debug(f"✅ Mirror counts invalidated: {entity}")
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Mirror count invalidation error for {entity}: {e}")

    def reset(self) -> None:
        """Drop and recreate the whole local store"""
        self.db.close()
        reset_mirror(self.db.get_bind())

    def forget(self, entity: str, record_id: Optional[str] = None) -> None:
        """After an own write: drop the record from every scope and the entity's counts"""
        if record_id is not None:
            self.discard(entity, record_id)
        self.invalidate_counts(entity)

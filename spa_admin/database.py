import logging
import os
import time

from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker

from .config import MIRROR_DATABASE_URL

logger = logging.getLogger(__name__)

ENABLE_QUERY_LOGGING = os.getenv("DB_LOG_SLOW_QUERIES", "true").lower() == "true"
SLOW_QUERY_THRESHOLD = float(os.getenv("DB_SLOW_QUERY_THRESHOLD", "0.5"))


def build_engine(url: str):
    """Create the SQLite engine backing the local mirror"""
    connect_args = {}
    if url.startswith("sqlite"):
        # Requests are served from the event loop and from TestClient's worker thread
        connect_args["check_same_thread"] = False
    return create_engine(url, connect_args=connect_args, echo=False)


try:
    engine = build_engine(MIRROR_DATABASE_URL)
    logger.info(f"✅ Mirror database engine created ({MIRROR_DATABASE_URL})")
except Exception as e:
    logger.error(f"❌ Failed to create mirror database engine: {e}")
    raise

# Slow query logging for performance monitoring
if ENABLE_QUERY_LOGGING:

    @event.listens_for(engine, "before_cursor_execute")
    def before_cursor_execute(conn, _cursor, statement, _parameters, context, _executemany):
        conn.info.setdefault("query_start_time", []).append(time.time())

    @event.listens_for(engine, "after_cursor_execute")
    def after_cursor_execute(conn, _cursor, statement, _parameters, context, _executemany):
        total = time.time() - conn.info["query_start_time"].pop(-1)
        if total > SLOW_QUERY_THRESHOLD:
            logger.warning(f"🐌 Slow mirror query ({total:.2f}s): {statement[:200]}...")

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

import os

# Settings are read at import time; keep tests off Redis, disk and static files
os.environ["MIRROR_DATABASE_URL"] = "sqlite://"
os.environ["REDIS_URL"] = ""
os.environ["REDIS_HOST"] = ""
os.environ["STATIC_DIR"] = ""
os.environ["PUBLIC_BASE_URL"] = "https://spa.example.com"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from fake_firestore import FakeFirestore
from spa_admin import rate_limiter
from spa_admin.database import get_db
from spa_admin.fetcher import InflightRequests, get_inflight
from spa_admin.firestore import get_firestore
from spa_admin.main import app
from spa_admin.mirror import LocalMirror
from spa_admin.models import init_mirror


@pytest.fixture
def mirror_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_mirror(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(mirror_engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=mirror_engine)()
    yield session
    session.close()


@pytest.fixture
def mirror(db_session):
    return LocalMirror(db_session)


@pytest.fixture
def firestore_client():
    return FakeFirestore()


@pytest.fixture
def client(mirror_engine, firestore_client):
    Session = sessionmaker(autocommit=False, autoflush=False, bind=mirror_engine)

    def override_get_db():
        db = Session()
        try:
            yield db
        finally:
            db.close()

    inflight = InflightRequests()
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_firestore] = lambda: firestore_client
    app.dependency_overrides[get_inflight] = lambda: inflight
    rate_limiter.memory_cache.clear()

    yield TestClient(app)

    app.dependency_overrides.clear()
    rate_limiter.memory_cache.clear()

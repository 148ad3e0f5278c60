"""
Configuration partagée pour tous les tests.
- client     : API avec la BDD mockée (dependency override de get_db)
- db_session : vraie session SQLite en mémoire (tris, transactions)
- api_client : API branchée sur la BDD SQLite en mémoire, base_url /api
               (injectable dans RemoteStoreClient pour les tests de bout en bout)
"""

import os

# Avant tout import de moodsurvey : aucune base sur disque pendant les tests
os.environ["DATABASE_URL"] = "sqlite://"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from unittest.mock import MagicMock  # noqa: E402

import moodsurvey.models  # noqa: E402,F401
from moodsurvey.database import Base, get_db  # noqa: E402
from moodsurvey.main import app  # noqa: E402


@pytest.fixture
def client():
    """Client HTTP de test avec la BDD mockée."""
    mock_db = MagicMock()
    app.dependency_overrides[get_db] = lambda: mock_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def session_factory():
    """Base SQLite en mémoire partagée entre threads (StaticPool)."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield factory
    engine.dispose()


@pytest.fixture
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def api_client(session_factory):
    """API réelle sur SQLite en mémoire ; les chemins relatifs sont préfixés par /api."""

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app, base_url="http://testserver/api") as c:
        yield c
    app.dependency_overrides.clear()

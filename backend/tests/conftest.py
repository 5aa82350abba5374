"""
Configuration partagée pour tous les tests.

- `client` : client HTTP avec la BDD mockée (tests de routers, services patchés)
- `db` / `session_factory` : vraie base SQLite dans un fichier temporaire
  (tests de services, d'invariants et de concurrence)
- `api` : client HTTP branché sur cette base SQLite (scénarios de bout en bout)
"""

import os

# Avant tout import de l'application : jamais de fichier qrpoints.db créé par les tests
os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from unittest.mock import MagicMock

from app.database import Base, get_db, make_engine
from app.main import app
from app.schemas.user import CallerIdentity
from app.services import user_service

ADMIN = CallerIdentity(email="admin@qrpoints.io", role="ADMIN")
SCANNER = CallerIdentity(email="scanner@qrpoints.io", role="SCANNER")


@pytest.fixture
def client():
    """Client HTTP de test avec la BDD mockée."""
    mock_db = MagicMock()
    app.dependency_overrides[get_db] = lambda: mock_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def engine(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'ledger.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def accounts(db):
    """Un administrateur et un scanner, soldes à 0."""
    user_service.create_user(db, "Admin", ADMIN.email, "ADMIN", "admin-secret")
    user_service.create_user(db, "Scanner", SCANNER.email, "SCANNER", "scanner-secret")
    return ADMIN, SCANNER


@pytest.fixture
def api(session_factory):
    """Client HTTP de test branché sur une vraie base SQLite."""
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()

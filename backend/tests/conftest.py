import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from poker_ledger.core.config import settings
from poker_ledger.core.deps import get_db
from poker_ledger.main import app
from poker_ledger.models.db import Base


@pytest.fixture
def db_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(bind=engine, autocommit=False, autoflush=False)
    engine.dispose()


@pytest.fixture
def db(db_factory):
    session = db_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def local_store_path(tmp_path, monkeypatch):
    path = tmp_path / "ledger.json"
    monkeypatch.setattr(settings, "LOCAL_STORE_PATH", str(path))
    return path


@pytest.fixture
def client(db_factory, local_store_path):
    def _get_db():
        session = db_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    yield TestClient(app)
    app.dependency_overrides.clear()

import os

os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from fastapi.testclient import TestClient

import database
import models
from main import app


@pytest.fixture(autouse=True)
def create_tables():
    models.Base.metadata.create_all(bind=database.engine)
    yield
    models.Base.metadata.drop_all(bind=database.engine)


@pytest.fixture
def db():
    session = database.SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    with TestClient(app) as client:
        yield client


@pytest.fixture
def file_sessions(tmp_path):
    """Session factory on a file-backed SQLite db, for multi-threaded tests."""
    engine = database.make_engine(f"sqlite:///{tmp_path / 'links.db'}")
    models.Base.metadata.create_all(bind=engine)
    yield database.sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()

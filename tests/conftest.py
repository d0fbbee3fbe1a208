"""
Pytest fixtures for the FeePayments transaction tests.

Every test gets its own in-memory SQLite database with the FeePayments
table already created.
"""
import os

# main.py import par init_db chalata hai; use file DB mat banane do
os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from database import build_engine, get_db
from services.transaction_runner import TransactionRunner


@pytest.fixture
def engine():
    eng = build_engine("sqlite://", echo=False)
    yield eng
    eng.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    yield session
    session.close()


@pytest.fixture
def runner(db):
    r = TransactionRunner(db)
    r.ensure_schema()
    return r


@pytest.fixture
def client(engine, runner):
    from main import app

    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        session = TestingSession()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from signbridge.backend.api.app import app
from signbridge.backend.api.deps import get_db
from signbridge.backend.db import Base
from signbridge.backend.ml.config import RecognizerConfig
from signbridge.backend.ml.samples import SignSample

import hands


@pytest.fixture
def config():
    return RecognizerConfig()


@pytest.fixture
def fist_samples():
    return [SignSample("a", hands.jitter(hands.fist(), d)) for d in (0.002, 0.004, -0.003)]


@pytest.fixture
def flat_samples():
    return [SignSample("b", hands.jitter(hands.flat(), d)) for d in (0.002, -0.002, 0.003)]


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(engine):
    TestingSession = sessionmaker(bind=engine)

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


@pytest.fixture
def seeded(client):
    """Three fist samples for 'a' and three flat-hand samples for 'b'."""
    payload = [hands.sample_payload("a", hands.jitter(hands.fist(), d)) for d in (0.002, 0.004, -0.003)]
    payload += [hands.sample_payload("b", hands.jitter(hands.flat(), d), is_augmented=True) for d in (0.002, -0.002, 0.003)]
    r = client.post("/api/sign/batch", json=payload)
    assert r.status_code == 200
    return client

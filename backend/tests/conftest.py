import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Settings are read at import time
os.environ.setdefault("JWT_SECRET_KEY", "test-signing-secret")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("GEMINI_API_KEY", "test-gemini-key")

from typing import List, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from pathways import models  # noqa: F401
from pathways.cache import QuestionCache
from pathways.db import Base, get_db
from pathways.main import app
from pathways.recommender import Recommendation, get_recommendation_engine


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class StubEngine:
    """Stands in for the generative engine; records what it was asked."""

    def __init__(self) -> None:
        self.calls: List[tuple] = []
        self.error: Optional[Exception] = None
        self.foundational = Recommendation(
            recommended_stream="Commerce",
            ai_insights="You enjoy numbers and business problems.",
            raw_response='{"recommendedStream": "Commerce", "aiInsights": "You enjoy numbers and business problems."}',
        )
        self.stream = Recommendation(
            recommended_stream="Data Science",
            top_courses=["B.Sc Data Science", "B.Tech CSE", "B.Stat", "BCA", "B.Sc Mathematics"],
            ai_insights="Strong analytical profile.",
            raw_response="{}",
        )

    async def recommend_foundational(self, answers):
        self.calls.append(("foundational", list(answers)))
        if self.error is not None:
            raise self.error
        return self.foundational

    async def recommend_stream(self, answers, current_stream):
        self.calls.append(("stream", list(answers), current_stream))
        if self.error is not None:
            raise self.error
        return self.stream


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True)
    yield factory
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def stub_engine():
    return StubEngine()


@pytest.fixture
def client(session_factory, stub_engine, clock):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    previous_cache = app.state.question_cache
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_recommendation_engine] = lambda: stub_engine
    app.state.question_cache = QuestionCache(ttl_seconds=15 * 60, clock=clock)
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
        app.state.question_cache = previous_cache


def register(client, email="asha@example.com", password="secret123", first="Asha", last="Verma"):
    return client.post(
        "/users/register",
        json={"firstName": first, "lastName": last, "email": email, "password": password},
    )


@pytest.fixture
def auth_headers(client):
    r = register(client)
    assert r.status_code == 201
    token = r.json()["tokens"]["accessToken"]
    return {"Authorization": f"Bearer {token}"}

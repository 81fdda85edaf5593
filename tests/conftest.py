from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from venue_rules.core.deps import get_db, get_gemini_client
from venue_rules.core.tracing import EvaluationTrace
from venue_rules.db.base import Base
from venue_rules.main import app
from venue_rules.schemas.rules import RuleSet
from venue_rules.schemas.simulation import SimulationInput
from venue_rules.services.gemini_client import GeminiError

# A Monday
NOW = datetime(2025, 6, 2, 10, 0, tzinfo=timezone.utc)


class FakeGeminiClient:
    """Stands in for GeminiClient; returns a canned payload or raises."""

    def __init__(self, payload=None, error: str | None = None):
        self.payload = payload or {}
        self.error = error
        self.prompts: list[str] = []

    async def generate_json(self, prompt: str):
        self.prompts.append(prompt)
        if self.error:
            raise GeminiError(self.error)
        return self.payload


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def trace():
    return EvaluationTrace()


@pytest.fixture
def make_request():
    def factory(space="Desk 1", tags=(), days_ahead=1, start="09:00", end="10:00", date=None):
        return SimulationInput(
            user_tags=list(tags),
            space=space,
            date=date if date is not None else NOW + timedelta(days=days_ahead),
            start_time=start,
            end_time=end,
        )

    return factory


@pytest.fixture
def sales_rules():
    return RuleSet.model_validate(
        {
            "booking_window_rules": [
                {
                    "user_scope": "users_with_tags",
                    "tags": ["Sales Team"],
                    "constraint": "less_than",
                    "value": 30,
                    "unit": "days",
                    "spaces": ["Desk 1"],
                    "explanation": "Sales Team can book up to 30 days ahead",
                },
                {
                    "user_scope": "all_users",
                    "constraint": "less_than",
                    "value": 3,
                    "unit": "days",
                    "spaces": ["Desk 1"],
                    "explanation": "Everyone else can book up to 3 days ahead",
                },
            ]
        }
    )


@pytest.fixture
def gemini_factory():
    return FakeGeminiClient


@pytest.fixture
def fake_gemini():
    return FakeGeminiClient()


@pytest.fixture
def db_session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    yield factory
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def client(db_session_factory, fake_gemini):
    def override_get_db():
        db = db_session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_gemini_client] = lambda: fake_gemini
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()

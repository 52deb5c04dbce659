"""Pytest configuration and fixtures for the consultation engine."""

from unittest.mock import MagicMock

import pytest

from sellspark.config import Settings
from sellspark.db.database import create_db_engine, create_session_factory, init_db
from sellspark.services.consultation_service import ConsultationService

from fakes import FakeCompletionClient, FakeKnowledgeService


@pytest.fixture
def settings():
    s = Settings()
    s.SIMULATION_TRIALS = 200
    s.SIMULATION_SEED = 42
    s.SIMULATION_WORKERS = 2
    s.COMPLETION_STEP_THRESHOLD = 6
    s.CATEGORY_COMPLETION_THRESHOLD = 9
    s.PERSONA_THRESHOLD = 7
    return s


@pytest.fixture
def session_factory():
    engine = create_db_engine("sqlite://")
    init_db(engine)
    yield create_session_factory(engine)
    engine.dispose()


@pytest.fixture
def completion_client():
    return FakeCompletionClient()


@pytest.fixture
def knowledge_service():
    return FakeKnowledgeService(snippets=["Coaches lose leads without follow-up."])


@pytest.fixture
def publisher():
    return MagicMock()


@pytest.fixture
def make_service(session_factory, knowledge_service, settings, publisher):
    def _make(client):
        return ConsultationService(
            session_factory=session_factory,
            completion_client=client,
            knowledge_service=knowledge_service,
            settings=settings,
            publisher=publisher,
        )
    return _make


@pytest.fixture
def service(make_service, completion_client):
    return make_service(completion_client)

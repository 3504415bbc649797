"""
Pytest configuration and shared fixtures for API tests.

Routes run against in-memory datasets and a fake generator via dependency overrides.
"""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from data_chat.api import dependencies
from data_chat.api.routes import datasets, questions, sessions
from data_chat.core.question_service import QuestionService
from data_chat.core.state_store import InMemorySessionStore


@pytest.fixture
def test_app():
    """Create FastAPI test app without lifespan."""
    app = FastAPI(title="Data Chat API (Test)")
    app.include_router(questions.router, prefix="/api", tags=["questions"])
    app.include_router(datasets.router, prefix="/api", tags=["datasets"])
    app.include_router(sessions.router, prefix="/api", tags=["sessions"])
    return app


@pytest.fixture
def registry(make_registry, survey_rows):
    """Registry with one populated and one empty dataset."""
    return make_registry({"h1_2025": survey_rows, "h2_2024": []})


@pytest.fixture
def question_service(registry, mock_generator):
    """Question service over the test registry."""
    return QuestionService(registry=registry, generator=mock_generator, session_store=InMemorySessionStore())


@pytest.fixture
def client(test_app, registry, question_service):
    """TestClient with registry, session store and service overridden."""
    test_app.dependency_overrides[dependencies.get_registry] = lambda: registry
    test_app.dependency_overrides[dependencies.get_session_store] = lambda: question_service.session_store
    test_app.dependency_overrides[dependencies.get_question_service] = lambda: question_service

    with TestClient(test_app) as test_client:
        yield test_client

    test_app.dependency_overrides.clear()

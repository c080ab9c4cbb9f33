# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Fixtures for in-process API tests.

The application runs with the in-memory learning store seeded with the
demo content, so no database is needed.
"""

from collections.abc import Callable, Iterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from apexlms.api import create_app
from apexlms.core.config import clear_settings_cache, get_settings
from apexlms.domains.auth.jwt import JWTManager

TEST_SECRET = "test-secret-key-for-testing-only"


@pytest.fixture
def test_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Configure the application for in-process testing."""
    monkeypatch.setenv("ENVIRONMENT", "development")
    monkeypatch.setenv("DEBUG", "true")
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    monkeypatch.setenv("STORAGE_BACKEND", "memory")
    monkeypatch.setenv("STORAGE_SEED_DEMO_DATA", "true")
    monkeypatch.setenv("JWT_SECRET_KEY", TEST_SECRET)
    monkeypatch.setenv("JWT_ALGORITHM", "HS256")
    clear_settings_cache()


@pytest.fixture
def app(test_environment: None) -> FastAPI:
    """Create the application under test."""
    return create_app()


@pytest.fixture
def client(app: FastAPI) -> Iterator[TestClient]:
    """Run the application lifespan around the test."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_headers(test_environment: None) -> Callable[..., dict[str, str]]:
    """Build Authorization headers for a user."""
    manager = JWTManager(get_settings().jwt)

    def _make(user_id: str = "learner-1", role: str = "LEARNER") -> dict[str, str]:
        token = manager.create_access_token(user_id=user_id, role=role)
        return {"Authorization": f"Bearer {token}"}

    return _make


@pytest.fixture
def make_token(test_environment: None) -> Callable[..., str]:
    """Mint a raw access token for a user."""
    manager = JWTManager(get_settings().jwt)

    def _make(user_id: str = "learner-1", role: str = "LEARNER", email: str | None = None) -> str:
        return manager.create_access_token(user_id=user_id, role=role, email=email)

    return _make


@pytest.fixture
def learner_headers(make_headers) -> dict[str, str]:
    return make_headers("learner-1", "LEARNER")


@pytest.fixture
def instructor_headers(make_headers) -> dict[str, str]:
    return make_headers("instructor-1", "INSTRUCTOR")

"""Pytest configuration and fixtures for Dreampost tests.

Test isolation strategy:
- Every test gets a fresh MemStorage (no shared state between tests)
- SQL tests run against a private in-memory SQLite database per test
- API tests inject a StubGenerator, so no provider call ever leaves the process
- Settings are built explicitly and never read from .env
"""

import sys
from collections.abc import Generator
from pathlib import Path

# Add repo root to sys.path for importing top-level packages (e.g., apps)
_repo_root = Path(__file__).parent.parent.parent
if str(_repo_root) not in sys.path:
    sys.path.insert(0, str(_repo_root))

import pytest
from fastapi.testclient import TestClient

from dreampost.app import add_request_id_middleware, create_app
from dreampost.config import Settings, clear_settings_cache
from dreampost.db.engine import create_db_engine
from dreampost.storage import MemStorage, SqlStorage
from tests.helpers import StubGenerator, make_settings


@pytest.fixture(autouse=True)
def _reset_settings_cache() -> Generator[None, None, None]:
    """Keep cached settings from leaking between tests."""
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def settings() -> Settings:
    """Test settings: no provider key, no database, integrity checks off."""
    return make_settings()


@pytest.fixture
def mem_storage() -> MemStorage:
    """Provide an empty in-memory store."""
    return MemStorage()


@pytest.fixture
def sql_storage() -> Generator[SqlStorage, None, None]:
    """Provide a SqlStorage over a private in-memory SQLite database."""
    storage = SqlStorage(create_db_engine("sqlite:///:memory:"))
    storage.create_schema()
    yield storage
    storage.close()


@pytest.fixture(params=["memory", "sql"])
def storage(request, mem_storage, sql_storage):
    """Run a test once against each store implementation."""
    if request.param == "memory":
        return mem_storage
    return sql_storage


@pytest.fixture
def stub_generator() -> StubGenerator:
    """Provide a generator that returns canned content."""
    return StubGenerator()


@pytest.fixture
def app(settings, mem_storage, stub_generator):
    """Provide an app wired to the in-memory store and the stub generator."""
    app = create_app(settings=settings, storage=mem_storage, generator=stub_generator)
    # Add request-id middleware LAST (so it runs FIRST, outermost)
    add_request_id_middleware(app, log_requests=False)
    return app


@pytest.fixture
def client(app) -> Generator[TestClient, None, None]:
    """Provide a FastAPI test client for the in-memory app."""
    with TestClient(app) as client:
        yield client

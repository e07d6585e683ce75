"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import sys
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (temporary SQLite database)")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        path = str(item.fspath)
        if "unit" in path:
            item.add_marker(pytest.mark.unit)
        elif "integration" in path:
            item.add_marker(pytest.mark.integration)
        elif "smoke" in path:
            item.add_marker(pytest.mark.smoke)


# ============================================================================
# Deterministic seams
# ============================================================================


class SequenceRandom:
    """Random source that replays a fixed list of draws (cycling)."""

    def __init__(self, *values: float):
        self.values = list(values) or [0.0]
        self.calls = 0

    def random(self) -> float:
        value = self.values[self.calls % len(self.values)]
        self.calls += 1
        return value


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2024, 1, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def first_pick():
    """Random source that always selects the first card of the walk."""
    return SequenceRandom(0.0)


@pytest.fixture
def make_rng():
    """Factory for SequenceRandom sources."""
    return SequenceRandom


# ============================================================================
# Database
# ============================================================================


@pytest.fixture
def session_factory(tmp_path):
    """Session factory bound to a fresh SQLite database."""
    from sqlalchemy.orm import sessionmaker

    from puplearn.db.database import create_db_engine, init_db

    engine = create_db_engine(f"sqlite:///{tmp_path / 'test.db'}")
    init_db(engine)
    yield sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)
    engine.dispose()


@pytest.fixture
def library(session_factory):
    from puplearn.library.library_service import LibraryService

    return LibraryService(user_email="learner@example.com", session_factory=session_factory)


@pytest.fixture
def capitals_set(library):
    """A study set with three capital-city cards."""
    study_set = library.create_study_set("Capitals", "European capitals")
    library.bulk_add_flashcards(
        study_set.id,
        [
            {"question": "Capital of France?", "answer": "Paris"},
            {"question": "Capital of Spain?", "answer": "Madrid"},
            {"question": "Capital of Italy?", "answer": "Rome"},
        ],
    )
    return library.get_study_set(study_set.id)

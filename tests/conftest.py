"""
Pytest configuration and fixtures.
"""

import os
import pytest

from core.screening.models import JobRequirements
from tests.mocks.screening_mocks import (
    FakeOracle,
    FakeRedis,
    InMemoryResultStore,
    StaticJobCatalog,
)


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "db: marks tests as requiring database (deselect with '-m \"not db\"')"
    )


@pytest.fixture
def requirements():
    return JobRequirements(
        job_post_id="job-1",
        title="Backend Engineer",
        description="Build and operate Python services on PostgreSQL and Redis",
        required_skills=["Python", "PostgreSQL", "Docker"],
        nice_to_have_skills=["Redis", "Kubernetes"],
        years_of_experience=3,
    )


@pytest.fixture
def store():
    return InMemoryResultStore()


@pytest.fixture
def catalog(requirements):
    return StaticJobCatalog([requirements])


@pytest.fixture
def oracle():
    return FakeOracle()


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def db_url(tmp_path):
    """External database from TEST_DATABASE_URL, else a fresh SQLite file."""
    external_url = os.environ.get("TEST_DATABASE_URL")
    if external_url:
        return external_url
    return f"sqlite:///{tmp_path / 'screening_test.db'}"

"""Shared test fixtures."""

import os
import time

import pytest

from db import InMemoryRuleRepository, SqlAlchemyRuleRepository, create_session_factory
from helpers import FIXED_NOW


@pytest.fixture
def database_url(tmp_path) -> str:
    return f"sqlite:///{tmp_path / 'automation.db'}"


@pytest.fixture
def session_factory(database_url):
    return create_session_factory(database_url)


@pytest.fixture
def sql_store(session_factory) -> SqlAlchemyRuleRepository:
    return SqlAlchemyRuleRepository(session_factory)


@pytest.fixture
def memory_store() -> InMemoryRuleRepository:
    return InMemoryRuleRepository()


@pytest.fixture
def fixed_now():
    return lambda: FIXED_NOW


@pytest.fixture
def local_tz():
    """Switch the process-local time zone for the duration of a test."""
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is not available on this platform")
    original = os.environ.get("TZ")

    def use(name: str) -> None:
        os.environ["TZ"] = name
        time.tzset()

    yield use

    if original is None:
        os.environ.pop("TZ", None)
    else:
        os.environ["TZ"] = original
    time.tzset()

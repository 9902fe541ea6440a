"""
Pytest configuration and shared fixtures.
"""

import itertools
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import pytest
import requests

from personenrich.database import init_database, get_session_factory, sqlite_url
from personenrich.logger import StructuredLogger, get_logger, reset_logger
from personenrich.lookups.common import LookupResult
from personenrich.person import Person
from personenrich.storage import PersonNotFoundError, PersonStore, StoreError

_BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)
_ticks = itertools.count(1)


def _next_timestamp() -> datetime:
    return _BASE_TIME + timedelta(seconds=next(_ticks))


@pytest.fixture(autouse=True)
def isolated_global_logger(tmp_path):
    """Keep the default logger quiet and out of the working directory."""
    reset_logger()
    get_logger(log_dir=tmp_path / "logs", enable_console=False)
    yield
    reset_logger()


@pytest.fixture
def quiet_logger(tmp_path) -> StructuredLogger:
    return StructuredLogger(
        name="test",
        level="DEBUG",
        log_dir=tmp_path / "test-logs",
        enable_console=False,
    )


@pytest.fixture
def database_url(tmp_path) -> str:
    url = sqlite_url(tmp_path / "people.db")
    init_database(url)
    return url


@pytest.fixture
def person_store(database_url, quiet_logger) -> PersonStore:
    return PersonStore(get_session_factory(database_url), logger=quiet_logger)


@pytest.fixture
def valid_person_data() -> Dict[str, Any]:
    """Valid person input."""
    return {
        "name": "Dmitriy",
        "surname": "Ushakov",
        "patronymic": "Vasilevich",
    }


@pytest.fixture
def maria() -> Person:
    return Person(id=uuid.uuid4(), name="Maria", surname="Rossi")


class FakeLookup:
    """Lookup capability double that records the names it was asked for."""

    def __init__(self, result: Optional[LookupResult] = None, error: Optional[Exception] = None):
        self.result = result
        self.error = error
        self.calls: List[str] = []

    def lookup_by_name(self, name: str) -> LookupResult:
        self.calls.append(name)
        if self.error is not None:
            raise self.error
        return self.result


class InMemoryStore:
    """Record store double counting reads and writes."""

    def __init__(self, *persons: Person, fail_get: bool = False, fail_update: bool = False):
        self.persons = {p.id: p for p in persons}
        self.fail_get = fail_get
        self.fail_update = fail_update
        self.reads = 0
        self.writes: List[Person] = []

    def get_by_id(self, person_id) -> Person:
        self.reads += 1
        if self.fail_get:
            raise StoreError("connection refused")
        if person_id not in self.persons:
            raise PersonNotFoundError(person_id)
        stored = self.persons[person_id]
        return Person(**vars(stored))

    def update(self, person: Person) -> Person:
        if self.fail_update:
            raise StoreError("disk full")
        if person.id not in self.persons:
            raise PersonNotFoundError(person.id)
        person.updated_at = _next_timestamp()
        self.persons[person.id] = Person(**vars(person))
        self.writes.append(Person(**vars(person)))
        return person


@pytest.fixture
def fake_lookup():
    """Factory for FakeLookup doubles."""
    return FakeLookup


@pytest.fixture
def in_memory_store():
    """Factory for InMemoryStore doubles."""
    return InMemoryStore


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None, text: Optional[str] = None):
        self.status_code = status_code
        self._payload = payload
        self._text = text

    def json(self):
        if self._text is not None:
            raise ValueError(f"Expecting value: {self._text!r}")
        return self._payload


class FakeSession:
    """Stands in for requests.Session; replays one response or raises."""

    def __init__(self, response: Optional[FakeResponse] = None, error: Optional[Exception] = None):
        self.response = response
        self.error = error
        self.requests: List[Dict[str, Any]] = []

    def get(self, url, params=None, timeout=None):
        self.requests.append({"url": url, "params": params, "timeout": timeout})
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def fake_session():
    """Factory: fake_session(payload) or fake_session(status_code=..., error=...)."""
    def _make(payload: Any = None, status_code: int = 200, text: Optional[str] = None,
              error: Optional[Exception] = None) -> FakeSession:
        return FakeSession(FakeResponse(status_code, payload, text), error=error)
    return _make


@pytest.fixture
def connection_error() -> Exception:
    return requests.exceptions.ConnectionError("Failed to establish a new connection")

from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from bolt_proxy.common.settings import Settings
from bolt_proxy.main import create_app


class FakeRecord:
    """Minimal stand-in for neo4j.Record: ordered keys plus get()."""

    def __init__(self, data: Dict[str, Any]):
        self._data = data

    def keys(self) -> List[str]:
        return list(self._data)

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)


class FakeResult:
    def __init__(self, records: List[FakeRecord]):
        self._records = records

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for record in self._records:
            yield record


class FakeSession:
    def __init__(self, driver: "FakeDriver", database: Optional[str]):
        self.driver = driver
        self.database = database
        self.calls = []
        self.close = AsyncMock(side_effect=driver.close_error)

    async def run(self, cypher: str, params: Dict[str, Any]):
        self.calls.append((cypher, params))
        if self.driver.run_error is not None:
            raise self.driver.run_error
        return FakeResult([FakeRecord(r) for r in self.driver.records])


class FakeDriver:
    """Records every session handed out; behaviour is set per test."""

    def __init__(self):
        self.records: List[Dict[str, Any]] = []
        self.run_error: Optional[BaseException] = None
        self.close_error: Optional[BaseException] = None
        self.sessions: List[FakeSession] = []
        self.verify_connectivity = AsyncMock(return_value=None)
        self.close = AsyncMock(return_value=None)

    def session(self, database: Optional[str] = None) -> FakeSession:
        session = FakeSession(self, database)
        self.sessions.append(session)
        return session


@pytest.fixture
def fake_driver():
    return FakeDriver()


@pytest.fixture
def settings():
    return Settings(
        NEO4J_URI="neo4j+s://abc123.databases.neo4j.io",
        NEO4J_PASSWORD="secret",
        NEO4J_DB="movies",
        ORIGIN_ALLOW_LIST="https://app.example.org, https://tool.example.org",
        MAX_BODY_BYTES=1024,
    )


@pytest.fixture
def app(settings, fake_driver):
    return create_app(settings, driver_factory=lambda _settings: fake_driver)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c

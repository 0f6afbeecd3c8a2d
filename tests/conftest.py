from contextlib import contextmanager
from datetime import datetime, timezone

import pytest

from fri.config import Settings
from fri.errors import PersistenceError
from fri.models import Report


class FakeStore:
    """In-memory stand-in for ReportStore."""

    def __init__(self):
        self.rows: dict[str, Report] = {}
        self.inserted = []
        self.updates = []
        self.fail_with: str | None = None

    def insert(self, report):
        if self.fail_with:
            raise PersistenceError(self.fail_with)
        now = datetime(2025, 11, 26, tzinfo=timezone.utc)
        stored = Report(
            **report.model_dump(),
            id=f"r{len(self.rows) + 1}",
            created_at=now,
            updated_at=now,
        )
        self.rows[stored.id] = stored
        self.inserted.append(report)
        return stored

    def update(self, report_id, fields):
        if self.fail_with:
            raise PersistenceError(self.fail_with)
        current = self.rows[report_id]
        self.updates.append((report_id, fields))
        stored = current.model_copy(
            update={**fields.column_values(), "updated_at": datetime(2025, 11, 27, tzinfo=timezone.utc)}
        )
        self.rows[report_id] = stored
        return stored

    def get(self, report_id):
        return self.rows.get(report_id)


class FakeCursor:
    def __init__(self, rows=None, error=None):
        self.rows = list(rows or [])
        self.error = error
        self.executed = []

    def execute(self, query, params=None):
        self.executed.append((query, params))
        if self.error is not None:
            raise self.error

    def fetchone(self):
        return self.rows[0] if self.rows else None

    def fetchall(self):
        return list(self.rows)


@pytest.fixture
def settings() -> Settings:
    return Settings(DATABASE_URL="postgresql://test@localhost/test")


@pytest.fixture
def fake_store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def cursor_factory():
    """Return (factory, cursor) where the factory yields the shared cursor."""

    def build(rows=None, error=None):
        cursor = FakeCursor(rows=rows, error=error)
        calls = []

        @contextmanager
        def factory(settings=None, row_factory=None):
            calls.append(row_factory)
            yield cursor

        factory.calls = calls
        return factory, cursor

    return build

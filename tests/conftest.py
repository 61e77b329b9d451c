import os
import copy
from collections import defaultdict
from datetime import datetime, timedelta, timezone
from uuid import uuid4

# Override env vars for testing (before the app reads its settings)
os.environ["SUPABASE_URL"] = "https://portal-test.supabase.co"
os.environ["SUPABASE_SERVICE_KEY"] = "test-service-role-key"
os.environ["JWT_SECRET_KEY"] = "test-jwt-secret-key-that-is-long-enough-1234"
os.environ["ADMIN_USERNAME"] = "admin"
os.environ["ADMIN_PASSWORD"] = "Sch00l@Portal"
os.environ["DEBUG"] = "false"
os.environ["ENVIRONMENT"] = "testing"
os.environ["TIMEZONE"] = "UTC"
os.environ["LOG_TO_FILE"] = "false"

import pytest
from fastapi.testclient import TestClient
from postgrest.exceptions import APIError

from main import app
from app.core.security import create_access_token
from app.core.supabase import get_db

ADMIN_PASSWORD = os.environ["ADMIN_PASSWORD"]


# ---------------------------------------------------------------------------
# In-memory stand-in for the Supabase (PostgREST) query builder
# ---------------------------------------------------------------------------

def _coerce(value):
    """Compare ISO timestamps as datetimes, everything else as-is."""
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return value
    return value


COMPARATORS = {
    "eq": lambda a, b: a == b,
    "neq": lambda a, b: a != b,
    "gt": lambda a, b: a > b,
    "gte": lambda a, b: a >= b,
    "lt": lambda a, b: a < b,
    "lte": lambda a, b: a <= b,
}


def _compare(column, op, value):
    def check(row):
        actual = row.get(column)
        if actual is None:
            return False
        return COMPARATORS[op](_coerce(actual), _coerce(value))
    return check


def _split_top_level(text):
    parts, depth, current = [], 0, ""
    for ch in text:
        if ch == "," and depth == 0:
            parts.append(current)
            current = ""
            continue
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
        current += ch
    parts.append(current)
    return parts


def _parse_condition(expr):
    for combinator, reducer in (("and(", all), ("or(", any)):
        if expr.startswith(combinator) and expr.endswith(")"):
            checks = [_parse_condition(part) for part in _split_top_level(expr[len(combinator):-1])]
            return lambda row, checks=checks, reducer=reducer: reducer(check(row) for check in checks)
    column, op, value = expr.split(".", 2)
    return _compare(column, op, value)


class FakeResponse:
    def __init__(self, data, count=None):
        self.data = data
        self.count = count


class FakeQuery:
    def __init__(self, db, table, operation, payload=None, count=None):
        self._db = db
        self._table = table
        self._operation = operation
        self._payload = payload
        self._count = count
        self._filters = []
        self._order = []
        self._range = None
        self._limit = None

    def select(self, *columns, count=None):
        self._count = count
        return self

    def eq(self, column, value):
        self._filters.append(_compare(column, "eq", value))
        return self

    def gte(self, column, value):
        self._filters.append(_compare(column, "gte", value))
        return self

    def lt(self, column, value):
        self._filters.append(_compare(column, "lt", value))
        return self

    def or_(self, filters):
        # PostgREST takes the bare list; the wrapping or() is implied
        self._filters.append(_parse_condition(f"or({filters})"))
        return self

    def order(self, column, desc=False):
        self._order.append((column, desc))
        return self

    def range(self, start, end):
        self._range = (start, end)
        return self

    def limit(self, size):
        self._limit = size
        return self

    def execute(self):
        rows = self._db.tables[self._table]
        matched = [row for row in rows if all(check(row) for check in self._filters)]

        if self._operation == "insert":
            row = self._db.new_row(self._payload)
            rows.append(row)
            return FakeResponse([copy.deepcopy(row)])

        if self._operation == "update":
            for row in matched:
                row.update(copy.deepcopy(self._payload))
                row["updated_at"] = self._db.tick()
            return FakeResponse(copy.deepcopy(matched))

        if self._operation == "delete":
            self._db.tables[self._table] = [row for row in rows if row not in matched]
            return FakeResponse(copy.deepcopy(matched))

        for column, desc in reversed(self._order):
            matched.sort(key=lambda row: _coerce(row.get(column)), reverse=desc)
        total = len(matched) if self._count else None
        if self._range is not None:
            # With an exact count PostgREST refuses offsets past the last row
            if self._count and self._range[0] > 0 and self._range[0] >= total:
                raise APIError({
                    "message": "Requested range not satisfiable",
                    "code": "PGRST103",
                    "hint": None,
                    "details": f"An offset of {self._range[0]} was requested, but there are only {total} rows.",
                })
            matched = matched[self._range[0]:self._range[1] + 1]
        if self._limit is not None:
            matched = matched[:self._limit]
        return FakeResponse(copy.deepcopy(matched), count=total)


class FakeTable:
    def __init__(self, db, name):
        self._db = db
        self._name = name

    def select(self, *columns, count=None):
        return FakeQuery(self._db, self._name, "select", count=count)

    def insert(self, payload):
        return FakeQuery(self._db, self._name, "insert", payload=payload)

    def update(self, payload):
        return FakeQuery(self._db, self._name, "update", payload=payload)

    def delete(self):
        return FakeQuery(self._db, self._name, "delete")


class FakeSupabase:
    """Just enough of ``supabase.Client`` for the portal endpoints."""

    def __init__(self):
        self.tables = defaultdict(list)
        self.calls = 0
        self._clock = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def table(self, name):
        self.calls += 1
        return FakeTable(self, name)

    def tick(self):
        # Each write is one second after the previous, so created_at order is insertion order
        self._clock += timedelta(seconds=1)
        return self._clock.isoformat()

    def new_row(self, payload):
        row = copy.deepcopy(payload)
        row.setdefault("id", str(uuid4()))
        row["created_at"] = row["updated_at"] = self.tick()
        return row

    def seed(self, table, **fields):
        row = self.new_row(fields)
        self.tables[table].append(row)
        return row


def news_row(**overrides):
    row = {
        "title": "Sports day",
        "content": "Sports day is on Friday.",
        "category": "general",
        "priority": "medium",
        "target_audience": ["all"],
        "attachments": [],
        "published_by": "Administrator",
        "is_active": True,
        "expiry_date": None,
        "notification_sent": False,
    }
    row.update(overrides)
    return row


def event_row(start, end=None, **overrides):
    row = {
        "title": "Event",
        "description": None,
        "type": "event",
        "start_date": start,
        "end_date": end,
        "all_day": True,
        "color": "#2196f3",
        "location": None,
        "target_audience": ["all"],
        "recurring": {"frequency": "none", "end_date": None},
        "created_by": "Administrator",
        "is_active": True,
    }
    row.update(overrides)
    return row


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def fake_db():
    return FakeSupabase()


@pytest.fixture
def client(fake_db):
    app.dependency_overrides[get_db] = lambda: fake_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {create_access_token('admin')}"}

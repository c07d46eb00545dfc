import itertools
from collections import defaultdict
from types import SimpleNamespace

import pytest

from app.services.db_service import db_service


class FakeResponse:
    def __init__(self, data):
        self.data = data


class FakeQuery:
    """Just enough of the postgrest builder API for the services under test."""

    def __init__(self, db, table):
        self.db = db
        self.table = table
        self.filters = []
        self.order_by = None
        self.row_limit = None
        self.action = "select"
        self.payload = None

    def select(self, *columns):
        self.action = "select"
        return self

    def insert(self, row):
        self.action = "insert"
        self.payload = row
        return self

    def update(self, values):
        self.action = "update"
        self.payload = values
        return self

    def eq(self, column, value):
        self.filters.append(lambda r: r.get(column) is not None and str(r.get(column)) == str(value))
        return self

    def neq(self, column, value):
        # SQL semantics: NULL <> x is not true
        self.filters.append(lambda r: r.get(column) is not None and str(r.get(column)) != str(value))
        return self

    def order(self, column, desc=False):
        self.order_by = (column, desc)
        return self

    def limit(self, n):
        self.row_limit = n
        return self

    def _matching(self):
        return [r for r in self.db.tables[self.table] if all(f(r) for f in self.filters)]

    async def execute(self):
        self.db.calls.append((self.table, self.action))
        error = self.db.errors.get((self.table, self.action))
        if error is not None:
            raise error

        if self.action == "insert":
            row = dict(self.payload)
            row.setdefault("id", next(self.db.ids))
            row.setdefault("created_at", self.db.stamp())
            self.db.tables[self.table].append(row)
            return FakeResponse([dict(row)])

        if self.action == "update":
            rows = self._matching()
            if self.db.update_mode == "blocked":
                return FakeResponse([])
            if self.db.update_mode == "ignored":
                return FakeResponse([{**r, **self.payload} for r in rows])
            for r in rows:
                r.update(self.payload)
            return FakeResponse([dict(r) for r in rows])

        rows = self._matching()
        if self.order_by:
            column, desc = self.order_by
            rows = sorted(rows, key=lambda r: str(r.get(column) or ""), reverse=desc)
        if self.row_limit is not None:
            rows = rows[: self.row_limit]
        return FakeResponse([dict(r) for r in rows])


class FakeAuth:
    def __init__(self):
        self.users = {}
        self.error = None

    async def get_user(self, jwt):
        if self.error is not None:
            raise self.error
        if jwt not in self.users:
            raise Exception("invalid JWT: unable to parse or verify signature")
        return SimpleNamespace(user=self.users[jwt])


class FakeSupabase:
    def __init__(self):
        self.tables = defaultdict(list)
        self.errors = {}
        self.calls = []
        self.update_mode = "normal"
        self.ids = itertools.count(1)
        self.ticks = itertools.count(1)
        self.auth = FakeAuth()

    def table(self, name):
        return FakeQuery(self, name)

    def stamp(self):
        tick = next(self.ticks)
        return f"2025-01-01T00:{tick // 60:02d}:{tick % 60:02d}+00:00"

    def seed(self, table, **row):
        row.setdefault("id", next(self.ids))
        row.setdefault("created_at", self.stamp())
        self.tables[table].append(row)
        return row

    def seed_booking(self, **row):
        defaults = {
            "facility_id": "1",
            "facility_name": "Box Cricket Arena",
            "user_id": "user-a",
            "user_email": "a@example.com",
            "date": "2025-03-10",
            "status": "pending",
            "total_price": 0,
        }
        return self.seed("bookings", **{**defaults, **row})

    def add_user(self, token, user_id, email=None, phone=None, metadata=None):
        self.auth.users[token] = SimpleNamespace(
            id=user_id, email=email, phone=phone or "", user_metadata=metadata or {}
        )


@pytest.fixture
def fake_db():
    fake = FakeSupabase()
    previous = db_service._client
    db_service._client = fake
    yield fake
    db_service._client = previous

import os

os.environ["SUPABASE_JWT_SECRET"] = "test-jwt-secret"
os.environ["SUPABASE_URL"] = "http://supabase.test"
os.environ["SUPABASE_SERVICE_ROLE_KEY"] = "service-role-key"
os.environ["REDIS_URL"] = ""
os.environ["TOMORROW_IO_API_KEY"] = ""
os.environ["UNSPLASH_ACCESS_KEY"] = ""
os.environ["MAPBOX_ACCESS_TOKEN"] = ""

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
import copy
import uuid

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from postgrest.exceptions import APIError
from supabase import AuthError

from gotrippin.core.supabase_config import get_supabase
from main import app

USER_ID = "5f0c7a4e-2d1b-4c3a-9e8f-1a2b3c4d5e6f"
OTHER_USER_ID = "9a8b7c6d-5e4f-4a3b-8c2d-1e0f9a8b7c6d"

UNIQUE_CONSTRAINTS = {
    "trips": [("share_code",)],
    "trip_locations": [("trip_id", "order_index")],
    "trip_members": [("trip_id", "user_id")],
    "profiles": [("id",)],
    "photos": [("unsplash_photo_id",)],
}

# (table, embedded table) -> (local column, remote column, cardinality)
RELATIONS = {
    ("activities", "trip_locations"): ("location_id", "id", "one"),
    ("trip_locations", "activities"): ("id", "location_id", "many"),
}


def split_columns(columns: str) -> list[str]:
    parts, depth, current = [], 0, ""
    for ch in columns:
        if ch == "," and depth == 0:
            parts.append(current.strip())
            current = ""
            continue
        depth += ch == "("
        depth -= ch == ")"
        current += ch
    if current.strip():
        parts.append(current.strip())
    return parts


class InvalidCredentials(AuthError):
    def __init__(self, message: str):
        Exception.__init__(self, message)
        self.message = message


class FakeQuery:
    """Just enough of the PostgREST request builder for the services under test."""

    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table_name = table
        self.op = "select"
        self.columns = "*"
        self.payload = None
        self.filters = []
        self.orders = []
        self.limit_n = None

    # operations

    def select(self, columns: str = "*"):
        self.op, self.columns = "select", columns
        return self

    def insert(self, payload):
        self.op, self.payload = "insert", payload
        return self

    def update(self, payload: dict):
        self.op, self.payload = "update", payload
        return self

    def delete(self):
        self.op = "delete"
        return self

    # filters

    def eq(self, column, value):
        self.filters.append(lambda r: r.get(column) is not None and str(r.get(column)) == str(value))
        return self

    def neq(self, column, value):
        self.filters.append(lambda r: r.get(column) is not None and str(r.get(column)) != str(value))
        return self

    def gt(self, column, value):
        self.filters.append(lambda r: r.get(column) is not None and r.get(column) > value)
        return self

    def in_(self, column, values):
        wanted = {str(v) for v in values}
        self.filters.append(lambda r: str(r.get(column)) in wanted)
        return self

    def is_(self, column, value):
        assert value == "null"
        self.filters.append(lambda r: r.get(column) is None)
        return self

    def order(self, column, desc=False, nullsfirst=False):
        self.orders.append((column, desc, nullsfirst))
        return self

    def limit(self, n):
        self.limit_n = n
        return self

    # execution

    @property
    def rows(self) -> list[dict]:
        return self.db.tables.setdefault(self.table_name, [])

    def matching(self) -> list[dict]:
        return [r for r in self.rows if all(f(r) for f in self.filters)]

    def check_unique(self, candidate: dict, ignore: dict | None = None):
        for columns in UNIQUE_CONSTRAINTS.get(self.table_name, []):
            if any(candidate.get(c) is None for c in columns):
                continue
            for row in self.rows:
                if row is ignore:
                    continue
                if all(str(row.get(c)) == str(candidate.get(c)) for c in columns):
                    raise APIError({
                        "code": "23505",
                        "message": f"duplicate key value violates unique constraint on {self.table_name}",
                        "details": None,
                        "hint": None,
                    })

    def project(self, row: dict) -> dict:
        out = {}
        for part in split_columns(self.columns):
            if part == "*":
                out.update(copy.deepcopy(row))
            elif "(" in part:
                name, sub = part.split("(", 1)
                name, sub = name.strip(), sub.rstrip(")")
                out[name] = self.embed(row, name, sub)
            else:
                out[part] = row.get(part)
        return out

    def embed(self, row: dict, relation: str, columns: str):
        local, remote, cardinality = RELATIONS[(self.table_name, relation)]
        sub = FakeQuery(self.db, relation).select(columns)
        related = [r for r in sub.rows if row.get(local) is not None and str(r.get(remote)) == str(row.get(local))]
        projected = [sub.project(r) for r in related]
        if cardinality == "one":
            return projected[0] if projected else None
        return projected

    def execute(self):
        self.db.calls.append((self.table_name, self.op))
        if self.db.fail_tables.get(self.table_name) == self.op:
            raise APIError({"code": "XX000", "message": "simulated failure", "details": None, "hint": None})

        if self.op == "insert":
            items = self.payload if isinstance(self.payload, list) else [self.payload]
            created = []
            for item in items:
                row = copy.deepcopy(item)
                row.setdefault("id", str(uuid.uuid4()))
                self.check_unique(row)
                self.rows.append(row)
                created.append(copy.deepcopy(row))
            return SimpleNamespace(data=created)

        if self.op == "update":
            updated = []
            for row in self.matching():
                self.check_unique({**row, **self.payload}, ignore=row)
                row.update(copy.deepcopy(self.payload))
                updated.append(copy.deepcopy(row))
            return SimpleNamespace(data=updated)

        if self.op == "delete":
            removed = self.matching()
            self.db.tables[self.table_name] = [r for r in self.rows if r not in removed]
            return SimpleNamespace(data=copy.deepcopy(removed))

        rows = self.matching()
        for column, desc, nullsfirst in reversed(self.orders):
            present = sorted((r for r in rows if r.get(column) is not None), key=lambda r: r[column], reverse=desc)
            missing = [r for r in rows if r.get(column) is None]
            rows = missing + present if nullsfirst else present + missing
        if self.limit_n is not None:
            rows = rows[:self.limit_n]
        return SimpleNamespace(data=[self.project(r) for r in rows])


class FakeAuth:

    def __init__(self):
        self.accounts = {}

    def add_account(self, email: str, password: str, user_id: str):
        self.accounts[email] = (password, user_id)

    def sign_in_with_password(self, credentials: dict):
        account = self.accounts.get(credentials["email"])
        if not account or account[0] != credentials["password"]:
            raise InvalidCredentials("Invalid login credentials")
        user = SimpleNamespace(id=account[1], email=credentials["email"], role="authenticated")
        return SimpleNamespace(session=SimpleNamespace(access_token=f"token-for-{account[1]}"), user=user)


class FakeSupabase:

    def __init__(self):
        self.tables: dict[str, list[dict]] = {}
        self.calls = []
        self.fail_tables = {}
        self.auth = FakeAuth()

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def seed(self, table: str, **row) -> dict:
        row.setdefault("id", str(uuid.uuid4()))
        self.tables.setdefault(table, []).append(row)
        return row

    def seed_trip(self, members=(USER_ID,), **fields) -> dict:
        trip = self.seed("trips", **{"title": "Trip", "share_code": "AbCd1234", "created_at": "2026-01-01T00:00:00+00:00", **fields})
        for member in members:
            self.seed("trip_members", trip_id=trip["id"], user_id=member)
        return trip


def make_token(user_id: str = USER_ID, email: str = "traveller@example.com", **claims) -> str:
    payload = {
        "sub": user_id,
        "email": email,
        "role": "authenticated",
        "aud": "authenticated",
        "exp": datetime.now(timezone.utc) + timedelta(hours=1),
        **claims,
    }
    return jwt.encode(payload, os.environ["SUPABASE_JWT_SECRET"], algorithm="HS256")


def auth_headers(user_id: str = USER_ID) -> dict:
    return {"Authorization": f"Bearer {make_token(user_id)}"}


@pytest.fixture
def db():
    return FakeSupabase()


@pytest.fixture
def client(db):
    app.dependency_overrides[get_supabase] = lambda: db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def headers():
    return auth_headers()

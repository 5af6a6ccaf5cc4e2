from __future__ import annotations

import os
import uuid
from typing import Any

import pytest
from fastapi.testclient import TestClient
from postgrest.exceptions import APIError


def pytest_configure() -> None:
    # Settings are read once at import time; fix them before the app is imported.
    os.environ["JWT_SECRET"] = "test-secret-key-that-is-long-enough-for-hs256"
    os.environ["ENVIRONMENT"] = "test"
    os.environ["RATE_LIMIT_ENABLED"] = "false"
    os.environ["BCRYPT_SALT_ROUNDS"] = "4"
    os.environ["RESUME_SIGNED_URL_EXPIRY"] = "600"
    os.environ["FRONTEND_URL"] = "http://localhost:4200"
    os.environ["S3_BUCKET_NAME"] = ""
    os.environ["SUPABASE_URL"] = "https://fake.supabase.co"
    os.environ["SUPABASE_SERVICE_ROLE_KEY"] = "service-role-key"


# Columns with a unique index, per table.
UNIQUE_COLUMNS = {
    "users": ("id", "email"),
    "profiles": ("id",),
    "used_reset_tokens": ("jti",),
}


class FakeResponse:
    def __init__(self, data: list[dict[str, Any]]) -> None:
        self.data = data


class FakeQuery:
    """Just enough of the postgrest query builder for the services under test."""

    def __init__(self, db: "FakeSupabase", table: str) -> None:
        self.db = db
        self.table = table
        self.op = "select"
        self.columns = "*"
        self.payload: dict[str, Any] | None = None
        self.on_conflict = ""
        self.filters: list[tuple[str, Any]] = []
        self.max_rows: int | None = None

    def select(self, columns: str = "*") -> "FakeQuery":
        self.op = "select"
        self.columns = columns
        return self

    def insert(self, payload: dict[str, Any]) -> "FakeQuery":
        self.op = "insert"
        self.payload = payload
        return self

    def update(self, payload: dict[str, Any]) -> "FakeQuery":
        self.op = "update"
        self.payload = payload
        return self

    def upsert(self, payload: dict[str, Any], on_conflict: str = "") -> "FakeQuery":
        self.op = "upsert"
        self.payload = payload
        self.on_conflict = on_conflict
        return self

    def eq(self, column: str, value: Any) -> "FakeQuery":
        self.filters.append((column, value))
        return self

    def limit(self, count: int) -> "FakeQuery":
        self.max_rows = count
        return self

    def _matches(self, row: dict[str, Any]) -> bool:
        return all(str(row.get(col)) == str(val) for col, val in self.filters)

    def _project(self, row: dict[str, Any]) -> dict[str, Any]:
        if self.columns.strip() == "*":
            return dict(row)
        names = [c.strip() for c in self.columns.split(",")]
        return {name: row.get(name) for name in names}

    def _check_unique(self, rows: list[dict[str, Any]], candidate: dict[str, Any]) -> None:
        for column in UNIQUE_COLUMNS.get(self.table, ()):
            if any(r.get(column) == candidate.get(column) for r in rows):
                raise APIError({
                    "message": f'duplicate key value violates unique constraint "{self.table}_{column}_key"',
                    "code": "23505",
                    "hint": None,
                    "details": None,
                })

    def execute(self) -> FakeResponse:
        if self.table in self.db.failing_tables:
            raise APIError({"message": "connection refused", "code": "08006", "hint": None, "details": None})
        rows = self.db.tables.setdefault(self.table, [])

        if self.op == "select":
            found = [self._project(r) for r in rows if self._matches(r)]
            if self.max_rows is not None:
                found = found[: self.max_rows]
            return FakeResponse(found)

        if self.op == "insert":
            row = dict(self.payload or {})
            if self.table == "users":
                row.setdefault("id", str(uuid.uuid4()))
            self._check_unique(rows, row)
            rows.append(row)
            return FakeResponse([dict(row)])

        if self.op == "update":
            updated = []
            for row in rows:
                if self._matches(row):
                    row.update(self.payload or {})
                    updated.append(dict(row))
            return FakeResponse(updated)

        if self.op == "upsert":
            key = self.on_conflict or "id"
            payload = dict(self.payload or {})
            for row in rows:
                if row.get(key) == payload.get(key):
                    row.update(payload)
                    return FakeResponse([dict(row)])
            rows.append(payload)
            return FakeResponse([dict(payload)])

        raise AssertionError(f"unsupported operation {self.op}")


class FakeBucket:
    def __init__(self, storage: "FakeStorage", name: str) -> None:
        self.storage = storage
        self.name = name

    def upload(self, path: str, file: bytes, file_options: dict[str, str] | None = None) -> dict[str, str]:
        self.storage.objects[(self.name, path)] = (file, dict(file_options or {}))
        return {"Key": f"{self.name}/{path}"}

    def remove(self, paths: list[str]) -> list[dict[str, str]]:
        for path in paths:
            self.storage.objects.pop((self.name, path), None)
        return [{"name": path} for path in paths]

    def get_public_url(self, path: str) -> str:
        return f"https://fake.supabase.co/storage/v1/object/public/{self.name}/{path}"

    def create_signed_url(self, path: str, expires_in: int) -> dict[str, str]:
        if (self.name, path) not in self.storage.objects:
            raise RuntimeError("Object not found")
        url = f"https://fake.supabase.co/storage/v1/object/sign/{self.name}/{path}?token=signed&expires_in={expires_in}"
        return {"signedURL": url, "signedUrl": url}


class FakeStorage:
    def __init__(self) -> None:
        self.objects: dict[tuple[str, str], tuple[bytes, dict[str, str]]] = {}

    def from_(self, bucket: str) -> FakeBucket:
        return FakeBucket(self, bucket)


class FakeSupabase:
    def __init__(self) -> None:
        self.tables: dict[str, list[dict[str, Any]]] = {}
        self.failing_tables: set[str] = set()
        self.storage = FakeStorage()

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)


@pytest.fixture()
def fake_supabase() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture()
def mailer() -> Any:
    from app.modules.auth.mailer import Mailer

    class RecordingMailer(Mailer):
        def __init__(self) -> None:
            super().__init__(host=None)
            self.sent: list[tuple[dict[str, Any], str]] = []

        def send_password_reset(self, user: dict[str, Any], reset_link: str) -> None:
            self.sent.append((user, reset_link))

    return RecordingMailer()


@pytest.fixture()
def client(fake_supabase: FakeSupabase, mailer: Any) -> Any:
    from app.database.supabase_client import get_supabase
    from app.main import app
    from app.modules.auth.routes import get_mailer

    app.dependency_overrides[get_supabase] = lambda: fake_supabase
    app.dependency_overrides[get_mailer] = lambda: mailer
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def registered_user(client: Any) -> dict[str, Any]:
    payload = {"name": "Ada Lovelace", "email": "ada@example.com", "password": "analytical-engine"}
    response = client.post("/api/auth/register", json=payload)
    assert response.status_code == 201
    body = response.json()
    return {**payload, "id": body["user"]["id"], "token": body["token"]}


@pytest.fixture()
def auth_headers(registered_user: dict[str, Any]) -> dict[str, str]:
    return {"Authorization": f"Bearer {registered_user['token']}"}

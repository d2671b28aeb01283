# =============================================================================
# tests/fake_supabase.py - In-Memory Supabase Client
# =============================================================================
# Implements the part of the supabase-py client the services use:
# - table().select/insert/update/upsert/delete with eq/neq/in_/like filters,
#   order, limit and count="exact"
# - Unique constraints that raise a PostgREST-style 23505 error
# - auth.admin.list_users / create_user / generate_link
# - storage.from_(bucket).move and storage.list_buckets
#
# Failures can be injected per (table, action) to exercise error paths.
# =============================================================================

import copy
import re
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Any
from uuid import uuid4

# Columns that must be unique together, per table. A constraint only applies
# when every column in it has a value (partial unique index semantics).
UNIQUE_CONSTRAINTS: dict[str, list[tuple[str, ...]]] = {
    "suppliers": [("email",)],
    "judges": [("email",)],
    "sauces": [("sauce_code",)],
    "judge_participations": [("email", "year")],
    "supplier_participations": [("email", "year")],
    "box_assignments": [("sauce_id",)],
    "bottle_scans": [("sauce_id", "bottle_number")],
    "judging_scores": [("sauce_id", "judge_id", "category_id")],
}

_EPOCH = datetime(2026, 3, 1, tzinfo=timezone.utc)


class FakePostgrestError(Exception):
    """Mimics postgrest.exceptions.APIError (has .code and .message)."""

    def __init__(self, message: str, code: str):
        super().__init__(message)
        self.message = message
        self.code = code


class FakeResponse:
    def __init__(self, data: list[dict[str, Any]], count: int | None = None):
        self.data = data
        self.count = count


class FakeQuery:
    """Chainable query against one table."""

    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table_name = table
        self.action = "select"
        self.payload: Any = None
        self.on_conflict: str | None = None
        self.count_mode: str | None = None
        self.filters: list = []
        self.order_by: tuple[str, bool] | None = None
        self.row_limit: int | None = None

    # -- actions ---------------------------------------------------------

    def select(self, columns: str = "*", count: str | None = None) -> "FakeQuery":
        self.action = "select"
        self.count_mode = count
        return self

    def insert(self, data: dict | list[dict]) -> "FakeQuery":
        self.action = "insert"
        self.payload = data
        return self

    def update(self, data: dict) -> "FakeQuery":
        self.action = "update"
        self.payload = data
        return self

    def upsert(self, data: dict | list[dict], on_conflict: str | None = None) -> "FakeQuery":
        self.action = "upsert"
        self.payload = data
        self.on_conflict = on_conflict
        return self

    def delete(self) -> "FakeQuery":
        self.action = "delete"
        return self

    # -- filters ---------------------------------------------------------

    def eq(self, column: str, value: Any) -> "FakeQuery":
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def neq(self, column: str, value: Any) -> "FakeQuery":
        self.filters.append(lambda row: row.get(column) != value)
        return self

    def in_(self, column: str, values: list[Any]) -> "FakeQuery":
        allowed = list(values)
        self.filters.append(lambda row: row.get(column) in allowed)
        return self

    def like(self, column: str, pattern: str) -> "FakeQuery":
        regex = re.compile("^" + ".*".join(re.escape(p) for p in pattern.split("%")) + "$")
        self.filters.append(lambda row: row.get(column) is not None and bool(regex.match(str(row[column]))))
        return self

    def order(self, column: str, desc: bool = False) -> "FakeQuery":
        self.order_by = (column, desc)
        return self

    def limit(self, count: int) -> "FakeQuery":
        self.row_limit = count
        return self

    # -- execution -------------------------------------------------------

    def _matches(self, row: dict[str, Any]) -> bool:
        return all(f(row) for f in self.filters)

    def execute(self) -> FakeResponse:
        self.db.calls.append((self.table_name, self.action))
        failure = self.db.failures.get((self.table_name, self.action))
        if failure:
            raise failure

        rows = self.db.tables.setdefault(self.table_name, [])

        if self.action == "select":
            matched = [row for row in rows if self._matches(row)]
            if self.order_by:
                column, desc = self.order_by
                matched.sort(key=lambda r: (r.get(column) is None, r.get(column) or ""), reverse=desc)
            total = len(matched)
            if self.row_limit is not None:
                matched = matched[:self.row_limit]
            return FakeResponse(
                copy.deepcopy(matched),
                count=total if self.count_mode else None,
            )

        if self.action == "insert":
            new_rows = self.payload if isinstance(self.payload, list) else [self.payload]
            prepared = [self.db.prepare_row(self.table_name, row) for row in new_rows]
            self.db.check_unique(self.table_name, prepared)
            rows.extend(prepared)
            return FakeResponse(copy.deepcopy(prepared))

        if self.action == "update":
            updated = []
            for row in rows:
                if self._matches(row):
                    candidate = {**row, **copy.deepcopy(self.payload)}
                    self.db.check_unique(self.table_name, [candidate], ignore=row)
                    row.update(copy.deepcopy(self.payload))
                    updated.append(copy.deepcopy(row))
            return FakeResponse(updated)

        if self.action == "upsert":
            return FakeResponse(self._upsert(rows))

        if self.action == "delete":
            removed = [row for row in rows if self._matches(row)]
            self.db.tables[self.table_name] = [row for row in rows if not self._matches(row)]
            return FakeResponse(copy.deepcopy(removed))

        raise AssertionError(f"Unsupported action {self.action}")

    def _upsert(self, rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
        keys = tuple(k.strip() for k in (self.on_conflict or "id").split(","))
        incoming = self.payload if isinstance(self.payload, list) else [self.payload]
        result = []

        for data in incoming:
            existing = next(
                (r for r in rows if all(r.get(k) == data.get(k) for k in keys)),
                None,
            )
            if existing is not None:
                existing.update(copy.deepcopy(data))
                result.append(copy.deepcopy(existing))
            else:
                row = self.db.prepare_row(self.table_name, data)
                self.db.check_unique(self.table_name, [row])
                rows.append(row)
                result.append(copy.deepcopy(row))

        return result


class FakeAuthAdmin:
    def __init__(self):
        self.users: list[SimpleNamespace] = []
        self.create_user_error: Exception | None = None
        self.generate_link_error: Exception | None = None
        self.links: list[dict[str, Any]] = []

    def list_users(self) -> list[SimpleNamespace]:
        return list(self.users)

    def create_user(self, attributes: dict[str, Any]) -> SimpleNamespace:
        if self.create_user_error:
            raise self.create_user_error
        user = SimpleNamespace(id=str(uuid4()), email=attributes["email"])
        self.users.append(user)
        return SimpleNamespace(user=user)

    def generate_link(self, params: dict[str, Any]) -> SimpleNamespace:
        if self.generate_link_error:
            raise self.generate_link_error
        self.links.append(params)
        link = f"https://test-project.supabase.co/auth/v1/verify?token=abc&email={params['email']}"
        return SimpleNamespace(properties=SimpleNamespace(action_link=link))


class FakeBucket:
    def __init__(self, storage: "FakeStorage", name: str):
        self.storage = storage
        self.name = name

    def move(self, source: str, destination: str) -> dict[str, str]:
        if self.storage.move_error:
            raise self.storage.move_error
        self.storage.moves.append((self.name, source, destination))
        return {"message": "Successfully moved"}


class FakeStorage:
    def __init__(self):
        self.moves: list[tuple[str, str, str]] = []
        self.move_error: Exception | None = None

    def from_(self, bucket: str) -> FakeBucket:
        return FakeBucket(self, bucket)

    def list_buckets(self) -> list[SimpleNamespace]:
        return [SimpleNamespace(name="sauce-media")]


class FakeSupabase:
    """
    In-memory stand-in for supabase.Client.

    Example:
        db = FakeSupabase()
        judge = db.seed("judges", email="a@b.com", type="admin")
        db.fail("sauces", "insert", RuntimeError("boom"))
    """

    def __init__(self):
        self.tables: dict[str, list[dict[str, Any]]] = {}
        self.failures: dict[tuple[str, str], Exception] = {}
        self.calls: list[tuple[str, str]] = []
        self.auth = SimpleNamespace(admin=FakeAuthAdmin())
        self.storage = FakeStorage()
        self._clock = 0

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    # -- helpers used by the fake itself ---------------------------------

    def prepare_row(self, table: str, data: dict[str, Any]) -> dict[str, Any]:
        row = copy.deepcopy(data)
        row.setdefault("id", str(uuid4()))
        self._clock += 1
        row.setdefault("created_at", (_EPOCH + timedelta(seconds=self._clock)).isoformat())
        return row

    def check_unique(
        self,
        table: str,
        new_rows: list[dict[str, Any]],
        ignore: dict[str, Any] | None = None,
    ) -> None:
        existing = [r for r in self.tables.get(table, []) if r is not ignore]
        seen: list[dict[str, Any]] = []

        for row in new_rows:
            for columns in UNIQUE_CONSTRAINTS.get(table, []):
                values = tuple(row.get(c) for c in columns)
                if any(v is None for v in values):
                    continue
                for other in existing + seen:
                    if tuple(other.get(c) for c in columns) == values:
                        raise FakePostgrestError(
                            f'duplicate key value violates unique constraint "{table}_{"_".join(columns)}_key"',
                            code="23505",
                        )
            seen.append(row)

    # -- helpers for tests -----------------------------------------------

    def seed(self, table: str, **values: Any) -> dict[str, Any]:
        """Insert a row directly and return it (with generated id)."""
        row = self.prepare_row(table, values)
        self.tables.setdefault(table, []).append(row)
        return row

    def rows(self, table: str, **filters: Any) -> list[dict[str, Any]]:
        """Rows of a table matching equality filters."""
        return [
            row for row in self.tables.get(table, [])
            if all(row.get(k) == v for k, v in filters.items())
        ]

    def get(self, table: str, row_id: str) -> dict[str, Any] | None:
        matches = self.rows(table, id=row_id)
        return matches[0] if matches else None

    def fail(self, table: str, action: str, error: Exception) -> None:
        """Make every execute() of (table, action) raise error."""
        self.failures[(table, action)] = error

    def writes(self) -> list[tuple[str, str]]:
        return [call for call in self.calls if call[1] != "select"]

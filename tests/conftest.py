import copy
import itertools
import uuid
from collections import Counter
from typing import Any, Dict, List, Optional
from unittest.mock import MagicMock

import pytest

from app.modules.boards.service import BoardService
from app.modules.deployments.service import DeploymentService
from app.modules.generation.llm_provider import LanguageModelProvider


class FakeResponse:
    def __init__(self, data):
        self.data = data


class FakeQuery:
    """Enough of the PostgREST builder chain for the services under test."""

    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table = table
        self.op = "select"
        self.payload: Optional[Dict[str, Any]] = None
        self.filters: List[tuple] = []
        self.order_key: Optional[str] = None
        self.order_desc = False
        self.limit_n: Optional[int] = None
        self.single = False

    def select(self, *columns):
        self.op = "select"
        return self

    def insert(self, payload):
        self.op = "insert"
        self.payload = payload
        return self

    def update(self, payload):
        self.op = "update"
        self.payload = payload
        return self

    def eq(self, column, value):
        self.filters.append((column, value))
        return self

    def order(self, column, desc=False):
        self.order_key = column
        self.order_desc = desc
        return self

    def limit(self, n):
        self.limit_n = n
        return self

    def maybe_single(self):
        self.single = True
        return self

    def execute(self):
        self.db.calls.append((self.table, self.op, list(self.filters), copy.deepcopy(self.payload)))
        if self.table in self.db.failing:
            raise Exception(f"{self.table} is unavailable")
        rows = self.db.tables.setdefault(self.table, [])
        matched = [r for r in rows if all(r.get(c) == v for c, v in self.filters)]

        if self.op == "insert":
            row = copy.deepcopy(self.payload)
            row.setdefault("id", str(uuid.uuid4()))
            row.setdefault("created_at", self.db.next_timestamp())
            rows.append(row)
            return FakeResponse([copy.deepcopy(row)])

        if self.op == "update":
            if self.db.empty_update_response:
                for row in matched:
                    row.update(copy.deepcopy(self.payload))
                return FakeResponse([])
            for row in matched:
                row.update(copy.deepcopy(self.payload))
            return FakeResponse([copy.deepcopy(r) for r in matched])

        if self.order_key:
            matched = sorted(matched, key=lambda r: r.get(self.order_key) or "", reverse=self.order_desc)
        if self.limit_n is not None:
            matched = matched[:self.limit_n]
        if self.single:
            return FakeResponse(copy.deepcopy(matched[0]) if matched else None)
        return FakeResponse([copy.deepcopy(r) for r in matched])


class FakeSupabase:
    def __init__(self):
        self.tables: Dict[str, List[Dict[str, Any]]] = {}
        self.calls: List[tuple] = []
        self.failing: set = set()
        self.empty_update_response = False
        self._clock = itertools.count(1)

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def next_timestamp(self) -> str:
        return f"2024-01-01T00:00:00.{next(self._clock):06d}+00:00"

    def writes_to(self, table: str) -> List[tuple]:
        return [c for c in self.calls if c[0] == table and c[1] in ("insert", "update")]


class StubProvider(LanguageModelProvider):
    def __init__(self, response=None, error: Optional[Exception] = None):
        self.response = response
        self.error = error
        self.prompts: List[str] = []

    def generate(self, prompt, response_schema):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return copy.deepcopy(self.response)


API = "https://api.github.test"
REPO = {
    "name": "todo-app",
    "full_name": "alice/todo-app",
    "html_url": "https://github.com/alice/todo-app",
    "clone_url": "https://github.com/alice/todo-app.git",
    "default_branch": "main",
}


def response(status=200, body=None):
    resp = MagicMock()
    resp.status_code = status
    resp.ok = status < 400
    resp.json.return_value = body if body is not None else {}
    resp.text = ""
    return resp


class FakeGitHub:
    """Routes session.request calls by (method, path suffix) and records them."""

    def __init__(self):
        self.session = MagicMock()
        self.session.request.side_effect = self.handle
        self.routes = {
            ("POST", "/user/repos"): [response(201, REPO)],
            ("GET", "/git/refs/heads/main"): [response(200, {"object": {"sha": "base-sha"}})],
            ("POST", "/git/trees"): [response(201, {"sha": "tree-sha"})],
            ("POST", "/git/commits"): [response(201, {"sha": "commit-sha"})],
            ("PATCH", "/git/refs/heads/main"): [response(200, {})],
            ("POST", "/git/refs"): [response(201, {})],
            ("DELETE", "/repos/alice/todo-app"): [response(204)],
        }
        self.calls = []

    def handle(self, method, url, headers=None, json=None, timeout=None):
        for (route_method, suffix), responses in self.routes.items():
            if method == route_method and url.endswith(suffix):
                self.calls.append((method, suffix, json))
                # the last queued response repeats
                return responses.pop(0) if len(responses) > 1 else responses[0]
        raise AssertionError(f"unexpected request {method} {url}")

    def count(self):
        return Counter((method, suffix) for method, suffix, _ in self.calls)

    def body(self, method, suffix):
        return next(json for m, s, json in self.calls if (m, s) == (method, suffix))


def seed_board(db: FakeSupabase, board_id: str = "B1", name: str = "Todo app", nodes=None, **related) -> None:
    db.tables.setdefault("boards", []).append({
        "id": board_id,
        "name": name,
        "description": related.pop("description", None),
        "nodes": nodes if nodes is not None else [],
    })
    for table, rows in related.items():
        for row in rows:
            db.tables.setdefault(table, []).append({"board_id": board_id, "created_at": db.next_timestamp(), **row})


@pytest.fixture
def fake_db() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def board_service(fake_db) -> BoardService:
    return BoardService(fake_db)


@pytest.fixture
def deployment_service(fake_db) -> DeploymentService:
    return DeploymentService(fake_db, log_retention=200)


@pytest.fixture
def todo_response() -> Dict[str, Any]:
    return {
        "entities": [{"name": "Task", "schema": {"type": "object", "properties": {"title": {"type": "string"}}}}],
        "pages": [{"name": "Home", "code": "```jsx\nexport default()=>null\n```"}],
    }


@pytest.fixture
def github() -> FakeGitHub:
    return FakeGitHub()

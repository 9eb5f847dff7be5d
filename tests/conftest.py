"""
Shared test fixtures.

Provides an in-memory Supabase stand-in, catalogs and the API client.
"""

import os
import sys
from pathlib import Path

# Make the backend packages importable
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

# Settings load at import time; tests never reach a real database
os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")

import pytest
from unittest.mock import patch
from typing import Generator

from config.catalog import Catalog, get_catalog

# ===================
# MOCK SUPABASE CLIENT
# ===================

INSERTED_ID = "test-uuid-123"


class MockSupabaseResponse:
    """What execute() returns: rows plus an optional exact count."""

    def __init__(self, data: list, count: int = None):
        self.data = data
        self.count = count if count is not None else len(data)


class MockSupabaseQuery:
    """
    Chainable query over a list of row dicts.

    eq/order/limit are applied on execute(); insert echoes rows back with
    INSERTED_ID, update returns matched rows merged with the payload.
    """

    def __init__(self, rows: list, count: int = None):
        self._rows = rows
        self._count = count
        self._action = "select"
        self._payload = None
        self._filters: list[tuple[str, object]] = []
        self._order = None
        self._limit = None

    def select(self, *args, **kwargs):
        self._action = "select"
        return self

    def insert(self, data):
        self._action = "insert"
        self._payload = [data] if isinstance(data, dict) else list(data)
        return self

    def update(self, data):
        self._action = "update"
        self._payload = data
        return self

    def delete(self):
        self._action = "delete"
        return self

    def eq(self, column, value):
        self._filters.append((column, value))
        return self

    def order(self, column, desc: bool = False, **kwargs):
        self._order = (column, desc)
        return self

    def limit(self, count):
        self._limit = count
        return self

    def execute(self) -> MockSupabaseResponse:
        if self._action == "insert":
            return MockSupabaseResponse([{"id": INSERTED_ID, **row} for row in self._payload])

        matched = [
            row for row in self._rows
            if all(str(row.get(column)) == str(value) for column, value in self._filters)
        ]

        if self._action == "update":
            return MockSupabaseResponse([{**row, **self._payload} for row in matched])
        if self._action == "delete":
            return MockSupabaseResponse(matched)

        if self._order:
            column, desc = self._order
            matched = sorted(matched, key=lambda row: str(row.get(column)), reverse=desc)
        count = self._count if self._count is not None else len(matched)
        if self._limit is not None:
            matched = matched[: self._limit]
        return MockSupabaseResponse(matched, count)


class MockSupabaseClient:
    """Mock Supabase client keyed by table name."""

    def __init__(self):
        self._tables = {}

    def set_table_data(self, table_name: str, data: list, count: int = None):
        """Configure rows (and optionally an exact count) for a table."""
        self._tables[table_name] = (data, count)

    def table(self, name: str) -> MockSupabaseQuery:
        data, count = self._tables.get(name, ([], None))
        return MockSupabaseQuery(list(data), count)


# ===================
# FIXTURES
# ===================

@pytest.fixture
def mock_supabase() -> MockSupabaseClient:
    """
    Empty mock client.

    Usage:
        def test_something(mock_db, mock_supabase):
            mock_supabase.set_table_data("scholarship_application", [
                ApplicationFactory.create(id="app-1"),
            ])
    """
    return MockSupabaseClient()


@pytest.fixture
def mock_db(mock_supabase) -> Generator:
    """Any ApplicationService created inside the test talks to mock_supabase."""
    with patch("services.application_service.get_supabase_client", return_value=mock_supabase):
        yield mock_supabase


@pytest.fixture
def catalog() -> Catalog:
    """The department catalog."""
    return get_catalog()


@pytest.fixture
def small_catalog() -> Catalog:
    """Two-scholarship catalog for focused tests."""
    return Catalog.from_dict(
        {
            "好读书奖学金": [
                ("好读书奖", "J3032030", 3000),
                ("好读书奖", "J3032080", 8000),
            ],
            "文体奖学金": [
                ("体育优秀奖", "J3052010"),
                ("文艺优秀奖", "J3052010"),
            ],
        },
        honors=["好读书奖", "体育优秀奖", "文艺优秀奖", "学业优秀奖"],
        class_names=["无61", "无62"],
    )


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def test_client():
    """FastAPI TestClient; lifespan (database probe) is not run."""
    from fastapi.testclient import TestClient
    from main import app

    return TestClient(app)

# tests/conftest.py

"""
Pytest configuration and shared fixtures for testing.
"""

from collections import defaultdict
from contextlib import ExitStack
from typing import Generator, List
from unittest.mock import MagicMock, Mock, patch

import pytest
from fastapi.testclient import TestClient

from main import create_app
from dependencies.auth import CurrentUser, get_current_user
from dependencies.tenant import get_company_context
from models.company import CompanyContext


COMPANY_ID = "company-1"
COMPANY_SLUG = "acme"

SUPABASE_IMPORT_SITES = [
    "core.tenant",
    "core.roles",
    "core.permissions",
    "core.inventory",
    "dependencies.auth",
    "routers.companies",
    "routers.auth",
    "routers.admin",
    "routers.warehouse_managers",
    "routers.categories",
    "routers.products",
    "routers.orders",
    "routers.payments",
    "routers.customer",
    "routers.suppliers",
    "routers.supplier_payments",
    "routers.leads",
    "routers.invoices",
    "routers.cart",
    "routers.purchase_invoices",
    "routers.warehouses",
]

QUERY_METHODS = (
    "select", "eq", "neq", "in_", "or_", "ilike", "like", "gt", "gte", "lt", "lte",
    "is_", "order", "range", "limit", "insert", "update", "delete", "upsert",
)


def result(data=None, count=None):
    return Mock(data=data, count=count)


def make_query(response):
    """A PostgREST-style builder: every chained call returns itself."""
    query = MagicMock()
    for name in QUERY_METHODS:
        getattr(query, name).return_value = query
    query.not_ = query
    if isinstance(response, Exception):
        query.execute.side_effect = response
    else:
        query.execute.return_value = response
    return query


class SupabaseStub:
    """
    Stand-in for the Supabase client.

    ``queue(table, data)`` appends one response for the next ``table(name)``
    call; the last queued response for a table is reused once the queue is
    drained. Every built query is kept in ``queries[table]`` for assertions.
    """

    def __init__(self):
        self._responses = defaultdict(list)
        self.queries = defaultdict(list)
        self.rpc_results = {}
        self.rpc_calls: List[tuple] = []
        self.auth = MagicMock()

    def queue(self, table: str, data=None, count=None, error: Exception = None):
        self._responses[table].append(error if error is not None else result(data, count))
        return self

    def table(self, name: str):
        pending = self._responses[name]
        if len(pending) > 1:
            response = pending.pop(0)
        elif pending:
            response = pending[0]
        else:
            response = result([])
        query = make_query(response)
        self.queries[name].append(query)
        return query

    def rpc(self, name: str, params: dict):
        self.rpc_calls.append((name, params))
        call = MagicMock()
        outcome = self.rpc_results.get(name, result([]))
        if isinstance(outcome, Exception):
            call.execute.side_effect = outcome
        else:
            call.execute.return_value = outcome
        return call


@pytest.fixture(scope="function")
def app():
    """Create a test FastAPI application instance."""
    return create_app()


@pytest.fixture(scope="function")
def client(app) -> Generator[TestClient, None, None]:
    """Create a test client for the FastAPI application."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def supabase() -> Generator[SupabaseStub, None, None]:
    """Patch get_supabase_client at every import site with one stub."""
    stub = SupabaseStub()
    with ExitStack() as stack:
        for module in SUPABASE_IMPORT_SITES:
            stack.enter_context(patch(f"{module}.get_supabase_client", return_value=stub))
        yield stub


@pytest.fixture
def company(app):
    """Resolve every request to the test company."""
    context = CompanyContext(company_id=COMPANY_ID, company_slug=COMPANY_SLUG)
    app.dependency_overrides[get_company_context] = lambda: context
    yield context
    app.dependency_overrides.pop(get_company_context, None)


def make_user(roles=None, user_id="test-user-id") -> CurrentUser:
    roles = roles or ["user"]
    return CurrentUser(
        id=user_id,
        email=f"{user_id}@example.com",
        role=roles[0],
        roles=roles,
        company_id=COMPANY_ID,
        company_slug=COMPANY_SLUG,
    )


@pytest.fixture
def login_as(app, company):
    """login_as(["sales"]) → CurrentUser injected for get_current_user."""
    def _login(roles=None, user_id="test-user-id") -> CurrentUser:
        user = make_user(roles, user_id)
        app.dependency_overrides[get_current_user] = lambda: user
        return user

    yield _login
    app.dependency_overrides.pop(get_current_user, None)


@pytest.fixture(autouse=True)
def reset_cache():
    """Reset cache and rate limits before each test."""
    from core.cache import cache_clear
    from core.rate_limiter import reset_rate_limits
    cache_clear()
    reset_rate_limits()
    yield
    cache_clear()
    reset_rate_limits()

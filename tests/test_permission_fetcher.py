# tests/test_permission_fetcher.py

"""
Tests for permission lookups and the async PermissionFetcher.
"""

import asyncio

import pytest

from core.cache import cache_get, make_key
from core.permissions import (
    PermissionFetcher,
    can_access,
    get_company_modules,
    get_user_accessible_modules,
    get_user_permissions,
)
from models.access import Permission
from tests.conftest import result


class FakeSource:
    def __init__(self, permissions=None, modules=None, company_modules=None, delay=0, fail=False):
        self.permissions = permissions or []
        self.modules = modules or []
        self.company = company_modules or []
        self.delay = delay
        self.fail = fail
        self.calls = []

    async def user_permissions(self, user_id, company_id):
        self.calls.append(("permissions", user_id, company_id))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise RuntimeError("rpc down")
        return self.permissions

    async def accessible_modules(self, user_id, company_id):
        self.calls.append(("modules", user_id, company_id))
        if self.fail:
            raise RuntimeError("rpc down")
        return self.modules

    async def company_modules(self, company_id):
        self.calls.append(("company", company_id))
        return self.company


SALES_READ = Permission(permission_code="sales.read", module="sales", action="read")


# -----------------------------------------------------
# Server-side RPC helpers
# -----------------------------------------------------
def test_user_permissions_are_cached(supabase):
    supabase.rpc_results["get_user_permissions"] = result([
        {"permission_code": "sales.read", "module": "sales", "action": "read"},
        {"permission_code": None},
    ])

    first = get_user_permissions("u-1", "c-1")
    second = get_user_permissions("u-1", "c-1")

    assert [p.permission_code for p in first] == ["sales.read"]
    assert second == first
    assert len(supabase.rpc_calls) == 1
    assert supabase.rpc_calls[0] == ("get_user_permissions", {"p_user_id": "u-1", "p_company_id": "c-1"})
    assert cache_get(make_key("permissions", "u-1", "c-1")) is not None


def test_permission_rpc_failure_is_fail_closed_and_not_cached(supabase):
    supabase.rpc_results["get_user_permissions"] = RuntimeError("boom")

    assert get_user_permissions("u-1", "c-1") == []
    assert cache_get(make_key("permissions", "u-1", "c-1")) is None


def test_missing_ids_skip_lookup(supabase):
    assert get_user_permissions(None, "c-1") == []
    assert get_user_accessible_modules("u-1", None) == []
    assert get_company_modules(None) == []
    assert supabase.rpc_calls == []


def test_company_modules_drop_disabled(supabase):
    supabase.rpc_results["get_company_modules"] = result([
        {"module_code": "sales", "is_enabled": True},
        {"module_code": "pos", "is_enabled": False},
        {"module_code": "inventory"},
    ])
    assert get_company_modules("c-1") == ["sales", "inventory"]


def test_can_access():
    assert can_access([SALES_READ], "sales.read")
    assert not can_access([SALES_READ], "sales.write")
    assert not can_access([], "sales.read")


# -----------------------------------------------------
# PermissionFetcher
# -----------------------------------------------------
async def test_load_runs_permissions_then_modules():
    source = FakeSource(permissions=[SALES_READ], modules=["sales"])
    snapshot = await PermissionFetcher(source).load("u-1", "c-1")

    assert snapshot.permission_codes == ["sales.read"]
    assert snapshot.modules == ["sales"]
    assert snapshot.loading is False
    assert [c[0] for c in source.calls] == ["permissions", "modules"]


async def test_load_without_ids_is_empty():
    source = FakeSource(permissions=[SALES_READ])
    snapshot = await PermissionFetcher(source).load(None, "c-1")

    assert snapshot.permissions == []
    assert source.calls == []


async def test_source_errors_yield_empty_lists():
    snapshot = await PermissionFetcher(FakeSource(fail=True)).load("u-1", "c-1")
    assert snapshot.permissions == []
    assert snapshot.modules == []


async def test_concurrent_loads_for_same_key_share_one_task():
    source = FakeSource(permissions=[SALES_READ], delay=0.05)
    fetcher = PermissionFetcher(source)

    first, second = await asyncio.gather(fetcher.load("u-1", "c-1"), fetcher.load("u-1", "c-1"))

    assert first.permission_codes == second.permission_codes == ["sales.read"]
    assert [c for c in source.calls if c[0] == "permissions"] == [("permissions", "u-1", "c-1")]
    assert not fetcher.is_loading("u-1", "c-1")


async def test_different_keys_load_independently():
    source = FakeSource(permissions=[SALES_READ], delay=0.02)
    fetcher = PermissionFetcher(source)

    await asyncio.gather(fetcher.load("u-1", "c-1"), fetcher.load("u-1", "c-2"))

    companies = sorted(c[2] for c in source.calls if c[0] == "permissions")
    assert companies == ["c-1", "c-2"]


async def test_cancel_stops_inflight_load():
    fetcher = PermissionFetcher(FakeSource(delay=1))

    waiter = asyncio.ensure_future(fetcher.load("u-1", "c-1"))
    await asyncio.sleep(0.01)
    assert fetcher.is_loading("u-1", "c-1")

    assert fetcher.cancel("u-1", "c-1") is True
    with pytest.raises(asyncio.CancelledError):
        await waiter
    assert fetcher.cancel("u-1", "c-1") is False


async def test_cancelling_one_waiter_keeps_shared_load():
    source = FakeSource(permissions=[SALES_READ], delay=0.05)
    fetcher = PermissionFetcher(source)

    impatient = asyncio.ensure_future(fetcher.load("u-1", "c-1"))
    patient = asyncio.ensure_future(fetcher.load("u-1", "c-1"))
    await asyncio.sleep(0.01)
    impatient.cancel()

    snapshot = await patient
    assert snapshot.permission_codes == ["sales.read"]


async def test_cancel_all():
    fetcher = PermissionFetcher(FakeSource(delay=1))
    tasks = [asyncio.ensure_future(fetcher.load("u-1", c)) for c in ("c-1", "c-2")]
    await asyncio.sleep(0.01)

    fetcher.cancel_all()

    for task in tasks:
        with pytest.raises(asyncio.CancelledError):
            await task
    assert not fetcher.is_loading("u-1", "c-1")


async def test_fetch_company_modules_requires_company():
    source = FakeSource(company_modules=["sales"])
    fetcher = PermissionFetcher(source)

    assert await fetcher.fetch_company_modules(None) == []
    assert await fetcher.fetch_company_modules("c-1") == ["sales"]

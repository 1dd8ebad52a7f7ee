"""Tests for ``datagate.access.security`` — secured filter composition."""

import pytest

from _support.fakes import StaticSecurity
from datagate.access.security import get_filter_secured
from datagate.core.enums import AccessMode
from datagate.core.errors import SecurityError
from datagate.core.filters import FALSE, eq, raw


@pytest.fixture
def security():
    return StaticSecurity({"customer": raw("idbranch = ?", 3)})


class TestGetFilterSecured:
    @pytest.mark.asyncio
    async def test_false_filter_skips_provider(self, security):
        result = await get_filter_secured(security, FALSE, True, "customer")
        assert result is FALSE
        assert security.calls == []

    @pytest.mark.asyncio
    async def test_ands_condition(self, security):
        result = await get_filter_secured(security, eq("city", "Rome"), True, "customer", "env")
        assert result.sql == "(city = ?) AND (idbranch = ?)"
        assert result.params == ("Rome", 3)
        assert security.calls == [("customer", AccessMode.SELECT, "env")]

    @pytest.mark.asyncio
    async def test_no_caller_filter(self, security):
        result = await get_filter_secured(security, None, True, "customer")
        assert result.sql == "idbranch = ?"

    @pytest.mark.asyncio
    async def test_table_without_condition(self, security):
        f = eq("id", 1)
        assert await get_filter_secured(security, f, True, "orders") is f

    @pytest.mark.asyncio
    async def test_apply_security_false(self, security):
        f = eq("id", 1)
        assert await get_filter_secured(security, f, False, "customer") is f
        assert security.calls == []

    @pytest.mark.asyncio
    async def test_no_security_configured(self):
        f = eq("id", 1)
        assert await get_filter_secured(None, f, True, "customer") is f

    @pytest.mark.asyncio
    async def test_condition_false_makes_result_false(self):
        security = StaticSecurity({"customer": FALSE})
        result = await get_filter_secured(security, eq("id", 1), True, "customer")
        assert result.is_false

    @pytest.mark.asyncio
    async def test_lookup_failure_wrapped(self):
        security = StaticSecurity(fail=KeyError("grants"))
        with pytest.raises(SecurityError) as exc_info:
            await get_filter_secured(security, None, True, "customer")
        assert exc_info.value.context.table_name == "customer"
        assert isinstance(exc_info.value.cause, KeyError)

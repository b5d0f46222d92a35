"""Tests for the connectivity probe."""

import httpx
import pytest

from dmrelay.diagnostics import ConnectivityProbe


class TestConnectivityProbe:
    @pytest.mark.asyncio
    async def test_all_tests_pass(self, backend_factory) -> None:
        transport, backend = backend_factory([200, (200, "ok"), 200])
        async with transport:
            report = await ConnectivityProbe(transport).run()
        assert [t.name for t in report.tests] == ["root_get", "raw_request", "origin_head"]
        assert report.backend_reachable
        assert report.summary == {"tests_run": 3, "successful_tests": 3, "backend_reachable": True}
        assert report.test("raw_request").body_length == 2

    @pytest.mark.asyncio
    async def test_targets_base_and_origin(self, backend_factory) -> None:
        transport, backend = backend_factory([200, 200, 200])
        async with transport:
            await ConnectivityProbe(transport).run()
        assert [(r.method, r.url.path) for r in backend.requests] == [
            ("GET", "/api"), ("GET", "/api"), ("HEAD", "/")]

    @pytest.mark.asyncio
    async def test_network_failures_never_raise(self, backend_factory) -> None:
        errors = [httpx.ConnectError("refused"), httpx.ConnectError("refused"), httpx.ReadTimeout("slow")]
        transport, _ = backend_factory(errors)
        async with transport:
            report = await ConnectivityProbe(transport).run()
        assert not report.backend_reachable
        assert report.successful_tests == 0
        assert all(t.error for t in report.tests)
        assert all(t.status_code is None for t in report.tests)

    @pytest.mark.asyncio
    async def test_raw_request_accepts_any_response(self, backend_factory) -> None:
        transport, _ = backend_factory([503, 503, 503])
        async with transport:
            report = await ConnectivityProbe(transport).run()
        assert report.test("root_get").success is False
        assert report.test("raw_request").success is True
        assert report.test("raw_request").status_code == 503
        assert report.test("origin_head").success is False
        assert report.backend_reachable

    @pytest.mark.asyncio
    async def test_to_dict_is_camel_case(self, backend_factory) -> None:
        transport, _ = backend_factory([200, 200, 404])
        async with transport:
            data = (await ConnectivityProbe(transport).run()).to_dict()
        assert data["baseUrl"] == "https://api.test/api"
        assert data["summary"] == {"testsRun": 3, "successfulTests": 2, "backendReachable": True}
        assert data["tests"][2]["statusCode"] == 404

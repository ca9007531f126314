"""Unit tests for sourced.core.readiness — address discovery, probing, browser."""

from __future__ import annotations

from unittest.mock import patch

import httpx
import pytest

from sourced.core.exceptions import (
    AddressNotFoundError,
    BrowserLaunchError,
    ComposeError,
    WorkdirNotFoundError,
)
from sourced.core.readiness import (
    find_address,
    normalize_address,
    open_browser,
    ui_url,
    wait_ready,
)

from tests.fakes import UI_PORT_ARGS, FakeComposeRunner

TICK = 0.01


# ---------------------------------------------------------------------------
# normalize_address
# ---------------------------------------------------------------------------


class TestNormalizeAddress:
    def test_bind_all_becomes_loopback(self) -> None:
        assert normalize_address("0.0.0.0:8088") == "127.0.0.1:8088"

    def test_other_host_unchanged(self) -> None:
        assert normalize_address("192.168.1.5:8088") == "192.168.1.5:8088"

    def test_ipv6_bind_all_becomes_loopback(self) -> None:
        assert normalize_address("[::]:8088") == "127.0.0.1:8088"
        assert normalize_address(":::8088") == "127.0.0.1:8088"

    def test_whitespace_stripped(self) -> None:
        assert normalize_address(" 0.0.0.0:32768\n") == "127.0.0.1:32768"

    def test_only_host_is_replaced(self) -> None:
        assert normalize_address("10.0.0.0:8088") == "10.0.0.0:8088"

    def test_ui_url(self) -> None:
        assert ui_url("0.0.0.0:8088") == "http://127.0.0.1:8088"
        assert ui_url("192.168.1.5:8088") == "http://192.168.1.5:8088"


# ---------------------------------------------------------------------------
# find_address
# ---------------------------------------------------------------------------


class TestFindAddress:
    @pytest.mark.asyncio
    async def test_returns_immediately_when_known(self) -> None:
        runner = FakeComposeRunner().on(*UI_PORT_ARGS, result="0.0.0.0:8088\n")
        assert await find_address(runner, "sourced-ui", 8088, TICK) == "0.0.0.0:8088"
        assert runner.count(*UI_PORT_ARGS) == 1

    @pytest.mark.asyncio
    async def test_retries_until_query_succeeds(self) -> None:
        runner = FakeComposeRunner().on(
            *UI_PORT_ARGS,
            result=[ComposeError("no container"), ComposeError("no container"), "0.0.0.0:8088"],
        )
        assert await find_address(runner, "sourced-ui", 8088, TICK) == "0.0.0.0:8088"
        assert runner.count(*UI_PORT_ARGS) == 3

    @pytest.mark.asyncio
    async def test_empty_output_is_an_error(self) -> None:
        runner = FakeComposeRunner().on(*UI_PORT_ARGS, result="\n")
        with pytest.raises(AddressNotFoundError, match="sourced-ui"):
            await find_address(runner, "sourced-ui", 8088, TICK)

    @pytest.mark.asyncio
    async def test_environment_error_propagates(self) -> None:
        runner = FakeComposeRunner().on(*UI_PORT_ARGS, result=WorkdirNotFoundError("gone"))
        with pytest.raises(WorkdirNotFoundError):
            await find_address(runner, "sourced-ui", 8088, TICK)


# ---------------------------------------------------------------------------
# wait_ready
# ---------------------------------------------------------------------------


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestWaitReady:
    @pytest.mark.asyncio
    async def test_ready_on_first_response(self) -> None:
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            return httpx.Response(200)

        async with _client(handler) as client:
            await wait_ready("http://127.0.0.1:8088", interval=TICK, client=client)
        assert seen == ["http://127.0.0.1:8088/"]

    @pytest.mark.asyncio
    async def test_error_status_counts_as_ready(self) -> None:
        async with _client(lambda request: httpx.Response(502)) as client:
            await wait_ready("http://127.0.0.1:8088", interval=TICK, client=client)

    @pytest.mark.asyncio
    async def test_retries_on_connection_errors(self) -> None:
        attempts = {"n": 0}

        def handler(request: httpx.Request) -> httpx.Response:
            attempts["n"] += 1
            if attempts["n"] < 3:
                raise httpx.ConnectError("connection refused", request=request)
            return httpx.Response(302, headers={"location": "/login"})

        async with _client(handler) as client:
            await wait_ready("http://127.0.0.1:8088", interval=TICK, client=client)
        assert attempts["n"] == 3

    @pytest.mark.asyncio
    async def test_retries_on_timeouts(self) -> None:
        attempts = {"n": 0}

        def handler(request: httpx.Request) -> httpx.Response:
            attempts["n"] += 1
            if attempts["n"] == 1:
                raise httpx.ReadTimeout("timed out", request=request)
            return httpx.Response(200)

        async with _client(handler) as client:
            await wait_ready("http://127.0.0.1:8088", interval=TICK, client=client)
        assert attempts["n"] == 2


# ---------------------------------------------------------------------------
# open_browser
# ---------------------------------------------------------------------------


class TestOpenBrowser:
    def test_opens_url(self) -> None:
        with patch("sourced.core.readiness.webbrowser.open", return_value=True) as mock_open:
            open_browser("http://127.0.0.1:8088")
        mock_open.assert_called_once_with("http://127.0.0.1:8088", new=2)

    def test_no_browser_available(self) -> None:
        with patch("sourced.core.readiness.webbrowser.open", return_value=False):
            with pytest.raises(BrowserLaunchError, match="could not open the browser"):
                open_browser("http://127.0.0.1:8088")

    def test_browser_error_is_wrapped(self) -> None:
        import webbrowser

        with patch(
            "sourced.core.readiness.webbrowser.open", side_effect=webbrowser.Error("no runnable")
        ):
            with pytest.raises(BrowserLaunchError) as info:
                open_browser("http://127.0.0.1:8088")
        assert isinstance(info.value.__cause__, webbrowser.Error)

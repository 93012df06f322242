"""Tests for the serve() lifecycle."""

import asyncio
from unittest.mock import AsyncMock, Mock, patch

import pytest

from pagelens.cli import serve
from pagelens.session.errors import EngineLaunchError


@pytest.mark.asyncio
class TestServe:

    async def test_launches_then_serves_and_closes(self, lens_config):
        session = Mock()
        session.launch = AsyncMock()
        session.close = AsyncMock()
        server = Mock()
        server.run_stdio_async = AsyncMock()

        with patch("pagelens.cli.BrowserSession", return_value=session), \
                patch("pagelens.cli.create_server", return_value=server) as create:
            await serve(lens_config)

        session.launch.assert_awaited_once()
        create.assert_called_once()
        assert create.call_args.args == (session,)
        server.run_stdio_async.assert_awaited_once()
        session.close.assert_awaited_once()

    async def test_cancellation_still_closes_session(self, lens_config):
        session = Mock()
        session.launch = AsyncMock()
        session.close = AsyncMock()
        server = Mock()
        server.run_stdio_async = AsyncMock(side_effect=asyncio.CancelledError)

        with patch("pagelens.cli.BrowserSession", return_value=session), \
                patch("pagelens.cli.create_server", return_value=server):
            await serve(lens_config)

        session.close.assert_awaited_once()

    async def test_fatal_relaunch_stops_server(self, lens_config):
        session = Mock()
        session.launch = AsyncMock()
        session.close = AsyncMock()
        server = Mock()
        error = EngineLaunchError("Failed to launch browser: no display")

        with patch("pagelens.cli.BrowserSession", return_value=session), \
                patch("pagelens.cli.create_server", return_value=server) as create:

            async def run_until_relaunch_fails():
                create.call_args.kwargs["on_fatal"](error)
                await asyncio.sleep(10)

            server.run_stdio_async = AsyncMock(side_effect=run_until_relaunch_fails)

            with pytest.raises(EngineLaunchError) as exc_info:
                await serve(lens_config)

        assert exc_info.value is error
        session.close.assert_awaited_once()

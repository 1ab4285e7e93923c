"""
Tests for the TUI device actions, run headless through Textual's test pilot.
"""

import asyncio
import threading
import time

from ftd_host.cli_protocol import CliProtocolError
from ftd_host.config import Config
from ftd_host.tui.tui import FtdHostApp


class FakeSession:
    """Session stand-in with scripted answers."""

    def __init__(self, join_error=None):
        self.join_error = join_error
        self.release = threading.Event()
        self.release.set()
        self.state_calls = 0
        self.stats = {"commands_tx": 0, "lines_rx": 0, "prompt_lines": 0, "protocol_errors": 0}

    def join_network(self, dataset):
        if self.join_error is not None:
            raise self.join_error

    def get_state(self):
        self.state_calls += 1
        self.release.wait(timeout=5)
        return "detached"

    def get_omr_address(self, dataset=None):
        return None

    def close(self):
        pass


def attach(app: FtdHostApp, session: FakeSession) -> None:
    app.session = session
    app.connected = True


class TestJoin:
    """Test the join action."""

    def test_failed_join_keeps_network(self):
        """A rejected join does not show the network as joined."""
        error = CliProtocolError("thread start", "Error: 13: InvalidState")

        async def run():
            app = FtdHostApp(Config())
            async with app.run_test() as pilot:
                attach(app, FakeSession(join_error=error))
                app.action_join()
                await app.workers.wait_for_complete()
                await pilot.pause()
                return app.status_panel.network

        assert asyncio.run(run()) == "-"

    def test_successful_join_shows_network(self):
        """The network name is shown once the join went through."""

        async def run():
            app = FtdHostApp(Config())
            async with app.run_test() as pilot:
                attach(app, FakeSession())
                app.action_join()
                await app.workers.wait_for_complete()
                await pilot.pause()
                return app.status_panel.network

        assert asyncio.run(run()) == Config().network.network_name


class TestStateRefresh:
    """Test the periodic role refresh."""

    def test_silent_device_does_not_block_app(self):
        """A refresh waiting on the device returns control to the app at once."""
        session = FakeSession()
        session.release.clear()

        async def run():
            app = FtdHostApp(Config())
            async with app.run_test() as pilot:
                attach(app, session)
                started = time.monotonic()
                app.update_state()
                elapsed = time.monotonic() - started
                deadline = time.monotonic() + 5
                while session.state_calls == 0 and time.monotonic() < deadline:
                    await asyncio.sleep(0.01)
                busy = app.session_lock.locked()

                session.release.set()
                await app.workers.wait_for_complete()
                await pilot.pause()
                return elapsed, busy, app.status_panel.state

        elapsed, busy, state = asyncio.run(run())

        assert elapsed < 1.0
        assert busy
        assert state == "detached"

    def test_tick_skipped_while_device_busy(self):
        """A refresh does not queue behind a command already on the device."""
        session = FakeSession()

        async def run():
            app = FtdHostApp(Config())
            async with app.run_test() as pilot:
                attach(app, session)
                with app.session_lock:
                    app.update_state()
                    await app.workers.wait_for_complete()
                await pilot.pause()
                return app.status_panel.state

        assert asyncio.run(run()) == "UNKNOWN"
        assert session.state_calls == 0

"""
Tests for the simulation and serial links.

The simulation test runs a small shell script that mimics ot-cli-ftd, so no
OpenThread build is needed.
"""

import os
import stat
import sys

import pytest

from ftd_host.cli_protocol import CliError, CliProtocolError
from ftd_host.commands import Session
from ftd_host.process_link import ProcessLink
from ftd_host.serial_link import SerialLink

FAKE_CLI = """#!/bin/sh
while read -r line; do
    echo "> $line"
    case "$line" in
        state) echo "leader"; echo "Done" ;;
        ipaddr) echo "fe80::1"; echo "fd00:1234::1"; echo "2001:db8::5"; echo "Done" ;;
        factoryreset) ;;
        "") ;;
        *) echo "Done" ;;
    esac
done
"""


@pytest.fixture
def fake_cli(tmp_path):
    path = tmp_path / "ot-cli-ftd"
    path.write_text(FAKE_CLI)
    path.chmod(path.stat().st_mode | stat.S_IXUSR)
    return str(path)


@pytest.mark.skipif(sys.platform == "win32", reason="needs /bin/sh")
class TestProcessLink:
    """Test sessions over a child process."""

    def test_state_round_trip(self, fake_cli):
        """Prompt echoes are dropped, state is returned."""
        with Session.open_simulation(1, binary=fake_cli) as session:
            assert session.get_state() == "leader"
            assert session.execute_command("ifconfig up") == []
            assert session.stats["prompt_lines"] == 2

    def test_factory_reset_then_command(self, fake_cli):
        """Padding lines after reset are consumed by the far end."""
        with Session.open_simulation(2, binary=fake_cli) as session:
            session.factory_reset()
            # Padding lines come back as bare prompt echoes
            assert session.get_state() == "leader"

    def test_close_stops_process(self, fake_cli):
        """close() terminates the child."""
        link = ProcessLink(3, binary=fake_cli)
        link.close()

        assert link.process.returncode is not None

    def test_close_after_exit_releases_pipes(self, tmp_path):
        """A child that already exited still gets both pipes closed."""
        path = tmp_path / "ot-cli-ftd"
        path.write_text("#!/bin/sh\nexit 0\n")
        path.chmod(path.stat().st_mode | stat.S_IXUSR)
        link = ProcessLink(4, binary=str(path))
        link.process.wait(timeout=5)

        link.close()

        assert link.process.stdin.closed
        assert link.process.stdout.closed
        assert link.process.returncode == 0

    def test_rejected_options_close_child(self, fake_cli, monkeypatch):
        """A session that cannot be built does not leave the child running."""
        links = []

        def spawn(*args, **kwargs):
            link = ProcessLink(*args, **kwargs)
            links.append(link)
            return link

        monkeypatch.setattr("ftd_host.commands.ProcessLink", spawn)

        with pytest.raises(ValueError, match="reset_padding_lines"):
            Session.open_simulation(5, binary=fake_cli, reset_padding_lines=10)

        assert len(links) == 1
        assert links[0].process.poll() is not None
        assert links[0].process.stdin.closed

    def test_invalid_node_id(self, fake_cli):
        """Node IDs start at 1."""
        with pytest.raises(ValueError):
            ProcessLink(0, binary=fake_cli)

    def test_missing_binary(self, tmp_path):
        """Launch failure is a CliError."""
        with pytest.raises(CliError, match="Failed to start"):
            ProcessLink(1, binary=os.fspath(tmp_path / "does-not-exist"))


class TestSerialLink:
    """Test sessions over a pyserial loopback port."""

    def test_loopback_round_trip(self):
        """Output queued on the port is read as the response."""
        with SerialLink("loop://") as link:
            link.writer.write(b"leader\r\nDone\r\n")
            session = Session(link.reader, link.writer)

            assert session.get_state() == "leader"

    def test_loopback_error_line(self):
        """Error lines surface as protocol errors."""
        with SerialLink("loop://") as link:
            link.writer.write(b"Error: 7: InvalidArgs\r\n")
            session = Session(link.reader, link.writer)

            with pytest.raises(CliProtocolError):
                session.execute_command("dataset set active 00")

    def test_rejected_options_close_port(self, monkeypatch):
        """open_serial closes the port when the session cannot be built."""
        links = []

        def open_port(*args, **kwargs):
            link = SerialLink(*args, **kwargs)
            links.append(link)
            return link

        monkeypatch.setattr("ftd_host.commands.SerialLink", open_port)

        with pytest.raises(ValueError, match="reset_padding_lines"):
            Session.open_serial("loop://", reset_padding_lines=10)

        assert len(links) == 1
        assert not links[0].serial.is_open

    def test_open_failure(self):
        """Unknown ports raise CliError."""
        with pytest.raises(CliError, match="Failed to open serial port"):
            SerialLink("/dev/ftd-host-no-such-port")

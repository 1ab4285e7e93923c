"""
Main TUI application using Textual.

Interactive console for one FTD: live role display, CLI traffic monitor, raw
command input and shortcuts for join/stop/reset and the network scenarios.
"""

import logging
import threading
from datetime import datetime
from pathlib import Path

from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container, Vertical
from textual.widgets import Footer, Header, Input

from ftd_host.cli_protocol import CliError, CliProtocolError
from ftd_host.commands import Session
from ftd_host.config import Config, load_config
from ftd_host.listener import VersionedListener
from ftd_host.tui.widgets import CommandMonitor, StatusPanel

logger = logging.getLogger(__name__)


class FtdHostApp(App):
    """
    FTD Host TUI application.
    """

    CSS = """
    Screen {
        layout: vertical;
    }

    #top_row {
        height: 1fr;
        layout: horizontal;
    }

    #left_panel {
        width: 2fr;
        border: solid magenta;
    }

    #right_panel {
        width: 1fr;
    }

    #command_input {
        dock: bottom;
        height: 3;
        border: solid $accent;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit", priority=True),
        Binding("c", "connect", "Connect", priority=True),
        Binding("d", "disconnect", "Disconnect", priority=True),
        Binding("j", "join", "Join", priority=True),
        Binding("x", "stop_radio", "Stop radio", priority=True),
        Binding("r", "factory_reset", "Reset", priority=True),
        Binding("s", "scenarios", "Scenarios", priority=True),
        Binding("slash", "focus_input", "Input", priority=True),
        Binding("escape", "unfocus_input", "Unfocus", show=False, priority=True),
    ]

    def __init__(self, config: Config) -> None:
        super().__init__()
        self.config = config
        self.session: Session | None = None
        self.connected = False
        self.monitor_listener: VersionedListener | None = None
        # One device exchange at a time across workers
        self.session_lock = threading.Lock()

        # Widgets
        self.status_panel = None
        self.command_monitor = None

    def compose(self) -> ComposeResult:
        """Create child widgets."""
        yield Header()

        with Container(id="top_row"):
            with Vertical(id="left_panel"):
                self.command_monitor = CommandMonitor(max_lines=20)
                yield self.command_monitor

            with Vertical(id="right_panel"):
                self.status_panel = StatusPanel()
                yield self.status_panel

        self.command_input = Input(
            placeholder="Press / to type a CLI command (e.g. 'ipaddr'), or use shortcuts: c d j x r s q",
            id="command_input",
        )
        yield self.command_input

        yield Footer()

    def on_mount(self) -> None:
        """Called when app starts."""
        self.title = "FTD Host - OpenThread CLI Console"
        self.sub_title = "Keys: c=connect d=disconnect j=join x=stop r=reset s=scenarios q=quit"
        self.set_interval(1.0, self.update_state)

    def _device_name(self) -> str:
        if self.config.session.transport == "serial":
            return f"{self.config.serial.port} @ {self.config.serial.baud}"
        return f"{self.config.simulation.binary} node {self.config.simulation.node_id}"

    def _require_session(self) -> bool:
        if not self.connected or not self.session:
            self.notify("Not connected", severity="error")
            return False
        return True

    def action_connect(self) -> None:
        """Open the configured device."""
        if self.connected:
            self.notify("Already connected", severity="warning")
            return

        try:
            logger.info(f"action_connect: opening {self._device_name()}")
            self.session = Session.from_config(self.config)
        except (CliError, ValueError) as e:
            logger.error(f"action_connect: connection failed - {e}", exc_info=True)
            self.notify(f"Connection failed: {e}", severity="error")
            return

        # Session I/O runs in workers, the monitor must be touched on the app thread
        self.monitor_listener = VersionedListener(
            "cli-monitor",
            register=self.session.add_observer,
            unregister=self.session.remove_observer,
            callback=lambda event: self.call_from_thread(self.command_monitor.add_line, event),
        )
        self.monitor_listener.start_listening()

        self.connected = True
        self.status_panel.update_status(connected=True, device=self._device_name())
        self.notify("Connected", severity="information")
        self.update_state()

    def action_disconnect(self) -> None:
        """Close the device."""
        if not self.connected:
            self.notify("Not connected", severity="warning")
            return

        if self.monitor_listener:
            self.monitor_listener.stop_listening()
            self.monitor_listener = None

        if self.session:
            self.session.close()
            self.session = None

        self.connected = False
        self.status_panel.update_status(connected=False, state="UNKNOWN", omr_address="-")
        self.notify("Disconnected", severity="information")

    def action_join(self) -> None:
        """Join the configured network."""
        if not self._require_session():
            return

        dataset = self.config.network.to_dataset()
        session = self.session
        self._run_guarded(
            "Join",
            lambda: session.join_network(dataset),
            on_success=lambda: self.status_panel.update_status(network=dataset.network_name),
        )

    def action_stop_radio(self) -> None:
        """Stop the Thread radio."""
        if self._require_session():
            self._run_guarded("Stop radio", self.session.stop_thread_radio)

    def action_factory_reset(self) -> None:
        """Factory reset the device."""
        if self._require_session():
            self._run_guarded("Factory reset", self.session.factory_reset)

    def action_scenarios(self) -> None:
        """Run all network scenarios."""
        if not self._require_session():
            return

        self.notify("Running network scenarios...", severity="information")
        self._run_scenarios(self.session)

    @work(thread=True, group="device")
    def _run_scenarios(self, session: Session) -> None:
        from ftd_host.scenarios.network import ScenarioResult, run_all_scenarios

        with self.session_lock:
            reports = run_all_scenarios(
                session, self.config.network.to_dataset(), self.config.session.wait_timeout_s
            )

        failed = [r for r in reports if r.result in (ScenarioResult.FAILED, ScenarioResult.ERROR)]
        for report in reports:
            for step in report.steps:
                status = "PASS" if step.passed else "FAIL"
                logger.info(f"  [{status}] {report.name} / {step.name}: {step.message}")

        if failed:
            self.call_from_thread(
                self.notify,
                f"{len(failed)}/{len(reports)} scenarios failed: " + ", ".join(r.name for r in failed),
                severity="error",
                timeout=15,
            )
        else:
            self.call_from_thread(
                self.notify, f"✓ All {len(reports)} scenarios passed", severity="information", timeout=15
            )

    def action_focus_input(self) -> None:
        """Focus the command input."""
        self.command_input.focus()

    def action_unfocus_input(self) -> None:
        """Unfocus the command input."""
        self.set_focus(None)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        """Send the typed line as a raw CLI command."""
        command = event.value.strip()
        self.command_input.value = ""
        if not command or not self._require_session():
            return

        # Output shows up in the monitor through the observer
        session = self.session
        self._run_guarded(command, lambda: session.execute_command(command))

    def _link_lost(self, session: Session, error: CliError) -> None:
        """Drop the session that failed, unless it was already replaced."""
        self.notify(f"Device lost: {error}", severity="error")
        if self.session is session:
            self.action_disconnect()

    @work(thread=True, group="device")
    def _run_guarded(self, label: str, operation, on_success=None) -> None:
        session = self.session
        try:
            with self.session_lock:
                operation()
        except CliProtocolError as e:
            self.call_from_thread(self.notify, f"{label}: {e.detail or e}", severity="error")
            return
        except CliError as e:
            logger.error(f"{label} failed: {e}", exc_info=True)
            self.call_from_thread(self._link_lost, session, e)
            return

        if on_success is not None:
            self.call_from_thread(on_success)
        self.call_from_thread(self.notify, f"{label}: Done", severity="information")

    @work(thread=True, group="refresh")
    def update_state(self) -> None:
        """Refresh the device role and OMR address."""
        session = self.session
        if not self.connected or session is None:
            return

        # Skip this tick while a command or an earlier refresh owns the device
        if not self.session_lock.acquire(blocking=False):
            return
        try:
            state = session.get_state()
            omr = None
            if state in ("leader", "router", "child"):
                omr = session.get_omr_address()
        except CliProtocolError as e:
            logger.warning(f"State refresh failed: {e}")
            return
        except CliError as e:
            logger.error(f"State refresh failed: {e}", exc_info=True)
            self.call_from_thread(self._link_lost, session, e)
            return
        finally:
            self.session_lock.release()

        self.call_from_thread(
            self.status_panel.update_status,
            state=state,
            omr_address=str(omr) if omr else "-",
            stats=session.stats,
        )


def main() -> None:
    """
    Launch TUI application.

    Entry point for ftd-tui command.
    """
    config = load_config()

    log_dir = Path(config.logging.log_dir).expanduser()
    log_dir.mkdir(parents=True, exist_ok=True)
    log_filename = log_dir / f"ftd_host_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"

    # File only: console output would corrupt the TUI
    logging.basicConfig(
        level=getattr(logging, config.logging.level.upper(), logging.INFO),
        format="%(asctime)s.%(msecs)03d [%(levelname)-8s] %(name)-20s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.FileHandler(log_filename)],
    )

    logger.info("=" * 80)
    logger.info("FTD Host TUI Starting")
    logger.info(f"Log file: {log_filename}")
    logger.info("=" * 80)

    try:
        app = FtdHostApp(config)
        app.run()
    except Exception as e:
        logger.critical(f"TUI crashed: {e}", exc_info=True)
        raise
    finally:
        logger.info("FTD Host TUI Exiting")


if __name__ == "__main__":
    main()

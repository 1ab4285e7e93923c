"""
High-level command API for FTD Host.

Provides the Session class, which drives one OpenThread CLI device through a
line-oriented command/response exchange. See
https://github.com/openthread/openthread/blob/main/src/cli/README.md for the
command set.
"""

import ipaddress
import logging
from typing import BinaryIO, Callable, Iterable, Optional, Union

from ftd_host.cli_protocol import (
    CliProtocolError,
    CliReadError,
    CliWriteError,
    LineKind,
    classify_line,
    decode_line,
    encode_command,
)
from ftd_host.config import Config
from ftd_host.dataset import ActiveOperationalDataset
from ftd_host.process_link import DEFAULT_BINARY, ProcessLink
from ftd_host.serial_link import DEFAULT_BAUD, SerialLink
from ftd_host.waiting import POLL_INTERVAL_S, wait_for

logger = logging.getLogger(__name__)

FACTORY_RESET_COMMAND = "factoryreset"
FACTORY_RESET_PADDING_LINES = 1000

# Observer signature: (direction, line) with direction "TX" or "RX".
CommandObserver = Callable[[tuple[str, str]], None]


class Session:
    """
    Command session bound to one Full Thread Device.

    Not thread-safe: each write/read round trip assumes exclusive use of the
    streams. Use one session per device and serialize callers externally.
    """

    def __init__(
        self,
        reader: BinaryIO,
        writer: BinaryIO,
        link: Optional[Union[ProcessLink, SerialLink]] = None,
        poll_interval_s: float = POLL_INTERVAL_S,
        reset_padding_lines: int = FACTORY_RESET_PADDING_LINES,
    ):
        """
        Initialize session.

        Args:
            reader: Byte stream with readline(), device output.
            writer: Byte stream with write()/flush(), device input.
            link: Link owning the streams, closed by close().
            poll_interval_s: Delay between state checks while waiting.
            reset_padding_lines: Blank lines written after factoryreset.
        """
        if reset_padding_lines < FACTORY_RESET_PADDING_LINES:
            raise ValueError(
                f"reset_padding_lines must be >= {FACTORY_RESET_PADDING_LINES}, got {reset_padding_lines}"
            )

        self.reader = reader
        self.writer = writer
        self.link = link
        self.poll_interval_s = poll_interval_s
        self.reset_padding_lines = reset_padding_lines
        self.active_dataset: Optional[ActiveOperationalDataset] = None
        self.observers: list[CommandObserver] = []

        # Statistics
        self.stats = {
            "commands_tx": 0,
            "lines_rx": 0,
            "prompt_lines": 0,
            "protocol_errors": 0,
        }

    @classmethod
    def open_simulation(
        cls,
        node_id: int,
        binary: str = DEFAULT_BINARY,
        **kwargs,
    ) -> "Session":
        """
        Launch a simulated FTD and open a session on it.

        Args:
            node_id: Simulation node ID.
            binary: Path of the ot-cli-ftd executable.
            **kwargs: Passed to the Session constructor.

        Returns:
            Opened Session instance.
        """
        link = ProcessLink(node_id, binary=binary)
        return cls._from_link(link, **kwargs)

    @classmethod
    def open_serial(cls, port: str, baud: int = DEFAULT_BAUD, **kwargs) -> "Session":
        """
        Open a session on a board attached to a serial port.

        Args:
            port: Serial device or pyserial URL.
            baud: Baud rate.
            **kwargs: Passed to the Session constructor.

        Returns:
            Opened Session instance.
        """
        link = SerialLink(port, baud)
        try:
            link.flush_input()
        except Exception:
            link.close()
            raise
        return cls._from_link(link, **kwargs)

    @classmethod
    def _from_link(cls, link: Union[ProcessLink, SerialLink], **kwargs) -> "Session":
        """Wrap a freshly opened link, closing it if the session cannot be built."""
        try:
            return cls(link.reader, link.writer, link=link, **kwargs)
        except Exception:
            link.close()
            raise

    @classmethod
    def from_config(cls, config: Config) -> "Session":
        """Open the link selected by the configuration."""
        options = {
            "poll_interval_s": config.session.poll_interval_s,
            "reset_padding_lines": config.session.factory_reset_padding_lines,
        }
        if config.session.transport == "serial":
            return cls.open_serial(config.serial.port, config.serial.baud, **options)
        return cls.open_simulation(
            config.simulation.node_id, binary=config.simulation.binary, **options
        )

    def close(self) -> None:
        """Close the owned link, if any. Streams passed in directly stay open."""
        if self.link is not None:
            self.link.close()

    def add_observer(self, observer: CommandObserver) -> None:
        """Receive ("TX", command) and ("RX", line) notifications."""
        self.observers.append(observer)

    def remove_observer(self, observer: CommandObserver) -> None:
        if observer in self.observers:
            self.observers.remove(observer)

    def _notify(self, direction: str, line: str) -> None:
        for observer in list(self.observers):
            observer((direction, line))

    def _write(self, command: str, data: bytes) -> None:
        """Write and flush, mapping channel failures to CliWriteError."""
        try:
            self.writer.write(data)
            self.writer.flush()
        except (OSError, ValueError) as e:
            raise CliWriteError(command) from e

    def _send_command(self, command: str) -> None:
        data = encode_command(command)
        self._write(command, data)
        self.stats["commands_tx"] += 1
        self._notify("TX", command)
        logger.debug(f"TX: {command}")

    def _read_line(self, command: str) -> Optional[str]:
        """Read one decoded line, or None at end of stream."""
        try:
            raw = self.reader.readline()
        except (OSError, ValueError) as e:
            raise CliReadError(command, f"read failed: {e}") from e

        if not raw:
            return None

        line = decode_line(raw)
        self.stats["lines_rx"] += 1
        self._notify("RX", line)
        logger.debug(f"RX: {line}")
        return line

    def _read_until_done(self, command: str) -> list[str]:
        """
        Read response lines until the Done sentinel.

        Args:
            command: Command being answered, for error messages.

        Returns:
            Content lines in arrival order, prompt echoes removed.

        Raises:
            CliProtocolError: On an "Error:" line.
            CliReadError: On end of stream before a terminator.
        """
        result: list[str] = []

        while True:
            line = self._read_line(command)
            if line is None:
                raise CliReadError(command, "truncated response")

            kind = classify_line(line)
            if kind is LineKind.DONE:
                return result
            if kind is LineKind.ERROR:
                self.stats["protocol_errors"] += 1
                logger.error(f"ot-cli-ftd reported an error for {command!r}: {line}")
                raise CliProtocolError(command, line)
            if kind is LineKind.PROMPT:
                self.stats["prompt_lines"] += 1
                continue
            result.append(line)

    def execute_command(self, command: str) -> list[str]:
        """
        Send a command and return its output lines.

        Args:
            command: Single-line CLI command.

        Returns:
            Content lines of the response (possibly empty).

        Raises:
            ValueError: If the command spans several lines.
            CliWriteError: If the command cannot be written.
            CliReadError: If the response cannot be read completely.
            CliProtocolError: If the device reports an error.
        """
        self._send_command(command)
        return self._read_until_done(command)

    def get_state(self) -> str:
        """
        Get the Thread device role.

        Returns:
            One of "disabled", "detached", "child", "router", "leader".

        Raises:
            CliProtocolError: If the response has no content line.
        """
        lines = self.execute_command("state")
        if not lines:
            self.stats["protocol_errors"] += 1
            raise CliProtocolError("state", message="empty response to state query")
        return lines[0]

    def join_network(self, dataset: ActiveOperationalDataset) -> None:
        """
        Join the Thread network described by the dataset.

        The dataset becomes the active dataset before any command is sent, so
        it stays available for address classification even if a step fails.
        A failing step stops the sequence; recovering is up to the caller
        (e.g. factory_reset()).

        Args:
            dataset: Active Operational Dataset of the network.
        """
        self.active_dataset = dataset
        self.execute_command(f"dataset set active {dataset.to_hex()}")
        self.execute_command("ifconfig up")
        self.execute_command("thread start")
        logger.info(f"Joining network {dataset.network_name!r}")

    def stop_thread_radio(self) -> None:
        """Stop the Thread network radio."""
        self.execute_command("thread stop")
        self.execute_command("ifconfig down")
        logger.info("Thread radio stopped")

    def get_unicast_addresses(self) -> list[str]:
        """List unicast addresses in the order the device reports them."""
        return self.execute_command("ipaddr")

    def get_omr_address(
        self, dataset: Optional[ActiveOperationalDataset] = None
    ) -> Optional[ipaddress.IPv6Address]:
        """
        Return an Off-Mesh-Routable address on this device, if any.

        Goes through the unicast addresses in device order and returns the
        first one that is neither link-local nor inside the active dataset's
        mesh-local prefix.

        Args:
            dataset: Dataset whose mesh-local prefix to use instead of the
                active dataset (for a device joined by someone else).

        Returns:
            First OMR address, or None if there is none or no dataset is
            known.

        Raises:
            CliProtocolError: If the device lists something that is not an
                IPv6 address.
        """
        if dataset is None:
            dataset = self.active_dataset
        if dataset is None:
            logger.warning("No active dataset, cannot classify mesh-local addresses")
            return None

        mesh_local_prefix = dataset.mesh_local_prefix
        addresses = self.get_unicast_addresses()

        for address in addresses:
            try:
                addr = ipaddress.IPv6Address(address.strip())
            except ValueError as e:
                raise CliProtocolError("ipaddr", address, f"invalid IPv6 address: {address!r}") from e

            if addr.is_link_local:
                continue
            if mesh_local_prefix is not None and addr in mesh_local_prefix:
                continue
            return addr

        return None

    def wait_for_state_any_of(self, states: Iterable[str], timeout_s: float) -> None:
        """
        Wait for the device to enter any of the given states.

        Args:
            states: Accepted states ("disabled", "detached", "child", "router",
                "leader").
            timeout_s: Time budget in seconds.

        Raises:
            WaitTimeoutError: If none of the states is reached in time.
        """
        wanted = set(states)
        wait_for(
            lambda: self.get_state() in wanted,
            timeout_s,
            poll_interval_s=self.poll_interval_s,
            description=f"state in {sorted(wanted)}",
        )

    def factory_reset(self) -> None:
        """
        Run "factoryreset" on the device.

        The device restarts instead of answering, so no response is read.
        Blank lines follow the command to fill the far end's input buffer
        and keep the next command from being truncated.
        """
        self._send_command(FACTORY_RESET_COMMAND)
        self._write(FACTORY_RESET_COMMAND, b"\n" * self.reset_padding_lines)
        logger.info("Factory reset issued")

    def __enter__(self) -> "Session":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.close()

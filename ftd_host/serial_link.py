"""
Serial link to a Thread board running the OpenThread CLI.

Provides the same reader/writer pair as the simulation link, backed by a
pyserial port. Any pyserial URL works as the port (e.g. 'socket://host:port',
'loop://').
"""

import logging
from typing import Optional

import serial

from ftd_host.cli_protocol import CliError

logger = logging.getLogger(__name__)

DEFAULT_BAUD = 115200


class SerialLink:
    """
    UART link to an FTD board.

    Reads block until a full line arrives; timeouts belong to the caller.
    """

    def __init__(self, port: str, baud: int = DEFAULT_BAUD, write_timeout: Optional[float] = None):
        """
        Open serial link.

        Args:
            port: Serial device or pyserial URL (e.g., '/dev/ttyACM0').
            baud: Baud rate (default 115200).
            write_timeout: Write timeout in seconds (None blocks).

        Raises:
            CliError: If the port cannot be opened.
        """
        self.port = port
        self.baud = baud

        try:
            self.serial = serial.serial_for_url(
                port,
                baudrate=baud,
                timeout=None,
                write_timeout=write_timeout,
                bytesize=serial.EIGHTBITS,
                parity=serial.PARITY_NONE,
                stopbits=serial.STOPBITS_ONE,
            )
        except serial.SerialException as e:
            raise CliError(f"Failed to open serial port {port}") from e

        logger.info(f"Serial link opened: {port} @ {baud} baud")

    @property
    def reader(self) -> serial.SerialBase:
        return self.serial

    @property
    def writer(self) -> serial.SerialBase:
        return self.serial

    def flush_input(self) -> None:
        """Discard anything already received."""
        self.serial.reset_input_buffer()

    def close(self) -> None:
        """Close serial port."""
        if self.serial.is_open:
            self.serial.close()
        logger.info("Serial link closed")

    def __enter__(self) -> "SerialLink":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.close()

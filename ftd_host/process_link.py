"""
Subprocess link to a simulated Full Thread Device.

Launches `ot-cli-ftd <node_id>` and exposes its stdin/stdout as the write and
read channels of a session.
"""

import logging
import subprocess
from typing import BinaryIO

from ftd_host.cli_protocol import CliError

logger = logging.getLogger(__name__)

DEFAULT_BINARY = "ot-cli-ftd"


class ProcessLink:
    """
    Simulated FTD running as a child process.

    The node ID selects the simulated radio; two live processes must not share
    one. Valid IDs start at 1 (upper bound is the simulation's network size).
    """

    def __init__(self, node_id: int, binary: str = DEFAULT_BINARY, terminate_timeout_s: float = 2.0):
        """
        Launch the simulation process.

        Args:
            node_id: Simulation node ID (>= 1).
            binary: Path of the ot-cli-ftd executable.
            terminate_timeout_s: Grace period before killing on close.

        Raises:
            ValueError: If node_id is out of range.
            CliError: If the process cannot be started.
        """
        if node_id < 1:
            raise ValueError(f"Node ID must be >= 1, got {node_id}")

        self.node_id = node_id
        self.binary = binary
        self.terminate_timeout_s = terminate_timeout_s

        try:
            self.process = subprocess.Popen(
                [binary, str(node_id)],
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
            )
        except OSError as e:
            raise CliError(f"Failed to start {binary} (id={node_id})") from e

        logger.info(f"Started {binary} node {node_id} (pid {self.process.pid})")

    @property
    def reader(self) -> BinaryIO:
        """Device output stream."""
        return self.process.stdout

    @property
    def writer(self) -> BinaryIO:
        """Device input stream."""
        return self.process.stdin

    def close(self) -> None:
        """Stop the process and release its pipes."""
        try:
            self.process.stdin.close()
        except OSError as e:
            logger.debug(f"Node {self.node_id} stdin already closed: {e}")

        if self.process.poll() is None:
            self.process.terminate()
            try:
                self.process.wait(timeout=self.terminate_timeout_s)
            except subprocess.TimeoutExpired:
                logger.warning(f"Node {self.node_id} did not exit, killing")
                self.process.kill()
                self.process.wait()

        self.process.stdout.close()
        logger.info(f"Node {self.node_id} closed (exit code {self.process.returncode})")

    def __enter__(self) -> "ProcessLink":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.close()

"""
OpenThread CLI line protocol.

A command is one line of text. The device answers with zero or more content
lines terminated by "Done" on success or by a line starting with "Error:".
Lines starting with "> " are prompt echoes and carry no content.
"""

from enum import Enum

DONE = "Done"
ERROR_PREFIX = "Error:"
PROMPT_PREFIX = "> "
LINE_TERMINATOR = "\n"
ENCODING = "utf-8"


class LineKind(Enum):
    """Classification of a single response line."""

    DONE = "done"
    ERROR = "error"
    PROMPT = "prompt"
    CONTENT = "content"


def classify_line(line: str) -> LineKind:
    """
    Classify a decoded response line.

    Args:
        line: Line without its trailing line terminator.

    Returns:
        Kind of the line.
    """
    if line == DONE:
        return LineKind.DONE
    if line.startswith(ERROR_PREFIX):
        return LineKind.ERROR
    if line.startswith(PROMPT_PREFIX):
        return LineKind.PROMPT
    return LineKind.CONTENT


def decode_line(raw: bytes) -> str:
    """Decode one raw line and strip its CR/LF terminator."""
    return raw.decode(ENCODING, errors="replace").rstrip("\r\n")


def encode_command(command: str) -> bytes:
    """
    Encode a command line for the write channel.

    Args:
        command: Command text, without line terminator.

    Returns:
        Encoded command followed by a newline.

    Raises:
        ValueError: If the command contains an embedded line break.
    """
    if "\n" in command or "\r" in command:
        raise ValueError(f"Command must be a single line: {command!r}")
    return (command + LINE_TERMINATOR).encode(ENCODING)


class CliError(Exception):
    """Base exception for recoverable CLI link errors."""

    pass


class CliWriteError(CliError):
    """The write channel rejected a command."""

    def __init__(self, command: str):
        self.command = command
        super().__init__(f"Failed to write the command {command!r} to ot-cli-ftd")


class CliReadError(CliError):
    """The read channel failed or ended before a terminator."""

    def __init__(self, command: str, reason: str = "truncated response"):
        self.command = command
        self.reason = reason
        super().__init__(f"Failed to read the ot-cli-ftd output of command {command!r}: {reason}")


class CliProtocolError(AssertionError):
    """
    The device reported an error or sent a structurally invalid response.

    Subclasses AssertionError rather than CliError: it signals a usage
    mistake, so handlers for transient link errors must not catch it.
    """

    def __init__(self, command: str, line: str | None = None, message: str | None = None):
        self.command = command
        self.line = line
        if message is None:
            message = f"ot-cli-ftd reported an error: {line}"
        super().__init__(f"{message} (command: {command!r})")

    @property
    def detail(self) -> str | None:
        """Full error line as reported by the device."""
        return self.line

"""
Bounded polling for device conditions.
"""

import logging
import time
from typing import Callable

logger = logging.getLogger(__name__)

# Worst-case overshoot past the deadline is one interval plus one check.
POLL_INTERVAL_S = 0.05


class WaitTimeoutError(TimeoutError):
    """Condition did not become true before the deadline."""

    def __init__(self, timeout_s: float, description: str = "condition"):
        self.timeout_s = timeout_s
        self.description = description
        super().__init__(f"Timed out after {timeout_s}s waiting for {description}")


def wait_for(
    condition: Callable[[], bool],
    timeout_s: float,
    poll_interval_s: float = POLL_INTERVAL_S,
    description: str = "condition",
) -> None:
    """
    Poll a condition until it holds or the timeout elapses.

    Args:
        condition: Callable evaluated on every check.
        timeout_s: Time budget in seconds.
        poll_interval_s: Delay between checks.
        description: Text used in the timeout message.

    Raises:
        WaitTimeoutError: If the condition is still false at the deadline.
        Exception: Anything raised by the condition itself, unchanged.
    """
    deadline = time.monotonic() + timeout_s
    checks = 0

    while True:
        checks += 1
        if condition():
            logger.debug(f"{description} satisfied after {checks} checks")
            return

        remaining = deadline - time.monotonic()
        if remaining <= 0:
            logger.debug(f"{description} still false after {checks} checks")
            raise WaitTimeoutError(timeout_s, description)

        time.sleep(min(poll_interval_s, remaining))

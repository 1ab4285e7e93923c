"""
Listener registration that ignores events from superseded receivers.

Each registration captures the generation number current when it was made.
Stopping bumps the shared generation, so any event that still reaches an old
receiver (already queued, or delivered by a source that has not finished
unregistering it) is dropped.
"""

import logging
import threading
from typing import Callable, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class _Generation:
    """Shared generation counter."""

    def __init__(self) -> None:
        self._value = 0
        self._lock = threading.Lock()

    def increment(self) -> int:
        with self._lock:
            self._value += 1
            return self._value

    def get(self) -> int:
        with self._lock:
            return self._value


class _Receiver(Generic[T]):
    """Receiver bound to one generation."""

    def __init__(self, tag: str, generation: _Generation, callback: Callable[[T], None]):
        self.tag = tag
        self.shared_generation = generation
        self.callback = callback
        self.generation = generation.increment()

    def __call__(self, event: T) -> None:
        current = self.shared_generation.get()
        if self.generation != current:
            logger.debug(f"{self.tag}: dropping event for generation {self.generation} (current {current})")
            return
        self.callback(event)


class VersionedListener(Generic[T]):
    """
    Forward events from a source to a callback while listening.

    Calls to start_listening() and stop_listening() must come from one thread.
    """

    def __init__(
        self,
        tag: str,
        register: Callable[[Callable[[T], None]], None],
        unregister: Callable[[Callable[[T], None]], None],
        callback: Callable[[T], None],
    ):
        """
        Args:
            tag: Name used in log messages.
            register: Attaches a receiver to the event source.
            unregister: Detaches a receiver from the event source.
            callback: Called with each event delivered to the current receiver.
        """
        self.tag = tag
        self._register = register
        self._unregister = unregister
        self._callback = callback
        self._generation = _Generation()
        self._receiver: Optional[_Receiver[T]] = None

    @property
    def is_listening(self) -> bool:
        return self._receiver is not None

    @property
    def generation(self) -> int:
        return self._generation.get()

    def start_listening(self) -> None:
        """Register a new receiver (no-op if already listening)."""
        logger.debug(f"{self.tag}: start listening")
        if self._receiver is not None:
            return

        self._receiver = _Receiver(self.tag, self._generation, self._callback)
        self._register(self._receiver)

    def stop_listening(self) -> None:
        """Invalidate and unregister the current receiver (no-op if idle)."""
        logger.debug(f"{self.tag}: stop listening")
        if self._receiver is None:
            return

        self._generation.increment()
        self._unregister(self._receiver)
        self._receiver = None

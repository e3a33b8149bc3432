"""Single-slot holder for errors raised on request-handling threads."""

from typing import Optional
import threading


class DeferredError:
    """
    Thread-safe single-slot error box.

    Handlers running on worker threads store their failures here so the test
    thread can raise them later. Only one error is kept: a second `put()`
    before the slot is consumed replaces the first.
    """

    def __init__(self):
        self._error: Optional[BaseException] = None
        self._lock = threading.Lock()

    def put(self, error: BaseException) -> None:
        """Store an error, replacing any error not yet consumed."""
        with self._lock:
            self._error = error

    def take(self) -> Optional[BaseException]:
        """Return the stored error and clear the slot."""
        with self._lock:
            error, self._error = self._error, None
            return error

    def peek(self) -> Optional[BaseException]:
        """Return the stored error without clearing it."""
        with self._lock:
            return self._error

    def raise_if_set(self) -> None:
        """Raise the stored error, if any, clearing the slot first."""
        error = self.take()
        if error is not None:
            raise error

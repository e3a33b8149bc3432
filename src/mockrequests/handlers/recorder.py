"""Per-route call bookkeeping."""

import threading


class CallRecorder:
    """
    Thread-safe call counter.

    `record()` is a fetch-and-increment: concurrent callers always receive
    distinct, sequential call indices.
    """

    def __init__(self, expected: int = 1):
        self.expected = expected
        self._called = 0
        self._lock = threading.Lock()

    def record(self) -> int:
        """Count one call and return its 0-based index."""
        with self._lock:
            index = self._called
            self._called += 1
            return index

    @property
    def called(self) -> int:
        return self._called

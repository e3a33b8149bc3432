"""
MockRequests - runs a mock HTTP server for the duration of a test.

The server binds a random port in a fixed test range, serves the given
handlers on a background thread and offers assertions over how they were
called.
"""

from __future__ import annotations

import errno
import logging
import random as _random_module
from contextlib import ExitStack
from typing import Any, Callable, Optional

import anyio
from anyio.from_thread import start_blocking_portal

from .deferred import DeferredError
from .errors import ConfigurationError, PortExhaustedError, RequestAssertionError
from .handlers.http_handler import HttpHandler
from .http.server import HttpServer


logger = logging.getLogger(__name__)

# Returns a number in [min_value, max_value), like random.randrange.
RandomNumber = Callable[[int, int], int]

PORT_IN_USE_ERRNOS = frozenset(
    code
    for code in (
        errno.EADDRINUSE,
        getattr(errno, "WSAEADDRINUSE", None),
        # Windows reports an exclusively bound port as an access error.
        getattr(errno, "WSAEACCES", None),
    )
    if code is not None
)

_random = _random_module.Random()


class MockRequests:
    """
    Mocks HTTP requests for a test.

    Use as a context manager::

        with MockRequests(HttpHandler("/custom/endpoint", "sample response")) as mock:
            httpx.get(mock.url + "custom/endpoint")
            mock.assert_all_called_once()

    Errors raised while handling requests are kept and re-raised on the
    calling thread by `assert_no_handler_exceptions()` or
    `assert_all_called_once()`.
    """
    port_range_start: int = 8100
    port_range_end: int = 8200
    host: str = "127.0.0.1"

    def __init__(
        self,
        *handlers: HttpHandler,
        random: Optional[RandomNumber] = None,
        host: Optional[str] = None,
        max_attempts: Optional[int] = None,
    ):
        if any(handler is None for handler in handlers):
            raise ConfigurationError("handlers must not be None")

        self._handlers: tuple[HttpHandler, ...] = tuple(handlers)
        self._random: RandomNumber = random or _random.randrange
        self._max_attempts = max_attempts
        self._errors = DeferredError()
        if host is not None:
            self.host = host

        # Ports found in use while looking for a free one, in order.
        self.rejected_ports: list[int] = []

        for handler in self._handlers:
            handler.subscribe(self._errors.put)

        self._stack = ExitStack()
        try:
            portal = self._stack.enter_context(start_blocking_portal())
            listener, self.port = portal.call(self._bind)
            server = HttpServer(listener, [(h.pattern, h) for h in self._handlers])
            self._stack.callback(portal.start_task_soon(server.serve).cancel)
        except BaseException:
            self.close()
            raise

        self.url = f"http://{self.host}:{self.port}/"
        logger.debug("mock server listening on %s", self.url)

    async def _bind(self) -> tuple[Any, int]:
        attempts = 0
        while True:
            port = self._random(self.port_range_start, self.port_range_end)
            attempts += 1
            try:
                listener = await anyio.create_tcp_listener(
                    local_host=self.host, local_port=port)
            except OSError as e:
                if e.errno not in PORT_IN_USE_ERRNOS:
                    raise
                logger.info("port %d in use (errno %s), retrying", port, e.errno)
                self.rejected_ports.append(port)
                if self._max_attempts is not None and attempts >= self._max_attempts:
                    raise PortExhaustedError(
                        attempts, f"no free port found after {attempts} attempt(s)") from e
                continue
            return listener, port

    @property
    def handlers(self) -> list[HttpHandler]:
        """A copy of the handlers passed to the constructor."""
        return list(self._handlers)

    def __getitem__(self, index: int) -> HttpHandler:
        return self._handlers[index]

    def __enter__(self) -> "MockRequests":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        """Stop the mock HTTP server."""
        for handler in self._handlers:
            handler.unsubscribe(self._errors.put)
        self._stack.close()

    def assert_no_handler_exceptions(self) -> None:
        """Raise the error kept from a failing handler, if any, and forget it."""
        self._errors.raise_if_set()

    def call_count_errors(self) -> list[RequestAssertionError]:
        """Return the call-count failure of every handler, in registration order."""
        return [e for e in (h.verify() for h in self._handlers) if e is not None]

    def assert_all_called_once(self) -> None:
        """
        Assert that every handler was called exactly as many times as it has responses.

        Handler errors take priority over call counts and are raised first.
        """
        self.assert_no_handler_exceptions()
        errors = self.call_count_errors()
        if errors:
            raise errors[0]

    def __repr__(self) -> str:
        return f"MockRequests(url={getattr(self, 'url', None)!r}, handlers={len(self._handlers)})"

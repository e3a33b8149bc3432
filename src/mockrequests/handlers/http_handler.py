"""A mocked route: URL pattern, canned responses and call bookkeeping."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

from typing_extensions import Self

from ..errors import (
    ConfigurationError,
    RequestAssertionError,
    RequestCalledTooFewError,
    RequestCalledTooOftenError,
    RequestNotCalledError,
)
from ..http.routing import RoutePattern
from ..http.server import Handler, HttpRequest, HttpResponse, Params
from .recorder import CallRecorder
from .sequenced import SequencedRequestHandler, as_handler
from .validate import ValidateRequestHandler


logger = logging.getLogger(__name__)

ErrorListener = Callable[[BaseException], None]

HANDLER_ERROR_PREFIX = "Exception in handler: "


class HttpHandler:
    """
    Mocks the requests made to one URL.

    With a single response (or none, meaning an empty body) every call gets the
    same answer and the route is expected to be called once. With several
    responses the Nth call gets the Nth one and the route is expected to be
    called exactly that many times.

    Responses may be strings, `ValidateRequestHandler` instances or any
    callable ``(request, response, params) -> str``.

    Calling the handler never raises. A failing response function is reported
    to every subscribed error listener and the error text is returned as the
    response body, prefixed with ``"Exception in handler: "``.
    """

    def __init__(self, url: str, *responses: "str | Handler", method: Optional[str] = None):
        if url is None:
            raise ConfigurationError("url must not be None")
        if not responses:
            responses = ("",)

        self.url = url
        self.pattern = RoutePattern(url, method)
        self._recorder = CallRecorder(expected=len(responses))
        if len(responses) == 1:
            self._handler = as_handler(responses[0])
        else:
            self._handler = SequencedRequestHandler(responses)

        self._listeners: list[ErrorListener] = []
        self._lock = threading.Lock()

    @classmethod
    def expecting(
        cls,
        url: str,
        expected_content: str,
        response: str,
        *,
        method: Optional[str] = None,
    ) -> Self:
        """Create a handler that validates the request content before answering."""
        return cls(url, ValidateRequestHandler(expected_content, response), method=method)

    @property
    def count(self) -> int:
        """Number of calls this route expects."""
        return self._recorder.expected

    @property
    def called(self) -> int:
        """Number of requests received so far."""
        return self._recorder.called

    @property
    def method(self) -> Optional[str]:
        return self.pattern.method

    def subscribe(self, listener: ErrorListener) -> None:
        """Call `listener` with every error raised while producing a response."""
        with self._lock:
            self._listeners.append(listener)

    def unsubscribe(self, listener: ErrorListener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def __call__(self, req: HttpRequest, rsp: HttpResponse, prm: Params) -> str:
        self._recorder.record()
        try:
            return self._handler(req, rsp, prm) or ""
        except Exception as e:
            logger.warning("handler for %s raised %r", self.url, e, exc_info=True)
            with self._lock:
                listeners = list(self._listeners)
            for listener in listeners:
                listener(e)
            rsp.status = 500
            return f"{HANDLER_ERROR_PREFIX}{e}"

    def verify(self) -> Optional[RequestAssertionError]:
        """Return the call-count failure for this route, or None if it was called as expected."""
        called, expected = self.called, self._recorder.expected
        if called == 0:
            return RequestNotCalledError(self.url, f"{self.url} was not called")
        if called > expected:
            return RequestCalledTooOftenError(
                self.url, expected, called,
                f"{self.url} was only expected to be called {expected} time(s). "
                f"Instead, was called {called} times")
        if called < expected:
            return RequestCalledTooFewError(
                self.url, expected, called,
                f"{self.url} was expected to be called {expected} time(s). "
                f"Instead, was called {called} times")
        return None

    def __repr__(self) -> str:
        return f"HttpHandler({self.url!r}, count={self.count}, called={self.called})"

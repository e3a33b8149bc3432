"""Handler that answers each successive call with a different handler."""

from __future__ import annotations

from typing import Sequence

from ..errors import ConfigurationError, NoMoreHandlersError
from ..http.server import Handler, HttpRequest, HttpResponse, Params
from .recorder import CallRecorder


def fixed_response(text: str) -> Handler:
    """Return a handler that always answers with `text`."""
    def handler(req: HttpRequest, rsp: HttpResponse, prm: Params) -> str:
        return text
    return handler


def as_handler(item: "str | Handler") -> Handler:
    """Turn a response string into a handler; callables pass through."""
    if isinstance(item, str):
        return fixed_response(item)
    if item is None or not callable(item):
        raise ConfigurationError(f"{item!r} is not a response string or handler")
    return item


class SequencedRequestHandler:
    """
    Iterates through a list of handlers, one per call.

    The Nth call goes to the Nth handler. Once every handler has been used,
    further calls raise `NoMoreHandlersError`; the sequence never wraps around.
    """

    def __init__(self, handlers: Sequence["str | Handler"]):
        if handlers is None:
            raise ConfigurationError("handlers must be provided")
        if len(handlers) == 0:
            raise ConfigurationError("at least one handler must be provided")

        self.handlers: list[Handler] = [as_handler(h) for h in handlers]
        self._cursor = CallRecorder(expected=len(self.handlers))

    def __len__(self) -> int:
        return self._cursor.expected

    def __call__(self, req: HttpRequest, rsp: HttpResponse, prm: Params) -> "str | None":
        index = self._cursor.record()
        try:
            handler = self.handlers[index]
        except IndexError as e:
            raise NoMoreHandlersError(
                "No more handlers are available for the request") from e
        return handler(req, rsp, prm)

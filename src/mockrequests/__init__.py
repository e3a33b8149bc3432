"""Mock HTTP requests in tests: canned responses, call counting and request validation."""

import logging

from .deferred import DeferredError
from .errors import (
    ConfigurationError,
    ContentMismatchError,
    MockRequestsError,
    NoMoreHandlersError,
    PortExhaustedError,
    RequestAssertionError,
    RequestCalledTooFewError,
    RequestCalledTooOftenError,
    RequestNotCalledError,
)
from .handlers import CallRecorder, HttpHandler, SequencedRequestHandler, ValidateRequestHandler
from .http import HttpRequest, HttpResponse, HttpServer, RoutePattern
from .mock_requests import MockRequests

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Server
    "MockRequests",
    "HttpServer",
    "HttpRequest",
    "HttpResponse",
    "RoutePattern",
    # Handlers
    "HttpHandler",
    "SequencedRequestHandler",
    "ValidateRequestHandler",
    "CallRecorder",
    "DeferredError",
    # Errors
    "MockRequestsError",
    "ConfigurationError",
    "PortExhaustedError",
    "RequestAssertionError",
    "RequestNotCalledError",
    "RequestCalledTooOftenError",
    "RequestCalledTooFewError",
    "NoMoreHandlersError",
    "ContentMismatchError",
]

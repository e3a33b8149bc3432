"""HTTP transport used to serve mocked routes.

This module provides a small HTTP/1.1 server implemented with AnyIO sockets.
Route handlers are plain callables run in worker threads.
"""

from .routing import RoutePattern
from .server import Handler, HttpRequest, HttpResponse, HttpServer

__all__ = [
    "Handler",
    "HttpRequest",
    "HttpResponse",
    "HttpServer",
    "RoutePattern",
]

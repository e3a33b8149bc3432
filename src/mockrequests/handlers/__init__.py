"""Request handlers for mocked routes."""

from .http_handler import HttpHandler
from .recorder import CallRecorder
from .sequenced import SequencedRequestHandler
from .validate import ValidateRequestHandler

__all__ = [
    "CallRecorder",
    "HttpHandler",
    "SequencedRequestHandler",
    "ValidateRequestHandler",
]

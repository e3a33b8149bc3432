"""Handler that checks the request body before answering."""

from __future__ import annotations

from ..errors import ContentMismatchError
from ..http.server import HttpRequest, HttpResponse, Params


class ValidateRequestHandler:
    """
    Validates that a request carries the expected content.

    Content is compared as equivalent strings, ignoring case. On a match the
    configured response is returned unchanged; otherwise `ContentMismatchError`
    is raised.
    """

    def __init__(self, expected_content: str, response: str):
        self.expected_content = expected_content
        self.response = response

    def __call__(self, req: HttpRequest, rsp: HttpResponse, prm: Params) -> str:
        content = req.content
        if content.casefold() != self.expected_content.casefold():
            raise ContentMismatchError(self.expected_content, content)
        return self.response

    def __repr__(self) -> str:
        return f"ValidateRequestHandler({self.expected_content!r}, {self.response!r})"

"""URL path patterns for mocked routes."""

from __future__ import annotations

import re
from typing import Optional
from urllib.parse import unquote

_PLACEHOLDER = re.compile(r"\{(\w+)\}")


def normalize_path(path: str) -> str:
    """Return `path` with exactly one leading slash and no trailing slash."""
    path = "/" + path.strip("/")
    return path


class RoutePattern:
    """
    A route path such as ``/users/{id}/posts``.

    Placeholders match a single path segment and are returned by `match()` as
    parameters. An optional method restricts which requests the route accepts.
    """

    def __init__(self, url: str, method: Optional[str] = None):
        self.url = url
        self.method = method.upper() if method else None
        self._regex = self._compile(normalize_path(url))

    @staticmethod
    def _compile(path: str) -> re.Pattern[str]:
        parts: list[str] = []
        last = 0
        for m in _PLACEHOLDER.finditer(path):
            parts.append(re.escape(path[last:m.start()]))
            parts.append(f"(?P<{m.group(1)}>[^/]+)")
            last = m.end()
        parts.append(re.escape(path[last:]))
        return re.compile("".join(parts))

    def match(self, path: str) -> Optional[dict[str, str]]:
        """Return the path parameters if `path` matches, otherwise None."""
        m = self._regex.fullmatch(normalize_path(path))
        if m is None:
            return None
        return {k: unquote(v) for k, v in m.groupdict().items()}

    def allows(self, method: str) -> bool:
        return self.method is None or self.method == method.upper()

    def __repr__(self) -> str:
        return f"RoutePattern({self.url!r}, method={self.method!r})"

"""Minimal HTTP/1.1 transport for mocked routes, built on AnyIO.

Features:
- HTTP/1.1 request line + headers parsing
- Optional Content-Length body (no chunked encoding)
- One request per connection (Connection: close)
- Query string and path placeholders parsed into a parameter mapping
- Each route handler runs in a worker thread, so handlers are plain sync callables
"""

from __future__ import annotations

import codecs
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Sequence
from urllib.parse import parse_qsl, urlsplit

import anyio
import anyio.to_thread
from anyio.abc import SocketStream

from .routing import RoutePattern


logger = logging.getLogger(__name__)

HeaderMap = dict[str, str]
Params = dict[str, str]
Handler = Callable[["HttpRequest", "HttpResponse", Params], "str | None"]


@dataclass(frozen=True, slots=True)
class HttpRequest:
    method: str
    path: str
    version: str
    headers: HeaderMap
    body: bytes
    query: Params = field(default_factory=dict)

    @property
    def charset(self) -> str:
        """The charset named by the content-type header; unknown or missing labels give UTF-8."""
        content_type = self.headers.get("content-type", "")
        for part in content_type.split(";")[1:]:
            key, _, value = part.strip().partition("=")
            if key.lower() == "charset" and value:
                value = value.strip('"')
                try:
                    codecs.lookup(value)
                except LookupError:
                    break
                return value
        return "utf-8"

    @property
    def content(self) -> str:
        """The request body decoded as text."""
        return self.body.decode(self.charset, errors="replace")


@dataclass(slots=True)
class HttpResponse:
    """Response under construction. Handlers may change `status` and `headers`."""

    status: int = 200
    headers: HeaderMap = field(default_factory=dict)
    body: bytes = b""

    @staticmethod
    def text(
        text: str,
        *,
        status: int = 200,
        headers: Mapping[str, str] | None = None,
        encoding: str = "utf-8",
    ) -> "HttpResponse":
        merged: dict[str, str] = {"content-type": f"text/plain; charset={encoding}"}
        if headers:
            merged.update({k.lower(): v for k, v in headers.items()})
        return HttpResponse(status=status, headers=merged, body=text.encode(encoding))


_STATUS_TEXT: dict[int, str] = {
    200: "OK",
    201: "Created",
    204: "No Content",
    400: "Bad Request",
    404: "Not Found",
    405: "Method Not Allowed",
    413: "Payload Too Large",
    500: "Internal Server Error",
}


def _status_line(status: int) -> str:
    text = _STATUS_TEXT.get(status, "OK")
    return f"HTTP/1.1 {status} {text}\r\n"


def _normalize_headers(headers: Mapping[str, str] | None) -> dict[str, str]:
    if not headers:
        return {}
    return {k.lower(): v for k, v in headers.items()}


async def _read_until(
    stream: SocketStream, marker: bytes, max_bytes: int
) -> tuple[bytes, bytes]:
    """Read through `marker`; returns the data up to it and any bytes read past it."""
    buf = bytearray()
    while True:
        if len(buf) > max_bytes:
            raise ValueError("request too large")
        idx = buf.find(marker)
        if idx != -1:
            return bytes(buf[: idx + len(marker)]), bytes(buf[idx + len(marker):])
        try:
            chunk = await stream.receive(4096)
        except anyio.EndOfStream:
            return bytes(buf), b""
        if not chunk:
            return bytes(buf), b""
        buf.extend(chunk)


def _parse_headers(block: bytes) -> tuple[str, str, str, HeaderMap]:
    # block contains request line + headers ending with \r\n\r\n
    head = block.decode("iso-8859-1")

    lines = head.split("\r\n")
    if not lines or not lines[0]:
        raise ValueError("missing request line")

    parts = lines[0].split(" ")
    if len(parts) != 3:
        raise ValueError("invalid request line")
    method, target, version = parts

    headers: HeaderMap = {}
    for line in lines[1:]:
        if line == "":
            break
        if ":" not in line:
            continue
        k, v = line.split(":", 1)
        headers[k.strip().lower()] = v.strip()
    return method, target, version, headers


def _split_target(target: str) -> tuple[str, Params]:
    parts = urlsplit(target)
    query = dict(parse_qsl(parts.query, keep_blank_values=True))
    return parts.path or "/", query


async def _read_exact(stream: SocketStream, n: int, initial: bytes = b"") -> bytes:
    buf = bytearray(initial)
    while len(buf) < n:
        try:
            chunk = await stream.receive(n - len(buf))
        except anyio.EndOfStream:
            break
        if not chunk:
            break
        buf.extend(chunk)
    return bytes(buf[:n])


async def _write_response(stream: SocketStream, response: HttpResponse) -> None:
    headers = _normalize_headers(response.headers)
    body = response.body or b""

    headers["content-length"] = str(len(body))
    headers.setdefault("connection", "close")

    start = _status_line(response.status).encode("ascii")
    head = b"".join(f"{k}: {v}\r\n".encode("latin-1") for k, v in headers.items())

    await stream.send(start + head + b"\r\n" + body)


class HttpServer:
    """
    Serves a fixed table of routes on an already bound listener.

    Routes are matched in registration order. A path that matches some route
    but none accepting the request method gets a 405; an unknown path gets a 404.
    """

    def __init__(
        self,
        listener: Any,
        routes: Sequence[tuple[RoutePattern, Handler]],
        *,
        max_header_bytes: int = 64 * 1024,
        max_body_bytes: int = 1 * 1024 * 1024,
    ):
        # anyio.create_tcp_listener() returns a MultiListener; kept loosely typed.
        self._listener = listener
        self._routes = list(routes)
        self._max_header_bytes = max_header_bytes
        self._max_body_bytes = max_body_bytes

    async def serve(self) -> None:
        """Serve connections until cancelled, then close the listener."""
        async with self._listener:
            await self._listener.serve(self._handle_client)

    async def _handle_client(self, stream: SocketStream) -> None:
        async with stream:
            try:
                header_block, rest = await _read_until(
                    stream, b"\r\n\r\n", self._max_header_bytes)
                if not header_block:
                    return

                method, target, version, headers = _parse_headers(header_block)
                content_length = int(headers.get("content-length", "0") or "0")
                if content_length < 0:
                    raise ValueError("invalid content-length")
                if content_length > self._max_body_bytes:
                    await _write_response(stream, HttpResponse.text("payload too large", status=413))
                    return

                body = b""
                if content_length:
                    body = await _read_exact(stream, content_length, rest)

                path, query = _split_target(target)
                req = HttpRequest(
                    method=method,
                    path=path,
                    version=version,
                    headers=headers,
                    body=body,
                    query=query,
                )
                resp = await self.dispatch(req)
                await _write_response(stream, resp)
            except ValueError as e:
                await _write_response(stream, HttpResponse.text(f"bad request: {e}", status=400))
            except Exception as e:
                logger.exception("unhandled error serving request")
                await _write_response(stream, HttpResponse.text(f"server error: {e!r}", status=500))

    async def dispatch(self, req: HttpRequest) -> HttpResponse:
        """Find the route for `req` and run its handler in a worker thread."""
        path_known = False
        for pattern, handler in self._routes:
            params = pattern.match(req.path)
            if params is None:
                continue
            path_known = True
            if not pattern.allows(req.method):
                continue

            response = HttpResponse()
            text = await anyio.to_thread.run_sync(handler, req, response, {**req.query, **params})
            response.body = (text or "").encode("utf-8")
            response.headers = _normalize_headers(response.headers)
            response.headers.setdefault("content-type", "text/plain; charset=utf-8")
            return response

        if path_known:
            logger.warning("method %s not allowed for %s", req.method, req.path)
            return HttpResponse.text("method not allowed", status=405)
        logger.warning("no mocked route for %s %s", req.method, req.path)
        return HttpResponse.text("not found", status=404)

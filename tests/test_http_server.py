"""Tests for the HTTP transport and route patterns."""

from __future__ import annotations

import anyio
import pytest
from anyio.abc import SocketAttribute

from mockrequests import HttpHandler, HttpRequest, HttpServer, RoutePattern


async def roundtrip(port: int, raw: bytes) -> bytes:
    async with await anyio.connect_tcp("127.0.0.1", port) as stream:
        await stream.send(raw)
        chunks = []
        while True:
            try:
                chunks.append(await stream.receive())
            except anyio.EndOfStream:
                break
    return b"".join(chunks)


def get(path: str) -> HttpRequest:
    return HttpRequest(method="GET", path=path, version="HTTP/1.1", headers={}, body=b"")


class TestRoutePattern:

    def test_literal_match(self):
        pattern = RoutePattern("/custom/endpoint")
        assert pattern.match("/custom/endpoint") == {}
        assert pattern.match("/custom/endpoint/") == {}
        assert pattern.match("/custom") is None

    def test_root_matches_empty_path(self):
        assert RoutePattern("/").match("") == {}
        assert RoutePattern("").match("/") == {}

    def test_placeholders(self):
        pattern = RoutePattern("/users/{id}/posts/{post}")
        assert pattern.match("/users/7/posts/hello%20world") == {"id": "7", "post": "hello world"}
        assert pattern.match("/users/7/posts") is None

    def test_special_characters_are_literal(self):
        assert RoutePattern("/a.b").match("/axb") is None

    def test_method(self):
        assert RoutePattern("/x").allows("DELETE")
        pattern = RoutePattern("/x", method="post")
        assert pattern.allows("POST")
        assert not pattern.allows("GET")


@pytest.mark.anyio
async def test_dispatch_merges_query_and_path_params():
    handler = HttpHandler("/items/{id}", lambda req, rsp, prm: f"{prm['id']}:{prm['sort']}")
    server = HttpServer(None, [(handler.pattern, handler)])

    request = HttpRequest(method="GET", path="/items/3", version="HTTP/1.1",
                          headers={}, body=b"", query={"sort": "asc"})
    response = await server.dispatch(request)

    assert response.status == 200
    assert response.body == b"3:asc"
    assert response.headers["content-type"] == "text/plain; charset=utf-8"


@pytest.mark.anyio
async def test_dispatch_unknown_routes():
    handler = HttpHandler("/only-post", "ok", method="POST")
    server = HttpServer(None, [(handler.pattern, handler)])

    assert (await server.dispatch(get("/only-post"))).status == 405
    assert (await server.dispatch(get("/missing"))).status == 404
    assert handler.called == 0


@pytest.mark.anyio
async def test_dispatch_first_matching_route_wins():
    first = HttpHandler("/users/me", "me")
    second = HttpHandler("/users/{id}", "someone")
    server = HttpServer(None, [(first.pattern, first), (second.pattern, second)])

    assert (await server.dispatch(get("/users/me"))).body == b"me"
    assert (await server.dispatch(get("/users/5"))).body == b"someone"


@pytest.mark.anyio
async def test_serve_over_socket():
    handler = HttpHandler.expecting("/send", "data=54", "we got 54")
    listener = await anyio.create_tcp_listener(local_host="127.0.0.1", local_port=0)
    port = listener.extra(SocketAttribute.local_port)
    server = HttpServer(listener, [(handler.pattern, handler)])

    async with anyio.create_task_group() as tg:
        tg.start_soon(server.serve)

        # Body arrives in the same packet as the headers.
        raw = await roundtrip(
            port,
            b"POST /send?x=1 HTTP/1.1\r\nHost: test\r\nContent-Length: 7\r\n\r\ndata=54",
        )
        assert raw.startswith(b"HTTP/1.1 200 OK\r\n")
        assert b"content-length: 9\r\n" in raw
        assert raw.endswith(b"\r\n\r\nwe got 54")

        raw = await roundtrip(port, b"garbage\r\n\r\n")
        assert raw.startswith(b"HTTP/1.1 400 Bad Request\r\n")

        raw = await roundtrip(
            port,
            b"POST /send HTTP/1.1\r\nHost: test\r\nContent-Length: -2\r\n\r\ndata=54xx",
        )
        assert raw.startswith(b"HTTP/1.1 400 Bad Request\r\n")
        assert raw.endswith(b"bad request: invalid content-length")

        tg.cancel_scope.cancel()

    assert handler.called == 1

"""
Mocking an HTTP API in a test

Starts a mock server with three routes, exercises them with httpx and checks
that each was called as expected.

Run:
  uv run python examples/01_mock_client.py
"""

from __future__ import annotations

import logging

import httpx

from mockrequests import HttpHandler, MockRequests, ValidateRequestHandler


def main() -> None:
    logging.basicConfig(level=logging.INFO)

    with MockRequests(
        HttpHandler("/health", '{"ok": true}'),
        HttpHandler("/users/{id}", lambda req, rsp, prm: f"user {prm['id']}"),
        HttpHandler(
            "/send",
            ValidateRequestHandler("data=54", "we got 54"),
            ValidateRequestHandler("data=56", "we got 56"),
            method="POST",
        ),
    ) as mock:
        print(f"Mock server on {mock.url}")

        with httpx.Client(base_url=mock.url, trust_env=False) as client:
            print(client.get("health").text)
            print(client.get("users/42").text)
            print(client.post("send", data={"data": "54"}).text)
            print(client.post("send", data={"data": "56"}).text)

        mock.assert_all_called_once()
        print("all routes called as expected")


if __name__ == "__main__":
    main()

"""Test doubles for Redis and the Strapi origin."""

import fnmatch
from collections.abc import AsyncIterator
from typing import Any

import httpx

STRAPI_URL = "http://strapi.test"
TEST_API_KEY = "test-api-key"


class FakeRedis:
    """Dict-backed stand-in for ``redis.asyncio.Redis``.

    Implements only the commands CacheStore uses and records every call.
    """

    def __init__(self) -> None:
        self.store: dict[str, bytes] = {}
        self.ttls: dict[str, int | None] = {}
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.closed = False

    async def get(self, key: str) -> bytes | None:
        self.calls.append(("get", (key,)))
        return self.store.get(key)

    async def set(self, key: str, value: bytes, ex: int | None = None) -> bool:
        self.calls.append(("set", (key, value, ex)))
        self.store[key] = value
        self.ttls[key] = ex
        return True

    async def delete(self, *keys: str) -> int:
        self.calls.append(("delete", keys))
        removed = 0
        for key in keys:
            if self.store.pop(key, None) is not None:
                self.ttls.pop(key, None)
                removed += 1
        return removed

    async def scan_iter(self, match: str = "*") -> AsyncIterator[str]:
        self.calls.append(("scan_iter", (match,)))
        for key in list(self.store):
            if fnmatch.fnmatchcase(key, match):
                yield key

    async def ping(self) -> bool:
        self.calls.append(("ping", ()))
        return True

    async def aclose(self) -> None:
        self.closed = True

    def called(self, command: str) -> int:
        return sum(1 for name, _ in self.calls if name == command)


class OriginStub:
    """Scripted Strapi origin for ``httpx.MockTransport``.

    Responses are keyed by URL path; unknown paths answer 404.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.routes: dict[str, tuple[int, bytes] | Exception] = {
            "/_health": (204, b""),
        }

    def respond(self, path: str, status_code: int = 200, body: bytes = b"{}") -> None:
        self.routes[path] = (status_code, body)

    def fail(self, path: str, error: Exception) -> None:
        self.routes[path] = error

    def content_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path != "/_health"]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(request.url.path)
        if route is None:
            return httpx.Response(404, content=b'{"error":"Not Found"}')
        if isinstance(route, Exception):
            raise route
        status_code, body = route
        return httpx.Response(status_code, content=body)

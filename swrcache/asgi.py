from __future__ import annotations

import logging
import typing as t
from typing import AsyncIterator

from swrcache._async_cache import AsyncCacheProxy
from swrcache._core._headers import Headers
from swrcache._core._spec import CacheOptions
from swrcache._core._storages._async_base import AsyncBaseStorage
from swrcache._core._storages._async_memory import AsyncInMemoryStorage
from swrcache._core.models import Request, Response
from swrcache._scheduler import AsyncBackgroundTasks
from swrcache._utils import make_async_iterator

logger = logging.getLogger(__name__)


class _ASGIScope(t.TypedDict, total=False):
    """ASGI HTTP scope type."""

    type: str
    asgi: dict[str, str]
    http_version: str
    method: str
    scheme: str
    path: str
    query_string: bytes
    root_path: str
    headers: list[tuple[bytes, bytes]]
    server: tuple[str, int | None] | None
    client: tuple[str, int] | None
    state: dict[str, t.Any]
    extensions: dict[str, t.Any]


_Scope = _ASGIScope
_Receive = t.Callable[[], t.Awaitable[dict[str, t.Any]]]
_Send = t.Callable[[dict[str, t.Any]], t.Awaitable[None]]
_ASGIApp = t.Callable[[_Scope, _Receive, _Send], t.Awaitable[None]]


class _AppOrigin:
    """
    Calls the wrapped application as if it was the origin server.

    The request body is collected once, so a background refresh that runs after
    the client's response was sent can replay it.
    """

    def __init__(self, app: _ASGIApp, scope: _Scope) -> None:
        self.app = app
        self.scope = scope

    async def __call__(self, request: Request) -> Response:
        logger.debug("Calling wrapped application: url=%s", request.url)
        pending = [{"type": "http.request", "body": await request.aread(), "more_body": False}]

        async def receive() -> dict[str, t.Any]:
            return pending.pop() if pending else {"type": "http.disconnect"}

        status_code = 500
        headers = Headers({})
        chunks: list[bytes] = []

        async def send(message: dict[str, t.Any]) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
                for key, value in message.get("headers", []):
                    headers[key.decode("latin1")] = value.decode("latin1")
            elif message["type"] == "http.response.body":
                chunks.append(message.get("body", b""))

        await self.app(self.scope, receive, send)
        headers.pop("transfer-encoding", None)

        return Response(status_code=status_code, headers=headers, stream=make_async_iterator(chunks), metadata={})


class ASGICacheMiddleware:
    """
    ASGI middleware that serves GET/HEAD responses from a stale-while-revalidate cache.

    The wrapped application plays the role of the origin. Stale entries are
    returned to the client right away while the wrapped application is called
    again in the background to refresh them.

    Background work started by a request runs in a scheduler scoped to that
    request: the response is fully sent first, and the middleware call only
    returns once the refresh has finished, so the server keeps the request
    task alive for it.

    Args:
        app: The ASGI application to wrap.
        storage: The storage backend shared by all requests. Defaults to AsyncInMemoryStorage.
        options: Cache configuration. Defaults to CacheOptions().

    Example:
        ```python
        from swrcache import AsyncSqliteStorage, CacheOptions
        from swrcache.asgi import ASGICacheMiddleware

        app = ASGICacheMiddleware(
            app=my_asgi_app,
            storage=AsyncSqliteStorage(),
            options=CacheOptions(freshness_window=600),
        )
        ```
    """

    def __init__(
        self,
        app: _ASGIApp,
        storage: AsyncBaseStorage | None = None,
        options: CacheOptions | None = None,
    ) -> None:
        self.app = app
        self.storage = storage if storage is not None else AsyncInMemoryStorage()
        self.options = options

        logger.info("Initialized ASGICacheMiddleware with storage=%s", type(self.storage).__name__)

    async def __call__(self, scope: _Scope, receive: _Receive, send: _Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        full_path = _full_path(scope)
        request = _scope_to_request(scope, receive)
        logger.debug("Incoming HTTP request: method=%s path=%s", request.method, full_path)

        async with AsyncBackgroundTasks() as background_tasks:
            cache_proxy = AsyncCacheProxy(
                request_sender=_AppOrigin(self.app, scope),
                scheduler=background_tasks,
                storage=self.storage,
                options=self.options,
            )
            response = await cache_proxy.handle_request(request)
            logger.info(
                "Request processed: method=%s path=%s status=%d from_cache=%s",
                request.method,
                full_path,
                response.status_code,
                response.metadata.get("swrcache_from_cache", False),
            )
            await _send_response(response, send)

    async def aclose(self) -> None:
        """Close the storage backend and release resources."""
        logger.info("Closing ASGICacheMiddleware and storage backend")
        await self.storage.close()


def _full_path(scope: _Scope) -> str:
    path = scope.get("path", "/")
    query_string = scope.get("query_string", b"")
    return f"{path}?{query_string.decode('latin1')}" if query_string else path


def _scope_to_request(scope: _Scope, receive: _Receive) -> Request:
    scheme = scope.get("scheme", "http")
    host, port = scope.get("server") or ("localhost", None)
    if port is not None and port != {"http": 80, "https": 443}.get(scheme):
        host = f"{host}:{port}"

    url = f"{scheme}://{host}{_full_path(scope)}"

    headers = Headers({})
    for key, value in scope.get("headers", []):
        headers[key.decode("latin1")] = value.decode("latin1")

    async def body() -> AsyncIterator[bytes]:
        more_body = True
        while more_body:
            message = await receive()
            if message["type"] != "http.request":
                return
            more_body = message.get("more_body", False)
            yield message.get("body", b"")

    return Request(method=scope.get("method", "GET"), url=url, headers=headers, stream=body(), metadata={})


async def _send_response(response: Response, send: _Send) -> None:
    await send(
        {
            "type": "http.response.start",
            "status": response.status_code,
            "headers": [
                (key.encode("latin1"), value.encode("latin1"))
                for key, values in response.headers._headers.items()
                for value in values
            ],
        }
    )

    total_bytes = 0
    async for chunk in response._aiter_stream():
        total_bytes += len(chunk)
        await send({"type": "http.response.body", "body": chunk, "more_body": True})
    await send({"type": "http.response.body", "body": b"", "more_body": False})
    logger.debug("Response sent: status=%d total_bytes=%d", response.status_code, total_bytes)

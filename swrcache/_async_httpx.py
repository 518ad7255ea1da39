from __future__ import annotations

import ssl
import types
import typing as t
from typing import AsyncIterator

from swrcache._async_cache import AsyncCacheProxy
from swrcache._core._headers import Headers
from swrcache._core._spec import CacheOptions
from swrcache._core._storages._async_base import AsyncBaseStorage
from swrcache._core.models import Request, Response
from swrcache._scheduler import AsyncBackgroundTasks

try:
    import httpx
except ImportError as e:
    raise ImportError(
        "httpx is required to use swrcache.httpx module. "
        "Please install swrcache with the 'httpx' extra, "
        "e.g., 'pip install swrcache[httpx]'."
    ) from e

if t.TYPE_CHECKING:  # pragma: no cover
    from typing_extensions import Self

# 128 KB
CHUNK_SIZE = 131072

DEFAULT_LIMITS = httpx.Limits(max_connections=100, max_keepalive_connections=20)


def _to_internal_headers(headers: httpx.Headers) -> Headers:
    internal = Headers({})
    for key, value in headers.multi_items():
        if key.lower() != "transfer-encoding":
            internal[key] = value
    return internal


def _to_httpx_headers(headers: Headers) -> list[tuple[str, str]]:
    return [(key, value) for key, values in headers._headers.items() for value in values]


async def _aiter(stream: t.AsyncIterable[bytes]) -> AsyncIterator[bytes]:
    async for chunk in stream:
        yield chunk


def _request_from_httpx(request: httpx.Request) -> Request:
    return Request(
        method=request.method,
        url=str(request.url),
        headers=_to_internal_headers(request.headers),
        stream=_aiter(t.cast(t.AsyncIterable[bytes], request.stream)),
        metadata={},
    )


def _request_to_httpx(request: Request) -> httpx.Request:
    return httpx.Request(
        method=request.method,
        url=request.url,
        headers=_to_httpx_headers(request.headers),
        stream=_IteratorStream(request._aiter_stream()),
    )


def _response_from_httpx(response: httpx.Response) -> Response:
    return Response(
        status_code=response.status_code,
        reason_phrase=response.reason_phrase,
        headers=_to_internal_headers(response.headers),
        stream=response.aiter_raw(chunk_size=CHUNK_SIZE),
        metadata={},
    )


def _response_to_httpx(response: Response) -> httpx.Response:
    extensions: dict[str, t.Any] = dict(response.metadata)
    if response.reason_phrase:
        extensions["reason_phrase"] = response.reason_phrase.encode("ascii", errors="ignore")
    return httpx.Response(
        status_code=response.status_code,
        headers=_to_httpx_headers(response.headers),
        stream=_IteratorStream(response._aiter_stream()),
        extensions=extensions,
    )


class _IteratorStream(httpx.AsyncByteStream):
    def __init__(self, iterator: t.AsyncIterable[bytes]) -> None:
        self.iterator = iterator

    async def __aiter__(self) -> AsyncIterator[bytes]:
        async for chunk in self.iterator:
            yield chunk


class AsyncCacheTransport(httpx.AsyncBaseTransport):
    """
    An httpx transport that answers from a stale-while-revalidate cache.

    ``next_transport`` is the origin. Background refreshes run in a scheduler
    owned by the transport, which only runs while the transport (or the client
    holding it) is used as an async context manager. Outside of it, requests
    are sent to ``next_transport`` without touching the cache. Leaving the
    context waits for pending refreshes before the next transport is closed.
    """

    def __init__(
        self,
        next_transport: httpx.AsyncBaseTransport,
        storage: AsyncBaseStorage | None = None,
        options: CacheOptions | None = None,
    ) -> None:
        self.next_transport = next_transport
        self.background_tasks = AsyncBackgroundTasks()
        self._cache_proxy = AsyncCacheProxy(
            request_sender=self.request_sender,
            scheduler=self.background_tasks,
            storage=storage,
            options=options,
        )
        self.storage = self._cache_proxy.storage

    async def __aenter__(self) -> "Self":
        await self.next_transport.__aenter__()
        await self.background_tasks.__aenter__()
        return self

    async def __aexit__(
        self,
        exc_type: t.Optional[t.Type[BaseException]] = None,
        exc_value: t.Optional[BaseException] = None,
        traceback: t.Optional[types.TracebackType] = None,
    ) -> None:
        try:
            await self.background_tasks.__aexit__(exc_type, exc_value, traceback)
        finally:
            await self.aclose()

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        response = await self._cache_proxy.handle_request(_request_from_httpx(request))
        return _response_to_httpx(response)

    async def aclose(self) -> None:
        await self.next_transport.aclose()
        await self.storage.close()

    async def request_sender(self, request: Request) -> Response:
        response = await self.next_transport.handle_async_request(_request_to_httpx(request))
        return _response_from_httpx(response)


class AsyncCacheClient(httpx.AsyncClient):
    """
    ``httpx.AsyncClient`` whose transports (including proxy mounts) are wrapped in
    :class:`AsyncCacheTransport`. Accepts the extra ``storage`` and ``options`` keyword arguments.
    """

    def __init__(self, *args: t.Any, **kwargs: t.Any) -> None:
        self.storage: AsyncBaseStorage | None = kwargs.pop("storage", None)
        self.options: CacheOptions | None = kwargs.pop("options", None)
        super().__init__(*args, **kwargs)

    def _cached(self, next_transport: httpx.AsyncBaseTransport) -> AsyncCacheTransport:
        return AsyncCacheTransport(next_transport=next_transport, storage=self.storage, options=self.options)

    def _init_transport(
        self,
        verify: ssl.SSLContext | str | bool = True,
        cert: t.Union[str, t.Tuple[str, str], t.Tuple[str, str, str], None] = None,
        trust_env: bool = True,
        http1: bool = True,
        http2: bool = False,
        limits: httpx.Limits = DEFAULT_LIMITS,
        transport: httpx.AsyncBaseTransport | None = None,
        **kwargs: t.Any,
    ) -> httpx.AsyncBaseTransport:
        if transport is not None:
            return transport
        return self._cached(
            httpx.AsyncHTTPTransport(
                verify=verify, cert=cert, trust_env=trust_env, http1=http1, http2=http2, limits=limits
            )
        )

    def _init_proxy_transport(
        self,
        proxy: httpx.Proxy,
        verify: ssl.SSLContext | str | bool = True,
        cert: t.Union[str, t.Tuple[str, str], t.Tuple[str, str, str], None] = None,
        trust_env: bool = True,
        http1: bool = True,
        http2: bool = False,
        limits: httpx.Limits = DEFAULT_LIMITS,
        **kwargs: t.Any,
    ) -> httpx.AsyncBaseTransport:
        return self._cached(
            httpx.AsyncHTTPTransport(
                verify=verify, cert=cert, trust_env=trust_env, http1=http1, http2=http2, limits=limits, proxy=proxy
            )
        )

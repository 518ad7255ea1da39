from __future__ import annotations

import hashlib
from dataclasses import dataclass, field, replace
from typing import (
    Any,
    AsyncIterable,
    AsyncIterator,
    Mapping,
    TypedDict,
    cast,
)

from swrcache._core._headers import Headers
from swrcache._exceptions import ResponseNotRead
from swrcache._utils import make_async_iterator


def _empty_stream() -> AsyncIterator[bytes]:
    return make_async_iterator([])


@dataclass
class Request:
    method: str
    url: str
    headers: Headers = field(default_factory=lambda: Headers({}))
    stream: AsyncIterator[bytes] = field(default_factory=_empty_stream)
    metadata: Mapping[str, Any] = field(default_factory=dict)

    async def _aiter_stream(self) -> AsyncIterator[bytes]:
        if hasattr(self, "collected_body"):
            yield getattr(self, "collected_body")
            return
        if isinstance(self.stream, (AsyncIterator, AsyncIterable)):
            async for chunk in self.stream:
                yield chunk
            return
        raise TypeError("Request stream is not an AsyncIterator")

    async def aread(self) -> bytes:
        """
        Asynchronously reads the entire request body without consuming the stream.
        """
        if hasattr(self, "collected_body"):
            return cast(bytes, getattr(self, "collected_body"))

        collected = b"".join([chunk async for chunk in self._aiter_stream()])
        setattr(self, "collected_body", collected)
        self.stream = make_async_iterator([collected])
        return collected


class ResponseMetadata(TypedDict, total=False):
    # All the names here should be prefixed with "swrcache_" to avoid collisions with user data
    swrcache_from_cache: bool
    """Indicates whether the response was served from cache."""

    swrcache_stale: bool
    """Indicates whether a stale cached response was served and a background refresh was scheduled."""

    swrcache_stored: bool
    """Indicates whether the response was scheduled to be stored in cache."""


@dataclass
class Response:
    status_code: int
    headers: Headers = field(default_factory=lambda: Headers({}))
    stream: AsyncIterator[bytes] = field(default_factory=_empty_stream)
    metadata: ResponseMetadata | Mapping[str, Any] = field(default_factory=dict)
    reason_phrase: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    async def _aiter_stream(self) -> AsyncIterator[bytes]:
        if hasattr(self, "collected_body"):
            yield getattr(self, "collected_body")
            return
        if isinstance(self.stream, (AsyncIterator, AsyncIterable)):
            async for chunk in self.stream:
                yield chunk
        else:
            raise TypeError("Response stream is not an AsyncIterator")

    async def aread(self) -> bytes:
        """
        Asynchronously reads the entire response body without consuming the stream.
        """
        if hasattr(self, "collected_body"):
            return cast(bytes, getattr(self, "collected_body"))

        collected = b"".join([chunk async for chunk in self._aiter_stream()])
        setattr(self, "collected_body", collected)
        self.stream = make_async_iterator([collected])
        return collected

    @property
    def content(self) -> bytes:
        if not hasattr(self, "collected_body"):
            raise ResponseNotRead()
        return cast(bytes, getattr(self, "collected_body"))

    def clone(self) -> "Response":
        """
        Return an independent copy of a response whose body was already read.

        The clone gets its own headers, metadata and body stream, so it can be
        stored while the original is handed back to the caller.
        """
        body = self.content
        cloned = replace(
            self,
            headers=self.headers.copy(),
            stream=make_async_iterator([body]),
            metadata=dict(self.metadata),
        )
        setattr(cloned, "collected_body", body)
        return cloned


@dataclass(frozen=True)
class CacheKey:
    """
    Canonical identity of a cacheable request.

    Only the URL takes part in it; the method is always ``GET`` so that
    ``HEAD`` and ``GET`` requests for the same resource share an entry.
    """

    url: str
    method: str = "GET"

    def hash(self) -> str:
        return hashlib.sha256(f"{self.method} {self.url}".encode("utf-8")).hexdigest()

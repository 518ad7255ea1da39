from __future__ import annotations

import logging
from typing import Optional

import anyio

from swrcache._core._storages._async_base import AsyncBaseStorage
from swrcache._core._storages._packing import pack, unpack
from swrcache._core.models import CacheKey, Response
from swrcache._lfu_cache import LFUCache

logger = logging.getLogger("swrcache.storages")


class AsyncInMemoryStorage(AsyncBaseStorage):
    """
    A simple in-memory storage.

    Entries are kept serialized, so every lookup hands out an independent
    response. When ``capacity`` entries are stored, the least frequently
    used one is evicted to make room.

    Args:
        capacity: The maximum number of responses that can be cached, defaults to 128
    """

    def __init__(self, capacity: int = 128) -> None:
        self._cache: LFUCache[str, bytes] = LFUCache(capacity=capacity)
        self._lock = anyio.Lock()

    async def match(self, key: CacheKey) -> Optional[Response]:
        async with self._lock:
            if key.hash() not in self._cache:
                return None
            stored = self._cache.get(key.hash())
        return unpack(stored)

    async def put(self, key: CacheKey, response: Response) -> None:
        body = await response.aread()
        packed = pack(response, body)
        async with self._lock:
            self._cache.put(key.hash(), packed)
        logger.debug(f"Stored {len(body)} bytes for {key.url}")

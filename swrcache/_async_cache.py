from __future__ import annotations

import logging
from typing import Awaitable, Callable

from typing_extensions import assert_never

from swrcache._core._spec import (
    AnyState,
    CacheMiss,
    CacheOptions,
    CouldNotBeStored,
    FromCache,
    IdleClient,
    Lookup,
    PassThrough,
    Refreshed,
    RefreshFailed,
    RefreshResult,
    RefreshSkipped,
    ServeStale,
    StoreAndUse,
    stamp_response,
)
from swrcache._core._storages._async_base import AsyncBaseStorage
from swrcache._core._storages._async_memory import AsyncInMemoryStorage
from swrcache._core.models import CacheKey, Request, Response
from swrcache._scheduler import AsyncBackgroundTasks

logger = logging.getLogger("swrcache.proxy")


class AsyncCacheProxy:
    """
    A stale-while-revalidate cache in front of an origin.

    This class is independent of any specific HTTP library and works only with internal models.
    It delegates request execution to a user-provided callable and hands every piece of
    background work to the given scheduler, so a caller never waits for a refresh.
    While the scheduler is not running, every request goes straight to the origin.

    Args:
        request_sender: Callable that sends requests to the origin and returns responses.
        scheduler: Running scheduler that executes detached refreshes and stores.
        storage: Storage backend for cache entries. Defaults to AsyncInMemoryStorage.
        options: Cache configuration. Defaults to CacheOptions().
    """

    def __init__(
        self,
        request_sender: Callable[[Request], Awaitable[Response]],
        scheduler: AsyncBackgroundTasks,
        storage: AsyncBaseStorage | None = None,
        options: CacheOptions | None = None,
    ) -> None:
        self.send_request = request_sender
        self.scheduler = scheduler
        self.storage = storage if storage is not None else AsyncInMemoryStorage()
        self.options = options if options is not None else CacheOptions()

    async def handle_request(self, request: Request) -> Response:
        state: AnyState = IdleClient(options=self.options)

        while state:
            logger.debug(f"Handling state: {state.__class__.__name__}")
            if isinstance(state, IdleClient):
                if not self.scheduler.running:
                    logger.warning(f"Background scheduler is not running, sending {request.url} to the origin uncached")
                    state = PassThrough(request=request, options=self.options)
                else:
                    state = state.next(request)
            elif isinstance(state, PassThrough):
                return await self.send_request(state.request)
            elif isinstance(state, Lookup):
                state = state.next(await self.storage.match(state.key))
            elif isinstance(state, FromCache):
                return state.response
            elif isinstance(state, ServeStale):
                logger.debug(f"Scheduling background refresh for {state.key.url}")
                self.scheduler.submit(self.refresh, state.request, state.key)
                return state.response
            elif isinstance(state, CacheMiss):
                state = state.next(await self.send_request(state.request))
            elif isinstance(state, StoreAndUse):
                return await self._handle_store_and_use(state)
            elif isinstance(state, CouldNotBeStored):
                return state.response
            else:
                assert_never(state)

        raise RuntimeError("Unreachable")

    async def _handle_store_and_use(self, state: StoreAndUse) -> Response:
        # The body is collected once so the caller and the storage each get their own copy.
        await state.response.aread()
        logger.debug(f"Scheduling storage of the origin response for {state.key.url}")
        self.scheduler.submit(self.store, state.key, state.response.clone())
        return state.response

    async def refresh(self, request: Request, key: CacheKey) -> RefreshResult:
        """
        Fetch a new copy of ``request`` from the origin and replace the entry under ``key``.

        Never raises. A non-2xx origin response or any error leaves the stored
        entry untouched and is reported through the returned result.
        """
        try:
            response = await self.send_request(request)
            if not response.ok:
                await response.aread()
                return RefreshSkipped(key=key, status_code=response.status_code)
        except Exception as exc:
            return RefreshFailed(key=key, error=exc)
        return await self.store(key, response)

    async def store(self, key: CacheKey, response: Response) -> RefreshResult:
        """
        Stamp a successful origin response with the current time and write it under ``key``.

        Never raises.
        """
        if not response.ok:
            return RefreshSkipped(key=key, status_code=response.status_code)
        try:
            await response.aread()
            entry = stamp_response(response, self.options)
            await self.storage.put(key, entry)
        except Exception as exc:
            return RefreshFailed(key=key, error=exc)
        return Refreshed(key=key, response=entry)

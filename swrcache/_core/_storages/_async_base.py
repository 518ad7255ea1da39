from __future__ import annotations

import abc
from typing import Optional

from swrcache._core.models import CacheKey, Response


class AsyncBaseStorage(abc.ABC):
    @abc.abstractmethod
    async def match(self, key: CacheKey) -> Optional[Response]:
        """
        Look up the entry stored under the given key.

        Args:
            key: The normalized identity of the request.

        Returns:
            A new Response carrying the stored status, reason phrase, headers and
            body, or None when nothing is stored for the key.
        """
        raise NotImplementedError()

    @abc.abstractmethod
    async def put(self, key: CacheKey, response: Response) -> None:
        """
        Store a response under the given key, replacing any previous entry.

        The replacement is atomic: concurrent readers observe either the old
        entry or the new one, never a mix of both. The response body is read
        completely before anything is written.

        Args:
            key: The normalized identity of the request.
            response: The response to store.
        """
        raise NotImplementedError()

    async def close(self) -> None:  # noqa: B027
        """Release any resources held by the storage."""

#!/usr/bin/env uv run
# /// script
# requires-python = ">=3.9"
# dependencies = [
#     "swrcache[async, httpx]",
# ]
#
# [tool.uv.sources]
# swrcache = { path = "../", editable = true }
# ///

import asyncio
from typing import cast

import anysqlite

from swrcache import AsyncSqliteStorage, CacheOptions, ResponseMetadata
from swrcache.httpx import AsyncCacheClient


async def fetch_and_print(client, url: str):
    print(f"\n➡ Sending request to {url}...")
    response = await client.get(url)
    meta = cast(ResponseMetadata, response.extensions)

    print(f"🚀 Was Stored: {meta.get('swrcache_stored', False)}")
    print(f"🔄 From Cache: {meta.get('swrcache_from_cache', False)}")
    print(f"⌛ Stale: {meta.get('swrcache_stale', False)}")
    print(f"⏰ Last Refresh: {response.headers.get('x-last-refresh')}")


async def main():
    url = "https://example.com/"
    storage = AsyncSqliteStorage(connection=await anysqlite.connect(":memory:"))
    # A short window makes the third request stale, its refresh runs after the response is printed.
    async with AsyncCacheClient(storage=storage, options=CacheOptions(freshness_window=1)) as client:
        await fetch_and_print(client, url)
        await fetch_and_print(client, url)
        await asyncio.sleep(1.5)
        await fetch_and_print(client, url)


if __name__ == "__main__":
    asyncio.run(main())

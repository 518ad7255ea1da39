try:
    import httpx  # noqa: F401
except ImportError as e:
    raise ImportError(
        "httpx is required to use swrcache.httpx module. "
        "Please install swrcache with the 'httpx' extra, "
        "e.g., 'pip install swrcache[httpx]'."
    ) from e


from ._async_httpx import AsyncCacheClient as AsyncCacheClient, AsyncCacheTransport as AsyncCacheTransport

__all__ = ("AsyncCacheClient", "AsyncCacheTransport")

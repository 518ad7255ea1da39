from swrcache._core._headers import Headers as Headers
from swrcache._core._spec import (
    AnyState as AnyState,
    CacheMiss as CacheMiss,
    CacheOptions as CacheOptions,
    CouldNotBeStored as CouldNotBeStored,
    Freshness as Freshness,
    FromCache as FromCache,
    IdleClient as IdleClient,
    Lookup as Lookup,
    PassThrough as PassThrough,
    Refreshed as Refreshed,
    RefreshFailed as RefreshFailed,
    RefreshResult as RefreshResult,
    RefreshSkipped as RefreshSkipped,
    ServeStale as ServeStale,
    State as State,
    StoreAndUse as StoreAndUse,
    evaluate_freshness as evaluate_freshness,
    get_last_refresh as get_last_refresh,
    is_cacheable as is_cacheable,
    normalize_request as normalize_request,
    stamp_response as stamp_response,
)
from swrcache._core._storages._async_base import AsyncBaseStorage as AsyncBaseStorage
from swrcache._core._storages._async_memory import AsyncInMemoryStorage as AsyncInMemoryStorage
from swrcache._core._storages._async_sqlite import AsyncSqliteStorage as AsyncSqliteStorage
from swrcache._core.models import (
    CacheKey as CacheKey,
    Request as Request,
    Response as Response,
    ResponseMetadata as ResponseMetadata,
)

__all__ = (
    ## States
    "AnyState",
    "State",
    "IdleClient",
    "PassThrough",
    "Lookup",
    "FromCache",
    "ServeStale",
    "CacheMiss",
    "StoreAndUse",
    "CouldNotBeStored",
    ## Decisions
    "CacheOptions",
    "Freshness",
    "is_cacheable",
    "normalize_request",
    "get_last_refresh",
    "evaluate_freshness",
    "stamp_response",
    ## Refresh results
    "Refreshed",
    "RefreshSkipped",
    "RefreshFailed",
    "RefreshResult",
    ## Models
    "CacheKey",
    "Request",
    "Response",
    "ResponseMetadata",
    ## Headers
    "Headers",
    ## Storages
    "AsyncBaseStorage",
    "AsyncInMemoryStorage",
    "AsyncSqliteStorage",
)

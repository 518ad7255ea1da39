from swrcache._core import (
    AnyState as AnyState,
    AsyncBaseStorage as AsyncBaseStorage,
    AsyncInMemoryStorage as AsyncInMemoryStorage,
    AsyncSqliteStorage as AsyncSqliteStorage,
    CacheKey as CacheKey,
    CacheMiss as CacheMiss,
    CacheOptions as CacheOptions,
    CouldNotBeStored as CouldNotBeStored,
    Freshness as Freshness,
    FromCache as FromCache,
    Headers as Headers,
    IdleClient as IdleClient,
    Lookup as Lookup,
    PassThrough as PassThrough,
    Refreshed as Refreshed,
    RefreshFailed as RefreshFailed,
    RefreshResult as RefreshResult,
    RefreshSkipped as RefreshSkipped,
    Request as Request,
    Response as Response,
    ResponseMetadata as ResponseMetadata,
    ServeStale as ServeStale,
    State as State,
    StoreAndUse as StoreAndUse,
    evaluate_freshness as evaluate_freshness,
    get_last_refresh as get_last_refresh,
    is_cacheable as is_cacheable,
    normalize_request as normalize_request,
    stamp_response as stamp_response,
)
from swrcache._async_cache import AsyncCacheProxy as AsyncCacheProxy
from swrcache._exceptions import (
    ResponseNotRead as ResponseNotRead,
    SchedulerNotRunning as SchedulerNotRunning,
    SwrCacheError as SwrCacheError,
)
from swrcache._scheduler import AsyncBackgroundTasks as AsyncBackgroundTasks

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
    ## Proxy
    "AsyncCacheProxy",
    "AsyncBackgroundTasks",
    ## Exceptions
    "SwrCacheError",
    "ResponseNotRead",
    "SchedulerNotRunning",
)

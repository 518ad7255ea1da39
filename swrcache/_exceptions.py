__all__ = ("SwrCacheError", "ResponseNotRead", "SchedulerNotRunning")


class SwrCacheError(Exception): ...


class ResponseNotRead(SwrCacheError):
    def __init__(self) -> None:
        super().__init__(
            "The response body has not been read yet. Call `await response.aread()` first."
        )


class SchedulerNotRunning(SwrCacheError):
    def __init__(self) -> None:
        super().__init__(
            "Background work was submitted outside of a running scheduler. "
            "Use the scheduler (or the transport/client that owns it) as an async context manager."
        )

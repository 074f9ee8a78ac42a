from typing import Optional


class FeeLookbackError(RuntimeError):
    pass


class InputError(FeeLookbackError):
    """Bad wallet address, non-positive hour count or invalid option."""
    pass


class RateLimitedError(FeeLookbackError):
    """The endpoint explicitly throttled the request (HTTP 429 / RPC -32005)."""
    pass


class TransportError(FeeLookbackError):
    """Network failure, 5xx, unreadable body or JSON-RPC error payload."""
    pass


class FetchFailedError(FeeLookbackError):
    """Retry budget exhausted; terminal for the request that raised it."""

    def __init__(self, what: str, reason: str, last_error: Optional[BaseException] = None):
        self.what = what
        self.reason = reason  # rate_limited | transport | elapsed | stalled
        self.last_error = last_error
        msg = f"{what}: {reason}"
        if last_error is not None:
            msg += f" (last error: {last_error})"
        super().__init__(msg)


class RecordSkipped(FeeLookbackError):
    """A single transaction could not be fetched or parsed; the run continues."""

    def __init__(self, ref, reason: str):
        self.ref = ref
        self.reason = reason
        super().__init__(f"{ref.signature}: {reason}")


class PipelineCancelled(FeeLookbackError):
    pass

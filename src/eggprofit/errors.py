"""
eggprofit error types — launch resolution and browsing session failures.
"""

from typing import Any, Optional


class EggProfitError(Exception):
    def __init__(self, code: str, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.details = details


class ConnectivityUnavailable(EggProfitError):
    def __init__(self, message: str = "Network is unreachable"):
        super().__init__("connectivity_unavailable", message)


class AttributionVerificationFailed(EggProfitError):
    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__("attribution_verification_failed", message, details)


class ConfigFetchFailed(EggProfitError):
    """Session config call failed. ``kind`` is one of TRANSPORT, STATUS, MALFORMED_BODY."""

    TRANSPORT = "transport"
    STATUS = "status"
    MALFORMED_BODY = "malformed_body"

    def __init__(self, kind: str, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(f"config_fetch_failed.{kind}", message, details)
        self.kind = kind


class RedirectLoopDetected(EggProfitError):
    def __init__(self, count: int, address: Optional[str] = None):
        super().__init__(
            "redirect_loop_detected",
            f"Redirect limit exceeded after {count} redirects",
            {"count": count, "address": address},
        )
        self.count = count


class TooManyRedirects(EggProfitError):
    def __init__(self, address: Optional[str] = None):
        super().__init__("too_many_redirects", "Transport reported too many redirects", {"address": address})


class StateInvariantError(EggProfitError):
    def __init__(self, message: str):
        super().__init__("state_invariant", message)

"""Error types for Opinion Trade."""

from typing import Optional


class OpinionTradeError(Exception):
    """Base class for all Opinion Trade errors."""

    pass


class ValidationError(OpinionTradeError, ValueError):
    """Malformed or out-of-range order input."""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"Invalid {field}: {message}")


class FixedPointError(OpinionTradeError, ValueError):
    """Decimal text that cannot be represented exactly."""

    pass


class SigningError(OpinionTradeError):
    """Typed-data signing failed."""

    pass


class ApiError(OpinionTradeError):
    """Order API request failed or returned an error response."""

    def __init__(
        self,
        message: str,
        errno: Optional[int] = None,
        errmsg: Optional[str] = None,
    ):
        self.errno = errno
        self.errmsg = errmsg
        super().__init__(message)


class TopicLookupError(OpinionTradeError):
    """Market metadata could not be resolved."""

    pass

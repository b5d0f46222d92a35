"""Exception types for the dmrelay client library."""


class DeliveryError(Exception):
    """Base exception for all delivery client errors."""
    pass


class InvalidArgument(DeliveryError, ValueError):
    """Caller supplied an unusable argument; raised before any I/O."""
    pass


class SessionError(DeliveryError):
    """No authenticated session is active."""
    pass


class TransportError(DeliveryError):
    """Network communication error."""
    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class HttpError(TransportError):
    """Server answered with a non-2xx status or an unparsable 2xx body."""
    def __init__(self, message: str, status_code: int | None = None, body: str | None = None) -> None:
        super().__init__(message, status_code=status_code)
        self.body = body


class NetworkError(TransportError):
    """Transport-level failure: DNS, refused connection, protocol error."""
    pass


class RequestTimeoutError(TransportError):
    """No response arrived within the request timeout."""
    def __init__(self, message: str, timeout: float | None = None) -> None:
        super().__init__(message)
        self.timeout = timeout

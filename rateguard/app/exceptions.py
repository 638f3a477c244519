"""Custom exceptions for rateguard."""


class RateGuardException(Exception):
    """Base class for rateguard exceptions with HTTP status code.

    These are operational or programming errors, never rate limiting
    verdicts. Verdicts are returned as VerificationResult values.
    """
    status_code: int = 500

    def __init__(self, message: str = "Rate guard error"):
        self.message = message
        super().__init__(message)


class StoreUnavailableError(RateGuardException):
    """Raised when Redis cannot be reached or fails at the transport level.

    Maps to HTTP 503 Service Unavailable when the caller fails closed.
    """
    status_code = 503

    def __init__(self, operation: str | None = None, detail: str | None = None):
        self.operation = operation
        message = detail or "Key-value store is unavailable"
        if operation:
            message = f"{message} (operation: {operation})"
        super().__init__(message)


class NotInitializedError(RateGuardException):
    """Raised when an operation runs before a store handle is established.

    Maps to HTTP 500 Internal Server Error.
    """
    status_code = 500

    def __init__(self, detail: str = "Redis connection is not established"):
        super().__init__(detail)


class ReservedAddressError(RateGuardException):
    """Raised when an address would map onto a reserved Redis key.

    Maps to HTTP 400 Bad Request.
    """
    status_code = 400

    def __init__(self, address: str):
        self.address = address
        super().__init__(f"Address {address!r} is reserved and cannot be counted")

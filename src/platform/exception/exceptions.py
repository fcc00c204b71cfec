class CustomBaseError(Exception):
    """Base class for all custom exceptions - controls logging behavior in @Logger.io"""

    code = 'ERROR'

    def __init__(self, message: str, status_code: int) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class DomainError(CustomBaseError):
    """Rejected input or a broken business rule (the ValidationError of the booking API)."""

    code = 'VALIDATION_ERROR'

    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message, status_code)


class NotFoundError(CustomBaseError):
    code = 'NOT_FOUND'

    def __init__(self, message: str) -> None:
        super().__init__(message, 404)


class ConflictError(CustomBaseError):
    code = 'CONFLICT'

    def __init__(self, message: str) -> None:
        super().__init__(message, 409)


class CapacityUnavailableError(ConflictError):
    """Requested quantity exceeds what the slot can still give out."""

    code = 'CAPACITY_UNAVAILABLE'


class LockExpiredError(ConflictError):
    """Lock is missing, expired, or held by another session."""

    code = 'LOCK_EXPIRED'


class InsufficientSubscriptionBalanceError(ConflictError):
    code = 'INSUFFICIENT_SUBSCRIPTION_BALANCE'


class TransientServerError(CustomBaseError):
    """Server side or transport failure; the only error the caller may retry."""

    code = 'TRANSIENT_SERVER_ERROR'

    def __init__(self, message: str, status_code: int = 503) -> None:
        super().__init__(message, status_code)


ERRORS_BY_CODE: dict[str, type[CustomBaseError]] = {
    error.code: error
    for error in (
        DomainError,
        NotFoundError,
        ConflictError,
        CapacityUnavailableError,
        LockExpiredError,
        InsufficientSubscriptionBalanceError,
        TransientServerError,
    )
}

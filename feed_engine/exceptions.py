from fastapi import HTTPException, status


class FeedException(Exception):
    """Base exception for feed engine errors"""
    pass


class StoreUnavailableException(FeedException):
    """Raised when a backing store (database, asset bucket) fails with a transient I/O error.

    Safe to retry at the caller's discretion; the core never retries on its own.
    """

    def __init__(self, store: str, detail: str = ""):
        self.store = store
        self.detail = detail
        message = f"{store} unavailable"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


# HTTP Exceptions
def store_unavailable_exception(error: StoreUnavailableException) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail={
            "message": str(error),
            "code": "store_unavailable",
            "retryable": True,
        },
    )


def validation_exception(message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=f"Validation error: {message}"
    )


def unauthorized_exception(detail: str = "Not authenticated") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )

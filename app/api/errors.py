from fastapi import HTTPException, status

from app.core.errors import (
    AllocationExhaustedError,
    InvalidArgumentError,
    InvalidStateError,
    NotFoundError,
    PotLogError,
)


def http_error(exc: PotLogError) -> HTTPException:
    """Translate a domain error into the matching HTTP response."""
    if isinstance(exc, NotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, InvalidArgumentError):
        code = status.HTTP_400_BAD_REQUEST
    elif isinstance(exc, InvalidStateError):
        code = status.HTTP_409_CONFLICT
    elif isinstance(exc, AllocationExhaustedError):
        code = status.HTTP_503_SERVICE_UNAVAILABLE
    else:
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return HTTPException(status_code=code, detail=str(exc))

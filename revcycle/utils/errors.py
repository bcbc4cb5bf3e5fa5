"""
HTTP Exceptions
Maps revenue cycle failures onto API responses
Source: https://fastapi.tiangolo.com/tutorial/handling-errors/
"""

from fastapi import HTTPException, status

from revcycle.services.exceptions import (
    NotFoundError as RecordNotFoundError,
    PreconditionFailedError,
    RevenueCycleError,
)


class NotFoundError(HTTPException):
    """404: an unknown payer, claim, denial, appeal or remittance id"""

    def __init__(self, detail: str = "Resource not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class ConflictError(HTTPException):
    """409: the claim or denial is in the wrong status for the operation"""

    def __init__(self, detail: str = "Resource conflict"):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class ValidationError(HTTPException):
    """422: request values the schema accepted but the domain rejects"""

    def __init__(self, detail: str = "Validation error"):
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=detail
        )


def http_error_for(error: RevenueCycleError) -> HTTPException:
    """Translate a service-layer error into its HTTP response."""
    if isinstance(error, RecordNotFoundError):
        return NotFoundError(str(error))
    if isinstance(error, PreconditionFailedError):
        return ConflictError(str(error))
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(error)
    )

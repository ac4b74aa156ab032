"""Mapping of service exceptions onto HTTP errors for routers."""

from fastapi import HTTPException, status

from .exceptions import ServiceException, ValidationError


def to_http_exception(error: ServiceException, detail: str) -> HTTPException:
    """
    Translate a service exception into an HTTPException.

    Validation errors keep their message (400); everything else becomes a
    500 with the generic ``detail``.

    :param error: Exception raised by a service
    :param detail: Message used for unexpected failures
    :returns: HTTPException to raise from the route
    """
    if isinstance(error, ValidationError):
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=error.message
        )
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail
    )

"""Common exception types and handlers for the project."""

import enum

from rest_framework.views import exception_handler
from rest_framework.response import Response
from rest_framework import status


class ErrorKind(enum.Enum):
    NOT_FOUND = 'not_found'
    VALIDATION = 'validation'
    STORAGE_FAILURE = 'storage_failure'


class BoardError(Exception):
    """Base error raised by board services. Callers branch on ``kind``."""
    kind = None

    def __init__(self, message=''):
        super().__init__(message)
        self.message = message


class NotFound(BoardError):
    kind = ErrorKind.NOT_FOUND


class ValidationFailed(BoardError):
    kind = ErrorKind.VALIDATION


class StorageFailure(BoardError):
    """The backing transaction could not commit; nothing was written."""
    kind = ErrorKind.STORAGE_FAILURE


ERROR_STATUS = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.STORAGE_FAILURE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def custom_exception_handler(exc, context):
    """Return a consistent error response structure."""
    if isinstance(exc, BoardError):
        return Response(
            {"errors": [exc.message], "kind": exc.kind.value},
            status=ERROR_STATUS[exc.kind],
        )

    response = exception_handler(exc, context)

    if response is None:
        # If DRF couldn't handle the exception, fall back to a generic 500.
        return Response(
            {"errors": [str(exc)]}, status=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    return Response({"errors": response.data}, status=response.status_code)

"""
Error kinds and exceptions for the memoir pipeline and trip operations.

Every backend failure is caught at the operation boundary and either
degraded (logged, pipeline continues) or raised as one of the exceptions
below. Routes translate them into HTTP errors with ``to_http_exception``.
"""
from enum import Enum
from fastapi import HTTPException, status


class ErrorKind(str, Enum):
    """Kinds of failure surfaced to the user."""
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    PARTIAL_DEGRADATION = "partial_degradation"
    UPLOAD_FAILURE = "upload_failure"
    PERSISTENCE_FAILURE = "persistence_failure"
    LOAD_FAILURE = "load_failure"
    EXPORT_FAILURE = "export_failure"
    CONFIRMATION_REQUIRED = "confirmation_required"
    INVALID_REQUEST = "invalid_request"


USER_MESSAGES: dict = {
    ErrorKind.NOT_FOUND: "The requested record could not be found.",
    ErrorKind.FORBIDDEN: "You don't have permission to do this.",
    ErrorKind.PARTIAL_DEGRADATION: "Some data could not be loaded.",
    ErrorKind.UPLOAD_FAILURE: "Some photos failed to upload.",
    ErrorKind.PERSISTENCE_FAILURE: "Saving failed. Your changes are kept, please try again.",
    ErrorKind.LOAD_FAILURE: "Loading failed. Please try again.",
    ErrorKind.EXPORT_FAILURE: "PDF export failed.",
    ErrorKind.CONFIRMATION_REQUIRED: "This action discards unsaved changes and must be confirmed.",
    ErrorKind.INVALID_REQUEST: "Invalid request.",
}

HTTP_STATUS: dict = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.PARTIAL_DEGRADATION: status.HTTP_200_OK,
    ErrorKind.UPLOAD_FAILURE: status.HTTP_502_BAD_GATEWAY,
    ErrorKind.PERSISTENCE_FAILURE: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorKind.LOAD_FAILURE: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorKind.EXPORT_FAILURE: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorKind.CONFIRMATION_REQUIRED: status.HTTP_409_CONFLICT,
    ErrorKind.INVALID_REQUEST: status.HTTP_400_BAD_REQUEST,
}


class TripnoteError(Exception):
    """Base exception carrying an error kind and the failed operation."""

    kind = ErrorKind.INVALID_REQUEST

    def __init__(self, message: str, operation: str = "", kind: ErrorKind = None):
        self.message = message
        self.operation = operation
        if kind is not None:
            self.kind = kind
        super().__init__(message)

    @property
    def user_message(self) -> str:
        return USER_MESSAGES.get(self.kind, USER_MESSAGES[ErrorKind.INVALID_REQUEST])


class TripNotFoundError(TripnoteError):
    """Trip record is absent. Fatal for the memoir view."""
    kind = ErrorKind.NOT_FOUND


class EditForbiddenError(TripnoteError):
    """The session's role does not allow editing this memoir."""
    kind = ErrorKind.FORBIDDEN


class PhotoIndexError(TripnoteError):
    """Photo index outside the draft's photo list."""
    kind = ErrorKind.NOT_FOUND


class ConfirmationRequiredError(TripnoteError):
    kind = ErrorKind.CONFIRMATION_REQUIRED


class UploadError(TripnoteError):
    kind = ErrorKind.UPLOAD_FAILURE


class LoadError(TripnoteError):
    """Fetching trip data for the memoir view failed."""
    kind = ErrorKind.LOAD_FAILURE


class PersistenceError(TripnoteError):
    """A write to the memoir store failed. Nothing was persisted."""
    kind = ErrorKind.PERSISTENCE_FAILURE


class ExportError(TripnoteError):
    """Rendering or encoding failed. No artifact was produced."""
    kind = ErrorKind.EXPORT_FAILURE


def to_http_exception(error: TripnoteError) -> HTTPException:
    """Map a pipeline error to the HTTPException the routes raise."""
    detail = error.message or error.user_message
    if error.operation:
        detail = f"{error.operation} failed: {detail}"
    return HTTPException(
        status_code=HTTP_STATUS.get(error.kind, status.HTTP_400_BAD_REQUEST),
        detail=detail
    )

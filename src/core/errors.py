"""
Error taxonomy for Inkwell.

Every error raised by the comment core carries a stable machine-readable
``kind`` and the HTTP status the API layer answers with. The FastAPI app
and the MCP tool surface both translate these at their boundary.
"""
from fastapi import status


class InkwellError(Exception):
    """Base class for recoverable request-level errors."""

    kind = "error"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(InkwellError):
    """Raised when input is malformed or out of range."""

    kind = "validation_error"
    status_code = status.HTTP_422_UNPROCESSABLE_CONTENT


class NotFound(InkwellError):
    """Raised when a referenced post or comment does not exist."""

    kind = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class InvalidNesting(InkwellError):
    """Raised when replying to a reply, or to a comment on another post."""

    kind = "invalid_nesting"
    status_code = status.HTTP_400_BAD_REQUEST


class Unauthenticated(InkwellError):
    """Raised when no principal can be resolved from the request."""

    kind = "unauthenticated"
    status_code = status.HTTP_401_UNAUTHORIZED


class Forbidden(InkwellError):
    """Raised when the principal lacks rights for the action."""

    kind = "forbidden"
    status_code = status.HTTP_403_FORBIDDEN

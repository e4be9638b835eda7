"""
Response envelope and failure classification.

Every endpoint answers with an ApiResponse. Successful calls carry `data`;
anything else carries a `failure` explaining what went wrong.

Response types:
- Success: Operation completed successfully
- KnownFailure: The service knows why it failed (bad input, missing record, ...)
- UnknownFailure: Unexpected error; the cause is logged, never returned

Known failures are raised as KnownError subclasses anywhere below the route
layer and converted into envelopes by the handlers registered in main.py.
"""

from enum import Enum
from typing import Any, Generic, TypeVar

from fastapi import status
from pydantic import BaseModel, Field


class FailureKind(str, Enum):
    """Classification of failure types."""

    # Caller identity
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"

    # Input validation failures
    INVALID_INPUT = "invalid_input"
    MISSING_REQUIRED = "missing_required"

    # Resource failures
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"

    # Upstream failures
    EXTERNAL_API_ERROR = "external_api_error"

    UNKNOWN = "unknown"


class OutcomeType(str, Enum):
    """High-level outcome classification."""

    SUCCESS = "success"
    KNOWN_FAILURE = "known_failure"
    UNKNOWN_FAILURE = "unknown_failure"


T = TypeVar("T")


# Standard messages for the unknown case. Fixed so nothing from the
# underlying exception leaks to the caller.
UNKNOWN_FAILURE_MESSAGE = "Something went wrong while handling the request."
UNKNOWN_FAILURE_SUGGESTION = "Retry the request. If this persists, please report the issue."


class FailureDetail(BaseModel):
    """Detailed information about a failure."""

    kind: FailureKind = Field(
        ...,
        description="Classification of the failure",
    )
    message: str = Field(
        ...,
        description="User-appropriate explanation of what went wrong",
    )
    detail: str | None = Field(
        default=None,
        description="Additional technical detail (optional)",
    )
    suggestion: str | None = Field(
        default=None,
        description="Suggested action for the user",
    )


class ApiResponse(BaseModel, Generic[T]):
    """
    Universal response envelope for all API endpoints.

    `outcome` tells success apart from failure without inspecting the
    HTTP status.
    """

    outcome: OutcomeType = Field(
        ...,
        description="High-level classification of the result",
    )
    data: T | None = Field(
        default=None,
        description="Response data (present on success)",
    )
    failure: FailureDetail | None = Field(
        default=None,
        description="Failure details (present on non-success)",
    )

    @classmethod
    def success(cls, data: T) -> "ApiResponse[T]":
        """Create a success response."""
        return cls(outcome=OutcomeType.SUCCESS, data=data)

    @classmethod
    def known_failure(
        cls,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
    ) -> "ApiResponse[Any]":
        """Create a known failure response."""
        return cls(
            outcome=OutcomeType.KNOWN_FAILURE,
            failure=FailureDetail(
                kind=kind,
                message=message,
                detail=detail,
                suggestion=suggestion,
            ),
        )

    @classmethod
    def unknown_failure(cls, exception: Exception | None = None) -> "ApiResponse[Any]":
        """
        Create an unknown failure response.

        Only the exception type is exposed, never its message.
        """
        detail = type(exception).__name__ if exception is not None else None
        return cls(
            outcome=OutcomeType.UNKNOWN_FAILURE,
            failure=FailureDetail(
                kind=FailureKind.UNKNOWN,
                message=UNKNOWN_FAILURE_MESSAGE,
                detail=detail,
                suggestion=UNKNOWN_FAILURE_SUGGESTION,
            ),
        )


class KnownError(Exception):
    """
    Base class for exceptions that represent known, explainable failures.

    Subclass this for errors where the system knows exactly what went wrong.
    """

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
        status_code: int = status.HTTP_400_BAD_REQUEST,
    ):
        self.kind = kind
        self.message = message
        self.detail = detail
        self.suggestion = suggestion
        self.status_code = status_code
        super().__init__(message)

    def to_response(self) -> ApiResponse[Any]:
        """Convert to an ApiResponse."""
        return ApiResponse.known_failure(
            kind=self.kind,
            message=self.message,
            detail=self.detail,
            suggestion=self.suggestion,
        )


class AuthenticationError(KnownError):
    """No user identity could be resolved for the request."""

    def __init__(self, detail: str | None = None):
        super().__init__(
            kind=FailureKind.UNAUTHENTICATED,
            message="Authentication required",
            detail=detail,
            suggestion="Sign in and retry the request.",
            status_code=status.HTTP_401_UNAUTHORIZED,
        )


class ForbiddenError(KnownError):
    """The caller is authenticated but does not own the resource."""

    def __init__(self, message: str = "Access denied"):
        super().__init__(
            kind=FailureKind.FORBIDDEN,
            message=message,
            status_code=status.HTTP_403_FORBIDDEN,
        )


class InvalidInputError(KnownError):
    """Malformed or missing input."""

    def __init__(
        self,
        message: str,
        detail: str | None = None,
        kind: FailureKind = FailureKind.INVALID_INPUT,
    ):
        super().__init__(
            kind=kind,
            message=message,
            detail=detail,
            status_code=status.HTTP_400_BAD_REQUEST,
        )


class NotFoundError(KnownError):
    """Referenced entity is absent or already removed."""

    def __init__(self, message: str):
        super().__init__(
            kind=FailureKind.NOT_FOUND,
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
        )


class ConflictError(KnownError):
    """Insert would violate a unique key."""

    def __init__(self, message: str):
        super().__init__(
            kind=FailureKind.CONFLICT,
            message=message,
            status_code=status.HTTP_409_CONFLICT,
        )


class UpstreamError(KnownError):
    """
    A catalog or marketplace call failed.

    `service` names the upstream; the upstream error text is kept on the
    exception for logging only.
    """

    def __init__(self, service: str, cause: str | None = None):
        self.service = service
        self.cause = cause
        super().__init__(
            kind=FailureKind.EXTERNAL_API_ERROR,
            message=f"The {service} service is unavailable",
            suggestion="Try again in a few minutes.",
            status_code=status.HTTP_502_BAD_GATEWAY,
        )

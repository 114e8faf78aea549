"""
Failure envelope and known errors.

Deck construction never fails: over-requests are clamped. Everything around
it can fail (stores, suggestion provider, unknown card names), and those
failures are returned to the caller as explicit outcomes, never as an
unhandled exception.

Outcomes:
- success: the operation completed; `data` holds the result
- known_failure: the system knows what went wrong; `failure` explains it,
  and `data` may still hold a partial result
"""

from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class FailureKind(str, Enum):
    """What went wrong."""

    INVALID_INPUT = "invalid_input"

    # Lookups
    NOT_FOUND = "not_found"
    CARD_NOT_FOUND = "card_not_found"

    # Persistence
    REMOTE_STORE_ERROR = "remote_store_error"
    LOCAL_STORE_ERROR = "local_store_error"

    # AI suggestions
    SUGGESTION_PROVIDER_ERROR = "suggestion_provider_error"


class OutcomeType(str, Enum):
    SUCCESS = "success"
    KNOWN_FAILURE = "known_failure"


class FailureDetail(BaseModel):
    """A classified failure, ready to show to the player."""

    kind: FailureKind
    message: str = Field(..., description="What went wrong, in player terms")
    detail: str | None = Field(default=None, description="Underlying error text")
    suggestion: str | None = Field(default=None, description="What the player can do next")


class ApiResponse(BaseModel, Generic[T]):
    """Response envelope for operations that can fail outside deck construction."""

    outcome: OutcomeType
    data: T | None = None
    failure: FailureDetail | None = None

    @classmethod
    def success(cls, data: T) -> "ApiResponse[T]":
        return cls(outcome=OutcomeType.SUCCESS, data=data)

    @classmethod
    def known_failure(
        cls,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
        data: Any = None,
    ) -> "ApiResponse[Any]":
        """
        Build a known-failure response.

        `data` may carry a partial result, e.g. a save whose remote write
        failed but whose local mirror succeeded.
        """
        failure = FailureDetail(kind=kind, message=message, detail=detail, suggestion=suggestion)
        return cls(outcome=OutcomeType.KNOWN_FAILURE, data=data, failure=failure)


class KnownError(Exception):
    """
    An explainable failure.

    Attributes:
        kind: Failure classification
        message: Player-facing message
        detail: Underlying error text, if any
        suggestion: Next step for the player, if any
        status_code: HTTP status used when the error escapes an endpoint
    """

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
        status_code: int = 400,
    ):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.detail = detail
        self.suggestion = suggestion
        self.status_code = status_code

    def to_detail(self) -> FailureDetail:
        return FailureDetail(
            kind=self.kind,
            message=self.message,
            detail=self.detail,
            suggestion=self.suggestion,
        )

    def to_response(self) -> ApiResponse[Any]:
        return ApiResponse[Any](
            outcome=OutcomeType.KNOWN_FAILURE,
            failure=self.to_detail(),
        )


class CardNotFoundError(KnownError):
    """A card name or identifier did not resolve against the inventory."""

    def __init__(self, card_name: str):
        self.card_name = card_name
        super().__init__(
            kind=FailureKind.CARD_NOT_FOUND,
            message=f"Card '{card_name}' not found in your collection.",
            suggestion="Only cards you own can be added to a deck.",
            status_code=404,
        )


class RemoteStoreError(KnownError):
    """The remote deck store could not complete an operation."""

    def __init__(self, message: str, detail: str | None = None):
        super().__init__(
            kind=FailureKind.REMOTE_STORE_ERROR,
            message=message,
            detail=detail,
            suggestion="Your deck is kept in the local cache; try saving again later.",
            status_code=502,
        )


class LocalStoreError(KnownError):
    """The local fallback cache could not be read or written."""

    def __init__(self, message: str, detail: str | None = None):
        super().__init__(
            kind=FailureKind.LOCAL_STORE_ERROR,
            message=message,
            detail=detail,
            status_code=500,
        )


class SuggestionProviderError(KnownError):
    """The suggestion provider failed; the upstream message is kept verbatim."""

    def __init__(self, message: str, detail: str | None = None):
        super().__init__(
            kind=FailureKind.SUGGESTION_PROVIDER_ERROR,
            message=message,
            detail=detail,
            suggestion="You can still build the deck manually.",
            status_code=502,
        )

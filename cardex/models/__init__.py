from cardex.models.card import Card, Expansion
from cardex.models.failure import (
    ApiResponse,
    AuthenticationError,
    ConflictError,
    FailureDetail,
    FailureKind,
    ForbiddenError,
    InvalidInputError,
    KnownError,
    NotFoundError,
    OutcomeType,
    UpstreamError,
)
from cardex.models.listing import Listing, MarketplaceExpansion

__all__ = [
    "ApiResponse",
    "AuthenticationError",
    "Card",
    "ConflictError",
    "Expansion",
    "FailureDetail",
    "FailureKind",
    "ForbiddenError",
    "InvalidInputError",
    "KnownError",
    "Listing",
    "MarketplaceExpansion",
    "NotFoundError",
    "OutcomeType",
    "UpstreamError",
]

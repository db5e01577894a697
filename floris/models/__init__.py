from floris.models.camel import CamelModel
from floris.models.failure import (
    AlreadyClaimedError,
    CatalogError,
    ExpiredError,
    FailureKind,
    InsufficientFundsError,
    InvalidRequestError,
    KnownError,
    NotFoundError,
    NotShareableError,
    SelfClaimError,
    UnauthorizedError,
)
from floris.models.flower import (
    ItemDefinition,
    Rarity,
    ShareInfo,
    can_share,
    is_expired,
    resolve_letter_style,
)

__all__ = [
    "AlreadyClaimedError",
    "CamelModel",
    "CatalogError",
    "ExpiredError",
    "FailureKind",
    "InsufficientFundsError",
    "InvalidRequestError",
    "ItemDefinition",
    "KnownError",
    "NotFoundError",
    "NotShareableError",
    "Rarity",
    "SelfClaimError",
    "ShareInfo",
    "UnauthorizedError",
    "can_share",
    "is_expired",
    "resolve_letter_style",
]

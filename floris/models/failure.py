"""
Failure classification for the Floris API.

Every domain rule violation is raised as a KnownError subclass. The HTTP
boundary (see floris.main) converts it to its status code and a
``{"success": false, "message": ...}`` body. Anything that is not a
KnownError is an internal failure and becomes a 500.

Status mapping:
- Unauthorized                                   -> 401
- InvalidRequest / InsufficientFunds / SelfClaim -> 400
- NotShareable                                   -> 400
- NotFound                                       -> 404
- Expired / AlreadyClaimed                       -> 410
- Catalog inconsistency                          -> 500
"""

from enum import Enum
from typing import Any


class FailureKind(str, Enum):
    """Classification of failure types."""

    # Authentication
    UNAUTHORIZED = "unauthorized"

    # Input validation failures
    INVALID_REQUEST = "invalid_request"

    # Resource failures
    NOT_FOUND = "not_found"

    # Rule violations
    INSUFFICIENT_FUNDS = "insufficient_funds"
    NOT_SHAREABLE = "not_shareable"
    SELF_CLAIM = "self_claim"
    EXPIRED = "expired"
    ALREADY_CLAIMED = "already_claimed"

    # Internal errors
    CATALOG_INCONSISTENCY = "catalog_inconsistency"


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
        status_code: int = 400,
    ):
        self.kind = kind
        self.message = message
        self.detail = detail
        self.suggestion = suggestion
        self.status_code = status_code
        super().__init__(message)

    def to_body(self) -> dict[str, Any]:
        """Convert to the JSON body returned to the frontend."""
        body: dict[str, Any] = {
            "success": False,
            "kind": self.kind.value,
            "message": self.message,
        }
        if self.suggestion:
            body["suggestion"] = self.suggestion
        return body


class UnauthorizedError(KnownError):
    """Missing, malformed or expired bearer credential."""

    def __init__(self, detail: str | None = None):
        super().__init__(
            kind=FailureKind.UNAUTHORIZED,
            message="Authentication required.",
            detail=detail,
            suggestion="Sign in again to refresh your session.",
            status_code=401,
        )


class InvalidRequestError(KnownError):
    """A required field is missing or a value is out of range."""

    def __init__(self, message: str, detail: str | None = None):
        super().__init__(
            kind=FailureKind.INVALID_REQUEST,
            message=message,
            detail=detail,
            status_code=400,
        )


class NotFoundError(KnownError):
    """Unknown user, flower, instance or share token."""

    def __init__(self, message: str, detail: str | None = None):
        super().__init__(
            kind=FailureKind.NOT_FOUND,
            message=message,
            detail=detail,
            status_code=404,
        )


class InsufficientFundsError(KnownError):
    """
    Raised when a debit would take a balance below zero.

    The balance is left untouched.
    """

    def __init__(self, balance: int, required: int):
        self.balance = balance
        self.required = required
        super().__init__(
            kind=FailureKind.INSUFFICIENT_FUNDS,
            message=f"Not enough points: {required} required, {balance} available.",
            suggestion="Sell flowers to earn more points.",
            status_code=400,
        )


class NotShareableError(KnownError):
    """The flower was already shared or was itself received as a gift."""

    def __init__(self, user_flower_id: str):
        self.user_flower_id = user_flower_id
        super().__init__(
            kind=FailureKind.NOT_SHAREABLE,
            message="Flowers that were already shared or received as gifts cannot be shared.",
            detail=f"user_flower_id={user_flower_id}",
            status_code=400,
        )


class SelfClaimError(KnownError):
    """A sender tried to claim their own gift."""

    def __init__(self) -> None:
        super().__init__(
            kind=FailureKind.SELF_CLAIM,
            message="You cannot claim a flower you sent yourself.",
            status_code=400,
        )


class ExpiredError(KnownError):
    """The share link is past its expiry time."""

    def __init__(self, ttl_hours: int):
        super().__init__(
            kind=FailureKind.EXPIRED,
            message=f"This gift expired after {ttl_hours} hours.",
            status_code=410,
        )


class AlreadyClaimedError(KnownError):
    """The share link was already redeemed by someone."""

    def __init__(self) -> None:
        super().__init__(
            kind=FailureKind.ALREADY_CLAIMED,
            message="This gift has already been claimed.",
            status_code=410,
        )


class CatalogError(KnownError):
    """Stored data references a flower the catalog does not know about."""

    def __init__(self, message: str, detail: str | None = None):
        super().__init__(
            kind=FailureKind.CATALOG_INCONSISTENCY,
            message=message,
            detail=detail,
            status_code=500,
        )

"""
Flower domain models.

ItemDefinition is a catalog entry. Owned copies live in the database
(see floris.models.db.UserFlowerDB); the predicates here operate on any
object exposing the relevant fields so they stay independent of the ORM.
"""

from dataclasses import asdict, dataclass
from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import Any, Protocol

from floris.config import settings


class Rarity(str, Enum):
    """Gacha rarity tiers, ordered from most to least common."""

    COMMON = "Common"
    RARE = "Rare"
    LEGENDARY = "Legendary"


@dataclass(frozen=True)
class ItemDefinition:
    """A catalog flower. Loaded once at startup and never mutated."""

    id: int
    name: str
    rarity: Rarity
    price: int
    image: str
    description: str = ""

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["rarity"] = self.rarity.value
        return data


class Shareable(Protocol):
    is_gift: bool
    is_shared: bool


def can_share(flower: Shareable) -> bool:
    """A flower may be shared once, and never if it was received as a gift."""
    return not flower.is_gift and not flower.is_shared


def resolve_letter_style(letter_style: str | None) -> str:
    """Return the letter style, falling back to the configured default."""
    if letter_style is None or not letter_style.strip():
        return settings.default_letter_style
    return letter_style


def as_utc(moment: datetime) -> datetime:
    """Attach UTC to naive timestamps read back from the database."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC)


def is_expired(expires_at: datetime | None, now: datetime) -> bool:
    """
    Expiry is derived, never stored.

    A link is still valid at exactly ``expires_at``; it expires strictly after.
    Links without an expiry never expire.
    """
    if expires_at is None:
        return False
    return as_utc(now) > as_utc(expires_at)


@dataclass(frozen=True)
class ShareInfo:
    """
    Letter attached to a shared flower.

    Built through ``create`` so defaults are resolved in one place.
    """

    token: str | None
    letter_content: str
    sender_name: str
    letter_style: str
    expires_at: datetime | None = None
    received_at: datetime | None = None
    claimed: bool = False

    @classmethod
    def create(
        cls,
        token: str,
        letter_content: str | None,
        sender_name: str | None,
        letter_style: str | None,
        now: datetime,
        ttl_hours: int | None = None,
    ) -> "ShareInfo":
        hours = settings.share_ttl_hours if ttl_hours is None else ttl_hours
        return cls(
            token=token,
            letter_content=letter_content or "",
            sender_name=sender_name or "",
            letter_style=resolve_letter_style(letter_style),
            expires_at=now + timedelta(hours=hours),
        )

    @classmethod
    def received(
        cls,
        letter_content: str | None,
        sender_name: str | None,
        letter_style: str | None,
        now: datetime,
    ) -> "ShareInfo":
        """Snapshot handed to the receiver: same letter, no token, stamped received."""
        return cls(
            token=None,
            letter_content=letter_content or "",
            sender_name=sender_name or "",
            letter_style=resolve_letter_style(letter_style),
            received_at=now,
        )

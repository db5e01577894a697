"""
SQLAlchemy ORM models for persistent storage.

A user owns many flower instances. Share letters are stored flat on the
instance rather than in a nested document.
"""

import uuid
from datetime import UTC, datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from floris.config import settings
from floris.models.flower import ShareInfo


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class UserDB(Base):
    """
    A player account.

    Identity comes from the OAuth provider; (sns_id, provider) is unique.
    """

    __tablename__ = "users"
    __table_args__ = (UniqueConstraint("sns_id", "provider", name="uq_user_sns_provider"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    sns_id: Mapped[str] = mapped_column(String(255), index=True)
    provider: Mapped[str] = mapped_column(String(50), default="kakao")
    nickname: Mapped[str | None] = mapped_column(String(255), nullable=True)
    profile_image: Mapped[str | None] = mapped_column(Text, nullable=True)
    points: Mapped[int] = mapped_column(Integer, default=lambda: settings.starting_points)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self) -> str:
        return f"<UserDB(id={self.id}, points={self.points})>"


class UserFlowerDB(Base):
    """
    One concrete copy of a catalog flower held by one user.

    is_shared only ever goes False -> True; share_token is never reassigned.
    """

    __tablename__ = "user_flowers"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(String(255), index=True)
    flower_id: Mapped[int] = mapped_column(Integer, index=True)
    obtained_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    is_gift: Mapped[bool] = mapped_column(Boolean, default=False)
    is_shared: Mapped[bool] = mapped_column(Boolean, default=False)

    # Share letter
    share_token: Mapped[str | None] = mapped_column(
        String(36), unique=True, index=True, nullable=True
    )
    letter_content: Mapped[str | None] = mapped_column(Text, nullable=True)
    sender_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    letter_style: Mapped[str | None] = mapped_column(String(100), nullable=True)
    expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    received_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    claimed: Mapped[bool] = mapped_column(Boolean, default=False)

    def apply_share_info(self, info: ShareInfo) -> None:
        self.share_token = info.token
        self.letter_content = info.letter_content
        self.sender_name = info.sender_name
        self.letter_style = info.letter_style
        self.expires_at = info.expires_at
        self.received_at = info.received_at
        self.claimed = info.claimed

    def __repr__(self) -> str:
        return (
            f"<UserFlowerDB(id={self.id}, user={self.user_id}, flower={self.flower_id}, "
            f"gift={self.is_gift}, shared={self.is_shared})>"
        )

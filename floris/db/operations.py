"""
Database CRUD operations.

Provides async functions for reading and writing users and their flower
instances. Balance changes and claim marking are single conditional
UPDATE statements so concurrent requests cannot both pass the check.
"""

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from floris.models.db import UserDB, UserFlowerDB
from floris.models.flower import ShareInfo

# --- User Operations ---


async def get_user(session: AsyncSession, user_id: str) -> UserDB | None:
    """
    Get a user by id.

    Returns None if no such user exists.
    """
    return await session.get(UserDB, user_id)


async def get_user_by_sns(session: AsyncSession, sns_id: str, provider: str) -> UserDB | None:
    """Get a user by their OAuth identity."""
    result = await session.execute(
        select(UserDB).where(UserDB.sns_id == sns_id, UserDB.provider == provider)
    )
    return result.scalar_one_or_none()


async def get_or_create_user(
    session: AsyncSession,
    sns_id: str,
    provider: str = "kakao",
    nickname: str | None = None,
    profile_image: str | None = None,
) -> tuple[UserDB, bool]:
    """
    Get the account for an OAuth identity, creating it on first sign-in.

    Returns:
        Tuple of (user, created) where created is True if new.
    """
    user = await get_user_by_sns(session, sns_id, provider)
    if user:
        return user, False

    user = UserDB(
        sns_id=sns_id,
        provider=provider,
        nickname=nickname,
        profile_image=profile_image,
    )
    session.add(user)
    await session.flush()
    return user, True


async def debit_points(session: AsyncSession, user_id: str, amount: int) -> bool:
    """
    Subtract points if the balance covers it.

    Returns True if the row was updated, False if the balance was too low
    or the user does not exist.
    """
    result = await session.execute(
        update(UserDB)
        .where(UserDB.id == user_id, UserDB.points >= amount)
        .values(points=UserDB.points - amount)
        .execution_options(synchronize_session=False)
    )
    # rowcount is available on UPDATE results; type stubs incomplete for async
    return int(result.rowcount) == 1  # type: ignore[attr-defined]


async def credit_points(session: AsyncSession, user_id: str, amount: int) -> bool:
    """Add points. Returns False if the user does not exist."""
    result = await session.execute(
        update(UserDB)
        .where(UserDB.id == user_id)
        .values(points=UserDB.points + amount)
        .execution_options(synchronize_session=False)
    )
    return int(result.rowcount) == 1  # type: ignore[attr-defined]


# --- Flower Instance Operations ---


async def create_user_flower(
    session: AsyncSession,
    user_id: str,
    flower_id: int,
    is_gift: bool = False,
    share_info: ShareInfo | None = None,
) -> UserFlowerDB:
    """Create a new flower instance. New instances are never shared."""
    flower = UserFlowerDB(user_id=user_id, flower_id=flower_id, is_gift=is_gift, is_shared=False)
    if share_info is not None:
        flower.apply_share_info(share_info)
    session.add(flower)
    await session.flush()
    return flower


async def get_user_flower(session: AsyncSession, user_flower_id: str) -> UserFlowerDB | None:
    """Get a flower instance by its id."""
    return await session.get(UserFlowerDB, user_flower_id)


async def get_user_flower_by_token(session: AsyncSession, token: str) -> UserFlowerDB | None:
    """Get the flower instance holding a share token."""
    result = await session.execute(select(UserFlowerDB).where(UserFlowerDB.share_token == token))
    return result.scalar_one_or_none()


async def list_user_flowers(session: AsyncSession, user_id: str) -> list[UserFlowerDB]:
    """Get every instance a user holds, oldest first."""
    result = await session.execute(
        select(UserFlowerDB)
        .where(UserFlowerDB.user_id == user_id)
        .order_by(UserFlowerDB.obtained_at, UserFlowerDB.id)
    )
    return list(result.scalars().all())


async def count_owned_copies(session: AsyncSession, user_id: str, flower_id: int) -> int:
    """Count a user's non-gift instances of a flower, shared ones included."""
    result = await session.execute(
        select(func.count())
        .select_from(UserFlowerDB)
        .where(
            UserFlowerDB.user_id == user_id,
            UserFlowerDB.flower_id == flower_id,
            UserFlowerDB.is_gift.is_(False),
        )
    )
    return int(result.scalar_one())


async def find_sellable_flower(
    session: AsyncSession, user_id: str, flower_id: int
) -> UserFlowerDB | None:
    """
    Find one instance that can be sold.

    Copies are fungible; the oldest one is picked.
    """
    result = await session.execute(
        select(UserFlowerDB)
        .where(
            UserFlowerDB.user_id == user_id,
            UserFlowerDB.flower_id == flower_id,
            UserFlowerDB.is_gift.is_(False),
            UserFlowerDB.is_shared.is_(False),
        )
        .order_by(UserFlowerDB.obtained_at, UserFlowerDB.id)
        .limit(1)
    )
    return result.scalar_one_or_none()


async def delete_user_flower(session: AsyncSession, user_flower_id: str) -> bool:
    """
    Delete a flower instance.

    Returns True if deleted, False if it was already gone.
    """
    result = await session.execute(
        delete(UserFlowerDB)
        .where(UserFlowerDB.id == user_flower_id)
        .execution_options(synchronize_session=False)
    )
    return int(result.rowcount) == 1  # type: ignore[attr-defined]


async def mark_shared(session: AsyncSession, flower: UserFlowerDB, share_info: ShareInfo) -> bool:
    """
    Attach a share letter and flag the instance as shared.

    Guarded on is_shared and share_token so an instance is shared at most
    once even under concurrent requests. Returns False if another request
    got there first.
    """
    result = await session.execute(
        update(UserFlowerDB)
        .where(
            UserFlowerDB.id == flower.id,
            UserFlowerDB.is_shared.is_(False),
            UserFlowerDB.is_gift.is_(False),
            UserFlowerDB.share_token.is_(None),
        )
        .values(
            is_shared=True,
            share_token=share_info.token,
            letter_content=share_info.letter_content,
            sender_name=share_info.sender_name,
            letter_style=share_info.letter_style,
            expires_at=share_info.expires_at,
            claimed=False,
        )
        .execution_options(synchronize_session=False)
    )
    if int(result.rowcount) != 1:  # type: ignore[attr-defined]
        return False
    await session.refresh(flower)
    return True


async def mark_claimed(session: AsyncSession, token: str) -> bool:
    """
    Compare-and-set the claimed flag for a share token.

    Returns True only for the single caller that flips it from False to True.
    """
    result = await session.execute(
        update(UserFlowerDB)
        .where(UserFlowerDB.share_token == token, UserFlowerDB.claimed.is_(False))
        .values(claimed=True)
        .execution_options(synchronize_session=False)
    )
    return int(result.rowcount) == 1  # type: ignore[attr-defined]


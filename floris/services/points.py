"""
Point ledger.

The only code that changes a user's balance. Balances are non-negative
integers; a debit that would go below zero fails and changes nothing.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from floris.db.operations import credit_points, debit_points
from floris.models.db import UserDB
from floris.models.failure import InsufficientFundsError, InvalidRequestError, NotFoundError

logger = logging.getLogger(__name__)


def _check_amount(amount: int) -> None:
    if amount < 0:
        raise InvalidRequestError(f"Point amount must not be negative (got {amount})")


async def debit(session: AsyncSession, user: UserDB, amount: int) -> int:
    """
    Take points from a user.

    Returns:
        The new balance.

    Raises:
        InvalidRequestError: If amount is negative
        InsufficientFundsError: If the balance is lower than amount
    """
    _check_amount(amount)
    if not await debit_points(session, user.id, amount):
        await session.refresh(user)
        raise InsufficientFundsError(balance=user.points, required=amount)

    await session.refresh(user)
    logger.debug("Debited %d points from %s, balance %d", amount, user.id, user.points)
    return user.points


async def credit(session: AsyncSession, user: UserDB, amount: int) -> int:
    """
    Give points to a user.

    Returns:
        The new balance.
    """
    _check_amount(amount)
    if not await credit_points(session, user.id, amount):
        raise NotFoundError("User not found", detail=f"user_id={user.id}")

    await session.refresh(user)
    logger.debug("Credited %d points to %s, balance %d", amount, user.id, user.points)
    return user.points

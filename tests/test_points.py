"""Tests for the point ledger."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from floris.models.db import UserDB
from floris.models.failure import InsufficientFundsError, InvalidRequestError
from floris.services.points import credit, debit


class TestDebit:
    async def test_debit_reduces_balance(self, session: AsyncSession, user: UserDB) -> None:
        assert await debit(session, user, 40) == 60
        assert user.points == 60

    async def test_debit_entire_balance(self, session: AsyncSession, user: UserDB) -> None:
        assert await debit(session, user, 100) == 0

    async def test_overdraw_rejected(self, session: AsyncSession, user: UserDB) -> None:
        with pytest.raises(InsufficientFundsError) as exc_info:
            await debit(session, user, 101)

        assert exc_info.value.balance == 100
        assert exc_info.value.required == 101
        assert user.points == 100

    async def test_negative_amount_rejected(self, session: AsyncSession, user: UserDB) -> None:
        with pytest.raises(InvalidRequestError):
            await debit(session, user, -5)
        assert user.points == 100

    async def test_balance_never_negative(self, session: AsyncSession, user: UserDB) -> None:
        """Repeated debits stop at zero."""
        for _ in range(5):
            try:
                await debit(session, user, 30)
            except InsufficientFundsError:
                pass
            assert user.points >= 0
        assert user.points == 10


class TestCredit:
    async def test_credit_increases_balance(self, session: AsyncSession, user: UserDB) -> None:
        assert await credit(session, user, 120) == 220

    async def test_zero_credit_allowed(self, session: AsyncSession, user: UserDB) -> None:
        assert await credit(session, user, 0) == 100

    async def test_negative_credit_rejected(self, session: AsyncSession, user: UserDB) -> None:
        with pytest.raises(InvalidRequestError):
            await credit(session, user, -1)

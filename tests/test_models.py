from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import pytest

from floris.models.failure import (
    AlreadyClaimedError,
    ExpiredError,
    FailureKind,
    InsufficientFundsError,
    NotFoundError,
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

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


@dataclass
class _Flower:
    is_gift: bool = False
    is_shared: bool = False


class TestItemDefinition:
    def test_immutable(self) -> None:
        flower = ItemDefinition(id=1, name="Daisy", rarity=Rarity.COMMON, price=30, image="/d.png")
        with pytest.raises(AttributeError):
            flower.price = 10  # type: ignore[misc]

    def test_to_dict_uses_rarity_name(self) -> None:
        flower = ItemDefinition(
            id=9, name="Lotus", rarity=Rarity.LEGENDARY, price=500, image="/l.png"
        )
        data = flower.to_dict()
        assert data == {
            "id": 9,
            "name": "Lotus",
            "rarity": "Legendary",
            "price": 500,
            "image": "/l.png",
            "description": "",
        }


class TestCanShare:
    def test_fresh_flower_can_be_shared(self) -> None:
        assert can_share(_Flower()) is True

    def test_shared_flower_cannot_be_shared(self) -> None:
        assert can_share(_Flower(is_shared=True)) is False

    def test_gift_cannot_be_shared(self) -> None:
        assert can_share(_Flower(is_gift=True)) is False

    def test_once_false_stays_false(self) -> None:
        """Nothing resets is_shared, so a consumed flower is never shareable again."""
        flower = _Flower()
        flower.is_shared = True
        for _ in range(3):
            assert can_share(flower) is False


class TestLetterStyle:
    def test_missing_style_uses_default(self) -> None:
        assert resolve_letter_style(None) == "bg-rose-50"

    def test_blank_style_uses_default(self) -> None:
        assert resolve_letter_style("   ") == "bg-rose-50"

    def test_explicit_style_kept(self) -> None:
        assert resolve_letter_style("bg-sky-50") == "bg-sky-50"


class TestExpiry:
    def test_valid_just_before_expiry(self) -> None:
        assert is_expired(NOW, NOW - timedelta(milliseconds=1)) is False

    def test_valid_at_exact_expiry(self) -> None:
        assert is_expired(NOW, NOW) is False

    def test_expired_just_after(self) -> None:
        assert is_expired(NOW, NOW + timedelta(milliseconds=1)) is True

    def test_naive_timestamps_treated_as_utc(self) -> None:
        """SQLite hands back naive datetimes."""
        naive = NOW.replace(tzinfo=None)
        assert is_expired(naive, NOW + timedelta(seconds=1)) is True
        assert is_expired(naive, NOW - timedelta(seconds=1)) is False

    def test_no_expiry_never_expires(self) -> None:
        assert is_expired(None, NOW) is False


class TestShareInfo:
    def test_create_resolves_defaults(self) -> None:
        info = ShareInfo.create(
            token="t-1", letter_content=None, sender_name=None, letter_style=None, now=NOW
        )
        assert info.letter_style == "bg-rose-50"
        assert info.letter_content == ""
        assert info.sender_name == ""
        assert info.claimed is False

    def test_create_expires_after_ttl(self) -> None:
        info = ShareInfo.create(
            token="t-1", letter_content="hi", sender_name="Mina", letter_style=None, now=NOW
        )
        assert info.expires_at == NOW + timedelta(hours=24)

    def test_received_keeps_letter(self) -> None:
        later = NOW + timedelta(hours=1)
        copy = ShareInfo.received("hi", "Mina", "bg-sky-50", later)

        assert copy.token is None
        assert copy.letter_content == "hi"
        assert copy.sender_name == "Mina"
        assert copy.letter_style == "bg-sky-50"
        assert copy.received_at == later
        assert copy.expires_at is None
        assert copy.claimed is False

    def test_received_fills_defaults(self) -> None:
        copy = ShareInfo.received(None, None, None, NOW)

        assert copy.letter_content == ""
        assert copy.sender_name == ""
        assert copy.letter_style == "bg-rose-50"
        assert copy.received_at == NOW


class TestFailures:
    @pytest.mark.parametrize(
        ("error", "status", "kind"),
        [
            (UnauthorizedError(), 401, FailureKind.UNAUTHORIZED),
            (NotFoundError("missing"), 404, FailureKind.NOT_FOUND),
            (InsufficientFundsError(balance=10, required=100), 400, FailureKind.INSUFFICIENT_FUNDS),
            (SelfClaimError(), 400, FailureKind.SELF_CLAIM),
            (ExpiredError(24), 410, FailureKind.EXPIRED),
            (AlreadyClaimedError(), 410, FailureKind.ALREADY_CLAIMED),
        ],
    )
    def test_status_mapping(self, error, status: int, kind: FailureKind) -> None:
        assert error.status_code == status
        assert error.kind == kind

    def test_body_shape(self) -> None:
        body = NotFoundError("Flower not found", detail="flower_id=3").to_body()
        assert body["success"] is False
        assert body["message"] == "Flower not found"
        assert "detail" not in body

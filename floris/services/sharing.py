"""
Share and gift lifecycle.

A flower instance moves through:

    Owned --create_link--> Shared (pending) --claim--> Claimed
                                  |
                                  +-- now > expires_at --> Expired

Expired is never stored; it is read off expires_at on every lookup.
Claiming never touches the sender's letter: it sets ``claimed`` on the
original through a compare-and-set and inserts a fresh gift instance for
the receiver, both in the caller's transaction.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from floris.config import settings
from floris.db.operations import (
    create_user_flower,
    get_user_flower,
    get_user_flower_by_token,
    mark_claimed,
    mark_shared,
)
from floris.models.db import UserFlowerDB
from floris.models.failure import (
    AlreadyClaimedError,
    CatalogError,
    ExpiredError,
    InvalidRequestError,
    NotFoundError,
    NotShareableError,
    SelfClaimError,
)
from floris.models.flower import (
    ItemDefinition,
    ShareInfo,
    can_share,
    is_expired,
    resolve_letter_style,
)
from floris.services.catalog import Catalog, get_flower

logger = logging.getLogger(__name__)

# Share copy shown in KakaoTalk and in the copy-paste message
SHARE_TITLE = "[Floris] 일상에 꽃을 심다"
SHARE_BUTTON_TITLE = "매일 피어나는 작은 정원, 플로리스에서 확인하세요."
ANONYMOUS_DESCRIPTION = (
    "🌸 편지와 함께 꽃이 도착했습니다. 24시간 내 확인 하지 않으면 꽃이 시들어요!"
)
SENDER_DESCRIPTION = (
    "🌸 {sender}님으로부터 편지와 함께 꽃이 도착했습니다.\n"
    "24시간 내 확인 하지 않으면 꽃이 시들어요!"
)
CLAIM_SUCCESS_MESSAGE = "꽃이 편지함에 추가되었습니다!"


@dataclass(frozen=True)
class KakaoLink:
    mobile_web_url: str
    web_url: str


@dataclass(frozen=True)
class KakaoOptions:
    """Payload for the KakaoTalk share SDK. The shape is fixed by Kakao."""

    title: str
    description: str
    image_url: str
    button_title: str
    link: KakaoLink


@dataclass(frozen=True)
class ShareLink:
    share_link: str
    message: str
    kakao_options: KakaoOptions
    instance: UserFlowerDB


@dataclass(frozen=True)
class ShareView:
    sender_name: str
    letter_content: str
    letter_style: str
    flower_id: int
    flower_info: dict[str, Any]


def _now(now: datetime | None) -> datetime:
    return datetime.now(UTC) if now is None else now


def share_url(token: str, frontend_url: str | None = None) -> str:
    base = (frontend_url or settings.frontend_url).rstrip("/")
    return f"{base}/share/{token}"


def share_description(sender_name: str | None) -> str:
    """Teaser text for the share message; the letter itself stays hidden."""
    if sender_name and sender_name.strip() and sender_name != settings.anonymous_sender_name:
        return SENDER_DESCRIPTION.format(sender=sender_name)
    return ANONYMOUS_DESCRIPTION


def build_share_payload(
    token: str, flower: ItemDefinition, sender_name: str | None
) -> tuple[str, str, KakaoOptions]:
    """
    Build the link, the copy-paste message and the Kakao payload.

    Returns:
        Tuple of (share_link, message, kakao_options).
    """
    url = share_url(token)
    description = share_description(sender_name)
    message = f"{SHARE_TITLE}\n\n{description}\n\n{SHARE_BUTTON_TITLE}\n{url}"
    kakao = KakaoOptions(
        title=SHARE_TITLE,
        description=description,
        image_url=f"{settings.frontend_url.rstrip('/')}{flower.image}",
        button_title=SHARE_BUTTON_TITLE,
        link=KakaoLink(mobile_web_url=url, web_url=url),
    )
    return url, message, kakao


def _require_flower(catalog: Catalog, flower_id: int) -> ItemDefinition:
    definition = get_flower(catalog, flower_id)
    if definition is None:
        raise CatalogError(
            "Flower information could not be found", detail=f"flower_id={flower_id}"
        )
    return definition


def _check_pending(flower: UserFlowerDB | None, now: datetime) -> UserFlowerDB:
    """Apply the lookup rules shared by view and claim."""
    if flower is None:
        raise NotFoundError("This share link is not valid")
    if is_expired(flower.expires_at, now):
        raise ExpiredError(settings.share_ttl_hours)
    if flower.claimed:
        raise AlreadyClaimedError()
    return flower


async def create_link(
    session: AsyncSession,
    catalog: Catalog,
    user_flower_id: str | None = None,
    flower_id: int | None = None,
    letter_content: str | None = None,
    sender_name: str | None = None,
    letter_style: str | None = None,
    now: datetime | None = None,
) -> ShareLink:
    """
    Turn an owned flower into a pending gift.

    Shares the stored instance ``user_flower_id`` when given. Otherwise a
    fresh instance of catalog flower ``flower_id`` is created for the guest
    owner and shared straight away.

    Raises:
        InvalidRequestError: If neither id is given
        NotFoundError: If the instance or catalog flower does not exist
        NotShareableError: If the instance was already shared or is a gift
        CatalogError: If the instance references a flower missing from the catalog
    """
    now = _now(now)

    if user_flower_id:
        instance = await get_user_flower(session, user_flower_id)
        if instance is None:
            raise NotFoundError("Flower not found", detail=f"user_flower_id={user_flower_id}")
        if not can_share(instance):
            raise NotShareableError(user_flower_id)
    elif flower_id is not None:
        if get_flower(catalog, flower_id) is None:
            raise NotFoundError("Flower not found", detail=f"flower_id={flower_id}")
        instance = await create_user_flower(session, settings.guest_user_id, flower_id)
    else:
        raise InvalidRequestError("A flower id is required")

    definition = _require_flower(catalog, instance.flower_id)

    token = str(uuid.uuid4())
    info = ShareInfo.create(
        token=token,
        letter_content=letter_content,
        sender_name=sender_name,
        letter_style=letter_style,
        now=now,
    )
    if not await mark_shared(session, instance, info):
        raise NotShareableError(instance.id)

    url, message, kakao = build_share_payload(token, definition, sender_name)
    logger.info("Flower %s (%s) shared by %s", instance.id, instance.flower_id, instance.user_id)
    return ShareLink(share_link=url, message=message, kakao_options=kakao, instance=instance)


async def view_link(
    session: AsyncSession, token: str, catalog: Catalog, now: datetime | None = None
) -> ShareView:
    """
    Read a pending gift without changing it.

    Raises:
        NotFoundError: If no instance holds the token
        ExpiredError: If the link is past expires_at
        AlreadyClaimedError: If the gift was already claimed
    """
    flower = _check_pending(await get_user_flower_by_token(session, token), _now(now))
    definition = _require_flower(catalog, flower.flower_id)
    return ShareView(
        sender_name=flower.sender_name or "",
        letter_content=flower.letter_content or "",
        letter_style=resolve_letter_style(flower.letter_style),
        flower_id=flower.flower_id,
        flower_info=definition.to_dict(),
    )


async def claim(
    session: AsyncSession,
    token: str | None,
    receiver_user_id: str | None,
    now: datetime | None = None,
) -> UserFlowerDB:
    """
    Redeem a share token into a new gift instance for the receiver.

    Exactly one claim per token can succeed: the claimed flag is flipped
    with a conditional update and losers see AlreadyClaimedError.

    Returns:
        The receiver's new instance.

    Raises:
        InvalidRequestError: If token or receiver is blank
        NotFoundError: If no instance holds the token
        ExpiredError: If the link is past expires_at
        AlreadyClaimedError: If the gift was already claimed
        SelfClaimError: If the receiver is the sender
    """
    if not token or not receiver_user_id:
        raise InvalidRequestError("A token and a receiver id are required")

    now = _now(now)
    original = _check_pending(await get_user_flower_by_token(session, token), now)

    if original.user_id == receiver_user_id:
        raise SelfClaimError()

    if not await mark_claimed(session, token):
        raise AlreadyClaimedError()
    await session.refresh(original)

    gift = await create_user_flower(
        session,
        receiver_user_id,
        original.flower_id,
        is_gift=True,
        share_info=ShareInfo.received(
            original.letter_content,
            original.sender_name,
            original.letter_style,
            now,
        ),
    )

    logger.info(
        "Gift %s claimed by %s (new instance %s)", original.id, receiver_user_id, gift.id
    )
    return gift

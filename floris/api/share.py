"""
Share API endpoints.

Create gift links, open them, and claim them. None of these routes require
a bearer token; the guest flow shares a catalog flower directly.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends
from pydantic import Field
from sqlalchemy.ext.asyncio import AsyncSession

from floris.db.database import get_session
from floris.models.camel import CamelModel
from floris.services.catalog import Catalog, get_catalog
from floris.services.sharing import CLAIM_SUCCESS_MESSAGE, claim, create_link, view_link

router = APIRouter(prefix="/share", tags=["share"])


class CreateLinkRequest(CamelModel):
    """Request model for creating a share link. One of the two ids is required."""

    user_flower_id: str | None = Field(
        default=None,
        description="Stored instance to share (signed-in flow)",
    )
    flower_id: int | None = Field(
        default=None,
        description="Catalog flower to share without an account (guest flow)",
    )
    letter_content: str | None = None
    sender_name: str | None = None
    letter_style: str | None = Field(
        default=None,
        description="Letter background class; defaults to bg-rose-50",
    )


class KakaoLinkModel(CamelModel):
    mobile_web_url: str
    web_url: str


class KakaoOptionsModel(CamelModel):
    """KakaoTalk share SDK payload."""

    title: str
    description: str
    image_url: str
    button_title: str
    link: KakaoLinkModel


class CreateLinkResponse(CamelModel):
    success: bool = True
    share_link: str
    message: str
    kakao_options: KakaoOptionsModel


class ShareData(CamelModel):
    sender_name: str
    letter_content: str
    letter_style: str
    flower_id: int
    flower_info: dict[str, Any]


class ShareViewResponse(CamelModel):
    success: bool = True
    data: ShareData


class ClaimRequest(CamelModel):
    """Request model for claiming a gift."""

    token: str | None = None
    receiver_user_id: str | None = None


class ClaimResponse(CamelModel):
    success: bool = True
    message: str


@router.post("/create-link", response_model=CreateLinkResponse)
async def create_share_link(
    request: CreateLinkRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
    catalog: Annotated[Catalog, Depends(get_catalog)],
) -> CreateLinkResponse:
    """
    Share a flower with a letter.

    The flower is consumed: it disappears from the sender's inventory and
    can never be shared again. The link expires after 24 hours.
    """
    link = await create_link(
        session,
        catalog,
        user_flower_id=request.user_flower_id,
        flower_id=request.flower_id,
        letter_content=request.letter_content,
        sender_name=request.sender_name,
        letter_style=request.letter_style,
    )
    kakao = link.kakao_options
    return CreateLinkResponse(
        share_link=link.share_link,
        message=link.message,
        kakao_options=KakaoOptionsModel(
            title=kakao.title,
            description=kakao.description,
            image_url=kakao.image_url,
            button_title=kakao.button_title,
            link=KakaoLinkModel(
                mobile_web_url=kakao.link.mobile_web_url,
                web_url=kakao.link.web_url,
            ),
        ),
    )


@router.post("/claim", response_model=ClaimResponse)
async def claim_gift(
    request: ClaimRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> ClaimResponse:
    """
    Add a shared flower to the receiver's gift box.

    Each link can be claimed once, and never by the person who sent it.
    """
    await claim(session, request.token, request.receiver_user_id)
    return ClaimResponse(message=CLAIM_SUCCESS_MESSAGE)


@router.get("/{token}", response_model=ShareViewResponse)
async def get_share(
    token: str,
    session: Annotated[AsyncSession, Depends(get_session)],
    catalog: Annotated[Catalog, Depends(get_catalog)],
) -> ShareViewResponse:
    """
    Open a share link and read the letter.

    Returns 410 once the link has expired or been claimed. Reading never
    changes the gift.
    """
    view = await view_link(session, token, catalog)
    return ShareViewResponse(
        data=ShareData(
            sender_name=view.sender_name,
            letter_content=view.letter_content,
            letter_style=view.letter_style,
            flower_id=view.flower_id,
            flower_info=view.flower_info,
        )
    )

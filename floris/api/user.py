"""
User API endpoints.

Garden view, gacha pulls and selling. All routes require a bearer token.
"""

from datetime import datetime
from typing import Annotated, Any

from fastapi import APIRouter, Depends
from pydantic import Field
from sqlalchemy.ext.asyncio import AsyncSession

from floris.auth import CurrentUser
from floris.db.database import get_session
from floris.models.camel import CamelModel
from floris.services.catalog import Catalog, get_catalog
from floris.services.gacha import draw
from floris.services.inventory import get_inventory_view, sell

router = APIRouter(prefix="/user", tags=["user"])


class GiftBoxEntry(CamelModel):
    """A received gift with its letter."""

    id: str
    flower_id: int
    flower_info: dict[str, Any]
    sender_name: str = ""
    letter_content: str = ""
    letter_style: str
    received_at: datetime | None = None


class GardenResponse(CamelModel):
    """Response model for the current user's garden."""

    points: int
    inventory: dict[int, int] = Field(
        default_factory=dict,
        description="Flower id to number of copies that are neither gifts nor shared",
    )
    gift_box: list[GiftBoxEntry] = Field(default_factory=list)


class GachaResponse(CamelModel):
    """Response model for a gacha pull."""

    success: bool = True
    points: int
    flower: dict[str, Any]
    is_new: bool


class SellRequest(CamelModel):
    """Request model for selling one copy of a flower."""

    flower_id: int = Field(..., description="Catalog id of the flower to sell", examples=[3])


class SellResponse(CamelModel):
    """Response model for a sale."""

    success: bool = True
    points: int
    sold_id: str


@router.get("/me", response_model=GardenResponse)
async def get_me(
    user: CurrentUser,
    session: Annotated[AsyncSession, Depends(get_session)],
    catalog: Annotated[Catalog, Depends(get_catalog)],
) -> GardenResponse:
    """
    Get the current user's points, inventory and gift box.

    Gifts whose flower no longer exists in the catalog are left out.
    """
    view = await get_inventory_view(session, user, catalog)
    return GardenResponse(
        points=view.points,
        inventory=view.inventory,
        gift_box=[
            GiftBoxEntry(
                id=gift.id,
                flower_id=gift.flower_id,
                flower_info=gift.flower_info,
                sender_name=gift.sender_name,
                letter_content=gift.letter_content,
                letter_style=gift.letter_style,
                received_at=gift.received_at,
            )
            for gift in view.gift_box
        ],
    )


@router.post("/gacha", response_model=GachaResponse)
async def gacha(
    user: CurrentUser,
    session: Annotated[AsyncSession, Depends(get_session)],
    catalog: Annotated[Catalog, Depends(get_catalog)],
) -> GachaResponse:
    """
    Spend points on one random flower.

    Fails with 400 when the balance cannot cover the pull; the balance is
    left unchanged in that case.
    """
    result = await draw(session, user, catalog)
    return GachaResponse(
        points=result.points,
        flower=result.flower.to_dict(),
        is_new=result.is_new,
    )


@router.post("/sell", response_model=SellResponse)
async def sell_flower(
    request: SellRequest,
    user: CurrentUser,
    session: Annotated[AsyncSession, Depends(get_session)],
    catalog: Annotated[Catalog, Depends(get_catalog)],
) -> SellResponse:
    """Sell one owned copy of a flower for its catalog price."""
    result = await sell(session, user, request.flower_id, catalog)
    return SellResponse(points=result.points, sold_id=result.sold_id)

"""
Inventory ledger.

Builds the garden view (counts of owned flowers plus the gift box) and
handles selling flowers back for points.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from floris.db.operations import delete_user_flower, find_sellable_flower, list_user_flowers
from floris.models.db import UserDB
from floris.models.failure import NotFoundError
from floris.models.flower import resolve_letter_style
from floris.services.catalog import Catalog, get_flower
from floris.services.points import credit

logger = logging.getLogger(__name__)


@dataclass
class GiftEntry:
    """A received gift as shown in the gift box."""

    id: str
    flower_id: int
    flower_info: dict[str, Any]
    sender_name: str
    letter_content: str
    letter_style: str
    received_at: datetime | None


@dataclass
class InventoryView:
    """Everything the garden screen needs."""

    points: int
    inventory: dict[int, int] = field(default_factory=dict)
    gift_box: list[GiftEntry] = field(default_factory=list)


@dataclass(frozen=True)
class SellResult:
    points: int
    sold_id: str


async def get_inventory_view(
    session: AsyncSession, user: UserDB, catalog: Catalog
) -> InventoryView:
    """
    Assemble a user's garden.

    Inventory counts only flowers the user may still act on: not gifts and
    not already shared. Every gift goes to the gift box; gifts whose flower
    is missing from the catalog are skipped.
    """
    flowers = await list_user_flowers(session, user.id)

    counts: Counter[int] = Counter(
        f.flower_id for f in flowers if not f.is_gift and not f.is_shared
    )

    # Gift copies are created at claim time, so obtained_at order is arrival order
    gifts = [f for f in flowers if f.is_gift]

    gift_box: list[GiftEntry] = []
    for gift in gifts:
        definition = get_flower(catalog, gift.flower_id)
        if definition is None:
            logger.warning("Skipping gift %s: flower %s not in catalog", gift.id, gift.flower_id)
            continue
        gift_box.append(
            GiftEntry(
                id=gift.id,
                flower_id=gift.flower_id,
                flower_info=definition.to_dict(),
                sender_name=gift.sender_name or "",
                letter_content=gift.letter_content or "",
                letter_style=resolve_letter_style(gift.letter_style),
                received_at=gift.received_at,
            )
        )

    return InventoryView(points=user.points, inventory=dict(counts), gift_box=gift_box)


async def sell(session: AsyncSession, user: UserDB, flower_id: int, catalog: Catalog) -> SellResult:
    """
    Sell one owned copy of a flower for its catalog price.

    Only copies that are neither gifts nor shared can be sold. The delete
    and the credit happen in the caller's transaction.

    Raises:
        NotFoundError: If the flower is unknown or the user has no sellable copy
    """
    definition = get_flower(catalog, flower_id)
    if definition is None:
        raise NotFoundError("Flower not found", detail=f"flower_id={flower_id}")

    instance = await find_sellable_flower(session, user.id, flower_id)
    if instance is None:
        raise NotFoundError("You have no sellable copy of this flower")

    sold_id = instance.id
    if not await delete_user_flower(session, sold_id):
        # Lost a race with another sell of the same copy
        raise NotFoundError("You have no sellable copy of this flower")
    session.expunge(instance)

    points = await credit(session, user, definition.price)
    logger.info("User %s sold flower %s (%s) for %d", user.id, flower_id, sold_id, definition.price)
    return SellResult(points=points, sold_id=sold_id)

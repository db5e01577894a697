"""
Gacha engine.

A draw costs a fixed number of points and yields one flower. The rarity
tier is picked first, then a flower uniformly within that tier.

Tier selection uses right-tail thresholds, walking from the rarest tier
down. With rates {Common: 0.6, Rare: 0.3, Legendary: 0.1} and r in [0, 1):

    r > 0.9         -> Legendary
    0.6 < r <= 0.9  -> Rare
    r <= 0.6        -> Common
"""

import logging
import math
import random
from collections.abc import Mapping
from dataclasses import dataclass
from functools import lru_cache

from sqlalchemy.ext.asyncio import AsyncSession

from floris.config import settings
from floris.db.operations import count_owned_copies, create_user_flower
from floris.models.db import UserDB, UserFlowerDB
from floris.models.failure import CatalogError
from floris.models.flower import ItemDefinition, Rarity
from floris.services.catalog import Catalog, flowers_by_rarity
from floris.services.points import debit

logger = logging.getLogger(__name__)

# Rarest first
TIER_ORDER: tuple[Rarity, ...] = (Rarity.LEGENDARY, Rarity.RARE, Rarity.COMMON)


@dataclass(frozen=True)
class DrawResult:
    """Outcome of one gacha pull."""

    points: int
    flower: ItemDefinition
    is_new: bool
    instance: UserFlowerDB


def validate_rates(rates: Mapping[str, float]) -> dict[Rarity, float]:
    """
    Parse and check tier probabilities.

    Every tier must be present and non-negative, and the total must be 1.0.

    Raises:
        ValueError: If the rates are unusable
    """
    parsed: dict[Rarity, float] = {}
    for name, probability in rates.items():
        rarity = Rarity(name)
        if probability < 0:
            raise ValueError(f"Rate for {rarity.value} must not be negative")
        parsed[rarity] = float(probability)

    missing = [r.value for r in Rarity if r not in parsed]
    if missing:
        raise ValueError(f"Missing gacha rates for: {', '.join(missing)}")

    total = math.fsum(parsed.values())
    if not math.isclose(total, 1.0, abs_tol=1e-9):
        raise ValueError(f"Gacha rates must sum to 1.0, got {total}")

    return parsed


@lru_cache(maxsize=1)
def configured_rates() -> dict[Rarity, float]:
    """Validated rates from settings, checked once at startup."""
    return validate_rates(settings.gacha_rates)


def pick_rarity(r: float, rates: Mapping[Rarity, float]) -> Rarity:
    """Map a uniform draw r in [0, 1) to a tier."""
    threshold = 1.0
    for rarity in TIER_ORDER[:-1]:
        threshold -= rates[rarity]
        if r > threshold:
            return rarity
    return TIER_ORDER[-1]


def pick_flower(rarity: Rarity, catalog: Catalog, rng: random.Random) -> ItemDefinition:
    """
    Pick a flower uniformly within a tier.

    Falls back to the whole catalog when the tier has no flowers.

    Raises:
        CatalogError: If the catalog is empty
    """
    pool = flowers_by_rarity(catalog, rarity)
    if not pool:
        logger.warning("No %s flowers in catalog, drawing from the full catalog", rarity.value)
        pool = sorted(catalog.values(), key=lambda f: f.id)
    if not pool:
        raise CatalogError("Flower catalog is empty")
    return rng.choice(pool)


async def draw(
    session: AsyncSession,
    user: UserDB,
    catalog: Catalog,
    cost: int | None = None,
    rates: Mapping[str, float] | None = None,
    rng: random.Random | None = None,
) -> DrawResult:
    """
    Spend points on one gacha pull.

    The debit and the new instance are written in the caller's transaction,
    so they commit or roll back together.

    Raises:
        InsufficientFundsError: If the user cannot afford the pull
    """
    if cost is None:
        cost = settings.gacha_cost
    tier_rates = configured_rates() if rates is None else validate_rates(rates)
    if rng is None:
        rng = random.Random()

    points = await debit(session, user, cost)

    rarity = pick_rarity(rng.random(), tier_rates)
    flower = pick_flower(rarity, catalog, rng)

    is_new = await count_owned_copies(session, user.id, flower.id) == 0
    instance = await create_user_flower(session, user.id, flower.id)

    logger.info(
        "User %s drew %s (%s, new=%s), balance %d",
        user.id,
        flower.id,
        flower.rarity.value,
        is_new,
        points,
    )
    return DrawResult(points=points, flower=flower, is_new=is_new, instance=instance)

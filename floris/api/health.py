"""
Health check endpoints.

Liveness, readiness (database round-trip plus catalog load) and the plain
banner served at the root path.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from floris.db.database import get_session
from floris.models.failure import CatalogError
from floris.services.catalog import get_catalog

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    database: str | None = None
    catalog_size: int | None = None


@router.get("/", response_class=PlainTextResponse, include_in_schema=False)
async def banner() -> str:
    return "Floris API Server is running!"


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """
    Liveness probe.

    Returns healthy if the service is running.
    Does not check dependencies.
    """
    return HealthResponse(status="healthy")


@router.get(
    "/ready",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse}},
)
async def ready(
    response: Response,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> HealthResponse:
    """
    Readiness probe.

    Checks database connectivity and that the flower catalog loads.
    Returns 503 if either is unavailable.
    """
    try:
        await session.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        logger.warning("Readiness check failed: database unavailable (%s)", e)
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return HealthResponse(status="not ready", database="disconnected")

    try:
        catalog = get_catalog()
    except (FileNotFoundError, ValueError, CatalogError) as e:
        logger.warning("Readiness check failed: catalog unavailable (%s)", e)
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return HealthResponse(status="not ready", database="connected")

    return HealthResponse(status="ready", database="connected", catalog_size=len(catalog))

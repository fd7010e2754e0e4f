"""Satellite catalog API route."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from spacetraffic.backend.models.schemas import (
    CatalogUnavailableResponse,
    ErrorResponse,
    SatelliteCatalogResponse,
)
from spacetraffic.services.satellite_api import (
    CatalogUnavailableError,
    SatelliteCatalogService,
    get_catalog_service,
)

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get(
    "",
    response_model=SatelliteCatalogResponse,
    response_model_exclude_none=True,
    responses={503: {"model": CatalogUnavailableResponse}, 500: {"model": ErrorResponse}},
)
async def get_satellites(
    service: SatelliteCatalogService = Depends(get_catalog_service),
):
    """Full deduplicated catalog, from the server cache when fresh."""
    try:
        payload = await service.get_catalog()
    except CatalogUnavailableError as e:
        logger.error("Catalog unavailable: %s", e)
        return JSONResponse(
            status_code=503,
            content=CatalogUnavailableResponse(error=str(e)).model_dump(mode="json"),
        )
    except Exception as e:
        logger.exception("Handler error")
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(error="Internal server error", message=str(e)).model_dump(),
        )

    return SatelliteCatalogResponse(
        satellites=payload.satellites,
        cached=payload.cached,
        timestamp=payload.timestamp,
        count=payload.count,
        age=payload.age,
    )

"""Pydantic schemas for API responses."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from spacetraffic.core.tle_parser import Category


class SatelliteRecord(BaseModel):
    name: str
    tle1: str
    tle2: str
    category: Category
    id: str


class SatelliteCatalogResponse(BaseModel):
    satellites: list[SatelliteRecord] = Field(default_factory=list)
    cached: bool
    timestamp: int
    count: int
    age: Optional[int] = None  # ms, only for cache hits


class CatalogUnavailableResponse(BaseModel):
    error: str
    satellites: list[SatelliteRecord] = Field(default_factory=list)
    cached: bool = False


class ErrorResponse(BaseModel):
    error: str
    message: str


class HealthResponse(BaseModel):
    status: str
    service: str

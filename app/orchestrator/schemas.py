"""Pydantic response models for the news and restaurant endpoints."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


# ═══════════════ SHARED ═══════════════

class CacheStatus(BaseModel):
    cached: bool = False
    cache_timestamp: str | None = Field(default=None, serialization_alias="cacheTimestamp")


class ClearCacheResponse(BaseModel):
    success: bool = True
    message: str = ""


class ErrorResponse(BaseModel):
    success: bool = False
    message: str = ""
    detail: str = ""


# ═══════════════ HPA NEWS ═══════════════

class NewsResponse(CacheStatus):
    success: bool = True
    message: str = ""
    data: list[Any] = Field(default_factory=list)
    year: str = ""


# ═══════════════ RESTAURANTS ═══════════════

class RestaurantResponse(CacheStatus):
    success: bool = True
    message: str = ""
    restaurants: list[Any] = Field(default_factory=list)
    total: int = 0
    city: str | None = None
    keyword: str | None = None


# ═══════════════ HEALTH ═══════════════

class PartitionSummary(BaseModel):
    age_s: float
    valid: bool
    records: int


class HealthResponse(BaseModel):
    status: str = "ok"
    has_moenv_key: bool = False
    caches: dict[str, dict[str, PartitionSummary]] = Field(default_factory=dict)

"""Shared Pydantic schemas for Club-Entitlements."""

from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = "0.1.0"
    service: str = "club-entitlements"
    cache_backend: str = "memory"

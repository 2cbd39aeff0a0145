"""Pydantic schemas for emission readings.

``is_compliant`` and ``timestamp_utc`` appear only on the read model; they are
computed by the ledger and cannot be supplied by callers.
"""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class EmissionRecordRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    vessel_id: str = Field(..., min_length=1)
    sulfur_content: int = Field(..., ge=0, description="Scaled units of 0.001 % m/m")
    position: str = ""
    is_eca: bool


class EmissionReadingRead(BaseModel):
    reading_id: int
    vessel_id: str
    timestamp_utc: datetime
    sulfur_content: int
    position: str
    is_eca: bool
    is_compliant: bool

    model_config = ConfigDict(from_attributes=True)

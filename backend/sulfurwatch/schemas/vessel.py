"""Pydantic schemas for vessel registration and lookup."""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class VesselRegisterRequest(BaseModel):
    vessel_id: str = Field(..., min_length=1, max_length=50)
    owner: str = ""
    flag_state: str = ""

    @field_validator("vessel_id")
    @classmethod
    def vessel_id_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("vessel_id must not be blank")
        return v


class VesselRead(BaseModel):
    vessel_id: str
    owner: str
    flag_state: str
    registered_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class RegistrationStatus(BaseModel):
    vessel_id: str
    registered: bool
    flag_state: str

"""Pydantic schemas for compliance alerts and port-state labels."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class NonComplianceReportRequest(BaseModel):
    vessel_id: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)
    flag_state: str = ""
    port_state: str = ""


class ComplianceAlertRead(BaseModel):
    alert_id: int
    timestamp_utc: datetime
    vessel_id: str
    message: str
    flag_state: str
    port_state: str

    model_config = {"from_attributes": True}


class PortStateSetRequest(BaseModel):
    location: str = Field(..., min_length=1)
    port_state: str


class PortStateRead(BaseModel):
    location: str
    port_state: str

    model_config = {"from_attributes": True}

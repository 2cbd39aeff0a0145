"""Vessel entity — identity record owned by the vessel directory."""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import String, DateTime, CheckConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sulfurwatch.models.base import Base


class Vessel(Base):
    __tablename__ = "vessels"
    __table_args__ = (
        CheckConstraint("length(vessel_id) > 0", name="ck_vessel_id_not_empty"),
    )

    # IMO number or any other unique identifier
    vessel_id: Mapped[str] = mapped_column(String(50), primary_key=True)
    owner: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    flag_state: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    registered_at: Mapped[datetime] = mapped_column(DateTime, default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=func.now(), onupdate=func.now()
    )

    emission_readings: Mapped[list] = relationship(
        "EmissionReading", back_populates="vessel", order_by="EmissionReading.reading_id"
    )

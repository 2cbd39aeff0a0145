"""PortState entity — location string to port-state label."""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import String, DateTime, func
from sqlalchemy.orm import Mapped, mapped_column
from sulfurwatch.models.base import Base


class PortState(Base):
    __tablename__ = "port_states"

    # Exact string match, no normalisation
    location: Mapped[str] = mapped_column(String(255), primary_key=True)
    port_state: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=func.now(), onupdate=func.now()
    )

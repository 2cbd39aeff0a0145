"""EmissionReading entity — one classified sulfur measurement in a vessel's history."""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import Integer, String, Boolean, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sulfurwatch.models.base import Base, append_only


@append_only
class EmissionReading(Base):
    __tablename__ = "emission_readings"
    __table_args__ = (
        CheckConstraint("sulfur_content >= 0", name="ck_sulfur_content_non_negative"),
    )

    # Autoincrement id is the insertion order of the history
    reading_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    vessel_id: Mapped[str] = mapped_column(
        String(50), ForeignKey("vessels.vessel_id"), nullable=False, index=True
    )
    timestamp_utc: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    # Scaled units of 0.001 % m/m (100 == 0.10 %)
    sulfur_content: Mapped[int] = mapped_column(Integer, nullable=False)
    position: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    is_eca: Mapped[bool] = mapped_column(Boolean, nullable=False)
    is_compliant: Mapped[bool] = mapped_column(Boolean, nullable=False)

    vessel: Mapped["Vessel"] = relationship("Vessel", back_populates="emission_readings")

    def to_event(self) -> dict:
        return {
            "reading_id": self.reading_id,
            "vessel_id": self.vessel_id,
            "timestamp_utc": self.timestamp_utc.isoformat() if self.timestamp_utc else None,
            "sulfur_content": self.sulfur_content,
            "position": self.position,
            "is_eca": self.is_eca,
            "is_compliant": self.is_compliant,
        }

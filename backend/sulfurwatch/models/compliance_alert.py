"""ComplianceAlert entity — immutable non-compliance notification.

``vessel_id`` is deliberately not a foreign key: the notifier accepts reports
for any identifier. ``flag_state`` and ``port_state`` are copied by value at
report time.
"""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import Integer, String, DateTime, Text
from sqlalchemy.orm import Mapped, mapped_column
from sulfurwatch.models.base import Base, append_only


@append_only
class ComplianceAlert(Base):
    __tablename__ = "compliance_alerts"

    alert_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    timestamp_utc: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    vessel_id: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    flag_state: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    port_state: Mapped[str] = mapped_column(String(100), nullable=False, default="")

    def to_event(self) -> dict:
        return {
            "alert_id": self.alert_id,
            "timestamp_utc": self.timestamp_utc.isoformat() if self.timestamp_utc else None,
            "vessel_id": self.vessel_id,
            "message": self.message,
            "flag_state": self.flag_state,
            "port_state": self.port_state,
        }

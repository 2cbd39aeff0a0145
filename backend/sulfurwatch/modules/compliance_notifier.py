"""Compliance notifier — append-only alert log and port-state lookup table.

The notifier is a pure data sink: ``report_non_compliance`` accepts a report
from any caller for any vessel identifier, with no check against the vessel
directory. Independent reports (port inspections, outside regulators) use
the same call.

Mutations flush but do not commit; the caller owns the transaction.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.orm import Session

from sulfurwatch.models.compliance_alert import ComplianceAlert
from sulfurwatch.models.port_state import PortState
from sulfurwatch.modules import events
from sulfurwatch.modules.audit import audit_log
from sulfurwatch.modules.authorization import AdminCheck, default_admin_check, require_admin

logger = logging.getLogger(__name__)


class ComplianceNotifier:
    def __init__(self, db: Session, is_admin: Optional[AdminCheck] = None):
        self.db = db
        self.is_admin = is_admin or default_admin_check()

    # -- port states ---------------------------------------------------------

    def set_port_state(self, caller: Optional[str], location: str, label: str) -> PortState:
        require_admin(self.is_admin, caller, "set port states")
        entry = self.db.query(PortState).filter(PortState.location == location).first()
        previous = None
        if entry is None:
            entry = PortState(location=location, port_state=label)
            self.db.add(entry)
        else:
            previous = entry.port_state
            entry.port_state = label
        self.db.flush()

        audit_log(self.db, "set_port_state", "port_state", location, details={
            "port_state": label, "previous": previous,
        }, actor=caller)
        events.queue_event(self.db, events.PORT_STATE_SET, {"location": location, "port_state": label})
        return entry

    def get_port_state(self, location: str) -> str:
        entry = self.db.query(PortState).filter(PortState.location == location).first()
        return entry.port_state if entry is not None and entry.port_state else ""

    def list_port_states(self) -> List[PortState]:
        return self.db.query(PortState).order_by(PortState.location).all()

    # -- alerts --------------------------------------------------------------

    def report_non_compliance(self, vessel_id: str, message: str, flag_state: str,
                              port_state: str) -> ComplianceAlert:
        """Append an alert. Values are stored as given (snapshot, not reference)."""
        alert = ComplianceAlert(
            timestamp_utc=datetime.now(timezone.utc),
            vessel_id=vessel_id,
            message=message,
            flag_state=flag_state or "",
            port_state=port_state or "",
        )
        self.db.add(alert)
        self.db.flush()

        events.queue_event(self.db, events.ALERT_REPORTED, alert.to_event())
        logger.warning("Compliance alert %s for vessel %s: %s (flag=%s, port=%s)",
                       alert.alert_id, vessel_id, message, alert.flag_state, alert.port_state)
        return alert

    def list_notifications(self, vessel_id: Optional[str] = None) -> List[ComplianceAlert]:
        """All alerts in append order; a new list on every call."""
        q = self.db.query(ComplianceAlert)
        if vessel_id is not None:
            q = q.filter(ComplianceAlert.vessel_id == vessel_id)
        return list(q.order_by(ComplianceAlert.alert_id).all())

    def count(self) -> int:
        return self.db.query(ComplianceAlert).count()

"""Vessel directory — identity records keyed by vessel identifier.

Registration is admin-only and overwrites silently; there is no deletion.
Lookups never raise for an unknown vessel: ``is_registered`` returns False
and ``get_flag_state`` returns an empty string.

Mutations flush but do not commit; the caller owns the transaction.
"""
from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from sulfurwatch.models.vessel import Vessel
from sulfurwatch.modules import events
from sulfurwatch.modules.audit import audit_log
from sulfurwatch.modules.authorization import AdminCheck, default_admin_check, require_admin

logger = logging.getLogger(__name__)


class VesselDirectory:
    def __init__(self, db: Session, is_admin: Optional[AdminCheck] = None):
        self.db = db
        self.is_admin = is_admin or default_admin_check()

    def register(self, caller: Optional[str], vessel_id: str, owner: str, flag_state: str) -> Vessel:
        """Insert or overwrite the record for ``vessel_id``."""
        require_admin(self.is_admin, caller, "register vessels")
        if not vessel_id or not vessel_id.strip():
            raise ValueError("vessel_id must not be blank")

        vessel = self.get_vessel(vessel_id)
        previous = None
        if vessel is None:
            vessel = Vessel(vessel_id=vessel_id, owner=owner, flag_state=flag_state)
            self.db.add(vessel)
        else:
            previous = {"owner": vessel.owner, "flag_state": vessel.flag_state}
            vessel.owner = owner
            vessel.flag_state = flag_state
        self.db.flush()

        audit_log(self.db, "register", "vessel", vessel_id, details={
            "owner": owner, "flag_state": flag_state, "previous": previous,
        }, actor=caller)
        events.queue_event(self.db, events.VESSEL_REGISTERED, {
            "vessel_id": vessel_id, "owner": owner, "flag_state": flag_state,
        })
        logger.info("Registered vessel %s (flag %s)%s", vessel_id, flag_state,
                    " — overwrote previous record" if previous else "")
        return vessel

    def get_vessel(self, vessel_id: str) -> Optional[Vessel]:
        if not vessel_id or not vessel_id.strip():
            return None
        return self.db.query(Vessel).filter(Vessel.vessel_id == vessel_id).first()

    def is_registered(self, vessel_id: str) -> bool:
        vessel = self.get_vessel(vessel_id)
        return vessel is not None and bool(vessel.vessel_id)

    def get_flag_state(self, vessel_id: str) -> str:
        vessel = self.get_vessel(vessel_id)
        return vessel.flag_state if vessel is not None and vessel.flag_state else ""

    def list_vessels(self, skip: int = 0, limit: int = 50) -> List[Vessel]:
        return (
            self.db.query(Vessel)
            .order_by(Vessel.vessel_id)
            .offset(skip)
            .limit(limit)
            .all()
        )

    def count(self) -> int:
        return self.db.query(Vessel).count()

"""Emission ledger — records sulfur readings and raises non-compliance alerts.

Compliance rule (fixed policy, not configurable):

  inside an ECA   compliant iff sulfur_content <= ECA_SULFUR_LIMIT      (100)
  outside an ECA  compliant iff sulfur_content <= NON_ECA_SULFUR_LIMIT  (500)

Units are 0.001 % m/m, so the limits are 0.10 % and 0.50 %. A reading exactly
at the limit is compliant.

``record_emission`` is a single transaction: the reading and, when it is
non-compliant, its alert are committed together or not at all. Calls for the
same vessel are serialised by a lock held from the registration check through
commit, so a vessel's history order is its submission order. Locks come from
a fixed pool chosen by hash, so unrelated vessels may occasionally share one;
unknown vessels are rejected before any lock is taken.
"""
from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.orm import Session

from sulfurwatch.errors import AlertWriteFailed, VesselNotRegistered
from sulfurwatch.models.emission_reading import EmissionReading
from sulfurwatch.modules import events
from sulfurwatch.modules.compliance_notifier import ComplianceNotifier
from sulfurwatch.modules.vessel_directory import VesselDirectory

logger = logging.getLogger(__name__)

ECA_SULFUR_LIMIT = 100
NON_ECA_SULFUR_LIMIT = 500

ECA_BREACH_MESSAGE = "Sulfur content exceeds ECA limit"
NON_ECA_BREACH_MESSAGE = "Sulfur content exceeds non-ECA limit"

# Fixed pool of striped locks; vessels sharing a stripe are serialised together
LOCK_STRIPES = 64
_stripe_locks = tuple(threading.Lock() for _ in range(LOCK_STRIPES))


def _vessel_lock(vessel_id: str) -> threading.Lock:
    return _stripe_locks[hash(vessel_id) % LOCK_STRIPES]


def evaluate_compliance(sulfur_content: int, is_eca: bool) -> bool:
    limit = ECA_SULFUR_LIMIT if is_eca else NON_ECA_SULFUR_LIMIT
    return sulfur_content <= limit


def breach_message(is_eca: bool) -> str:
    return ECA_BREACH_MESSAGE if is_eca else NON_ECA_BREACH_MESSAGE


class EmissionLedger:
    def __init__(self, db: Session, directory: Optional[VesselDirectory] = None,
                 notifier: Optional[ComplianceNotifier] = None):
        self.db = db
        self.directory = directory or VesselDirectory(db)
        self.notifier = notifier or ComplianceNotifier(db)

    def record_emission(self, vessel_id: str, sulfur_content: int, position: str,
                        is_eca: bool) -> EmissionReading:
        """Record a reading, alert on breach and commit.

        This is a unit of work on ``self.db``: it commits or rolls back the
        whole session, including anything the caller already added to it.
        Callers must not keep unrelated pending work in the session passed in.

        Raises VesselNotRegistered (no state change) for an unknown vessel and
        AlertWriteFailed (everything rolled back) if the alert cannot be written.
        """
        if sulfur_content < 0:
            raise ValueError("sulfur_content must be non-negative")
        if not self.directory.is_registered(vessel_id):
            raise VesselNotRegistered(vessel_id)

        with _vessel_lock(vessel_id):
            if not self.directory.is_registered(vessel_id):
                raise VesselNotRegistered(vessel_id)

            is_compliant = evaluate_compliance(sulfur_content, is_eca)
            reading = EmissionReading(
                vessel_id=vessel_id,
                timestamp_utc=datetime.now(timezone.utc),
                sulfur_content=sulfur_content,
                position=position,
                is_eca=is_eca,
                is_compliant=is_compliant,
            )
            try:
                self.db.add(reading)
                self.db.flush()
                events.queue_event(self.db, events.EMISSION_RECORDED, reading.to_event())
            except Exception:
                self.db.rollback()
                raise

            if not is_compliant:
                try:
                    self._raise_alert(reading)
                except Exception as exc:
                    self.db.rollback()
                    logger.error("Alert write failed for vessel %s; reading rolled back: %s",
                                 vessel_id, exc)
                    raise AlertWriteFailed(vessel_id, str(exc)) from exc

            self.db.commit()

        logger.info("Recorded emission for %s: %d at %r (eca=%s, compliant=%s)",
                    vessel_id, sulfur_content, position, is_eca, is_compliant)
        return reading

    def _raise_alert(self, reading: EmissionReading) -> None:
        # Snapshot both labels now; later registry changes must not alter this alert
        flag_state = self.directory.get_flag_state(reading.vessel_id)
        port_state = self.notifier.get_port_state(reading.position)
        self.notifier.report_non_compliance(
            reading.vessel_id, breach_message(reading.is_eca), flag_state, port_state,
        )

    def get_history(self, vessel_id: str) -> List[EmissionReading]:
        """Full history in insertion order; empty for unknown vessels."""
        return list(
            self.db.query(EmissionReading)
            .filter(EmissionReading.vessel_id == vessel_id)
            .order_by(EmissionReading.reading_id)
            .all()
        )

    def count(self, compliant: Optional[bool] = None) -> int:
        q = self.db.query(EmissionReading)
        if compliant is not None:
            q = q.filter(EmissionReading.is_compliant == compliant)
        return q.count()

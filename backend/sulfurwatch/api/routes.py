from __future__ import annotations

import logging
import time
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query
from sqlalchemy.orm import Session

from sulfurwatch.config import settings
from sulfurwatch.database import get_db
from sulfurwatch.modules.compliance_notifier import ComplianceNotifier
from sulfurwatch.modules.emission_ledger import EmissionLedger
from sulfurwatch.modules.vessel_directory import VesselDirectory
from sulfurwatch.schemas.alerts import (
    ComplianceAlertRead,
    NonComplianceReportRequest,
    PortStateRead,
    PortStateSetRequest,
)
from sulfurwatch.schemas.emission import EmissionReadingRead, EmissionRecordRequest
from sulfurwatch.schemas.error import ErrorResponse
from sulfurwatch.schemas.vessel import RegistrationStatus, VesselRead, VesselRegisterRequest

logger = logging.getLogger(__name__)

router = APIRouter()

_ADMIN_RESPONSES = {403: {"model": ErrorResponse}}


def get_caller(x_caller_id: Optional[str] = Header(None, alias="X-Caller-Id")) -> Optional[str]:
    """Caller identity used by the admin gate. Authentication happens upstream."""
    return x_caller_id


def _clamp_limit(limit: int) -> int:
    return min(limit, settings.MAX_QUERY_LIMIT)


# ---------------------------------------------------------------------------
# Vessels
# ---------------------------------------------------------------------------

@router.post("/vessels", tags=["vessels"], response_model=VesselRead, responses=_ADMIN_RESPONSES)
def register_vessel(
    body: VesselRegisterRequest,
    caller: Optional[str] = Depends(get_caller),
    db: Session = Depends(get_db),
):
    """Register a vessel, or overwrite its owner and flag state (admin only)."""
    vessel = VesselDirectory(db).register(caller, body.vessel_id, body.owner, body.flag_state)
    db.commit()
    return VesselRead.model_validate(vessel)


@router.get("/vessels", tags=["vessels"])
def list_vessels(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=500),
    db: Session = Depends(get_db),
):
    directory = VesselDirectory(db)
    vessels = directory.list_vessels(skip=skip, limit=_clamp_limit(limit))
    return {
        "total": directory.count(),
        "vessels": [VesselRead.model_validate(v) for v in vessels],
    }


@router.get("/vessels/{vessel_id}", tags=["vessels"], response_model=VesselRead)
def get_vessel(vessel_id: str, db: Session = Depends(get_db)):
    vessel = VesselDirectory(db).get_vessel(vessel_id)
    if not vessel:
        raise HTTPException(status_code=404, detail="Vessel not found")
    return VesselRead.model_validate(vessel)


@router.get("/vessels/{vessel_id}/registration", tags=["vessels"], response_model=RegistrationStatus)
def get_registration(vessel_id: str, db: Session = Depends(get_db)):
    """Registration check and flag state. Unknown vessels are not an error."""
    directory = VesselDirectory(db)
    return RegistrationStatus(
        vessel_id=vessel_id,
        registered=directory.is_registered(vessel_id),
        flag_state=directory.get_flag_state(vessel_id),
    )


@router.get("/vessels/{vessel_id}/emissions", tags=["emissions"], response_model=list[EmissionReadingRead])
def get_emission_history(vessel_id: str, db: Session = Depends(get_db)):
    """Full reading history in submission order (empty for unknown vessels)."""
    return [EmissionReadingRead.model_validate(r) for r in EmissionLedger(db).get_history(vessel_id)]


# ---------------------------------------------------------------------------
# Emissions
# ---------------------------------------------------------------------------

@router.post("/emissions", tags=["emissions"], status_code=201, response_model=EmissionReadingRead,
             responses={404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}})
def record_emission(body: EmissionRecordRequest, db: Session = Depends(get_db)):
    """Record a sulfur reading. Non-compliant readings raise an alert atomically."""
    reading = EmissionLedger(db).record_emission(
        body.vessel_id, body.sulfur_content, body.position, body.is_eca,
    )
    return EmissionReadingRead.model_validate(reading)


# ---------------------------------------------------------------------------
# Port states
# ---------------------------------------------------------------------------

@router.put("/port-states", tags=["port-states"], response_model=PortStateRead, responses=_ADMIN_RESPONSES)
def set_port_state(
    body: PortStateSetRequest,
    caller: Optional[str] = Depends(get_caller),
    db: Session = Depends(get_db),
):
    """Assign the port-state label for an exact location string (admin only)."""
    entry = ComplianceNotifier(db).set_port_state(caller, body.location, body.port_state)
    db.commit()
    return PortStateRead.model_validate(entry)


@router.get("/port-states", tags=["port-states"])
def get_port_states(location: Optional[str] = None, db: Session = Depends(get_db)):
    """Look up one location (empty label if unknown) or list every entry."""
    notifier = ComplianceNotifier(db)
    if location is not None:
        return PortStateRead(location=location, port_state=notifier.get_port_state(location))
    return [PortStateRead.model_validate(e) for e in notifier.list_port_states()]


# ---------------------------------------------------------------------------
# Alerts
# ---------------------------------------------------------------------------

@router.post("/alerts", tags=["alerts"], status_code=201, response_model=ComplianceAlertRead)
def report_non_compliance(body: NonComplianceReportRequest, db: Session = Depends(get_db)):
    """File a non-compliance report directly. Open to any caller."""
    alert = ComplianceNotifier(db).report_non_compliance(
        body.vessel_id, body.message, body.flag_state, body.port_state,
    )
    db.commit()
    return ComplianceAlertRead.model_validate(alert)


@router.get("/alerts", tags=["alerts"], response_model=list[ComplianceAlertRead])
def list_notifications(vessel_id: Optional[str] = None, db: Session = Depends(get_db)):
    """All alerts in the order they were written."""
    alerts = ComplianceNotifier(db).list_notifications(vessel_id=vessel_id)
    return [ComplianceAlertRead.model_validate(a) for a in alerts]


# ---------------------------------------------------------------------------
# Dashboard
# ---------------------------------------------------------------------------

@router.get("/stats", tags=["dashboard"])
def get_stats(db: Session = Depends(get_db)):
    ledger = EmissionLedger(db)
    return {
        "vessels": ledger.directory.count(),
        "readings": ledger.count(),
        "non_compliant_readings": ledger.count(compliant=False),
        "alerts": ledger.notifier.count(),
    }


# ---------------------------------------------------------------------------
# System / Health
# ---------------------------------------------------------------------------

@router.get("/health", tags=["system"])
def health_check(db: Session = Depends(get_db)):
    """Health check with DB latency measurement."""
    from sqlalchemy import text

    t0 = time.time()
    try:
        db.execute(text("SELECT 1"))
        db_status = "ok"
    except Exception as e:
        db_status = f"error: {e}"
    latency_ms = round((time.time() - t0) * 1000, 1)

    return {
        "status": "ok",
        "database": {"status": db_status, "latency_ms": latency_ms},
    }


# ---------------------------------------------------------------------------
# Audit Log
# ---------------------------------------------------------------------------

@router.get("/audit-log", tags=["admin"])
def list_audit_logs(
    action: Optional[str] = None,
    entity_type: Optional[str] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=500),
    db: Session = Depends(get_db),
):
    """List admin actions, newest first."""
    from sulfurwatch.models.audit_log import AuditLog
    q = db.query(AuditLog).order_by(AuditLog.audit_id.desc())
    if action:
        q = q.filter(AuditLog.action == action)
    if entity_type:
        q = q.filter(AuditLog.entity_type == entity_type)
    total = q.count()
    logs = q.offset(skip).limit(_clamp_limit(limit)).all()
    return {
        "total": total,
        "logs": [
            {
                "audit_id": l.audit_id,
                "action": l.action,
                "entity_type": l.entity_type,
                "entity_id": l.entity_id,
                "actor": l.actor,
                "details": l.details,
                "created_at": l.created_at.isoformat() if l.created_at else None,
            }
            for l in logs
        ],
    }

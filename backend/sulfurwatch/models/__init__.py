"""Import all models to register them with SQLAlchemy metadata."""
from sulfurwatch.models.base import Base
from sulfurwatch.models.vessel import Vessel
from sulfurwatch.models.emission_reading import EmissionReading
from sulfurwatch.models.compliance_alert import ComplianceAlert
from sulfurwatch.models.port_state import PortState
from sulfurwatch.models.audit_log import AuditLog

__all__ = [
    "Base",
    "Vessel",
    "EmissionReading",
    "ComplianceAlert",
    "PortState",
    "AuditLog",
]

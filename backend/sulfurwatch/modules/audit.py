"""Audit trail helper shared by the admin-gated registry mutations."""
from __future__ import annotations

from typing import Optional

from sqlalchemy.orm import Session

from sulfurwatch.models.audit_log import AuditLog


def audit_log(db: Session, action: str, entity_type: str, entity_id: Optional[str] = None,
              details: Optional[dict] = None, actor: Optional[str] = None) -> None:
    """Record an admin action in the caller's transaction (no commit)."""
    db.add(AuditLog(
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        details=details,
        actor=actor,
    ))

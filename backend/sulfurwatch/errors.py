"""Domain errors raised by the registries and the emission ledger.

API handlers in ``sulfurwatch.main`` map these to HTTP responses; the CLI
prints them and exits non-zero. Input validation problems stay plain
``ValueError`` (422 at the API).
"""
from __future__ import annotations


class ComplianceError(Exception):
    """Base class for all SulfurWatch domain errors."""


class Unauthorized(ComplianceError):
    """Caller is not the designated administrator."""

    def __init__(self, caller: str | None, action: str):
        self.caller = caller
        self.action = action
        super().__init__(f"Caller {caller!r} is not allowed to {action}")


class VesselNotRegistered(ComplianceError):
    def __init__(self, vessel_id: str):
        self.vessel_id = vessel_id
        super().__init__(f"Vessel {vessel_id!r} is not registered")


class AlertWriteFailed(ComplianceError):
    """The non-compliance alert could not be written; the reading was rolled back."""

    def __init__(self, vessel_id: str, reason: str):
        self.vessel_id = vessel_id
        self.reason = reason
        super().__init__(f"Failed to write compliance alert for vessel {vessel_id!r}: {reason}")

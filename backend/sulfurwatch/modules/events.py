"""Structured event sink for external observers (dashboards, auditors).

Registry operations queue events on the SQLAlchemy session that performed
the write. Queued events are published only once that session commits and
are discarded if it rolls back, so observers never hear about a reading
that was not durably stored.

Delivery is fire-and-forget: a failing listener is logged and skipped, it
never fails the write that produced the event.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable

from sqlalchemy import event
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

VESSEL_REGISTERED = "vessel.registered"
PORT_STATE_SET = "port_state.set"
EMISSION_RECORDED = "emission.recorded"
ALERT_REPORTED = "compliance.alert_reported"

_PENDING_KEY = "sulfurwatch_pending_events"


@dataclass(frozen=True)
class DomainEvent:
    name: str
    payload: dict[str, Any]
    emitted_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


Listener = Callable[[DomainEvent], None]


class EventBus:
    def __init__(self) -> None:
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def publish(self, evt: DomainEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(evt)
            except Exception:
                logger.exception("Event listener %r failed for %s", listener, evt.name)


def _log_event(evt: DomainEvent) -> None:
    logger.info("event %s %s", evt.name, evt.payload)


bus = EventBus()
bus.subscribe(_log_event)


def queue_event(db: Session, name: str, payload: dict[str, Any]) -> None:
    """Attach an event to ``db``; it is published after the next commit."""
    db.info.setdefault(_PENDING_KEY, []).append(DomainEvent(name=name, payload=payload))


@event.listens_for(Session, "after_commit")
def _publish_pending(session: Session) -> None:
    pending = session.info.pop(_PENDING_KEY, [])
    for evt in pending:
        bus.publish(evt)


@event.listens_for(Session, "after_rollback")
def _discard_pending(session: Session) -> None:
    dropped = session.info.pop(_PENDING_KEY, [])
    if dropped:
        logger.debug("Discarded %d unpublished events after rollback", len(dropped))

"""Administrator gate for registry mutations.

The gate is a plain predicate ``is_admin(caller) -> bool`` injected into the
registries. The default compares the caller identity against
``settings.ADMIN_IDENTITY``; tests and embedders may pass any other callable.
"""
from __future__ import annotations

import hmac
import logging
from typing import Callable, Optional

from sulfurwatch.config import settings
from sulfurwatch.errors import Unauthorized

logger = logging.getLogger(__name__)

AdminCheck = Callable[[Optional[str]], bool]


def identity_check(admin_identity: Optional[str]) -> AdminCheck:
    """Build a predicate that accepts exactly ``admin_identity``."""

    def _is_admin(caller: Optional[str]) -> bool:
        if not admin_identity or not caller:
            return False
        return hmac.compare_digest(caller.encode("utf-8"), admin_identity.encode("utf-8"))

    return _is_admin


def default_admin_check() -> AdminCheck:
    return identity_check(settings.ADMIN_IDENTITY)


def require_admin(is_admin: AdminCheck, caller: Optional[str], action: str) -> None:
    if not is_admin(caller):
        logger.warning("Rejected %s by non-admin caller %r", action, caller)
        raise Unauthorized(caller, action)

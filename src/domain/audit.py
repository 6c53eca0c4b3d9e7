"""Best-effort audit trail writes shared by the domain services."""

import logging

from .models import AuditLogEntry, Clock
from .ports import AuditLog

logger = logging.getLogger(__name__)


def record_activity(audit_log: AuditLog, email: str, activity: str, clock: Clock) -> None:
    """
    Append one audit entry without failing the calling operation.

    A failed write is logged at ERROR with its traceback so monitoring
    picks it up; it is never silently dropped.
    """
    entry = AuditLogEntry(email=email, activity_name=activity, added_on=clock())
    try:
        audit_log.append(entry)
    except Exception:
        logger.exception("Audit log write failed: email=%s activity=%r", email, activity)

"""Best-effort audit trail writes."""

from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from echo_feedback.core.settings import settings
from echo_feedback.models import AuditLog
from echo_feedback.models.audit_log import AUDIT_ACTIONS, SEVERITIES, SEVERITY_LOW

logger = logging.getLogger(__name__)

DEFAULT_ADMIN = "Admin"


def record_audit_event(
    db: Session,
    *,
    action: str,
    target_type: str,
    target_id: str = "",
    details: str = "",
    severity: str = SEVERITY_LOW,
    admin: str = DEFAULT_ADMIN,
) -> AuditLog | None:
    """Append an audit entry in its own commit.

    Must be called after the triggering operation has committed. A failed
    write is rolled back and logged; the caller never sees the error.

    Returns:
        The persisted entry, or None if it was skipped or failed.
    """
    if not action or not target_type:
        return None
    if action not in AUDIT_ACTIONS:
        action = "other"
    if severity not in SEVERITIES:
        severity = SEVERITY_LOW

    entry = AuditLog(
        admin=admin or DEFAULT_ADMIN,
        action=action,
        target_type=target_type,
        target_id=str(target_id or ""),
        details=str(details)[: settings.audit_details_max_length],
        severity=severity,
    )
    try:
        db.add(entry)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.warning(
            "Audit log write failed for %s %s:%s",
            action,
            target_type,
            target_id,
            exc_info=True,
        )
        return None
    return entry

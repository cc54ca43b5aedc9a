import logging
from typing import Optional

from sqlmodel import Session

from boutique.models.admin_log import AdminLog

logger = logging.getLogger(__name__)


def log_admin_action(
    session: Session,
    admin_email: str,
    action: str,
    entity_type: str,
    entity_id: str,
    details: Optional[dict] = None,
):
    """
    Append-only audit trail for back-office changes.
    A failed audit write never breaks the change itself.
    """
    try:
        session.add(AdminLog(
            admin_email=admin_email,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            details=details or {},
        ))
        session.commit()
    except Exception:
        session.rollback()
        logger.exception(f"Failed to log admin action {action} on {entity_type} {entity_id}")

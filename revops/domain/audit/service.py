"""Audit service - Records and queries admin changes"""

import logging
from typing import Any, Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...auth import AdminUser
from ...shared.validators import parse_iso_datetime
from .repository import AuditRepository
from .schemas import AUDIT_ACTIONS, AuditLogResponse

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 100
MAX_LIMIT = 500


def normalize_limit(raw: Optional[str]) -> int:
    """Default 100 for missing, non-numeric or non-positive values; cap at 500"""
    try:
        limit = int(raw) if raw is not None else DEFAULT_LIMIT
    except ValueError:
        return DEFAULT_LIMIT
    if limit < 1:
        return DEFAULT_LIMIT
    return min(limit, MAX_LIMIT)


def log_admin_change(
    db: Session,
    admin: AdminUser,
    table_name: str,
    record_id: str,
    action: str,
    old_values: Optional[dict[str, Any]] = None,
    new_values: Optional[dict[str, Any]] = None,
) -> None:
    """
    Append an audit entry for an admin write.

    The write it describes has already been committed; a failure here is logged
    rather than turned into an error response.
    """
    try:
        AuditRepository.create_log(
            db,
            table_name=table_name,
            record_id=str(record_id),
            action=action,
            old_values=old_values,
            new_values=new_values,
            changed_by=admin.name,
            ip_address=admin.ip_address,
            user_agent=admin.user_agent,
        )
        logger.info(f"📝 Audit: {admin.name} {action} {table_name}/{record_id}")
    except Exception as e:
        db.rollback()
        logger.error(f"❌ Failed to write audit log for {table_name}/{record_id}: {e}")


class AuditService:
    """Service layer for audit log queries"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = AuditRepository()

    def get_logs(
        self,
        table_name: Optional[str] = None,
        record_id: Optional[str] = None,
        action: Optional[str] = None,
        changed_by: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        limit: Optional[str] = None,
    ) -> dict:
        if action and action not in AUDIT_ACTIONS:
            raise HTTPException(
                status_code=400,
                detail=f"Invalid action. Must be one of: {', '.join(AUDIT_ACTIONS)}",
            )

        try:
            start_dt = parse_iso_datetime(start_date)
            end_dt = parse_iso_datetime(end_date)
        except ValueError as e:
            raise HTTPException(status_code=400, detail="Invalid date format. Use ISO 8601") from e

        resolved_limit = normalize_limit(limit)
        logs = self.repo.get_logs(
            self.db,
            table_name=table_name,
            record_id=record_id,
            action=action,
            changed_by=changed_by,
            start_date=start_dt,
            end_date=end_dt,
            limit=resolved_limit,
        )

        return {
            "data": [AuditLogResponse.model_validate(log).to_api() for log in logs],
            "meta": {
                "count": len(logs),
                "limit": resolved_limit,
                "filters": {
                    "tableName": table_name,
                    "recordId": record_id,
                    "action": action,
                    "changedBy": changed_by,
                    "startDate": start_date,
                    "endDate": end_date,
                },
            },
        }

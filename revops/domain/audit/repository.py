"""Audit repository - Database operations for admin audit logs"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ...models import AdminAuditLog


class AuditRepository:
    """Repository for admin audit log operations"""

    @staticmethod
    def create_log(db: Session, **log_data) -> AdminAuditLog:
        """Insert an audit entry"""
        log = AdminAuditLog(**log_data)
        db.add(log)
        db.commit()
        db.refresh(log)
        return log

    @staticmethod
    def get_logs(
        db: Session,
        table_name: Optional[str] = None,
        record_id: Optional[str] = None,
        action: Optional[str] = None,
        changed_by: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        limit: int = 100,
    ) -> list[AdminAuditLog]:
        """Filtered audit entries, newest first"""
        query = db.query(AdminAuditLog)

        if table_name:
            query = query.filter(AdminAuditLog.table_name == table_name)
        if record_id:
            query = query.filter(AdminAuditLog.record_id == record_id)
        if action:
            query = query.filter(AdminAuditLog.action == action)
        if changed_by:
            query = query.filter(AdminAuditLog.changed_by == changed_by)
        if start_date:
            query = query.filter(AdminAuditLog.changed_at >= start_date)
        if end_date:
            query = query.filter(AdminAuditLog.changed_at <= end_date)

        return query.order_by(AdminAuditLog.changed_at.desc()).limit(limit).all()

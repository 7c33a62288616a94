"""Audit router - Admin audit log viewer"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import AdminUser, require_admin
from ...database import get_db
from ...shared.schemas import success_response
from .service import AuditService

router = APIRouter(prefix="/api/admin/audit-logs", tags=["Admin Audit"])


def get_audit_service(db: Session = Depends(get_db)) -> AuditService:
    """Dependency injection for AuditService"""
    return AuditService(db)


@router.get("")
async def get_audit_logs(
    tableName: Optional[str] = Query(None),
    recordId: Optional[str] = Query(None),
    action: Optional[str] = Query(None),
    changedBy: Optional[str] = Query(None),
    startDate: Optional[str] = Query(None),
    endDate: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    admin: AdminUser = Depends(require_admin),
    service: AuditService = Depends(get_audit_service),
):
    """Admin changes, newest first"""
    result = service.get_logs(tableName, recordId, action, changedBy, startDate, endDate, limit)
    return success_response(result["data"], meta=result["meta"])

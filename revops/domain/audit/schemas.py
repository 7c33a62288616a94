"""Audit log schemas"""

from datetime import datetime
from typing import Any, Optional

from ...shared.schemas import CamelModel

AUDIT_ACTIONS = ("create", "update", "delete", "activate", "deactivate")


class AuditLogResponse(CamelModel):
    id: str
    table_name: str
    record_id: str
    action: str
    old_values: Optional[dict[str, Any]] = None
    new_values: Optional[dict[str, Any]] = None
    changed_by: str
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    changed_at: datetime

"""Scoping router - Admin factor/rule CRUD and the public scope calculator"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from ...auth import AdminUser, require_admin
from ...database import get_db
from ...rate_limiter import create_rate_limiter
from ...shared.schemas import success_response
from .schemas import (
    CalculateScopeRequest,
    ScopingFactorCreate,
    ScopingFactorUpdate,
    ScopingRuleCreate,
    ScopingRuleUpdate,
)
from .service import ScopingService, serialize_factor, serialize_rule

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Scoping"])
admin_router = APIRouter(prefix="/api/admin", tags=["Admin Scoping"])

calculate_rate_limit = create_rate_limiter(limit=60, window_seconds=60, key_prefix="calculate_scope")


def get_scoping_service(db: Session = Depends(get_db)) -> ScopingService:
    """Dependency injection for ScopingService"""
    return ScopingService(db)


def _require_package_id(package_id: Optional[str]) -> str:
    if not package_id:
        raise HTTPException(status_code=400, detail="packageId query parameter is required")
    return package_id


# ============================================================================
# CALCULATOR
# ============================================================================


@router.post("/calculate-scope", dependencies=[Depends(calculate_rate_limit)])
async def calculate_scope(
    data: CalculateScopeRequest,
    response: Response,
    service: ScopingService = Depends(get_scoping_service),
):
    """Apply the package's active rules to the visitor's answers"""
    result = service.calculate(data)
    response.headers["Cache-Control"] = "private, no-store"
    return success_response(result)


# ============================================================================
# ADMIN - FACTORS
# ============================================================================


@admin_router.get("/scoping-factors")
async def list_scoping_factors(
    packageId: Optional[str] = Query(None),
    activeOnly: Optional[str] = Query(None),
    admin: AdminUser = Depends(require_admin),
    service: ScopingService = Depends(get_scoping_service),
):
    factors = service.list_factors(_require_package_id(packageId), activeOnly == "true")
    return success_response(factors, meta={"count": len(factors), "packageId": packageId})


@admin_router.post("/scoping-factors", status_code=201)
async def create_scoping_factor(
    data: ScopingFactorCreate,
    admin: AdminUser = Depends(require_admin),
    service: ScopingService = Depends(get_scoping_service),
):
    return success_response(service.create_factor(data, admin), message="Scoping factor created")


@admin_router.get("/scoping-factors/{factor_id}")
async def get_scoping_factor(
    factor_id: str,
    admin: AdminUser = Depends(require_admin),
    service: ScopingService = Depends(get_scoping_service),
):
    return success_response(serialize_factor(service.get_factor(factor_id)))


@admin_router.patch("/scoping-factors/{factor_id}")
async def update_scoping_factor(
    factor_id: str,
    data: ScopingFactorUpdate,
    admin: AdminUser = Depends(require_admin),
    service: ScopingService = Depends(get_scoping_service),
):
    return success_response(
        service.update_factor(factor_id, data, admin), message="Scoping factor updated"
    )


@admin_router.delete("/scoping-factors/{factor_id}")
async def delete_scoping_factor(
    factor_id: str,
    admin: AdminUser = Depends(require_admin),
    service: ScopingService = Depends(get_scoping_service),
):
    service.delete_factor(factor_id, admin)
    return success_response(message="Scoping factor deleted")


# ============================================================================
# ADMIN - RULES
# ============================================================================


@admin_router.get("/scoping-rules")
async def list_scoping_rules(
    packageId: Optional[str] = Query(None),
    activeOnly: Optional[str] = Query(None),
    admin: AdminUser = Depends(require_admin),
    service: ScopingService = Depends(get_scoping_service),
):
    rules = service.list_rules(_require_package_id(packageId), activeOnly == "true")
    return success_response(rules, meta={"count": len(rules), "packageId": packageId})


@admin_router.post("/scoping-rules", status_code=201)
async def create_scoping_rule(
    data: ScopingRuleCreate,
    admin: AdminUser = Depends(require_admin),
    service: ScopingService = Depends(get_scoping_service),
):
    return success_response(service.create_rule(data, admin), message="Scoping rule created")


@admin_router.get("/scoping-rules/{rule_id}")
async def get_scoping_rule(
    rule_id: str,
    admin: AdminUser = Depends(require_admin),
    service: ScopingService = Depends(get_scoping_service),
):
    return success_response(serialize_rule(service.get_rule(rule_id)))


@admin_router.patch("/scoping-rules/{rule_id}")
async def update_scoping_rule(
    rule_id: str,
    data: ScopingRuleUpdate,
    admin: AdminUser = Depends(require_admin),
    service: ScopingService = Depends(get_scoping_service),
):
    return success_response(service.update_rule(rule_id, data, admin), message="Scoping rule updated")


@admin_router.delete("/scoping-rules/{rule_id}")
async def delete_scoping_rule(
    rule_id: str,
    admin: AdminUser = Depends(require_admin),
    service: ScopingService = Depends(get_scoping_service),
):
    service.delete_rule(rule_id, admin)
    return success_response(message="Scoping rule deleted")

"""Catalog router - Public service/package listings and admin CRUD"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from ...auth import AdminUser, require_admin
from ...database import get_db
from ...shared.schemas import success_response
from .schemas import PackageCreate, PackageUpdate, ServiceCreate, ServiceUpdate
from .service import CatalogService, serialize_package, serialize_service

logger = logging.getLogger(__name__)

PUBLIC_CACHE_CONTROL = "public, s-maxage=300, stale-while-revalidate=600"

router = APIRouter(prefix="/api", tags=["Catalog"])
admin_router = APIRouter(prefix="/api/admin", tags=["Admin Catalog"])


def get_catalog_service(db: Session = Depends(get_db)) -> CatalogService:
    """Dependency injection for CatalogService"""
    return CatalogService(db)


# ============================================================================
# PUBLIC
# ============================================================================


@router.get("/services")
async def get_services(
    response: Response,
    category: Optional[str] = Query(None),
    featured: Optional[str] = Query(None),
    service: CatalogService = Depends(get_catalog_service),
):
    """Active services for the marketing site"""
    featured_only = featured == "true"
    services = service.list_active_services(category, featured_only)

    response.headers["Cache-Control"] = PUBLIC_CACHE_CONTROL
    return success_response(
        services,
        meta={"count": len(services), "category": category, "featured": featured_only},
    )


@router.get("/packages")
async def get_packages(
    response: Response,
    type: Optional[str] = Query(None),
    featured: Optional[str] = Query(None),
    include_services: Optional[str] = Query(None),
    service: CatalogService = Depends(get_catalog_service),
):
    """Active packages, optionally with their services embedded"""
    featured_only = featured == "true"
    packages = service.list_active_packages(type, featured_only, include_services == "true")

    response.headers["Cache-Control"] = PUBLIC_CACHE_CONTROL
    return success_response(
        packages, meta={"count": len(packages), "type": type, "featured": featured_only}
    )


@router.get("/packages/{package_id}")
async def get_package(
    package_id: str,
    response: Response,
    include_services: str = Query("true"),
    include_scoping: str = Query("true"),
    service: CatalogService = Depends(get_catalog_service),
):
    """Package detail with services and the scoping quiz"""
    package = service.get_active_package(package_id)

    response.headers["Cache-Control"] = PUBLIC_CACHE_CONTROL
    return success_response(
        serialize_package(
            package,
            include_services=include_services != "false",
            include_scoping=include_scoping != "false",
        )
    )


# ============================================================================
# ADMIN - SERVICES
# ============================================================================


@admin_router.get("/services")
async def admin_list_services(
    admin: AdminUser = Depends(require_admin),
    service: CatalogService = Depends(get_catalog_service),
):
    services = service.list_all_services()
    return success_response(services, meta={"count": len(services)})


@admin_router.post("/services", status_code=201)
async def admin_create_service(
    data: ServiceCreate,
    admin: AdminUser = Depends(require_admin),
    service: CatalogService = Depends(get_catalog_service),
):
    return success_response(service.create_service(data, admin), message="Service created")


@admin_router.get("/services/{service_id}")
async def admin_get_service(
    service_id: str,
    admin: AdminUser = Depends(require_admin),
    service: CatalogService = Depends(get_catalog_service),
):
    return success_response(serialize_service(service.get_service(service_id)))


@admin_router.patch("/services/{service_id}")
async def admin_update_service(
    service_id: str,
    data: ServiceUpdate,
    admin: AdminUser = Depends(require_admin),
    service: CatalogService = Depends(get_catalog_service),
):
    return success_response(service.update_service(service_id, data, admin), message="Service updated")


@admin_router.delete("/services/{service_id}")
async def admin_delete_service(
    service_id: str,
    admin: AdminUser = Depends(require_admin),
    service: CatalogService = Depends(get_catalog_service),
):
    service.delete_service(service_id, admin)
    return success_response(message="Service deleted")


# ============================================================================
# ADMIN - PACKAGES
# ============================================================================


@admin_router.get("/packages")
async def admin_list_packages(
    admin: AdminUser = Depends(require_admin),
    service: CatalogService = Depends(get_catalog_service),
):
    packages = service.list_all_packages()
    return success_response(packages, meta={"count": len(packages)})


@admin_router.post("/packages", status_code=201)
async def admin_create_package(
    data: PackageCreate,
    admin: AdminUser = Depends(require_admin),
    service: CatalogService = Depends(get_catalog_service),
):
    return success_response(service.create_package(data, admin), message="Package created")


@admin_router.get("/packages/{package_id}")
async def admin_get_package(
    package_id: str,
    admin: AdminUser = Depends(require_admin),
    service: CatalogService = Depends(get_catalog_service),
):
    """Package with services and scoping configuration"""
    package = service.get_package(package_id)
    return success_response(serialize_package(package, include_services=True, include_scoping=True))


@admin_router.patch("/packages/{package_id}")
async def admin_update_package(
    package_id: str,
    data: PackageUpdate,
    admin: AdminUser = Depends(require_admin),
    service: CatalogService = Depends(get_catalog_service),
):
    return success_response(service.update_package(package_id, data, admin), message="Package updated")


@admin_router.delete("/packages/{package_id}")
async def admin_delete_package(
    package_id: str,
    admin: AdminUser = Depends(require_admin),
    service: CatalogService = Depends(get_catalog_service),
):
    service.delete_package(package_id, admin)
    return success_response(message="Package deleted")

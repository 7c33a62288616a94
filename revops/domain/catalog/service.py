"""Catalog service - Business logic for services and packages"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...auth import AdminUser
from ...models import Package, Service
from ...shared.schemas import to_column_values, to_update_values
from ..audit.service import log_admin_change
from ..scoping.schemas import ScopingFactorResponse, ScopingRuleResponse
from .repository import PackageRepository, ServiceRepository
from .schemas import (
    PACKAGE_TYPES,
    PackageCreate,
    PackageResponse,
    PackageUpdate,
    ServiceCreate,
    ServiceResponse,
    ServiceUpdate,
)

logger = logging.getLogger(__name__)


def serialize_service(service: Service) -> dict:
    return ServiceResponse.model_validate(service).to_api()


def serialize_package(
    package: Package, include_services: bool = False, include_scoping: bool = False
) -> dict:
    """Package payload, optionally with linked services and active scoping config"""
    data = PackageResponse.model_validate(package).to_api()

    if include_services:
        data["services"] = [
            {
                **serialize_service(link.service),
                "isIncluded": link.is_included,
                "packageDisplayOrder": link.display_order,
            }
            for link in package.service_links
            if link.service is not None
        ]

    if include_scoping:
        factors = sorted(
            (f for f in package.scoping_factors if f.is_active), key=lambda f: f.display_order or 0
        )
        rules = sorted(
            (r for r in package.scoping_rules if r.is_active),
            key=lambda r: (r.priority or 0, r.created_at),
        )
        data["scopingFactors"] = [ScopingFactorResponse.model_validate(f).to_api() for f in factors]
        data["scopingRules"] = [ScopingRuleResponse.model_validate(r).to_api() for r in rules]

    return data


class CatalogService:
    """Service layer for the public catalog and its admin CRUD"""

    def __init__(self, db: Session):
        self.db = db
        self.services = ServiceRepository()
        self.packages = PackageRepository()

    # ------------------------------------------------------------------
    # Services
    # ------------------------------------------------------------------

    def list_active_services(self, category: Optional[str], featured_only: bool) -> list[dict]:
        services = self.services.get_active_services(self.db, category, featured_only)
        return [serialize_service(s) for s in services]

    def list_all_services(self) -> list[dict]:
        return [serialize_service(s) for s in self.services.get_all_services(self.db)]

    def get_service(self, service_id: str) -> Service:
        service = self.services.get_service_by_id(self.db, service_id)
        if not service:
            raise HTTPException(status_code=404, detail="Service not found")
        return service

    def _ensure_unique_service_slug(self, slug: str, exclude_id: Optional[str] = None):
        existing = self.services.get_service_by_slug(self.db, slug)
        if existing and existing.id != exclude_id:
            raise HTTPException(status_code=409, detail=f"A service with slug '{slug}' already exists")

    def create_service(self, data: ServiceCreate, admin: AdminUser) -> dict:
        self._ensure_unique_service_slug(data.slug)

        service = self.services.create_service(
            self.db, **to_column_values(data), created_by=admin.name, updated_by=admin.name
        )
        logger.info(f"✅ Service created: {service.slug} by {admin.name}")

        payload = serialize_service(service)
        log_admin_change(self.db, admin, "services", service.id, "create", new_values=payload)
        return payload

    def update_service(self, service_id: str, data: ServiceUpdate, admin: AdminUser) -> dict:
        service = self.get_service(service_id)
        if data.slug:
            self._ensure_unique_service_slug(data.slug, exclude_id=service.id)

        old_values = serialize_service(service)
        service = self.services.update_service(
            self.db, service, **to_update_values(data, Service), updated_by=admin.name
        )

        payload = serialize_service(service)
        log_admin_change(
            self.db, admin, "services", service.id, "update", old_values=old_values, new_values=payload
        )
        return payload

    def delete_service(self, service_id: str, admin: AdminUser) -> None:
        service = self.get_service(service_id)
        old_values = serialize_service(service)

        self.services.delete_service(self.db, service)
        logger.info(f"🗑️ Service deleted: {old_values['slug']} by {admin.name}")
        log_admin_change(self.db, admin, "services", service_id, "delete", old_values=old_values)

    # ------------------------------------------------------------------
    # Packages
    # ------------------------------------------------------------------

    def list_active_packages(
        self, package_type: Optional[str], featured_only: bool, include_services: bool
    ) -> list[dict]:
        if package_type and package_type not in PACKAGE_TYPES:
            raise HTTPException(
                status_code=400,
                detail=f"Invalid type. Must be one of: {', '.join(PACKAGE_TYPES)}",
            )

        packages = self.packages.get_active_packages(self.db, package_type, featured_only)
        return [serialize_package(p, include_services=include_services) for p in packages]

    def list_all_packages(self) -> list[dict]:
        return [serialize_package(p) for p in self.packages.get_all_packages(self.db)]

    def get_package(self, package_id: str) -> Package:
        package = self.packages.get_package_by_id(self.db, package_id)
        if not package:
            raise HTTPException(status_code=404, detail="Package not found")
        return package

    def get_active_package(self, package_id: str) -> Package:
        """Public lookups hide inactive packages"""
        package = self.get_package(package_id)
        if not package.is_active:
            raise HTTPException(status_code=404, detail="Package not found")
        return package

    def _ensure_unique_package_slug(self, slug: str, exclude_id: Optional[str] = None):
        existing = self.packages.get_package_by_slug(self.db, slug)
        if existing and existing.id != exclude_id:
            raise HTTPException(status_code=409, detail=f"A package with slug '{slug}' already exists")

    def _resolve_services(self, service_ids: list[str]) -> list[Service]:
        found = {s.id: s for s in self.services.get_services_by_ids(self.db, service_ids)}
        missing = [sid for sid in service_ids if sid not in found]
        if missing:
            raise HTTPException(status_code=400, detail=f"Unknown service IDs: {', '.join(missing)}")
        return [found[sid] for sid in service_ids]

    def create_package(self, data: PackageCreate, admin: AdminUser) -> dict:
        self._ensure_unique_package_slug(data.slug)
        services = self._resolve_services(data.serviceIds) if data.serviceIds else []

        package = self.packages.create_package(
            self.db,
            **to_column_values(data, exclude={"serviceIds"}),
            created_by=admin.name,
            updated_by=admin.name,
        )
        if services:
            package = self.packages.set_package_services(self.db, package, services)
        logger.info(f"✅ Package created: {package.slug} by {admin.name}")

        payload = serialize_package(package, include_services=True)
        log_admin_change(self.db, admin, "packages", package.id, "create", new_values=payload)
        return payload

    def update_package(self, package_id: str, data: PackageUpdate, admin: AdminUser) -> dict:
        package = self.get_package(package_id)
        if data.slug:
            self._ensure_unique_package_slug(data.slug, exclude_id=package.id)
        services = self._resolve_services(data.serviceIds) if data.serviceIds is not None else None

        old_values = serialize_package(package, include_services=True)
        package = self.packages.update_package(
            self.db,
            package,
            **to_update_values(data, Package, exclude={"serviceIds"}),
            updated_by=admin.name,
        )
        if services is not None:
            package = self.packages.set_package_services(self.db, package, services)

        payload = serialize_package(package, include_services=True)
        log_admin_change(
            self.db, admin, "packages", package.id, "update", old_values=old_values, new_values=payload
        )
        return payload

    def delete_package(self, package_id: str, admin: AdminUser) -> None:
        package = self.get_package(package_id)
        old_values = serialize_package(package)

        self.packages.delete_package(self.db, package)
        logger.info(f"🗑️ Package deleted: {old_values['slug']} by {admin.name}")
        log_admin_change(self.db, admin, "packages", package_id, "delete", old_values=old_values)

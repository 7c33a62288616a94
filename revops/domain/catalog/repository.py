"""Catalog repository - Database operations for services and packages"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import Package, PackageService, Service


class ServiceRepository:
    """Repository for service database operations"""

    @staticmethod
    def get_active_services(
        db: Session, category: Optional[str] = None, featured_only: bool = False
    ) -> list[Service]:
        """Active services in display order"""
        query = db.query(Service).filter(Service.is_active.is_(True))

        if category:
            query = query.filter(Service.category == category)
        if featured_only:
            query = query.filter(Service.is_featured.is_(True))

        return query.order_by(Service.display_order, Service.name).all()

    @staticmethod
    def get_all_services(db: Session) -> list[Service]:
        """All services including inactive ones"""
        return db.query(Service).order_by(Service.display_order, Service.name).all()

    @staticmethod
    def get_service_by_id(db: Session, service_id: str) -> Optional[Service]:
        return db.query(Service).filter(Service.id == service_id).first()

    @staticmethod
    def get_service_by_slug(db: Session, slug: str) -> Optional[Service]:
        return db.query(Service).filter(Service.slug == slug).first()

    @staticmethod
    def get_services_by_ids(db: Session, service_ids: list[str]) -> list[Service]:
        if not service_ids:
            return []
        return db.query(Service).filter(Service.id.in_(service_ids)).all()

    @staticmethod
    def create_service(db: Session, **service_data) -> Service:
        service = Service(**service_data)
        db.add(service)
        db.commit()
        db.refresh(service)
        return service

    @staticmethod
    def update_service(db: Session, service: Service, **updates) -> Service:
        for key, value in updates.items():
            if hasattr(service, key):
                setattr(service, key, value)

        db.commit()
        db.refresh(service)
        return service

    @staticmethod
    def delete_service(db: Session, service: Service) -> None:
        """Hard delete; package links go with it"""
        db.delete(service)
        db.commit()


class PackageRepository:
    """Repository for package database operations"""

    @staticmethod
    def get_active_packages(
        db: Session, package_type: Optional[str] = None, featured_only: bool = False
    ) -> list[Package]:
        """Active packages in display order"""
        query = db.query(Package).filter(Package.is_active.is_(True))

        if package_type:
            query = query.filter(Package.type == package_type)
        if featured_only:
            query = query.filter(Package.is_featured.is_(True))

        return query.order_by(Package.display_order, Package.name).all()

    @staticmethod
    def get_all_packages(db: Session) -> list[Package]:
        return db.query(Package).order_by(Package.display_order, Package.name).all()

    @staticmethod
    def get_package_by_id(db: Session, package_id: str) -> Optional[Package]:
        return (
            db.query(Package)
            .options(joinedload(Package.service_links).joinedload(PackageService.service))
            .filter(Package.id == package_id)
            .first()
        )

    @staticmethod
    def get_package_by_slug(db: Session, slug: str) -> Optional[Package]:
        return db.query(Package).filter(Package.slug == slug).first()

    @staticmethod
    def create_package(db: Session, **package_data) -> Package:
        package = Package(**package_data)
        db.add(package)
        db.commit()
        db.refresh(package)
        return package

    @staticmethod
    def update_package(db: Session, package: Package, **updates) -> Package:
        for key, value in updates.items():
            if hasattr(package, key):
                setattr(package, key, value)

        db.commit()
        db.refresh(package)
        return package

    @staticmethod
    def set_package_services(db: Session, package: Package, services: list[Service]) -> Package:
        """Replace the package's service links, keeping the given order"""
        package.service_links.clear()
        db.flush()
        for index, service in enumerate(services):
            package.service_links.append(
                PackageService(service_id=service.id, is_included=True, display_order=index)
            )

        db.commit()
        db.refresh(package)
        return package

    @staticmethod
    def delete_package(db: Session, package: Package) -> None:
        """Hard delete; service links, scoping factors and rules go with it"""
        db.delete(package)
        db.commit()

from datetime import datetime, timedelta

import pytest

from revops.models import AdminAuditLog, Package, ScopingRule, Service


@pytest.fixture
def seeded_catalog(db_session):
    """Two active services, one inactive, and one package linking the first two."""
    audit = Service(
        name="CRM Audit", slug="crm-audit", base_price=2500, category="assessment", display_order=1
    )
    cleanup = Service(
        name="Data Cleanup",
        slug="data-cleanup",
        base_price=4000,
        category="implementation",
        is_featured=True,
        display_order=2,
    )
    retired = Service(
        name="Legacy Migration", slug="legacy", base_price=100, category="implementation", is_active=False
    )
    db_session.add_all([audit, cleanup, retired])
    db_session.commit()

    package = Package(
        name="Series A Foundation",
        slug="series-a",
        type="stage",
        base_price=15000,
        target_arr_min=1000000,
        target_arr_max=5000000,
        timeline_weeks_min=6,
    )
    db_session.add(package)
    db_session.commit()
    return {"services": [audit, cleanup, retired], "package": package}


class TestPublicCatalog:
    """Public service and package listings."""

    def test_lists_only_active_services_in_display_order(self, client, seeded_catalog):
        response = client.get("/api/services")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert [s["slug"] for s in body["data"]] == ["crm-audit", "data-cleanup"]
        assert body["meta"] == {"count": 2, "category": None, "featured": False}
        assert response.headers["cache-control"] == "public, s-maxage=300, stale-while-revalidate=600"

    def test_filters_services_by_category_and_featured(self, client, seeded_catalog):
        response = client.get("/api/services", params={"category": "implementation", "featured": "true"})

        body = response.json()
        assert [s["slug"] for s in body["data"]] == ["data-cleanup"]
        assert body["meta"]["featured"] is True

    def test_service_payload_uses_camel_case(self, client, seeded_catalog):
        service = client.get("/api/services").json()["data"][0]

        assert service["basePrice"] == 2500
        assert service["isActive"] is True
        assert "base_price" not in service

    def test_arr_bounds_serialize_as_strings(self, client, seeded_catalog):
        package = client.get("/api/packages").json()["data"][0]

        assert package["targetArrMin"] == "1000000"
        assert package["targetArrMax"] == "5000000"

    def test_invalid_package_type_is_rejected(self, client, seeded_catalog):
        response = client.get("/api/packages", params={"type": "enterprise"})

        assert response.status_code == 400
        assert response.json()["success"] is False
        assert "Invalid type" in response.json()["error"]

    def test_package_detail_hides_inactive_packages(self, client, db_session, seeded_catalog):
        package = seeded_catalog["package"]
        package.is_active = False
        db_session.commit()

        response = client.get(f"/api/packages/{package.id}")

        assert response.status_code == 404
        assert response.json() == {"success": False, "error": "Package not found"}

    def test_package_rules_with_equal_priority_keep_creation_order(
        self, client, db_session, seeded_catalog
    ):
        package = seeded_catalog["package"]
        created = datetime(2025, 1, 1)
        for offset, name in [(2, "Third"), (0, "First"), (1, "Second")]:
            db_session.add(
                ScopingRule(
                    package_id=package.id,
                    rule_name=name,
                    factor_key="team_size",
                    operator="greater_than",
                    condition_value=10,
                    priority=5,
                    created_at=created + timedelta(minutes=offset),
                )
            )
        db_session.add(
            ScopingRule(
                package_id=package.id,
                rule_name="Urgent",
                factor_key="team_size",
                operator="greater_than",
                condition_value=0,
                priority=1,
                created_at=created + timedelta(minutes=9),
            )
        )
        db_session.commit()

        rules = client.get(f"/api/packages/{package.id}").json()["data"]["scopingRules"]

        assert [r["ruleName"] for r in rules] == ["Urgent", "First", "Second", "Third"]

    def test_unknown_package_is_404(self, client):
        assert client.get("/api/packages/does-not-exist").status_code == 404


class TestAdminServices:
    """Admin CRUD for services."""

    def test_requires_admin_key(self, client):
        response = client.get("/api/admin/services")

        assert response.status_code == 401
        assert response.json()["error"] == "Missing admin API key"

    def test_rejects_wrong_admin_key(self, client):
        response = client.get("/api/admin/services", headers={"X-Admin-Key": "nope"})

        assert response.status_code == 401
        assert response.json()["error"] == "Invalid admin API key"

    def test_lists_inactive_services_too(self, client, admin_headers, seeded_catalog):
        body = client.get("/api/admin/services", headers=admin_headers).json()

        assert body["meta"]["count"] == 3

    def test_create_service_records_author_and_audit(self, client, db_session, admin_headers):
        response = client.post(
            "/api/admin/services",
            headers=admin_headers,
            json={"name": "RevOps Roadmap", "slug": "roadmap", "basePrice": 3000, "category": "strategy"},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Service created"
        assert body["data"]["createdBy"] == "jane@revelateops.com"

        log = db_session.query(AdminAuditLog).one()
        assert log.table_name == "services"
        assert log.action == "create"
        assert log.record_id == body["data"]["id"]
        assert log.new_values["slug"] == "roadmap"

    def test_duplicate_slug_conflicts(self, client, admin_headers, seeded_catalog):
        response = client.post(
            "/api/admin/services",
            headers=admin_headers,
            json={"name": "Again", "slug": "crm-audit", "basePrice": 1, "category": "assessment"},
        )

        assert response.status_code == 409

    def test_missing_required_field_is_validation_error(self, client, admin_headers):
        response = client.post(
            "/api/admin/services", headers=admin_headers, json={"name": "No slug"}
        )

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Validation failed"
        assert {d["field"] for d in body["details"]} >= {"slug", "basePrice", "category"}

    def test_update_only_changes_sent_fields(self, client, admin_headers, seeded_catalog):
        service = seeded_catalog["services"][0]

        response = client.patch(
            f"/api/admin/services/{service.id}", headers=admin_headers, json={"basePrice": 2750}
        )

        data = response.json()["data"]
        assert data["basePrice"] == 2750
        assert data["name"] == "CRM Audit"
        assert data["updatedBy"] == "jane@revelateops.com"

    def test_update_clears_optional_text(self, client, db_session, admin_headers, seeded_catalog):
        service = seeded_catalog["services"][0]
        service.icon = "broom"
        service.short_description = "Find the gaps"
        db_session.commit()

        data = client.patch(
            f"/api/admin/services/{service.id}",
            headers=admin_headers,
            json={"icon": None, "shortDescription": None, "name": None},
        ).json()["data"]

        assert data["icon"] is None
        assert data["shortDescription"] is None
        assert data["name"] == "CRM Audit"

    def test_delete_service(self, client, db_session, admin_headers, seeded_catalog):
        service_id = seeded_catalog["services"][2].id

        response = client.delete(f"/api/admin/services/{service_id}", headers=admin_headers)

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Service deleted"}
        assert client.get(f"/api/admin/services/{service_id}", headers=admin_headers).status_code == 404


class TestAdminPackages:
    """Admin CRUD for packages and their service links."""

    def test_create_package_with_services(self, client, admin_headers, seeded_catalog):
        service_ids = [s.id for s in seeded_catalog["services"][:2]]

        response = client.post(
            "/api/admin/packages",
            headers=admin_headers,
            json={
                "name": "Growth Engine",
                "slug": "growth",
                "type": "targeted",
                "basePrice": 22000,
                "serviceIds": service_ids,
            },
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert [s["id"] for s in data["services"]] == service_ids
        assert all(s["isIncluded"] for s in data["services"])

        public = client.get(f"/api/packages/{data['id']}").json()["data"]
        assert len(public["services"]) == 2
        assert public["scopingFactors"] == []

    def test_unknown_service_ids_are_rejected(self, client, admin_headers):
        response = client.post(
            "/api/admin/packages",
            headers=admin_headers,
            json={"name": "X", "slug": "x", "type": "custom", "basePrice": 1, "serviceIds": ["missing"]},
        )

        assert response.status_code == 400
        assert "Unknown service IDs" in response.json()["error"]

    def test_invalid_package_type_fails_validation(self, client, admin_headers):
        response = client.post(
            "/api/admin/packages",
            headers=admin_headers,
            json={"name": "X", "slug": "x", "type": "mega", "basePrice": 1},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Validation failed"

    def test_update_replaces_service_links(self, client, admin_headers, seeded_catalog):
        package = seeded_catalog["package"]
        cleanup_id = seeded_catalog["services"][1].id

        response = client.patch(
            f"/api/admin/packages/{package.id}",
            headers=admin_headers,
            json={"serviceIds": [cleanup_id], "badge": "Popular"},
        )

        data = response.json()["data"]
        assert data["badge"] == "Popular"
        assert [s["id"] for s in data["services"]] == [cleanup_id]

    def test_delete_package(self, client, admin_headers, seeded_catalog):
        package_id = seeded_catalog["package"].id

        response = client.delete(f"/api/admin/packages/{package_id}", headers=admin_headers)

        assert response.json()["message"] == "Package deleted"
        assert client.get(f"/api/packages/{package_id}").status_code == 404

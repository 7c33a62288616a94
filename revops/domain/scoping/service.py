"""Scoping service - Factor/rule administration and the public calculator"""

import logging

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...auth import AdminUser
from ...models import ScopingFactor, ScopingRule
from ...shared.schemas import to_column_values, to_update_values
from ..audit.service import log_admin_change
from ..catalog.repository import PackageRepository
from ..quotes.repository import QuoteRepository
from .calculator import calculate_scope
from .repository import ScopingRepository
from .schemas import (
    CalculateScopeRequest,
    ScopingFactorCreate,
    ScopingFactorResponse,
    ScopingFactorUpdate,
    ScopingRuleCreate,
    ScopingRuleResponse,
    ScopingRuleUpdate,
)

logger = logging.getLogger(__name__)


def serialize_factor(factor: ScopingFactor) -> dict:
    return ScopingFactorResponse.model_validate(factor).to_api()


def serialize_rule(rule: ScopingRule) -> dict:
    return ScopingRuleResponse.model_validate(rule).to_api()


class ScopingService:
    """Service layer for scoping factors, rules and scope calculation"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ScopingRepository()
        self.packages = PackageRepository()

    def _require_package(self, package_id: str):
        package = self.packages.get_package_by_id(self.db, package_id)
        if not package:
            raise HTTPException(status_code=404, detail="Package not found")
        return package

    # ------------------------------------------------------------------
    # Factors
    # ------------------------------------------------------------------

    def list_factors(self, package_id: str, active_only: bool) -> list[dict]:
        return [serialize_factor(f) for f in self.repo.get_factors(self.db, package_id, active_only)]

    def get_factor(self, factor_id: str) -> ScopingFactor:
        factor = self.repo.get_factor_by_id(self.db, factor_id)
        if not factor:
            raise HTTPException(status_code=404, detail="Scoping factor not found")
        return factor

    def create_factor(self, data: ScopingFactorCreate, admin: AdminUser) -> dict:
        self._require_package(data.packageId)

        factor = self.repo.create_factor(self.db, **to_column_values(data))
        logger.info(f"✅ Scoping factor created: {factor.factor_key} ({factor.package_id})")

        payload = serialize_factor(factor)
        log_admin_change(self.db, admin, "scoping_factors", factor.id, "create", new_values=payload)
        return payload

    def update_factor(self, factor_id: str, data: ScopingFactorUpdate, admin: AdminUser) -> dict:
        factor = self.get_factor(factor_id)
        old_values = serialize_factor(factor)

        factor = self.repo.update_factor(self.db, factor, **to_update_values(data, ScopingFactor))

        payload = serialize_factor(factor)
        log_admin_change(
            self.db, admin, "scoping_factors", factor.id, "update", old_values=old_values, new_values=payload
        )
        return payload

    def delete_factor(self, factor_id: str, admin: AdminUser) -> None:
        factor = self.get_factor(factor_id)
        old_values = serialize_factor(factor)

        self.repo.delete_factor(self.db, factor)
        log_admin_change(self.db, admin, "scoping_factors", factor_id, "delete", old_values=old_values)

    # ------------------------------------------------------------------
    # Rules
    # ------------------------------------------------------------------

    def list_rules(self, package_id: str, active_only: bool) -> list[dict]:
        return [serialize_rule(r) for r in self.repo.get_rules(self.db, package_id, active_only)]

    def get_rule(self, rule_id: str) -> ScopingRule:
        rule = self.repo.get_rule_by_id(self.db, rule_id)
        if not rule:
            raise HTTPException(status_code=404, detail="Scoping rule not found")
        return rule

    def create_rule(self, data: ScopingRuleCreate, admin: AdminUser) -> dict:
        self._require_package(data.packageId)

        rule = self.repo.create_rule(self.db, **to_column_values(data))
        logger.info(f"✅ Scoping rule created: {rule.rule_name} ({rule.package_id})")

        payload = serialize_rule(rule)
        log_admin_change(self.db, admin, "scoping_rules", rule.id, "create", new_values=payload)
        return payload

    def update_rule(self, rule_id: str, data: ScopingRuleUpdate, admin: AdminUser) -> dict:
        rule = self.get_rule(rule_id)
        old_values = serialize_rule(rule)

        rule = self.repo.update_rule(self.db, rule, **to_update_values(data, ScopingRule))

        payload = serialize_rule(rule)
        log_admin_change(
            self.db, admin, "scoping_rules", rule.id, "update", old_values=old_values, new_values=payload
        )
        return payload

    def delete_rule(self, rule_id: str, admin: AdminUser) -> None:
        rule = self.get_rule(rule_id)
        old_values = serialize_rule(rule)

        self.repo.delete_rule(self.db, rule)
        log_admin_change(self.db, admin, "scoping_rules", rule_id, "delete", old_values=old_values)

    # ------------------------------------------------------------------
    # Calculator
    # ------------------------------------------------------------------

    def calculate(self, data: CalculateScopeRequest) -> dict:
        """Price and timeline for a package given the visitor's quiz answers"""
        package = self._require_package(data.packageId)
        rules = self.repo.get_rules(self.db, package.id, active_only=True)

        result = calculate_scope(package.base_price, package.timeline_weeks_min, rules, data.inputs)
        payload = result.to_api()

        if data.saveQuote:
            quote = QuoteRepository.create_quote(
                self.db,
                user_email=data.userEmail,
                company_name=data.companyName,
                package_id=package.id,
                scoping_inputs=data.inputs,
                calculated_price=result.adjusted_price,
                calculated_timeline_weeks=result.adjusted_timeline_weeks,
                status="draft",
            )
            payload["quoteId"] = quote.id
            logger.info(f"✅ Draft quote {quote.id} saved for {data.userEmail}")

        return payload

"""Scoping repository - Database operations for factors and rules"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import ScopingFactor, ScopingRule


class ScopingRepository:
    """Repository for scoping factor and rule database operations"""

    # ------------------------------------------------------------------
    # Factors
    # ------------------------------------------------------------------

    @staticmethod
    def get_factors(db: Session, package_id: str, active_only: bool = False) -> list[ScopingFactor]:
        query = db.query(ScopingFactor).filter(ScopingFactor.package_id == package_id)
        if active_only:
            query = query.filter(ScopingFactor.is_active.is_(True))
        return query.order_by(ScopingFactor.display_order, ScopingFactor.created_at).all()

    @staticmethod
    def get_factor_by_id(db: Session, factor_id: str) -> Optional[ScopingFactor]:
        return db.query(ScopingFactor).filter(ScopingFactor.id == factor_id).first()

    @staticmethod
    def create_factor(db: Session, **factor_data) -> ScopingFactor:
        factor = ScopingFactor(**factor_data)
        db.add(factor)
        db.commit()
        db.refresh(factor)
        return factor

    @staticmethod
    def update_factor(db: Session, factor: ScopingFactor, **updates) -> ScopingFactor:
        for key, value in updates.items():
            if hasattr(factor, key):
                setattr(factor, key, value)

        db.commit()
        db.refresh(factor)
        return factor

    @staticmethod
    def delete_factor(db: Session, factor: ScopingFactor) -> None:
        db.delete(factor)
        db.commit()

    # ------------------------------------------------------------------
    # Rules
    # ------------------------------------------------------------------

    @staticmethod
    def get_rules(db: Session, package_id: str, active_only: bool = False) -> list[ScopingRule]:
        """Rules in evaluation order: ascending priority, then creation time"""
        query = db.query(ScopingRule).filter(ScopingRule.package_id == package_id)
        if active_only:
            query = query.filter(ScopingRule.is_active.is_(True))
        return query.order_by(ScopingRule.priority, ScopingRule.created_at).all()

    @staticmethod
    def get_rule_by_id(db: Session, rule_id: str) -> Optional[ScopingRule]:
        return db.query(ScopingRule).filter(ScopingRule.id == rule_id).first()

    @staticmethod
    def create_rule(db: Session, **rule_data) -> ScopingRule:
        rule = ScopingRule(**rule_data)
        db.add(rule)
        db.commit()
        db.refresh(rule)
        return rule

    @staticmethod
    def update_rule(db: Session, rule: ScopingRule, **updates) -> ScopingRule:
        for key, value in updates.items():
            if hasattr(rule, key):
                setattr(rule, key, value)

        db.commit()
        db.refresh(rule)
        return rule

    @staticmethod
    def delete_rule(db: Session, rule: ScopingRule) -> None:
        db.delete(rule)
        db.commit()

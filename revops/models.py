import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from .database import Base


def generate_uuid():
    """Generate a string UUID primary key"""
    return str(uuid.uuid4())


def utcnow():
    """Naive UTC timestamp (all DateTime columns store UTC without tzinfo)"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


# ============================================================================
# CATALOG
# ============================================================================


class Service(Base):
    __tablename__ = "services"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    slug = Column(String(255), unique=True, index=True, nullable=False)
    short_description = Column(String(500), nullable=True)
    full_description = Column(Text, nullable=True)
    base_price = Column(Float, nullable=False)
    category = Column(String(100), index=True, nullable=False)
    icon = Column(String(100), nullable=True)
    is_featured = Column(Boolean, default=False)
    is_active = Column(Boolean, default=True)
    display_order = Column(Integer, default=0)
    created_by = Column(String(255), nullable=True)
    updated_by = Column(String(255), nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    package_links = relationship(
        "PackageService", back_populates="service", cascade="all, delete-orphan"
    )


class Package(Base):
    __tablename__ = "packages"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    slug = Column(String(255), unique=True, index=True, nullable=False)
    type = Column(String(20), index=True, nullable=False)  # stage, targeted, custom
    stage = Column(String(100), nullable=True)
    target_arr_min = Column(BigInteger, nullable=True)
    target_arr_max = Column(BigInteger, nullable=True)
    tagline = Column(String(500), nullable=True)
    short_description = Column(String(500), nullable=True)
    full_description = Column(Text, nullable=True)
    base_price = Column(Float, nullable=False)
    discount_percentage = Column(Float, default=0)
    timeline_weeks_min = Column(Integer, nullable=True)
    timeline_weeks_max = Column(Integer, nullable=True)
    icon = Column(String(100), nullable=True)
    badge = Column(String(100), nullable=True)
    inputs_description = Column(Text, nullable=True)
    delivery_rhythm_description = Column(Text, nullable=True)
    outputs_description = Column(Text, nullable=True)
    success_criteria_description = Column(Text, nullable=True)
    guarantee_description = Column(Text, nullable=True)
    is_featured = Column(Boolean, default=False)
    is_active = Column(Boolean, default=True)
    display_order = Column(Integer, default=0)
    created_by = Column(String(255), nullable=True)
    updated_by = Column(String(255), nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    service_links = relationship(
        "PackageService",
        back_populates="package",
        cascade="all, delete-orphan",
        order_by="PackageService.display_order",
    )
    scoping_factors = relationship(
        "ScopingFactor", back_populates="package", cascade="all, delete-orphan"
    )
    scoping_rules = relationship(
        "ScopingRule", back_populates="package", cascade="all, delete-orphan"
    )


class PackageService(Base):
    __tablename__ = "package_services"

    id = Column(Integer, primary_key=True, autoincrement=True)
    package_id = Column(String(36), ForeignKey("packages.id", ondelete="CASCADE"), index=True)
    service_id = Column(String(36), ForeignKey("services.id", ondelete="CASCADE"), index=True)
    is_included = Column(Boolean, default=True)
    display_order = Column(Integer, default=0)

    package = relationship("Package", back_populates="service_links")
    service = relationship("Service", back_populates="package_links")


# ============================================================================
# SCOPING
# ============================================================================


class ScopingFactor(Base):
    __tablename__ = "scoping_factors"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    package_id = Column(
        String(36), ForeignKey("packages.id", ondelete="CASCADE"), index=True, nullable=False
    )
    factor_key = Column(String(100), nullable=False)
    question_text = Column(String(500), nullable=False)
    help_text = Column(String(1000), nullable=True)
    input_type = Column(String(20), nullable=False)  # select, number, boolean, range
    options = Column(JSON, nullable=True)  # [{"value": ..., "label": ...}]
    is_required = Column(Boolean, default=True)
    display_order = Column(Integer, default=0)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    package = relationship("Package", back_populates="scoping_factors")


class ScopingRule(Base):
    __tablename__ = "scoping_rules"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    package_id = Column(
        String(36), ForeignKey("packages.id", ondelete="CASCADE"), index=True, nullable=False
    )
    rule_name = Column(String(255), nullable=False)
    factor_key = Column(String(100), nullable=False)
    operator = Column(String(20), nullable=False)
    condition_value = Column(JSON, nullable=False)
    price_adjustment_type = Column(String(20), nullable=True)  # multiplier, fixed_add, fixed_subtract
    price_adjustment_value = Column(Float, nullable=True)
    timeline_adjustment_weeks = Column(Integer, default=0)
    adjustment_label = Column(String(255), nullable=True)
    priority = Column(Integer, default=0)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    package = relationship("Package", back_populates="scoping_rules")


# ============================================================================
# QUOTES & AUDIT
# ============================================================================


class Quote(Base):
    __tablename__ = "quotes"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_email = Column(String(255), index=True, nullable=True)
    company_name = Column(String(255), nullable=True)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    phone = Column(String(50), nullable=True)
    title = Column(String(255), nullable=True)
    comments = Column(Text, nullable=True)
    package_id = Column(String(36), ForeignKey("packages.id", ondelete="SET NULL"), nullable=True)
    scoping_inputs = Column(JSON, nullable=True)
    selected_services = Column(JSON, nullable=True)
    calculated_price = Column(Float, nullable=True)
    calculated_timeline_weeks = Column(Integer, nullable=True)
    pdf_url = Column(String(1000), nullable=True)
    status = Column(String(20), default="draft", index=True)  # draft, sent, accepted
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    package = relationship("Package")


class AdminAuditLog(Base):
    __tablename__ = "admin_audit_logs"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    table_name = Column(String(100), index=True, nullable=False)
    record_id = Column(String(36), index=True, nullable=False)
    action = Column(String(20), nullable=False)  # create, update, delete, activate, deactivate
    old_values = Column(JSON, nullable=True)
    new_values = Column(JSON, nullable=True)
    changed_by = Column(String(255), nullable=False)
    ip_address = Column(String(45), nullable=True)
    user_agent = Column(String(500), nullable=True)
    changed_at = Column(DateTime, default=utcnow, index=True)


# ============================================================================
# CONTACT / CHAT RELAY
# ============================================================================


class Conversation(Base):
    __tablename__ = "conversations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_name = Column(String(255), nullable=False)
    user_email = Column(String(255), index=True, nullable=False)
    user_phone = Column(String(50), nullable=True)
    user_company = Column(String(255), nullable=True)
    slack_thread_ts = Column(String(50), index=True, nullable=True)
    status = Column(String(20), default="active")  # active, closed
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    messages = relationship(
        "Message",
        back_populates="conversation",
        cascade="all, delete-orphan",
        order_by="Message.sent_at",
    )


class Message(Base):
    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, autoincrement=True)
    conversation_id = Column(
        Integer, ForeignKey("conversations.id", ondelete="CASCADE"), index=True, nullable=False
    )
    sender = Column(String(20), nullable=False)  # user, owner
    message_text = Column(Text, nullable=False)
    sent_at = Column(DateTime, default=utcnow)
    read_by_user = Column(Boolean, default=False)
    slack_ts = Column(String(50), nullable=True)

    conversation = relationship("Conversation", back_populates="messages")

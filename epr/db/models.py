"""SQLAlchemy ORM models."""
import uuid

from sqlalchemy import Boolean, CheckConstraint, Column, Date, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from epr.infrastructure.database.base import Base


def generate_uuid() -> str:
    return str(uuid.uuid4())


class User(Base):
    __tablename__ = "users"
    __table_args__ = (CheckConstraint("wallet_balance_cents >= 0", name="ck_users_wallet_balance_non_negative"),)

    id = Column(String(36), primary_key=True, default=generate_uuid)
    email = Column(String(255), unique=True, nullable=False, index=True)
    organization_name = Column(String(255), nullable=False, default="")
    role = Column(String(32), nullable=False, default="public")
    wallet_balance_cents = Column(Integer, nullable=False, default=0)
    verification_count = Column(Integer, nullable=False, default=0)
    free_verifications_earned = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    bills = relationship("Bill", back_populates="issuer")


class Bill(Base):
    __tablename__ = "bills"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    bill_number = Column(String(50), unique=True, nullable=False, index=True)
    bill_type = Column(String(32), nullable=False)
    access_level = Column(String(20), nullable=False, default="public")
    issuer_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    issuer_name = Column(String(255), nullable=False)
    bill_data = Column(Text, nullable=False)
    amount_cents = Column(Integer, nullable=False)
    currency = Column(String(3), nullable=False, default="INR")
    issue_date = Column(Date, nullable=False)
    data_hash = Column(String(64), unique=True, nullable=False)
    blockchain_status = Column(String(20), nullable=False, default="pending")
    is_deleted = Column(Boolean, nullable=False, default=False)
    deletion_reason = Column(Text)
    deleted_at = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    issuer = relationship("User", back_populates="bills")


class Verification(Base):
    """Audit trail row. Inserted once, never updated or deleted."""

    __tablename__ = "verifications"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    bill_id = Column(String(36), ForeignKey("bills.id"), nullable=True, index=True)
    bill_number = Column(String(50), nullable=False, index=True)
    requester_id = Column(String(36), ForeignKey("users.id"), nullable=True, index=True)
    requester_ip = Column(String(45))
    requester_user_agent = Column(Text)
    disclosure = Column(String(20), nullable=False)
    data_revealed = Column(Text)
    amount_charged_cents = Column(Integer, nullable=False, default=0)
    was_free = Column(Boolean, nullable=False, default=False)
    pricing_rule_applied = Column(String(50))
    verification_status = Column(String(20), nullable=False, index=True)
    response_time_ms = Column(Integer)
    verified_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    bill = relationship("Bill")


class WalletTransaction(Base):
    __tablename__ = "wallet_transactions"
    __table_args__ = (Index("ix_wallet_transactions_user_created", "user_id", "created_at"),)

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    type = Column(String(32), nullable=False)  # bill_generation, verification, wallet_topup, ...
    amount_cents = Column(Integer, nullable=False)
    balance_before_cents = Column(Integer, nullable=False)
    balance_after_cents = Column(Integer, nullable=False)
    bill_id = Column(String(36), ForeignKey("bills.id"), nullable=True)
    reference = Column(String(100))
    description = Column(String(255))
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User")

# app/shared/database/models.py
from sqlalchemy import (
    Column, Integer, String, DateTime, Text,
    ForeignKey, CheckConstraint, Index, UniqueConstraint, func
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()

USER_ROLES = ("sender", "carrier", "both")
PACKAGE_SIZES = ("small", "medium", "large")
DELIVERY_STATUSES = ("requested", "accepted", "picked", "delivered")


def _in_clause(column: str, values) -> str:
    quoted = ", ".join(f"'{value}'" for value in values)
    return f"{column} IN ({quoted})"


# =====================================================
# USERS
# =====================================================

class User(Base):
    """Registered account; can send, carry or both"""
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(_in_clause("role", USER_ROLES), name="ck_users_role"),
    )

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    full_name = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default='both')
    rating = Column(Integer)
    total_reviews = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.current_timestamp())


# =====================================================
# DELIVERIES
# =====================================================

class Delivery(Base):
    """Package delivery request and its lifecycle status"""
    __tablename__ = "deliveries"
    __table_args__ = (
        CheckConstraint(_in_clause("package_size", PACKAGE_SIZES), name="ck_deliveries_package_size"),
        CheckConstraint(_in_clause("status", DELIVERY_STATUSES), name="ck_deliveries_status"),
        CheckConstraint("package_weight > 0", name="ck_deliveries_package_weight"),
        CheckConstraint("delivery_fee > 0", name="ck_deliveries_delivery_fee"),
        CheckConstraint(
            "(status = 'requested' AND carrier_id IS NULL) OR "
            "(status <> 'requested' AND carrier_id IS NOT NULL)",
            name="ck_deliveries_carrier_assignment"
        ),
        Index("ix_deliveries_status_created", "status", "created_at"),
    )

    id = Column(Integer, primary_key=True, index=True)
    sender_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    carrier_id = Column(Integer, ForeignKey("users.id"), index=True)
    pickup_location = Column(String(255), nullable=False)
    drop_location = Column(String(255), nullable=False)
    package_size = Column(String(20), nullable=False)
    package_weight = Column(Integer, nullable=False)  # grams
    description = Column(Text)
    special_instructions = Column(Text)
    preferred_delivery_date = Column(String(50), nullable=False)
    preferred_delivery_time = Column(String(100), nullable=False)
    status = Column(String(20), nullable=False, default='requested')
    delivery_fee = Column(Integer, nullable=False)  # minor currency units
    created_at = Column(DateTime(timezone=True), nullable=False)

    # Relationships
    sender = relationship("User", foreign_keys=[sender_id])
    carrier = relationship("User", foreign_keys=[carrier_id])


# =====================================================
# REVIEWS
# =====================================================

class Review(Base):
    """Rating left by one party of a delivery for the other"""
    __tablename__ = "reviews"
    __table_args__ = (
        CheckConstraint("rating BETWEEN 1 AND 5", name="ck_reviews_rating"),
        UniqueConstraint("delivery_id", "reviewer_id", name="uq_reviews_delivery_reviewer"),
    )

    id = Column(Integer, primary_key=True, index=True)
    delivery_id = Column(Integer, ForeignKey("deliveries.id"), nullable=False)
    reviewer_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    reviewee_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    rating = Column(Integer, nullable=False)
    comment = Column(Text)
    created_at = Column(DateTime(timezone=True), nullable=False)

    # Relationships
    delivery = relationship("Delivery")
    reviewer = relationship("User", foreign_keys=[reviewer_id])
    reviewee = relationship("User", foreign_keys=[reviewee_id])

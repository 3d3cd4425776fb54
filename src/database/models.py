"""SQLAlchemy database models.

This module defines the redemption code schema using SQLAlchemy ORM.
"""

from enum import IntEnum

from sqlalchemy import Column, String, Integer, BigInteger, Index
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all database models."""
    pass


class RedemptionStatus(IntEnum):
    """Lifecycle state of a redemption code."""
    UNUSED = 1
    DISABLED = 2
    USED = 3


class Redemption(Base):
    """
    A single-use redemption code granting a quota to the redeeming account.

    Codes are created in batches; every row of a batch shares created_time,
    user_id, name and expired_time. expired_time == 0 means the code never expires.
    """
    __tablename__ = "redemptions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, nullable=False, index=True)  # Creating admin, immutable
    key = Column(String(32), unique=True, nullable=False, index=True)
    status = Column(Integer, nullable=False, default=RedemptionStatus.UNUSED)
    name = Column(String(255), nullable=False, index=True)
    quota = Column(Integer, nullable=False, default=100)
    created_time = Column(BigInteger, nullable=False)
    redeemed_time = Column(BigInteger, nullable=False, default=0)
    used_user_id = Column(Integer, nullable=False, default=0)
    expired_time = Column(BigInteger, nullable=False, default=0)

    # Indexes
    __table_args__ = (
        Index("ix_redemptions_status_expired", "status", "expired_time"),
    )

    def __repr__(self):
        return f"<Redemption(id={self.id}, name={self.name}, quota={self.quota}, status={self.status})>"

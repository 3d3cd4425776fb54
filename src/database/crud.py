"""CRUD (Create, Read, Update, Delete) operations for redemption codes.

These functions are the persistence layer behind RedemptionService. They
commit their own work and let SQLAlchemy errors propagate to the caller.
"""

from typing import List, Optional, Sequence, Tuple
from sqlalchemy.orm import Session
from sqlalchemy import select, delete, and_, or_, func
from sqlalchemy.exc import SQLAlchemyError

from .models import Redemption, RedemptionStatus


# ============================================================================
# Redemption CRUD Operations
# ============================================================================

def create_redemptions_batch(
    db: Session,
    redemptions: Sequence[Redemption],
    batch_size: int = 50
) -> List[Redemption]:
    """
    Insert a batch of redemption codes in chunks within a single transaction.

    Each chunk is flushed separately to keep INSERT statements small; the
    commit happens once at the end, so a failure in any chunk rolls back
    every row of the batch.
    """
    try:
        for start in range(0, len(redemptions), batch_size):
            db.add_all(redemptions[start:start + batch_size])
            db.flush()
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    return list(redemptions)


def get_redemption_by_id(db: Session, redemption_id: int) -> Optional[Redemption]:
    """Get a redemption code by its ID."""
    return db.get(Redemption, redemption_id)


def get_all_redemptions(
    db: Session,
    offset: int = 0,
    limit: int = 10
) -> Tuple[List[Redemption], int]:
    """Get a page of redemption codes (newest first) and the total count."""
    total = db.scalar(select(func.count(Redemption.id))) or 0
    stmt = select(Redemption).order_by(Redemption.id.desc()).offset(offset).limit(limit)
    return list(db.scalars(stmt)), total


def search_redemptions(
    db: Session,
    keyword: str,
    offset: int = 0,
    limit: int = 10
) -> Tuple[List[Redemption], int]:
    """
    Search redemption codes by name prefix, or by ID when the keyword is numeric.

    Returns:
        Tuple of (page of matching codes newest first, total match count)
    """
    condition = Redemption.name.like(f"{keyword}%")
    if keyword.isdecimal():
        condition = or_(Redemption.id == int(keyword), condition)

    total = db.scalar(select(func.count(Redemption.id)).where(condition)) or 0
    stmt = (
        select(Redemption)
        .where(condition)
        .order_by(Redemption.id.desc())
        .offset(offset)
        .limit(limit)
    )
    return list(db.scalars(stmt)), total


def update_redemption(db: Session, redemption: Redemption) -> Redemption:
    """Persist changes made to a loaded redemption code."""
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    db.refresh(redemption)
    return redemption


def delete_redemption(db: Session, redemption: Redemption) -> None:
    """Delete a single redemption code."""
    try:
        db.delete(redemption)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise


def delete_invalid_redemptions(db: Session, now: int) -> int:
    """
    Delete codes that can no longer be redeemed.

    A code is invalid when it is no longer unused (used or disabled) or when
    it has an expiration time that has already passed.

    Returns:
        Number of rows removed
    """
    stmt = delete(Redemption).where(
        or_(
            Redemption.status != RedemptionStatus.UNUSED,
            and_(
                Redemption.expired_time != 0,
                Redemption.expired_time < now
            )
        )
    )
    try:
        result = db.execute(stmt)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    return result.rowcount or 0

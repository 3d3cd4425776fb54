"""Redemption code service.

This module handles:
- Validating and generating batches of redemption codes
- Persisting batches all-or-nothing
- Administrative field and status updates
- Lookup, listing, search and deletion
- Cleanup of codes that can no longer be redeemed
"""

import logging
from typing import Callable, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.config import settings
from src.database import crud
from src.database.models import Redemption, RedemptionStatus

from .codes import CodeFactory, generate_redemption_key
from .errors import NotFoundError, PersistenceFailureError, RedemptionValidationError
from .quota import QuotaAllocator
from .validation import (
    RedemptionBatchRequest,
    current_timestamp,
    validate_create_request,
    validate_expired_time,
    validate_name,
    validate_quota,
)


logger = logging.getLogger(__name__)


class RedemptionService:
    """Service for managing redemption codes."""

    def __init__(
        self,
        db: Session,
        allocator: Optional[QuotaAllocator] = None,
        clock: Callable[[], int] = current_timestamp,
        key_generator: Callable[[], str] = generate_redemption_key,
        insert_batch_size: Optional[int] = None
    ):
        """
        Initialize redemption service.

        Args:
            db: Database session for this request
            allocator: Quota allocator; pass one built on the application's
                shared random source. A private one is created if omitted.
            clock: Returns the current Unix time in seconds
            key_generator: Returns a new unique redemption key
            insert_batch_size: Rows per INSERT chunk, defaults to settings
        """
        self.db = db
        self.clock = clock
        self.factory = CodeFactory(
            allocator or QuotaAllocator(),
            clock=clock,
            key_generator=key_generator
        )
        self.insert_batch_size = insert_batch_size or settings.redemption_insert_batch_size

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def create_redemptions(self, request: RedemptionBatchRequest, owner_id: int) -> List[str]:
        """
        Validate a request, generate its codes and persist them.

        Returns:
            The generated keys, in creation order

        Raises:
            RedemptionValidationError: the request was rejected; nothing was built
            PersistenceFailureError: storage failed; no code of the batch was saved
        """
        now = self.clock()
        try:
            validate_create_request(request, now=now)
        except RedemptionValidationError as e:
            logger.info("Rejected redemption batch from user %s: %s", owner_id, e.kind)
            raise

        # created_time is the reading validated against, so expired_time >= created_time
        batch = self.factory.build(request, owner_id, created_time=now)

        try:
            crud.create_redemptions_batch(self.db, batch.redemptions, batch_size=self.insert_batch_size)
        except SQLAlchemyError as e:
            logger.exception("Failed to persist batch of %d redemption codes", request.count)
            raise PersistenceFailureError(e) from e

        logger.info(
            "User %s created %d redemption codes named %r (%s quota)",
            owner_id,
            len(batch.keys),
            request.name,
            "random" if request.random_mode else "fixed",
        )
        return batch.keys

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_redemption(self, redemption_id: int) -> Redemption:
        """Get a redemption code by ID, raising NotFoundError if absent."""
        try:
            redemption = crud.get_redemption_by_id(self.db, redemption_id)
        except SQLAlchemyError as e:
            logger.exception("Failed to load redemption code %s", redemption_id)
            raise PersistenceFailureError(e) from e
        if redemption is None:
            raise NotFoundError()
        return redemption

    def list_redemptions(self, offset: int = 0, limit: int = 10) -> Tuple[List[Redemption], int]:
        try:
            return crud.get_all_redemptions(self.db, offset=offset, limit=limit)
        except SQLAlchemyError as e:
            logger.exception("Failed to list redemption codes")
            raise PersistenceFailureError(e) from e

    def search_redemptions(
        self,
        keyword: str,
        offset: int = 0,
        limit: int = 10
    ) -> Tuple[List[Redemption], int]:
        try:
            return crud.search_redemptions(self.db, keyword, offset=offset, limit=limit)
        except SQLAlchemyError as e:
            logger.exception("Failed to search redemption codes")
            raise PersistenceFailureError(e) from e

    # ------------------------------------------------------------------
    # Updates
    # ------------------------------------------------------------------

    def update_fields(
        self,
        redemption_id: int,
        name: str,
        quota: int,
        expired_time: int
    ) -> Redemption:
        """
        Replace the name, quota and expiration of a code.

        Status, key, owner and timestamps are left untouched.
        """
        redemption = self.get_redemption(redemption_id)

        validate_name(name)
        validate_quota(quota)
        validate_expired_time(expired_time, now=self.clock())

        redemption.name = name
        redemption.quota = quota
        redemption.expired_time = expired_time
        redemption = self._save(redemption)

        logger.info("Updated redemption code %s", redemption_id)
        return redemption

    def update_status(self, redemption_id: int, status: RedemptionStatus) -> Redemption:
        """
        Set the status of a code.

        Any status may be set from any other (administrative override).
        """
        redemption = self.get_redemption(redemption_id)
        redemption.status = RedemptionStatus(status)
        redemption = self._save(redemption)

        logger.info("Set redemption code %s status to %s", redemption_id, RedemptionStatus(status).name)
        return redemption

    def _save(self, redemption: Redemption) -> Redemption:
        redemption_id = redemption.id
        try:
            return crud.update_redemption(self.db, redemption)
        except SQLAlchemyError as e:
            logger.exception("Failed to update redemption code %s", redemption_id)
            raise PersistenceFailureError(e) from e

    # ------------------------------------------------------------------
    # Deletion
    # ------------------------------------------------------------------

    def delete_redemption(self, redemption_id: int) -> None:
        redemption = self.get_redemption(redemption_id)
        try:
            crud.delete_redemption(self.db, redemption)
        except SQLAlchemyError as e:
            logger.exception("Failed to delete redemption code %s", redemption_id)
            raise PersistenceFailureError(e) from e
        logger.info("Deleted redemption code %s", redemption_id)

    def delete_invalid_redemptions(self) -> int:
        """
        Remove used, disabled and expired codes.

        Returns:
            Number of codes removed
        """
        try:
            removed = crud.delete_invalid_redemptions(self.db, now=self.clock())
        except SQLAlchemyError as e:
            logger.exception("Failed to delete invalid redemption codes")
            raise PersistenceFailureError(e) from e

        logger.info("Deleted %d invalid redemption codes", removed)
        return removed

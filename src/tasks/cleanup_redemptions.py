#!/usr/bin/env python3
"""
Background task to delete invalid redemption codes.

Removes codes that were used, disabled, or have expired. Run it periodically
(e.g., daily) via cron:
    0 3 * * * cd /path/to/redemption-service && uv run python -m src.tasks.cleanup_redemptions
"""

import logging
import sys

from ..config import settings
from ..database.session import get_db_context
from ..services.redemptions import RedemptionService
from ..services.errors import PersistenceFailureError


logger = logging.getLogger(__name__)


def main():
    """Delete invalid redemption codes."""
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
    )
    logger.info("Starting invalid redemption code cleanup...")

    with get_db_context() as db:
        try:
            removed = RedemptionService(db).delete_invalid_redemptions()
        except PersistenceFailureError as e:
            logger.error("Failed to delete invalid redemption codes: %s", e.original)
            return 1

    logger.info("Cleanup finished: %d redemption codes removed", removed)
    return 0


if __name__ == "__main__":
    sys.exit(main())

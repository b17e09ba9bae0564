"""Celery tasks for the inquiry domain."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore

from .reservations import expire_reservations

logger = logging.getLogger(__name__)


# ============================================================================
# PERIODIC TASKS (scheduled through Celery Beat)
# ============================================================================

@shared_task(name="inquiries.expire_reservations")
def expire_reservations_task() -> dict[str, int]:
    """
    Reclaim properties whose deposit reservation has lapsed.

    Runs daily at midnight through Celery Beat. Properties go back to
    ``available`` and the inquiry that held them becomes ``expired``.

    Returns:
        dict: {"expired": number of reclaimed properties}
    """
    logger.info("Running reservation expiry sweep")
    try:
        expired_count = expire_reservations()
    except Exception as e:
        logger.error(f"Reservation expiry sweep failed: {e}", exc_info=True)
        raise

    logger.info(f"Reservation expiry sweep succeeded: {expired_count} reclaimed")
    return {"expired": expired_count}

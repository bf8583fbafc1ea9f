"""
Background sweep of expired pending registrations.

Expiry is enforced at verification time; the sweep only bounds how long
dead entries occupy the store. It runs as an APScheduler interval job
in a background thread.
"""

import logging

from apscheduler.schedulers.background import BackgroundScheduler

from otpgate.domain.ports import Clock, PendingRegistrationStore, utc_now

logger = logging.getLogger(__name__)

SWEEP_JOB_ID = "pending-registration-sweep"


def sweep_expired_registrations(store: PendingRegistrationStore, clock: Clock = utc_now) -> int:
    """Delete expired pending entries. Returns the number removed."""
    removed = store.purge_expired(clock())
    if removed:
        logger.info("Pending sweep: removed %d expired registration(s)", removed)
    return removed


def build_sweeper(
    store: PendingRegistrationStore,
    interval_seconds: float,
    clock: Clock = utc_now,
) -> BackgroundScheduler:
    """
    Create a scheduler with the sweep job registered. Caller starts it.

    Args:
        store: Pending store to purge
        interval_seconds: Seconds between runs
        clock: Source of "now" for expiry comparison
    """
    scheduler = BackgroundScheduler(timezone="UTC")
    scheduler.add_job(
        sweep_expired_registrations,
        "interval",
        seconds=interval_seconds,
        args=[store, clock],
        id=SWEEP_JOB_ID,
        coalesce=True,
        max_instances=1,
    )
    return scheduler

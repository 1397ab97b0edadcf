"""Nightly rollup: moves the session WAL into the CSV archive.

Usage:
    python -m scheduler.nightly --once      # single run (for cron)
    python -m scheduler.nightly --daemon    # APScheduler loop
"""

from __future__ import annotations

import argparse
import logging

from microdose_store import StoreError
from microdose_store.paths import DataPaths
from microdose_store.rollup import cleanup_processed_wals, wal_to_csv_and_archive

from scheduler.config import MICRODOSE_CONFIG, ROLLUP_CLEANUP, ROLLUP_HOUR, ROLLUP_MINUTE

logger = logging.getLogger(__name__)


def nightly_job(cleanup: bool = ROLLUP_CLEANUP) -> int:
    """Execute one rollup cycle. Returns the number of sessions archived."""
    paths = DataPaths(MICRODOSE_CONFIG.data_dir)
    logger.info("Starting nightly rollup in %s", paths.data_dir)

    try:
        count = wal_to_csv_and_archive(paths.wal, paths.archive, MICRODOSE_CONFIG.lock_timeout_s)
    except StoreError as exc:
        # WAL is untouched on failure; the next run replays it
        logger.error("Rollup failed (retryable=%s): %s", exc.retryable, exc)
        return 0

    if cleanup:
        removed = cleanup_processed_wals(paths.wal_dir)
        logger.info("Removed %d processed WAL files", removed)

    logger.info("Nightly rollup complete: %d sessions archived", count)
    return count


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Microdose nightly WAL rollup")
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--once", action="store_true", help="Run once and exit")
    group.add_argument("--daemon", action="store_true", help="Run as APScheduler daemon")
    parser.add_argument(
        "--cleanup",
        action="store_true",
        default=ROLLUP_CLEANUP,
        help="Delete processed WAL files after a successful rollup",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    if args.once:
        nightly_job(cleanup=args.cleanup)
        return

    from apscheduler.schedulers.blocking import BlockingScheduler

    scheduler = BlockingScheduler()
    scheduler.add_job(
        nightly_job,
        "cron",
        hour=ROLLUP_HOUR,
        minute=ROLLUP_MINUTE,
        kwargs={"cleanup": args.cleanup},
        id="nightly_rollup",
    )
    logger.info("Scheduler started, nightly rollup at %02d:%02d", ROLLUP_HOUR, ROLLUP_MINUTE)
    try:
        scheduler.start()
    except (KeyboardInterrupt, SystemExit):
        logger.info("Scheduler stopped")


if __name__ == "__main__":
    main()

"""
One refresh batch: fetch both sources, reconcile, write, commit the marker.

Fetching and reconciling happen before anything is written, so a source
failure leaves the store and the refresh marker untouched. Once writing has
started the batch always runs through to the marker commit.
"""
import logging
import time
from dataclasses import dataclass
from datetime import datetime

from . import store, utils
from .reconcile import reconcile
from .sources import SourceClient

logger = logging.getLogger(__name__)

SUMMARY_TOP_N = 5


@dataclass
class RefreshResult:
    total_countries: int
    last_refreshed_at: datetime
    refreshed: int
    failed: int
    duration_seconds: float


def refresh_countries(client=None, rng=None):
    start_time = time.time()
    owns_client = client is None
    client = client or SourceClient()

    logger.info("Starting country data refresh")
    try:
        raw_countries, rates = client.fetch_all()
    finally:
        if owns_client:
            client.close()

    records = reconcile(raw_countries, rates, rng=rng)

    now = utils.get_now()
    saved = store.bulk_reconcile(records, now=now)
    marker = store.commit_refresh_marker(now=now)

    total = store.count_countries()
    _write_summary(total, marker)

    result = RefreshResult(
        total_countries=total,
        last_refreshed_at=marker,
        refreshed=len(saved),
        failed=len(records) - len(saved),
        duration_seconds=round(time.time() - start_time, 2),
    )
    logger.info(
        "Country data refresh completed: %d written, %d skipped, %d total in %.2fs",
        result.refreshed, result.failed, result.total_countries, result.duration_seconds,
    )
    return result


def _write_summary(total, marker):
    # runs after the marker commit; failures are only logged
    try:
        utils.generate_summary_image(total, store.top_by_gdp(SUMMARY_TOP_N), marker)
    except OSError:
        logger.exception("Could not write the summary image")

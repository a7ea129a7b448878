from __future__ import annotations
from typing import Optional

from celery import shared_task
from celery.utils.log import get_task_logger
from django.db import DatabaseError

from analysis.normalize import parse_query_date
from .services.recalculation import recalculate_daily_counters
from .services.snapshots import take_daily_snapshot

logger = get_task_logger(__name__)


@shared_task(bind=True, autoretry_for=(DatabaseError,), retry_backoff=True, retry_kwargs={'max_retries': 3})
def take_daily_snapshot_task(self, snapshot_date: Optional[str] = None) -> int:
    """Store the funnel snapshots for ``snapshot_date`` (ISO string, default today).

    The write is an upsert per scope, so retrying after a database error
    is safe.
    """
    day = parse_query_date(snapshot_date)
    saved = take_daily_snapshot(day)
    logger.info('take_daily_snapshot_task stored %s snapshot(s) for %s', len(saved), day or 'today')
    return len(saved)


@shared_task(bind=True)
def recalculate_daily_counters_task(self) -> int:
    """Replay the status history into the daily lifecycle counters.

    Not retried automatically: a failure leaves earlier dates written and
    the next run rewrites everything anyway.
    """
    written = recalculate_daily_counters()
    logger.info('recalculate_daily_counters_task updated %s date(s)', len(written))
    return len(written)

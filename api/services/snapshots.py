"""Daily funnel snapshot job.

Counts come from ``analysis.funnel``; this module gathers the inputs and
upserts one ``FunnelSnapshot`` row per scope. Rerunning for the same day
overwrites the rows in place.
"""
from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

from django.utils import timezone

from analysis.funnel import OVERALL_SCOPE, active_seqs_from_aggregates, build_snapshots
from analysis.taxonomy import FUNNEL_TAXONOMY
from ..models import FunnelSnapshot
from . import collaborators

logger = logging.getLogger(__name__)

SNAPSHOT_FIELDS = ('stage_counts', 'total_stores', 'funnel', 'conversion', 'daily_change', 'churn_analysis')


def _previous_overall(snapshot_date: date) -> Optional[Dict[str, Any]]:
    prev = FunnelSnapshot.objects.filter(
        snapshot_date=snapshot_date - timedelta(days=1), scope=OVERALL_SCOPE,
    ).first()
    if prev is None:
        return None
    return {'funnel': prev.funnel}


def take_daily_snapshot(snapshot_date: Optional[date] = None) -> List[FunnelSnapshot]:
    """Compute and store the overall and per-owner snapshots for ``snapshot_date``.

    Defaults to today in the configured timezone. A missing snapshot for the
    previous day is not an error; the active delta is then taken against 0.
    """
    snapshot_date = snapshot_date or timezone.localdate()
    stores = collaborators.scan_stores()
    events = collaborators.events_on(snapshot_date)
    active = active_seqs_from_aggregates(collaborators.scan_daily_orders())
    yesterday = _previous_overall(snapshot_date)
    if yesterday is None:
        logger.info('no overall snapshot for %s; daily active delta starts from 0', snapshot_date - timedelta(days=1))

    payloads = build_snapshots(snapshot_date, stores, events, active, yesterday, FUNNEL_TAXONOMY)
    saved = []
    for payload in payloads:
        obj, created = FunnelSnapshot.objects.update_or_create(
            snapshot_date=snapshot_date,
            scope=payload['scope'],
            defaults={k: payload[k] for k in SNAPSHOT_FIELDS},
        )
        saved.append(obj)
    logger.info('Stored %s funnel snapshot(s) for %s (%s stores, %s events)',
                len(saved), snapshot_date, len(stores), len(events))
    return saved


def list_snapshots(scope: Optional[str] = None,
                   start: Optional[date] = None,
                   end: Optional[date] = None):
    qs = FunnelSnapshot.objects.all()
    if scope:
        qs = qs.filter(scope=scope)
    if start is not None:
        qs = qs.filter(snapshot_date__gte=start)
    if end is not None:
        qs = qs.filter(snapshot_date__lte=end)
    return qs.order_by('snapshot_date', 'scope')

"""Rebuild the lifecycle counters stored on ``DailyOrderStats``.

The whole event history is replayed on every run, so the job can be rerun
at any time. Dates are written one by one; a failure part way through
leaves the earlier dates updated and aborts the rest.
"""
from __future__ import annotations

import logging
from typing import List

from analysis.reactivation import DailyCounters, daily_deltas, replay_cumulative
from analysis.taxonomy import CHURNED, INSTALL_COMPLETED_FOR_FUNNEL
from ..models import DailyOrderStats
from . import collaborators

logger = logging.getLogger(__name__)


def recalculate_daily_counters() -> List[DailyCounters]:
    events = collaborators.scan_events()
    deltas = daily_deltas(events, INSTALL_COMPLETED_FOR_FUNNEL, CHURNED)
    dates = collaborators.order_dates()
    logger.info('Recalculating daily counters: %s events over %s dates', len(events), len(dates))

    written = []
    for counters in replay_cumulative(dates, deltas):
        DailyOrderStats.objects.update_or_create(
            order_date=counters.order_date,
            defaults={
                'cumulative_installed': counters.cumulative_installed,
                'cumulative_churned': counters.cumulative_churned,
                'new_installs': counters.new_installs,
                'new_churns': counters.new_churns,
                'reactivations': counters.reactivations,
            },
        )
        logger.info('%s: installed=%s churned=%s (+%s/-%s installs, +%s churns, %s reactivations)',
                    counters.order_date, counters.cumulative_installed, counters.cumulative_churned,
                    counters.new_installs, counters.uninstalls, counters.new_churns, counters.reactivations)
        written.append(counters)
    return written

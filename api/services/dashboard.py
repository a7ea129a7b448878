"""Live dashboard overview service."""
from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, Optional

from analysis.dashboard import build_overview
from analysis.funnel import active_seqs_from_aggregates
from analysis.normalize import ordered_window
from analysis.taxonomy import DASHBOARD_TAXONOMY
from . import collaborators

logger = logging.getLogger(__name__)


def dashboard_overview(start: Optional[date] = None, end: Optional[date] = None) -> Dict[str, Any]:
    """Overview funnel, optionally restricted to activity inside ``[start, end]``.

    Without a window every store with a positive order day is active and the
    order/customer totals are the lifetime totals. With a window, the order
    total is summed over the window's day rows and the customer total over
    the stores active in it.
    """
    stores = collaborators.scan_stores()
    names = collaborators.owner_names()
    stats = collaborators.order_stats_by_seq()

    windowed = start is not None and end is not None
    if windowed:
        start, end = ordered_window(start, end)
        rows = collaborators.scan_daily_orders(start, end)
        active = active_seqs_from_aggregates(rows, start, end)
        total_orders = sum(int(r.get('order_count') or 0) for r in rows)
        total_customers = sum(stats[seq]['customer_count'] for seq in active if seq in stats)
    else:
        active = active_seqs_from_aggregates(collaborators.scan_daily_orders())
        total_orders = sum(s['order_count'] for s in stats.values())
        total_customers = sum(s['customer_count'] for s in stats.values())

    first_installs = collaborators.fan_out(
        [s['store_id'] for s in stores],
        collaborators.first_install_for_store,
    )
    logger.debug('dashboard overview: %s stores, %s active', len(stores), len(active))

    data = build_overview(
        stores,
        active,
        stats,
        first_installs,
        owner_names=names,
        window_end=end if windowed else None,
        total_order_count=total_orders,
        total_customer_count=total_customers,
        taxonomy=DASHBOARD_TAXONOMY,
    )
    if windowed:
        data['period'] = {'start_date': start, 'end_date': end}
    return data

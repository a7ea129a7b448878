"""Daily usage series built from the per-day order stats table."""
from __future__ import annotations

from datetime import date
from typing import Any, Dict, Iterable

from .normalize import date_range, to_date


USAGE_FIELDS = ('active', 'order_count', 'new_installs', 'new_churns', 'cumulative_installed', 'cumulative_churned')


def build_daily_usage(rows: Iterable[Dict[str, Any]], start: date, end: date) -> Dict[str, Any]:
    """Fill every day of ``[start, end]``, zeroing days with no row."""
    by_date: Dict[date, Dict[str, Any]] = {}
    for r in rows:
        d = to_date(r.get('order_date'))
        if d is not None:
            by_date[d] = r

    usage = []
    for d in date_range(start, end):
        r = by_date.get(d) or {}
        entry = {'date': d}
        for field in USAGE_FIELDS:
            # the stats table names the active count active_store_count
            key = 'active_store_count' if field == 'active' else field
            entry[field] = int(r.get(key) or 0)
        usage.append(entry)

    with_activity = [u for u in usage if u['active'] > 0]
    avg = round(sum(u['active'] for u in with_activity) / len(with_activity), 1) if with_activity else 0
    return {
        'summary': {
            'period': {'start_date': start, 'end_date': end},
            'total_days': len(with_activity),
            'avg_daily_active': avg,
            'max_daily_active': max([u['active'] for u in usage] + [0]),
        },
        'daily_usage': usage,
    }

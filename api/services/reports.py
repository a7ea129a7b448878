"""Read-only reports served by the dashboard endpoints.

Each function collects its inputs through ``collaborators`` and hands them
to the matching ``analysis`` module. Dates arrive already parsed; missing
ones fall back to the defaults below.
"""
from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Any, Dict, Optional

from django.conf import settings
from django.utils import timezone

from analysis.cohorts import (
    ACTIVE_WINDOW_DAYS,
    DISPLAY_LIMIT,
    active_window,
    build_monthly_cohorts,
    first_install_map,
)
from analysis.daily_usage import build_daily_usage
from analysis.funnel import active_seqs_from_aggregates
from analysis.heatmap import accumulate_counts, build_heatmap, installed_store_lookup
from analysis.inactivity import detect_inactive, last_week_same_day
from analysis.normalize import monday_of, ordered_window, to_date
from analysis.taxonomy import FINAL_INSTALL
from analysis.weekly_cohorts import MAX_WEEKS, build_week_detail, build_weekly_cohorts, latest_install_map
from . import collaborators

logger = logging.getLogger(__name__)

HEATMAP_DEFAULT_DAYS = 14
USAGE_DEFAULT_DAYS = 30


def _today() -> date:
    return timezone.localdate()


def _default_window(start: Optional[date], end: Optional[date], days: int):
    end = end or _today()
    start = start or end - timedelta(days=days)
    return ordered_window(start, end)


def _positive(rows):
    return [r for r in rows if (r.get('order_count') or 0) > 0]


def monthly_cohort_report(base_date: Optional[date] = None) -> Dict[str, Any]:
    base_date = base_date or _today()
    days = int(getattr(settings, 'COHORT_ACTIVE_WINDOW_DAYS', ACTIVE_WINDOW_DAYS))
    limit = int(getattr(settings, 'COHORT_DISPLAY_LIMIT', DISPLAY_LIMIT))
    cutover = to_date(getattr(settings, 'COHORT_PRE_CUTOVER_DATE', None))

    window_start, window_end = active_window(base_date, days)
    active = active_seqs_from_aggregates(collaborators.scan_daily_orders(window_start, window_end))
    first_installs = first_install_map(collaborators.install_events(FINAL_INSTALL), FINAL_INSTALL)
    data = build_monthly_cohorts(
        collaborators.scan_stores(),
        first_installs,
        active,
        base_date,
        cutover=cutover,
        limit=limit,
    )
    data['active_window'] = {'start_date': window_start, 'end_date': window_end}
    return data


def heatmap_report(start: Optional[date] = None, end: Optional[date] = None) -> Dict[str, Any]:
    start, end = _default_window(start, end, HEATMAP_DEFAULT_DAYS)
    lookup = installed_store_lookup(collaborators.scan_stores_by_status(FINAL_INSTALL))
    counts = accumulate_counts(collaborators.scan_pages(start, end), start, end)
    logger.debug('heatmap %s..%s: %s installed stores, %s seqs with orders', start, end, len(lookup), len(counts))
    return build_heatmap(lookup, counts, start, end, collaborators.owner_names())


def inactive_today_report(target_date: Optional[date] = None) -> Dict[str, Any]:
    target_date = target_date or _today() - timedelta(days=1)
    last_week = {}
    for row in _positive(collaborators.daily_orders_on(last_week_same_day(target_date))):
        last_week[row['seq']] = last_week.get(row['seq'], 0) + int(row['order_count'])
    target_active = {row['seq'] for row in _positive(collaborators.daily_orders_on(target_date))}
    first_installs = first_install_map(collaborators.install_events(FINAL_INSTALL), FINAL_INSTALL)
    return detect_inactive(
        target_date,
        last_week,
        target_active,
        collaborators.scan_stores(),
        first_installs,
        collaborators.owner_names(),
    )


def _weekly_settings():
    start = to_date(getattr(settings, 'WEEKLY_COHORT_START', None)) or date(2024, 12, 15)
    max_weeks = int(getattr(settings, 'WEEKLY_COHORT_MAX_WEEKS', MAX_WEEKS))
    excluded = list(getattr(settings, 'WEEKLY_COHORT_EXCLUDED_ACTORS', []) or [])
    return start, max_weeks, excluded


def weekly_cohort_report() -> Dict[str, Any]:
    start, max_weeks, excluded = _weekly_settings()
    today = _today()
    installs = latest_install_map(collaborators.scan_events(), start, excluded)

    order_dates: Dict[str, set] = {}
    if installs:
        first_monday = monday_of(min(installs.values()))
        for row in _positive(collaborators.scan_daily_orders(first_monday, today)):
            order_dates.setdefault(row['seq'], set()).add(row['order_date'])

    rows = build_weekly_cohorts(collaborators.scan_stores(), installs, order_dates, today, max_weeks)
    return {
        'start_date': start,
        'today': today,
        'max_weeks': max_weeks,
        'cohorts': rows,
    }


def weekly_cohort_detail_report(week_key: Optional[date]) -> Dict[str, Any]:
    if week_key is None:
        raise ValueError('week_key is required')
    _, max_weeks, excluded = _weekly_settings()
    today = _today()
    monday = monday_of(week_key)
    orders = accumulate_counts(collaborators.scan_pages(monday, today), monday, today)
    return build_week_detail(
        monday,
        collaborators.scan_stores(),
        collaborators.scan_events(),
        orders,
        today,
        excluded_actors=excluded,
        max_weeks=max_weeks,
    )


def daily_usage_report(start: Optional[date] = None, end: Optional[date] = None) -> Dict[str, Any]:
    start, end = _default_window(start, end, USAGE_DEFAULT_DAYS)
    return build_daily_usage(collaborators.daily_stats(start, end), start, end)

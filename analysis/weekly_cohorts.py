"""Weekly install cohorts with week-over-week retention.

Weeks run Monday to Sunday and are keyed by the Monday's ISO date. Unlike
the monthly cohorts, a store that was put on hold and installed again is
counted in the week of its *latest* install.
"""
from __future__ import annotations

import math
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Optional, Set

from .normalize import monday_of, to_date
from .taxonomy import CHURNED, FINAL_INSTALL, HOLD, INSTALL_PROGRESS


MAX_WEEKS = 12
MARK_HOLD = 'hold'
MARK_CHURNED = 'churned'
MARK_NONE = '-'


def week_label(monday: date) -> str:
    """e.g. ``Dec week 2``."""
    return f"{monday:%b} week {math.ceil(monday.day / 7)}"


def _is_cohort_install(ev: Dict[str, Any], excluded_actors: Iterable[str]) -> bool:
    return (
        ev.get('new_status') == FINAL_INSTALL
        and ev.get('old_status') in INSTALL_PROGRESS
        and ev.get('changed_by') not in excluded_actors
    )


def latest_install_map(events: Iterable[Dict[str, Any]],
                       start_date: date,
                       excluded_actors: Iterable[str] = ()) -> Dict[str, date]:
    """Latest qualifying install day per store, on or after ``start_date``."""
    excluded = set(excluded_actors)
    latest: Dict[str, date] = {}
    for ev in events:
        if not _is_cohort_install(ev, excluded):
            continue
        day = to_date(ev.get('changed_at'))
        if day is None or day < start_date:
            continue
        store_id = ev.get('store_id')
        if store_id not in latest or day > latest[store_id]:
            latest[store_id] = day
    return latest


def _has_order_between(order_dates: Set[date], start: date, end: date) -> bool:
    return any(start <= d <= end for d in order_dates)


def build_weekly_cohorts(stores: Iterable[Dict[str, Any]],
                         installs: Dict[str, date],
                         order_dates_by_seq: Dict[str, Set[date]],
                         today: date,
                         max_weeks: int = MAX_WEEKS) -> List[Dict[str, Any]]:
    """Retention rows, oldest cohort first.

    Each row lists, for week offsets 0..N, how many stores of the cohort had
    at least one order in that week and the rounded percentage. Offsets whose
    week has not started yet are omitted.
    """
    store_map = {s.get('store_id'): s for s in stores}
    cohorts: Dict[date, List[Set[date]]] = {}
    for store_id, installed_on in installs.items():
        store = store_map.get(store_id)
        if not store or not store.get('seq'):
            continue
        monday = monday_of(installed_on)
        cohorts.setdefault(monday, []).append(order_dates_by_seq.get(store['seq']) or set())

    if not cohorts:
        return []
    weeks = sorted(cohorts)
    max_offset = min((today - weeks[0]).days // 7, max_weeks)

    rows = []
    for monday in weeks:
        members = cohorts[monday]
        installed = len(members)
        row = {
            'week_key': monday.isoformat(),
            'label': week_label(monday),
            'installed': installed,
            'weeks': [],
        }
        for offset in range(max_offset + 1):
            check_start = monday + timedelta(weeks=offset)
            if check_start > today:
                break
            check_end = check_start + timedelta(days=6)
            count = sum(1 for dates in members if _has_order_between(dates, check_start, check_end))
            row['weeks'].append({
                'week_offset': offset,
                'count': count,
                'rate': round(count / installed * 100),
            })
        rows.append(row)
    return rows


def _termination_in(changes: List[Dict[str, Any]], start: date, end: date) -> Optional[str]:
    for ch in changes:
        day = ch['changed_on']
        if day < start or day > end:
            continue
        if ch.get('old_status') == FINAL_INSTALL and ch.get('new_status') in HOLD:
            return MARK_HOLD
        if ch.get('new_status') in CHURNED:
            return MARK_CHURNED
    return None


def build_week_detail(week_key: date,
                      stores: Iterable[Dict[str, Any]],
                      events: Iterable[Dict[str, Any]],
                      orders_by_seq: Dict[str, Dict[date, int]],
                      today: date,
                      excluded_actors: Iterable[str] = (),
                      max_weeks: int = MAX_WEEKS) -> Dict[str, Any]:
    """Per-store weekly order counts for the cohort installed in one week.

    Each week cell is the order count, or a termination marker in the week
    the store went on hold or churned, and ``-`` after that or for weeks not
    started yet.
    """
    monday = monday_of(week_key)
    sunday = monday + timedelta(days=6)
    excluded = set(excluded_actors)

    changes_by_store: Dict[str, List[Dict[str, Any]]] = {}
    installs_in_week: Dict[str, date] = {}
    for ev in events:
        day = to_date(ev.get('changed_at'))
        if day is None:
            continue
        store_id = ev.get('store_id')
        changes_by_store.setdefault(store_id, []).append({
            'changed_on': day,
            'old_status': ev.get('old_status'),
            'new_status': ev.get('new_status'),
        })
        if not _is_cohort_install(ev, excluded) or day < monday or day > sunday:
            continue
        if store_id not in installs_in_week or day > installs_in_week[store_id]:
            installs_in_week[store_id] = day

    store_map = {s.get('store_id'): s for s in stores}
    week_count = max(min(max_weeks, (today - monday).days // 7), 0)
    rows = []
    for store_id, installed_on in installs_in_week.items():
        store = store_map.get(store_id)
        if not store or not store.get('seq'):
            continue
        orders = orders_by_seq.get(store['seq']) or {}
        changes = sorted(changes_by_store.get(store_id, []), key=lambda c: c['changed_on'])
        cells = []
        terminated = False
        for offset in range(week_count + 1):
            check_start = monday + timedelta(weeks=offset)
            check_end = check_start + timedelta(days=6)
            if check_start > today or terminated:
                cells.append({'week': offset, 'value': MARK_NONE})
                continue
            mark = _termination_in(changes, check_start, check_end)
            if mark:
                terminated = True
                cells.append({'week': offset, 'value': mark})
                continue
            total = sum(orders.get(check_start + timedelta(days=i), 0) for i in range(7))
            cells.append({'week': offset, 'value': total})
        rows.append({
            'store_id': store_id,
            'store_name': store.get('store_name'),
            'seq': store['seq'],
            'install_date': installed_on,
            'weeks': cells,
        })
    rows.sort(key=lambda r: r['install_date'])

    return {
        'week_key': monday.isoformat(),
        'label': week_label(monday),
        'week_start': monday,
        'week_end': sunday,
        'store_count': len(rows),
        'max_weeks': week_count,
        'stores': rows,
    }

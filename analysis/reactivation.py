"""Reactivation-aware cumulative install/churn counters.

The full status history is replayed so that backward transitions (a store
leaving the installed set, or coming back from churn) decrement the running
totals instead of being ignored.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, FrozenSet, Iterable, Iterator

from .normalize import to_date
from .taxonomy import CHURNED, INSTALL_COMPLETED_FOR_FUNNEL


@dataclass
class DailyDelta:
    new_installs: int = 0
    uninstalls: int = 0
    new_churns: int = 0
    reactivations: int = 0


@dataclass(frozen=True)
class DailyCounters:
    order_date: date
    cumulative_installed: int
    cumulative_churned: int
    new_installs: int
    new_churns: int
    reactivations: int
    uninstalls: int


def daily_deltas(events: Iterable[Dict[str, Any]],
                 install_completed: FrozenSet[str] = INSTALL_COMPLETED_FOR_FUNNEL,
                 churned: FrozenSet[str] = CHURNED) -> Dict[date, DailyDelta]:
    """Group events by ``changed_date`` into install/churn deltas.

    Events with no readable ``changed_date`` are skipped. A single event
    can move both counters, e.g. installed -> terminated is an uninstall and
    a new churn on the same day.
    """
    out: Dict[date, DailyDelta] = {}
    for ev in events:
        day = to_date(ev.get('changed_date'))
        if day is None:
            continue
        delta = out.get(day)
        if delta is None:
            delta = out[day] = DailyDelta()

        old_status = ev.get('old_status') or ''
        new_status = ev.get('new_status') or ''
        was_installed = old_status in install_completed
        is_installed = new_status in install_completed
        was_churned = old_status in churned
        is_churned = new_status in churned

        if was_installed and not is_installed:
            delta.uninstalls += 1
        if not was_installed and is_installed:
            delta.new_installs += 1
        if was_churned and not is_churned:
            delta.reactivations += 1
        if not was_churned and is_churned:
            delta.new_churns += 1
    return out


def replay_cumulative(dates: Iterable[date], deltas: Dict[date, DailyDelta]) -> Iterator[DailyCounters]:
    """Walk ``dates`` in ascending order, yielding running totals per date.

    Both totals are clamped at zero after every day. Deltas on dates that
    are not in ``dates`` do not contribute.
    """
    installed = 0
    churned_total = 0
    for day in sorted(set(dates)):
        d = deltas.get(day) or DailyDelta()
        installed = max(installed + d.new_installs - d.uninstalls, 0)
        churned_total = max(churned_total + d.new_churns - d.reactivations, 0)
        yield DailyCounters(
            order_date=day,
            cumulative_installed=installed,
            cumulative_churned=churned_total,
            new_installs=d.new_installs,
            new_churns=d.new_churns,
            reactivations=d.reactivations,
            uninstalls=d.uninstalls,
        )

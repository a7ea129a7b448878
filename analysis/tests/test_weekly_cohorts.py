import datetime

from analysis import taxonomy
from analysis.weekly_cohorts import build_week_detail, build_weekly_cohorts, latest_install_map, week_label


def d(m, day, y=2025):
    return datetime.date(y, m, day)


def ev(store_id, old, new, when, by='kim@example.com'):
    return {
        'store_id': store_id,
        'old_status': old,
        'new_status': new,
        'changed_at': datetime.datetime.combine(when, datetime.time(10, 0)),
        'changed_by': by,
    }


STORES = [
    {'store_id': 'a', 'store_name': 'A', 'seq': 'S1', 'status': taxonomy.REVISIT_SCHEDULED},
    {'store_id': 'b', 'store_name': 'B', 'seq': 'S2', 'status': taxonomy.QR_MENU_INSTALL},
    {'store_id': 'c', 'store_name': 'C', 'seq': 'S3', 'status': taxonomy.SERVICE_TERMINATED},
]


def test_week_label():
    assert week_label(d(12, 9, 2024)) == 'Dec week 2'
    assert week_label(d(1, 6)) == 'Jan week 1'


def test_latest_install_map_filters_and_keeps_latest():
    events = [
        ev('a', taxonomy.ADMIN_SETTING, taxonomy.QR_MENU_INSTALL, d(1, 6)),
        ev('a', taxonomy.REVISIT_SCHEDULED, taxonomy.QR_MENU_INSTALL, d(1, 15)),
        # not from an install-progress status
        ev('b', taxonomy.VISIT_PENDING, taxonomy.QR_MENU_INSTALL, d(1, 7)),
        # bulk import account
        ev('c', taxonomy.ADMIN_SETTING, taxonomy.QR_MENU_INSTALL, d(1, 7), by='importer'),
        # before the start date
        ev('d', taxonomy.ADMIN_SETTING, taxonomy.QR_MENU_INSTALL, d(12, 1, 2024)),
    ]
    out = latest_install_map(events, d(12, 15, 2024), excluded_actors=['importer'])
    assert out == {'a': d(1, 15)}


def test_build_weekly_cohorts_retention():
    installs = {'a': d(1, 6), 'b': d(1, 8), 'c': d(1, 15)}
    orders = {
        'S1': {d(1, 7), d(1, 20)},
        'S2': {d(1, 10)},
        'S3': {d(1, 21)},
    }
    rows = build_weekly_cohorts(STORES, installs, orders, today=d(1, 22))
    assert [r['week_key'] for r in rows] == ['2025-01-06', '2025-01-13']

    first, second = rows
    assert first['label'] == 'Jan week 1'
    assert first['installed'] == 2
    assert [(w['week_offset'], w['count'], w['rate']) for w in first['weeks']] == [(0, 2, 100), (1, 0, 0), (2, 1, 50)]
    # week 2 of the second cohort has not started yet
    assert [(w['week_offset'], w['count'], w['rate']) for w in second['weeks']] == [(0, 0, 0), (1, 1, 100)]


def test_build_weekly_cohorts_empty():
    assert build_weekly_cohorts(STORES, {}, {}, today=d(1, 22)) == []


def test_week_detail_marks_terminations():
    events = [
        ev('a', taxonomy.ADMIN_SETTING, taxonomy.QR_MENU_INSTALL, d(1, 6)),
        ev('a', taxonomy.QR_MENU_INSTALL, taxonomy.REVISIT_SCHEDULED, d(1, 14)),
        ev('b', taxonomy.ADMIN_SETTING, taxonomy.QR_MENU_INSTALL, d(1, 8)),
        ev('c', taxonomy.QR_LINKING, taxonomy.QR_MENU_INSTALL, d(1, 7)),
        ev('c', taxonomy.QR_MENU_INSTALL, taxonomy.SERVICE_TERMINATED, d(1, 9)),
    ]
    orders = {
        'S1': {d(1, 7): 3},
        'S2': {d(1, 8): 2, d(1, 9): 1, d(1, 21): 4},
    }
    out = build_week_detail(d(1, 8), STORES, events, orders, today=d(1, 22))
    assert out['week_key'] == '2025-01-06'
    assert out['week_start'] == d(1, 6)
    assert out['week_end'] == d(1, 12)
    assert out['max_weeks'] == 2
    assert out['store_count'] == 3

    cells = {r['store_id']: [c['value'] for c in r['weeks']] for r in out['stores']}
    assert [r['store_id'] for r in out['stores']] == ['a', 'c', 'b']
    assert cells['a'] == [3, 'hold', '-']
    assert cells['c'] == ['churned', '-', '-']
    assert cells['b'] == [3, 0, 4]

import datetime

from analysis import taxonomy
from analysis.dashboard import DETAIL_KEYS, build_overview


def _store(store_id, status, seq, owner_id='', created_at=None):
    return {
        'store_id': store_id,
        'store_name': store_id.upper(),
        'seq': seq,
        'status': status,
        'owner_id': owner_id,
        'created_at': created_at,
    }


STORES = [
    _store('a', taxonomy.QR_MENU_INSTALL, 'S1', 'kim@example.com'),
    _store('b', taxonomy.QR_MENU_INSTALL, 'S2', 'kim@example.com', datetime.datetime(2025, 1, 1, 9)),
    _store('c', taxonomy.SERVICE_TERMINATED, 'S3', 'lee@example.com'),
    _store('d', taxonomy.UNUSED_TERMINATED, 'S4', 'lee@example.com'),
    _store('e', taxonomy.DEFECT_REPAIR, 'S5', 'lee@example.com'),
    _store('f', taxonomy.PENDING, 'S6'),
    _store('g', taxonomy.ADMIN_SETTING, 'S7'),
    _store('h', taxonomy.QR_MENU_INSTALL, 'S8', created_at=datetime.datetime(2025, 2, 10, 9)),
]
STATS = {
    'S1': {'order_count': 10, 'customer_count': 4},
    'S2': {'order_count': 5, 'customer_count': 2},
}


def _ids(detail, key):
    return [s['store_id'] for s in detail[key]]


def test_overview_funnel_and_rates():
    out = build_overview(STORES, {'S1', 'S7'}, STATS, {}, total_order_count=15, total_customer_count=6)
    overall = out['overall']
    assert overall['total_stores'] == 8
    assert sum(overall['stats'].values()) == 8
    assert overall['funnel'] == {'registered': 8, 'install_completed': 6, 'active': 2, 'churned': 2}
    assert overall['conversion'] == {'active_rate': 33.3, 'churn_rate': 33.3}
    assert overall['total_order_count'] == 15
    assert overall['total_customer_count'] == 6


def test_install_detail_lists():
    out = build_overview(STORES, {'S1', 'S7'}, STATS, {'a': datetime.datetime(2024, 12, 1)})
    detail = out['overall']['install_detail']
    assert _ids(detail, 'active') == ['a']
    assert _ids(detail, 'inactive') == ['b', 'h']
    assert _ids(detail, 'churned_service') == ['c']
    assert _ids(detail, 'churned_unused') == ['d']
    assert _ids(detail, 'repair') == ['e']
    assert _ids(detail, 'pending') == ['f']
    assert _ids(detail, 'active_not_completed') == ['g']
    assert detail['summary'] == {k: len(detail[k]) for k in DETAIL_KEYS}

    active = detail['active'][0]
    assert active['order_count'] == 10
    assert active['customer_count'] == 4
    assert active['first_install_completed_at'] == datetime.datetime(2024, 12, 1)
    assert detail['inactive'][0]['order_count'] == 0


def test_window_end_hides_stores_created_later_from_inactive():
    out = build_overview(STORES, {'S1'}, STATS, {}, window_end=datetime.date(2025, 1, 31))
    assert _ids(out['overall']['install_detail'], 'inactive') == ['b']


def test_owner_rows():
    out = build_overview(STORES, {'S1'}, STATS, {}, owner_names={'kim@example.com': 'Kim'})
    rows = {r['owner_id']: r for r in out['owners']}
    assert set(rows) == {'kim@example.com', 'lee@example.com', 'unassigned'}
    assert rows['kim@example.com']['owner_name'] == 'Kim'
    assert rows['lee@example.com']['owner_name'] == 'lee'
    assert rows['kim@example.com']['funnel'] == {'registered': 2, 'install_completed': 2, 'active': 1, 'churned': 0}
    assert rows['kim@example.com']['conversion']['install_to_active'] == 50.0

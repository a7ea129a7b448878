import datetime

from analysis import taxonomy
from analysis.heatmap import accumulate_counts, build_heatmap, installed_store_lookup


START = datetime.date(2025, 1, 1)
END = datetime.date(2025, 1, 3)

STORES = [
    {'store_id': 'a', 'store_name': 'Alpha', 'seq': 'S1', 'status': taxonomy.QR_MENU_INSTALL, 'owner_id': 'lee@example.com'},
    {'store_id': 'b', 'store_name': 'Beta', 'seq': 'S2', 'status': taxonomy.QR_MENU_INSTALL, 'owner_id': 'kim@example.com'},
    {'store_id': 'c', 'store_name': 'Gamma', 'seq': 'S3', 'status': taxonomy.SERVICE_TERMINATED, 'owner_id': 'kim@example.com'},
    {'store_id': 'd', 'store_name': 'Delta', 'seq': None, 'status': taxonomy.QR_MENU_INSTALL, 'owner_id': ''},
]


def test_installed_store_lookup_only_keeps_final_install_with_seq():
    lookup = installed_store_lookup(STORES)
    assert set(lookup) == {'S1', 'S2'}
    assert lookup['S1']['store_name'] == 'Alpha'


def test_scenario_single_order():
    lookup = installed_store_lookup(STORES[:1])
    pages = [[{'seq': 'S1', 'order_date': '2025-01-02', 'order_count': 1}]]
    out = build_heatmap(lookup, accumulate_counts(pages, START, END), START, END)
    assert out['dates'] == ['2025-01-01', '2025-01-02', '2025-01-03']
    assert len(out['stores']) == 1
    row = out['stores'][0]
    assert row['orders'] == {'2025-01-01': 0, '2025-01-02': 1, '2025-01-03': 0}
    assert row['total'] == 1


def test_duplicate_rows_are_summed_and_window_is_enforced():
    pages = [
        [{'seq': 'S1', 'order_date': START, 'order_count': 2}],
        [{'seq': 'S1', 'order_date': START, 'order_count': 3}],
        [
            {'seq': 'S1', 'order_date': datetime.date(2025, 1, 4), 'order_count': 9},
            {'seq': 'UNMAPPED', 'order_date': START, 'order_count': 9},
            {'seq': 'S2', 'order_date': None, 'order_count': 9},
        ],
    ]
    counts = accumulate_counts(pages, START, END)
    assert counts == {'S1': {START: 5}}


def test_page_boundaries_do_not_change_the_result():
    rows = [
        {'seq': 'S1', 'order_date': START, 'order_count': 1},
        {'seq': 'S2', 'order_date': START, 'order_count': 4},
        {'seq': 'S1', 'order_date': END, 'order_count': 2},
        {'seq': 'S9', 'order_date': END, 'order_count': 7},
    ]
    lookup = installed_store_lookup(STORES)
    one_page = build_heatmap(lookup, accumulate_counts([rows], START, END), START, END)
    split = build_heatmap(lookup, accumulate_counts([rows[:1], rows[1:3], rows[3:]], START, END), START, END)
    assert one_page == split


def test_rows_sorted_by_total_and_owners_by_name():
    lookup = installed_store_lookup(STORES)
    counts = {'S2': {START: 4}, 'S1': {END: 1}, 'S9': {END: 50}}
    names = {'lee@example.com': 'Aaron Lee', 'kim@example.com': 'Minji Kim'}
    out = build_heatmap(lookup, counts, START, END, names)
    assert [r['seq'] for r in out['stores']] == ['S2', 'S1']
    assert out['owners'] == [
        {'id': 'lee@example.com', 'name': 'Aaron Lee'},
        {'id': 'kim@example.com', 'name': 'Minji Kim'},
    ]


def test_zero_rows_keep_roster_order():
    lookup = installed_store_lookup(STORES)
    out = build_heatmap(lookup, {}, START, END)
    assert [r['seq'] for r in out['stores']] == ['S1', 'S2']
    assert all(r['total'] == 0 for r in out['stores'])

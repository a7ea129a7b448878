from analysis import taxonomy
from analysis.taxonomy import (
    DASHBOARD_TAXONOMY,
    FUNNEL_TAXONOMY,
    is_new_registration,
    is_store_seq,
    owner_display_name,
)


def test_install_taxonomies_differ():
    # terminated stores were installed once; only the dashboard counts them
    assert FUNNEL_TAXONOMY.is_install_completed(taxonomy.QR_MENU_INSTALL)
    assert not FUNNEL_TAXONOMY.is_install_completed(taxonomy.SERVICE_TERMINATED)
    assert DASHBOARD_TAXONOMY.is_install_completed(taxonomy.SERVICE_TERMINATED)
    assert DASHBOARD_TAXONOMY.is_install_completed(taxonomy.DEFECT_REPAIR)
    assert FUNNEL_TAXONOMY.install_completed < DASHBOARD_TAXONOMY.install_completed


def test_churned_set():
    assert FUNNEL_TAXONOMY.is_churned(taxonomy.UNUSED_TERMINATED)
    assert DASHBOARD_TAXONOMY.is_churned(taxonomy.SERVICE_TERMINATED)
    assert not FUNNEL_TAXONOMY.is_churned(taxonomy.PENDING)
    assert not FUNNEL_TAXONOMY.is_churned(None)


def test_every_status_has_a_choice_label():
    codes = {code for code, _ in taxonomy.STATUS_CHOICES}
    assert taxonomy.INSTALL_COMPLETED_FOR_DASHBOARD <= codes
    assert taxonomy.IN_PROGRESS <= codes
    assert taxonomy.INSTALL_PROGRESS <= codes
    assert taxonomy.HOLD <= codes


def test_new_registration():
    assert is_new_registration(None)
    assert is_new_registration('')
    assert is_new_registration('N/A')
    assert not is_new_registration(taxonomy.VISIT_PENDING)


def test_store_seq():
    assert is_store_seq('S1')
    assert not is_store_seq(None)
    assert not is_store_seq('')
    assert not is_store_seq('UNMAPPED')


def test_owner_display_name():
    assert owner_display_name('kim@example.com', {'kim@example.com': 'Kim'}) == 'Kim'
    assert owner_display_name('lee@example.com', {}) == 'lee'
    assert owner_display_name(None) == 'unassigned'

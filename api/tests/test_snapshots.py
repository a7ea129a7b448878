import datetime

from django.test import TestCase, override_settings

from analysis import taxonomy
from api.models import FunnelSnapshot
from api.services.snapshots import list_snapshots, take_daily_snapshot
from api.tests.factories import make_event, make_orders, make_store


DAY = datetime.date(2025, 1, 10)


@override_settings(HISTORY_LOOKUP_WORKERS=1)
class DailySnapshotTests(TestCase):
    def setUp(self):
        make_store('a', taxonomy.QR_MENU_INSTALL, 'S1', 'kim@example.com')
        make_store('b', taxonomy.QR_MENU_INSTALL, None, 'kim@example.com')
        make_store('c', taxonomy.SERVICE_TERMINATED, 'S3', 'lee@example.com')
        make_store('d', taxonomy.VISIT_PENDING, 'S4', '')
        make_event('c', taxonomy.QR_MENU_INSTALL, taxonomy.SERVICE_TERMINATED, DAY)
        make_event('d', 'N/A', taxonomy.VISIT_PENDING, DAY)
        make_event('a', taxonomy.ADMIN_SETTING, taxonomy.QR_MENU_INSTALL, DAY - datetime.timedelta(days=3))
        make_orders('S1', DAY - datetime.timedelta(days=1), 4)
        make_orders('S3', DAY, 0)

    def test_writes_overall_and_owner_scopes(self):
        saved = take_daily_snapshot(DAY)
        self.assertEqual([s.scope for s in saved], ['overall', 'owner:kim@example.com', 'owner:lee@example.com', 'owner:unassigned'])

        overall = FunnelSnapshot.objects.get(snapshot_date=DAY, scope='overall')
        self.assertEqual(overall.total_stores, 4)
        self.assertEqual(sum(overall.stage_counts.values()), overall.total_stores)
        self.assertEqual(overall.funnel, {'registered': 4, 'install_completed': 2, 'active': 1})
        self.assertEqual(overall.conversion, {'register_to_install': 50.0, 'install_to_active': 50.0})
        self.assertEqual(overall.daily_change, {'new_registered': 1, 'new_install': 0, 'new_active': 1, 'churned': 1})
        self.assertEqual(overall.churn_analysis, {'total_churned': 1, 'by_stage': {taxonomy.QR_MENU_INSTALL: 1}})

        owner = FunnelSnapshot.objects.get(snapshot_date=DAY, scope='owner:kim@example.com')
        self.assertIsNone(owner.daily_change)
        self.assertEqual(owner.funnel['install_completed'], 2)

    def test_rerun_overwrites_in_place(self):
        take_daily_snapshot(DAY)
        first = list(FunnelSnapshot.objects.filter(snapshot_date=DAY).values())
        take_daily_snapshot(DAY)
        second = list(FunnelSnapshot.objects.filter(snapshot_date=DAY).values())
        self.assertEqual(first, second)
        self.assertEqual(FunnelSnapshot.objects.filter(snapshot_date=DAY).count(), 4)

    def test_new_active_uses_previous_day(self):
        FunnelSnapshot.objects.create(
            snapshot_date=DAY - datetime.timedelta(days=1),
            scope='overall',
            funnel={'registered': 4, 'install_completed': 2, 'active': 3},
        )
        take_daily_snapshot(DAY)
        overall = FunnelSnapshot.objects.get(snapshot_date=DAY, scope='overall')
        self.assertEqual(overall.daily_change['new_active'], 0)

    def test_list_snapshots_filters(self):
        take_daily_snapshot(DAY)
        take_daily_snapshot(DAY + datetime.timedelta(days=1))
        self.assertEqual(list_snapshots('overall').count(), 2)
        self.assertEqual(list_snapshots(None, DAY, DAY).count(), 4)
        self.assertEqual(list_snapshots('owner:lee@example.com', DAY + datetime.timedelta(days=1)).count(), 1)

import datetime
from io import StringIO

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase

from analysis import taxonomy
from api.models import DailyOrderStats, FunnelSnapshot, Store, StoreDailyOrders
from api.tests.factories import make_event, make_orders, make_store


class SnapshotCommandTests(TestCase):
    def test_take_daily_snapshot_for_date(self):
        make_store('a', taxonomy.QR_MENU_INSTALL, 'S1')
        out = StringIO()
        call_command('take_daily_snapshot', '--date', '2025-01-10', stdout=out)
        self.assertIn('2025-01-10', out.getvalue())
        self.assertTrue(FunnelSnapshot.objects.filter(snapshot_date=datetime.date(2025, 1, 10), scope='overall').exists())

    def test_bad_date(self):
        with self.assertRaises(CommandError):
            call_command('take_daily_snapshot', '--date', 'soon', stdout=StringIO())


class RecalcCommandTests(TestCase):
    def test_recalc_daily_counters(self):
        day = datetime.date(2025, 3, 1)
        make_event('a', taxonomy.ADMIN_SETTING, taxonomy.QR_MENU_INSTALL, day)
        make_orders('S1', day, 2)
        out = StringIO()
        call_command('recalc_daily_counters', stdout=out)
        self.assertIn('Updated 1 date(s)', out.getvalue())
        self.assertEqual(DailyOrderStats.objects.get(order_date=day).cumulative_installed, 1)


class DemoCommandTests(TestCase):
    def test_create_demo_stores_once(self):
        call_command('create_demo_stores', '--stores', '6', '--days', '20', stdout=StringIO())
        self.assertEqual(Store.objects.count(), 6)
        rows = StoreDailyOrders.objects.count()
        out = StringIO()
        call_command('create_demo_stores', stdout=out)
        self.assertIn('already exist', out.getvalue())
        self.assertEqual(Store.objects.count(), 6)
        self.assertEqual(StoreDailyOrders.objects.count(), rows)

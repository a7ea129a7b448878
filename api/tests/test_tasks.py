import datetime
from unittest.mock import patch

from django.db import DatabaseError
from django.test import TestCase

from analysis import taxonomy
from api.models import FunnelSnapshot
from api.tasks import recalculate_daily_counters_task, take_daily_snapshot_task
from api.tests.factories import make_event, make_orders, make_store


class TaskTests(TestCase):
    def test_snapshot_task_retry_configuration(self):
        self.assertEqual(take_daily_snapshot_task.autoretry_for, (DatabaseError,))
        self.assertEqual(take_daily_snapshot_task.retry_kwargs, {'max_retries': 3})
        self.assertTrue(take_daily_snapshot_task.retry_backoff)

    def test_snapshot_task_runs_inline(self):
        make_store('a', taxonomy.QR_MENU_INSTALL, 'S1', 'kim@example.com')
        saved = take_daily_snapshot_task('2025-01-10')
        self.assertEqual(saved, 2)
        self.assertEqual(FunnelSnapshot.objects.filter(snapshot_date=datetime.date(2025, 1, 10)).count(), 2)

    def test_snapshot_task_surfaces_database_errors(self):
        with patch('api.tasks.take_daily_snapshot', side_effect=DatabaseError('deadlock')):
            with self.assertRaises(DatabaseError):
                take_daily_snapshot_task('2025-01-10')

    def test_recalculate_task(self):
        day = datetime.date(2025, 3, 1)
        make_event('a', taxonomy.ADMIN_SETTING, taxonomy.QR_MENU_INSTALL, day)
        make_orders('S1', day, 2)
        self.assertEqual(recalculate_daily_counters_task(), 1)

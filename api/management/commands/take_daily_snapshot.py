from django.core.management.base import BaseCommand, CommandError

from analysis.normalize import parse_query_date
from api.services.snapshots import take_daily_snapshot


class Command(BaseCommand):
    help = 'Compute and store the overall and per-owner funnel snapshots for one day.'

    def add_arguments(self, parser):
        parser.add_argument('--date', type=str, default=None, help='Snapshot day, YYYY-MM-DD (default: today)')

    def handle(self, *args, **options):
        try:
            day = parse_query_date(options.get('date'))
        except ValueError as e:
            raise CommandError(str(e))
        saved = take_daily_snapshot(day)
        snapshot_date = saved[0].snapshot_date if saved else day
        self.stdout.write(self.style.SUCCESS(f'Stored {len(saved)} snapshot(s) for {snapshot_date}'))

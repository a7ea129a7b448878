from django.core.management.base import BaseCommand

from api.services.recalculation import recalculate_daily_counters


class Command(BaseCommand):
    help = 'Replay the status history and rewrite cumulative install/churn counters per day.'

    def handle(self, *args, **options):
        written = recalculate_daily_counters()
        if written:
            last = written[-1]
            self.stdout.write(
                f'{last.order_date}: cumulative_installed={last.cumulative_installed} '
                f'cumulative_churned={last.cumulative_churned}'
            )
        self.stdout.write(self.style.SUCCESS(f'Updated {len(written)} date(s)'))

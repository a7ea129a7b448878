import random
from datetime import datetime, time, timedelta

from django.core.management.base import BaseCommand
from django.utils import timezone

from analysis import taxonomy
from api.models import Owner, StatusChangeEvent, Store, StoreDailyOrders, StoreOrderStats


DEMO_OWNERS = [
    ('kim@example.com', 'Kim'),
    ('lee@example.com', 'Lee'),
    ('park@example.com', 'Park'),
]

# status path a demo store walks through, ending at its final status
INSTALL_PATH = [taxonomy.VISIT_PENDING, taxonomy.VISIT_COMPLETED, taxonomy.ADMIN_SETTING, taxonomy.QR_MENU_INSTALL]


class Command(BaseCommand):
    help = 'Create demo owners, stores, status history and order rows for development'

    def add_arguments(self, parser):
        parser.add_argument('--stores', type=int, default=30, help='Number of demo stores')
        parser.add_argument('--days', type=int, default=60, help='Days of history to generate')
        parser.add_argument('--seed', type=int, default=7)

    def handle(self, *args, **options):
        if Store.objects.filter(store_id__startswith='demo-').exists():
            self.stdout.write('Demo stores already exist.')
            return

        rng = random.Random(options['seed'])
        days = options['days']
        today = timezone.localdate()
        start = today - timedelta(days=days)

        for owner_id, name in DEMO_OWNERS:
            Owner.objects.get_or_create(owner_id=owner_id, defaults={'name': name})

        events = []
        orders = []
        for i in range(options['stores']):
            store_id = f'demo-{i:03d}'
            seq = f'{1000 + i}'
            owner_id = DEMO_OWNERS[i % len(DEMO_OWNERS)][0]
            registered = start + timedelta(days=rng.randint(0, days // 2))
            steps = INSTALL_PATH[:rng.randint(1, len(INSTALL_PATH))]
            path = list(steps)
            if steps[-1] == taxonomy.QR_MENU_INSTALL and rng.random() < 0.2:
                path.append(rng.choice([taxonomy.SERVICE_TERMINATED, taxonomy.UNUSED_TERMINATED]))

            previous = taxonomy.NO_PRIOR_STATUS
            day = registered
            installed_on = None
            for status in path:
                changed_at = timezone.make_aware(datetime.combine(day, time(10, 0)))
                events.append(StatusChangeEvent(
                    store_id=store_id, old_status=previous, new_status=status,
                    changed_at=changed_at, changed_date=day, changed_by=owner_id,
                ))
                if status == taxonomy.QR_MENU_INSTALL:
                    installed_on = day
                previous = status
                day = min(day + timedelta(days=rng.randint(1, 5)), today)

            Store.objects.create(
                store_id=store_id,
                store_name=f'Demo Store {i + 1}',
                seq=seq,
                status=path[-1],
                owner_id=owner_id,
                created_at=timezone.make_aware(datetime.combine(registered, time(9, 0))),
            )

            total = 0
            if installed_on is not None:
                d = installed_on
                while d <= today:
                    if rng.random() < 0.6:
                        count = rng.randint(1, 40)
                        total += count
                        orders.append(StoreDailyOrders(seq=seq, order_date=d, order_count=count))
                    d += timedelta(days=1)
            StoreOrderStats.objects.create(seq=seq, order_count=total, customer_count=total // 3)

        StatusChangeEvent.objects.bulk_create(events)
        StoreDailyOrders.objects.bulk_create(orders)
        self.stdout.write(self.style.SUCCESS(
            f'Created {options["stores"]} demo stores, {len(events)} events, {len(orders)} order rows.'
        ))

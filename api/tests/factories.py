"""Small helpers to seed the roster, event log and order tables in tests."""
import datetime

from django.utils import timezone

from api.models import Owner, StatusChangeEvent, Store, StoreDailyOrders, StoreOrderStats


def aware(day, hour=10):
    return timezone.make_aware(datetime.datetime.combine(day, datetime.time(hour, 0)), datetime.timezone.utc)


def make_store(store_id, status, seq=None, owner_id='kim@example.com', created=None):
    return Store.objects.create(
        store_id=store_id,
        store_name=f'Store {store_id}',
        seq=seq,
        status=status,
        owner_id=owner_id,
        created_at=aware(created) if created else None,
    )


def make_event(store_id, old, new, day, by='kim@example.com', hour=10):
    return StatusChangeEvent.objects.create(
        store_id=store_id,
        old_status=old,
        new_status=new,
        changed_at=aware(day, hour),
        changed_date=day,
        changed_by=by,
    )


def make_orders(seq, day, count):
    return StoreDailyOrders.objects.create(seq=seq, order_date=day, order_count=count)


def make_stats(seq, orders, customers):
    return StoreOrderStats.objects.create(seq=seq, order_count=orders, customer_count=customers)


def make_owner(owner_id, name):
    return Owner.objects.create(owner_id=owner_id, name=name)

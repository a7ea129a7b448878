from django.contrib import admin
from .models import DailyOrderStats, FunnelSnapshot, Owner, StatusChangeEvent, Store, StoreDailyOrders, StoreOrderStats


@admin.register(Owner)
class OwnerAdmin(admin.ModelAdmin):
	list_display = ('id', 'owner_id', 'name')
	search_fields = ('owner_id', 'name')


@admin.register(Store)
class StoreAdmin(admin.ModelAdmin):
	list_display = ('id', 'store_id', 'store_name', 'seq', 'status', 'owner_id', 'created_at')
	list_filter = ('status',)
	search_fields = ('store_id', 'store_name', 'seq')


@admin.register(StatusChangeEvent)
class StatusChangeEventAdmin(admin.ModelAdmin):
	list_display = ('id', 'store_id', 'old_status', 'new_status', 'changed_at', 'changed_by')
	list_filter = ('new_status',)


@admin.register(StoreDailyOrders)
class StoreDailyOrdersAdmin(admin.ModelAdmin):
	list_display = ('id', 'seq', 'order_date', 'order_count')


@admin.register(StoreOrderStats)
class StoreOrderStatsAdmin(admin.ModelAdmin):
	list_display = ('id', 'seq', 'order_count', 'customer_count')


@admin.register(DailyOrderStats)
class DailyOrderStatsAdmin(admin.ModelAdmin):
	list_display = ('order_date', 'order_count', 'active_store_count', 'cumulative_installed', 'cumulative_churned')


@admin.register(FunnelSnapshot)
class FunnelSnapshotAdmin(admin.ModelAdmin):
	list_display = ('snapshot_date', 'scope', 'total_stores')
	list_filter = ('scope',)

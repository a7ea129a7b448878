from django.db import models

from analysis.taxonomy import STATUS_CHOICES


class Owner(models.Model):
	"""Sales/install owner directory; owner_id is usually an email address."""
	owner_id = models.CharField(max_length=255, unique=True)
	name = models.CharField(max_length=255, blank=True)

	def __str__(self):
		return self.name or self.owner_id


class Store(models.Model):
	"""Current roster entry for a store. ``seq`` links the store to its order records."""
	store_id = models.CharField(max_length=64, unique=True)
	store_name = models.CharField(max_length=255, blank=True)
	seq = models.CharField(max_length=64, blank=True, null=True, db_index=True)
	status = models.CharField(max_length=32, choices=STATUS_CHOICES)
	owner_id = models.CharField(max_length=255, blank=True, default='')
	created_at = models.DateTimeField(blank=True, null=True)

	def as_record(self):
		return {
			'store_id': self.store_id,
			'store_name': self.store_name,
			'seq': self.seq,
			'status': self.status,
			'owner_id': self.owner_id,
			'created_at': self.created_at,
		}

	def __str__(self):
		return f"{self.store_name or self.store_id} ({self.status})"


class StatusChangeEvent(models.Model):
	"""Append-only status transition log."""
	store_id = models.CharField(max_length=64, db_index=True)
	old_status = models.CharField(max_length=32, blank=True, null=True)
	new_status = models.CharField(max_length=32)
	changed_at = models.DateTimeField()
	# calendar day of changed_at in the reporting timezone, indexed for per-day queries
	changed_date = models.DateField(blank=True, null=True, db_index=True)
	changed_by = models.CharField(max_length=255, blank=True, default='')

	class Meta:
		ordering = ['changed_at', 'pk']

	def as_record(self):
		return {
			'store_id': self.store_id,
			'old_status': self.old_status,
			'new_status': self.new_status,
			'changed_at': self.changed_at,
			'changed_date': self.changed_date,
			'changed_by': self.changed_by,
		}

	def __str__(self):
		return f"{self.store_id}: {self.old_status} -> {self.new_status}"


class StoreDailyOrders(models.Model):
	"""Per store, per day order count. Duplicate (seq, order_date) rows are tolerated."""
	seq = models.CharField(max_length=64, db_index=True)
	order_date = models.DateField(db_index=True)
	order_count = models.IntegerField(default=0)

	class Meta:
		indexes = [models.Index(fields=['seq', 'order_date'], name='store_daily_seq_date_idx')]

	def as_record(self):
		return {'seq': self.seq, 'order_date': self.order_date, 'order_count': self.order_count}


class StoreOrderStats(models.Model):
	"""Lifetime order and customer totals per store."""
	seq = models.CharField(max_length=64, unique=True)
	order_count = models.IntegerField(default=0)
	customer_count = models.IntegerField(default=0)


class DailyOrderStats(models.Model):
	"""Per day totals. The lifecycle counters are rewritten by the recalculation job."""
	order_date = models.DateField(unique=True)
	order_count = models.IntegerField(default=0)
	active_store_count = models.IntegerField(default=0)
	new_installs = models.IntegerField(default=0)
	new_churns = models.IntegerField(default=0)
	reactivations = models.IntegerField(default=0)
	cumulative_installed = models.IntegerField(default=0)
	cumulative_churned = models.IntegerField(default=0)

	def as_record(self):
		return {
			'order_date': self.order_date,
			'order_count': self.order_count,
			'active_store_count': self.active_store_count,
			'new_installs': self.new_installs,
			'new_churns': self.new_churns,
			'reactivations': self.reactivations,
			'cumulative_installed': self.cumulative_installed,
			'cumulative_churned': self.cumulative_churned,
		}

	def __str__(self):
		return f"DailyOrderStats {self.order_date}"


class FunnelSnapshot(models.Model):
	"""Daily funnel snapshot for one scope ('overall' or 'owner:<id>')."""
	snapshot_date = models.DateField(db_index=True)
	scope = models.CharField(max_length=300)
	stage_counts = models.JSONField(default=dict)
	total_stores = models.IntegerField(default=0)
	funnel = models.JSONField(default=dict)
	conversion = models.JSONField(default=dict)
	daily_change = models.JSONField(blank=True, null=True)
	churn_analysis = models.JSONField(blank=True, null=True)

	class Meta:
		unique_together = (('snapshot_date', 'scope'),)
		ordering = ['snapshot_date', 'scope']

	def __str__(self):
		return f"{self.snapshot_date} {self.scope}"

# Initial schema for the store roster, event log and order aggregates.
from django.db import migrations, models


STATUS_CHOICES = [
    ('PRE_INTRODUCTION', 'Pre-introduction'),
    ('VISIT_PENDING', 'Visit pending'),
    ('VISIT_COMPLETED', 'Visit completed'),
    ('REVISIT_SCHEDULED', 'Revisit scheduled'),
    ('INFO_REQUEST', 'Info requested'),
    ('REMOTE_INSTALL_SCHEDULED', 'Remote install scheduled'),
    ('ADMIN_SETTING', 'Admin setting'),
    ('QR_LINKING', 'POS linking'),
    ('QR_MENU_ONLY', 'QR menu only'),
    ('DEFECT_REPAIR', 'Defect repair'),
    ('QR_MENU_INSTALL', 'Install completed'),
    ('SERVICE_TERMINATED', 'Service terminated'),
    ('UNUSED_TERMINATED', 'Terminated (unused)'),
    ('PENDING', 'On hold'),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Owner',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('owner_id', models.CharField(max_length=255, unique=True)),
                ('name', models.CharField(blank=True, max_length=255)),
            ],
        ),
        migrations.CreateModel(
            name='Store',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('store_id', models.CharField(max_length=64, unique=True)),
                ('store_name', models.CharField(blank=True, max_length=255)),
                ('seq', models.CharField(blank=True, db_index=True, max_length=64, null=True)),
                ('status', models.CharField(choices=STATUS_CHOICES, max_length=32)),
                ('owner_id', models.CharField(blank=True, default='', max_length=255)),
                ('created_at', models.DateTimeField(blank=True, null=True)),
            ],
        ),
        migrations.CreateModel(
            name='StatusChangeEvent',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('store_id', models.CharField(db_index=True, max_length=64)),
                ('old_status', models.CharField(blank=True, max_length=32, null=True)),
                ('new_status', models.CharField(max_length=32)),
                ('changed_at', models.DateTimeField()),
                ('changed_date', models.DateField(blank=True, db_index=True, null=True)),
                ('changed_by', models.CharField(blank=True, default='', max_length=255)),
            ],
            options={
                'ordering': ['changed_at', 'pk'],
            },
        ),
        migrations.CreateModel(
            name='StoreDailyOrders',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('seq', models.CharField(db_index=True, max_length=64)),
                ('order_date', models.DateField(db_index=True)),
                ('order_count', models.IntegerField(default=0)),
            ],
            options={
                'indexes': [models.Index(fields=['seq', 'order_date'], name='store_daily_seq_date_idx')],
            },
        ),
        migrations.CreateModel(
            name='StoreOrderStats',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('seq', models.CharField(max_length=64, unique=True)),
                ('order_count', models.IntegerField(default=0)),
                ('customer_count', models.IntegerField(default=0)),
            ],
        ),
        migrations.CreateModel(
            name='DailyOrderStats',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('order_date', models.DateField(unique=True)),
                ('order_count', models.IntegerField(default=0)),
                ('active_store_count', models.IntegerField(default=0)),
                ('new_installs', models.IntegerField(default=0)),
                ('new_churns', models.IntegerField(default=0)),
                ('reactivations', models.IntegerField(default=0)),
                ('cumulative_installed', models.IntegerField(default=0)),
                ('cumulative_churned', models.IntegerField(default=0)),
            ],
        ),
        migrations.CreateModel(
            name='FunnelSnapshot',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('snapshot_date', models.DateField(db_index=True)),
                ('scope', models.CharField(max_length=300)),
                ('stage_counts', models.JSONField(default=dict)),
                ('total_stores', models.IntegerField(default=0)),
                ('funnel', models.JSONField(default=dict)),
                ('conversion', models.JSONField(default=dict)),
                ('daily_change', models.JSONField(blank=True, null=True)),
                ('churn_analysis', models.JSONField(blank=True, null=True)),
            ],
            options={
                'ordering': ['snapshot_date', 'scope'],
                'unique_together': {('snapshot_date', 'scope')},
            },
        ),
    ]
